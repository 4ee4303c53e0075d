"""Tests for container wiring."""

import asyncio

from centerstage.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.review_service.submission_service is container.submission_service
    assert (
        container.dashboard_service.submission_service
        is container.submission_service
    )
    assert container.rate_limiter.limit == settings.submission_rate_limit
    assert container.rate_limiter.window_ms == 60_000
    asyncio.run(container.close_resources())
