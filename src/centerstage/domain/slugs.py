"""URL slug derivation for project names."""

import re
from collections.abc import Collection

DEFAULT_SLUG = "project"

_DISALLOWED = re.compile(r"[^a-z0-9\s_-]")
_SEPARATORS = re.compile(r"[\s_-]+")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")
_VALID_SLUG = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


def normalize_slug(text: str) -> str:
    """Return the URL-safe form of free text, without uniqueness checks."""
    slug = _DISALLOWED.sub("", text.lower().strip())
    slug = _SEPARATORS.sub("-", slug)
    slug = _EDGE_HYPHENS.sub("", slug)
    return slug or DEFAULT_SLUG


def slugify(text: str, existing: Collection[str] = ()) -> str:
    """Derive a slug from text that is not already in ``existing``.

    Collisions are resolved by appending ``-1``, ``-2`` and so on until an
    unused value is found.
    """
    slug = normalize_slug(text)
    taken = set(existing)
    if slug not in taken:
        return slug
    counter = 1
    while f"{slug}-{counter}" in taken:
        counter += 1
    return f"{slug}-{counter}"


def is_valid_slug(slug: str) -> bool:
    """Return True for lowercase alphanumeric segments joined by single hyphens."""
    return _VALID_SLUG.fullmatch(slug) is not None
