"""
Slug helpers.

Slugs (``link_rewrite``) are URL-safe, lowercase and unique per table.
"""
import re

from sqlalchemy.orm import Session

from app.exceptions import ValidationError

_INVALID_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """
    "Men's Shirt" -> "mens-shirt".

    Lowercases, drops anything outside [a-z0-9 -], turns whitespace into
    hyphens, collapses repeated hyphens and trims them from both ends.
    """
    slug = _INVALID_CHARS.sub("", (text or "").strip().lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def legacy_id_to_slug(identifier: str) -> str:
    """"Mountain_fox_-_Vector_graphics" -> "mountain-fox-vector-graphics"."""
    slug = identifier.replace("_-_", "-").replace("_", "-").lower()
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def slug_exists(db: Session, model, slug: str, exclude_id: int | None = None) -> bool:
    query = db.query(model.id).filter(model.link_rewrite == slug)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return query.first() is not None


def unique_slug(db: Session, model, base: str, exclude_id: int | None = None) -> str:
    """Return ``base`` or the first free ``base-1``, ``base-2`` ... for ``model``."""
    base = slugify(base)
    if not base:
        raise ValidationError("Cannot derive a slug from an empty name")

    candidate = base
    counter = 1
    while slug_exists(db, model, candidate, exclude_id):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate
