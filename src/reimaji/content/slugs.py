"""URL slugs for titled content."""

from __future__ import annotations

import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")

FALLBACK_SLUG = "untitled"


def slugify(title: str) -> str:
    """Lowercase, keep ASCII letters, digits, spaces and hyphens, then hyphenate whitespace.

    >>> slugify("GPT-5 Lands in Europe!")
    'gpt-5-lands-in-europe'
    """
    cleaned = _NON_SLUG_CHARS.sub("", title.lower()).strip()
    return _WHITESPACE.sub("-", cleaned) or FALLBACK_SLUG


async def unique_slug(db: AsyncSession, model: type, base: str) -> str:
    """Return `base`, or `base-N` with the smallest N >= 2 not yet taken in `model`.

    Soft-deleted rows keep their slug, so they count as taken.
    """
    result = await db.execute(
        select(model.slug).where(  # type: ignore[attr-defined]
            (model.slug == base) | model.slug.startswith(f"{base}-", autoescape=True)  # type: ignore[attr-defined]
        )
    )
    taken = set(result.scalars().all())
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"
