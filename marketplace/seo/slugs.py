"""
Listing slug generation.

Slugs are generated once when a listing is created and never change:
``{title-slug}-{first 8 chars of the id}``.
"""

import re

from slugify import slugify as _slugify


MAX_TITLE_SEGMENT = 100
MAX_SLUG_LENGTH = 120

_SLUG_FORMAT_RE = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)+$')


def create_slug(text):
    """SEO-friendly slug for free text (titles, blog posts)."""
    return _slugify(text or '', max_length=MAX_TITLE_SEGMENT)


def generate_listing_slug(title: str, listing_id: str) -> str:
    title_segment = create_slug(title)
    id_segment = str(listing_id)[:8].lower()
    slug = f"{title_segment}-{id_segment}" if title_segment else id_segment
    return slug[:MAX_SLUG_LENGTH]


def validate_slug_format(slug: str) -> bool:
    return bool(_SLUG_FORMAT_RE.match(slug or ''))
