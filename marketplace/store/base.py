from __future__ import annotations

import re
from typing import Any, Dict, Optional

from marketplace.seo.url_mapping import (
    BUSINESS_SALE,
    FRANCHISE_SALE,
    INVESTMENT_OPPORTUNITY,
    to_slug,
)


# listing type -> (detail table, selected columns, headline price column)
FINANCIAL_TABLES = {
    BUSINESS_SALE: ('business_sale_details', ('asking_price', 'annual_revenue', 'ebitda'), 'asking_price'),
    FRANCHISE_SALE: ('franchise_sale_details', ('franchise_fee', 'avg_unit_revenue', 'avg_unit_profit'), 'franchise_fee'),
    INVESTMENT_OPPORTUNITY: (
        'investment_opportunity_details',
        ('capital_required', 'annual_revenue', 'equity_offered_percent'),
        'capital_required',
    ),
}

STATUS_APPROVED = 'approved'
STATUS_PUBLISHED = 'published'

SORT_OPTIONS = ('newest', 'oldest')
DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 48
MAX_PAGE = 10_000

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def financial_table(listing_type: str):
    """Detail table for a type; unknown types read the investment table."""
    return FINANCIAL_TABLES.get(listing_type, FINANCIAL_TABLES[INVESTMENT_OPPORTUNITY])


def match_pattern(value: str) -> str:
    """Case-insensitive LIKE pattern matching a value through its slug.

    ``"food beverage"`` (recovered from a slug) matches a stored
    ``"Food & Beverage"`` via ``food%beverage``.
    """
    parts = [part for part in to_slug(value).split('-') if part]
    return '%'.join(parts) if parts else value


def normalize_search(
    listing_type: str,
    *,
    country: Optional[str] = None,
    industry: Optional[str] = None,
    city: Optional[str] = None,
    q: Optional[str] = None,
    price_min=None,
    price_max=None,
    sort: Optional[str] = None,
    page=1,
    page_size=DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    """Clamp paging and drop empty filters before a backend sees them."""

    def _number(value):
        if value in (None, ''):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def _int(value, default):
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return default

    def _text(value):
        if not isinstance(value, str):
            return None
        return value.strip() or None

    page = min(MAX_PAGE, max(1, _int(page, 1)))
    page_size = min(MAX_PAGE_SIZE, max(1, _int(page_size, DEFAULT_PAGE_SIZE)))

    return {
        'listing_type': listing_type,
        'country': _text(country),
        'industry': _text(industry),
        'city': _text(city),
        'q': _text(q),
        'price_min': _number(price_min),
        'price_max': _number(price_max),
        'sort': sort if sort in SORT_OPTIONS else 'newest',
        'page': page,
        'page_size': page_size,
    }


def page_result(items, total: int, page: int, page_size: int) -> Dict[str, Any]:
    total_pages = max(1, -(-total // page_size)) if page_size else 1
    return {
        'items': items,
        'total': total,
        'page': page,
        'page_size': page_size,
        'total_pages': total_pages,
    }


def user_payload(user_id, email, metadata=None) -> Dict[str, Any]:
    metadata = metadata or {}
    return {
        'id': str(user_id),
        'email': email,
        'full_name': metadata.get('full_name') or metadata.get('name') or '',
    }
