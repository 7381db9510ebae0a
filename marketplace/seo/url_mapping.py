"""
SEO URL Mapping

Maps between clean, hierarchical listing routes and filter parameters:
- listing type keys <-> path segments
- country / industry values <-> slugs
- canonical URL and robots directive selection
- query string helpers for the non-SEO filters (price, city, sort, page)
"""

import re
from urllib.parse import urlencode


BUSINESS_SALE = 'business_sale'
FRANCHISE_SALE = 'franchise_sale'
INVESTMENT_OPPORTUNITY = 'investment_opportunity'

LISTING_TYPES = (BUSINESS_SALE, FRANCHISE_SALE, INVESTMENT_OPPORTUNITY)

DEFAULT_TYPE = BUSINESS_SALE
DEFAULT_SEGMENT = 'businesses'

TYPE_SEGMENT_MAP = {
    BUSINESS_SALE: 'businesses',
    FRANCHISE_SALE: 'franchises',
    INVESTMENT_OPPORTUNITY: 'investments',
}

SEGMENT_TYPE_MAP = {segment: key for key, segment in TYPE_SEGMENT_MAP.items()}

# Legacy "<type>-for-sale" roots; listing detail pages still live under them.
TYPE_ROUTE_MAP = {
    BUSINESS_SALE: 'businesses-for-sale',
    FRANCHISE_SALE: 'franchises-for-sale',
    INVESTMENT_OPPORTUNITY: 'investments-for-sale',
}

TYPE_LABELS = {
    BUSINESS_SALE: 'Businesses for Sale',
    FRANCHISE_SALE: 'Franchises for Sale',
    INVESTMENT_OPPORTUNITY: 'Investment Opportunities',
}

TYPE_SHORT_LABELS = {
    BUSINESS_SALE: 'Businesses',
    FRANCHISE_SALE: 'Franchises',
    INVESTMENT_OPPORTUNITY: 'Investments',
}

SEO_PARAMS = frozenset({'type', 'country', 'industry'})

_WHITESPACE_RE = re.compile(r'\s+')
_NON_SLUG_RE = re.compile(r'[^a-z0-9\s-]')


def to_slug(value: str) -> str:
    """Convert a filter value to a URL-safe path segment.

    Characters outside ``[a-z0-9-]`` are stripped before whitespace runs are
    collapsed, so ``"Food & Beverage"`` becomes ``"food-beverage"``.
    Existing hyphen runs are left as they are.
    """
    cleaned = _NON_SLUG_RE.sub('', value.lower())
    return _WHITESPACE_RE.sub('-', cleaned)


def from_slug(slug: str) -> str:
    """Turn a slug back into an approximate display value (lossy)."""
    return slug.replace('-', ' ')


def type_to_segment(listing_type: str) -> str:
    return TYPE_SEGMENT_MAP.get(listing_type, DEFAULT_SEGMENT)


def segment_to_type(segment):
    """Strict segment lookup. Returns None for unknown segments."""
    return SEGMENT_TYPE_MAP.get(segment)


def generate_clean_url(type: str, country=None, industry=None) -> str:
    """
    Build the clean SEO URL for a listing type and optional filters.

    Hierarchy is type > country > industry. The industry segment is only
    emitted when a country is present as well.
    """
    path = f"/listings/{type_to_segment(type)}"

    if country:
        path += f"/{to_slug(country)}"

    if country and industry:
        path += f"/{to_slug(industry)}"

    return path


def parse_clean_url(type: str, country=None, industry=None) -> dict:
    """
    Parse clean URL segments back into filter parameters.

    Unknown type segments fall back to ``business_sale``. Country and
    industry are recovered with :func:`from_slug` and are therefore only
    display approximations of the original values.
    """
    return {
        'type': SEGMENT_TYPE_MAP.get(type, DEFAULT_TYPE),
        'country': from_slug(country) if country else None,
        'industry': from_slug(industry) if industry else None,
    }


def generate_canonical_url(type: str, country=None, industry=None, has_query_params=False) -> str:
    """Canonical path for a browse page.

    Query-string driven pages canonicalize to their nearest clean ancestor,
    which is the clean URL built from the same SEO filters.
    """
    return generate_clean_url(type, country=country, industry=industry)


def get_robots_directive(has_query_params=False, has_content=None, current_page=None) -> str:
    """Pick the robots directive for a browse page; first matching rule wins."""

    # Paginated pages (page 2+)
    if current_page and current_page > 1:
        return 'noindex, follow'

    # Filtered through the query string
    if has_query_params:
        return 'noindex, follow'

    # Thin/empty page
    if has_content is False:
        return 'noindex, follow'

    return 'index, follow'


def _query_value(value) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def build_query_string(filters) -> str:
    """
    Serialize non-SEO filters into a query string.

    None and empty-string values are omitted; list/tuple values are emitted
    as repeated keys. Returns ``""`` when nothing is left to serialize.
    """
    pairs = []
    for key, value in filters.items():
        if value is None or value == '':
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_value(item)) for item in value if item is not None)
        else:
            pairs.append((key, _query_value(value)))

    query_string = urlencode(pairs)
    return f"?{query_string}" if query_string else ''


def has_non_seo_query_params(params) -> bool:
    """True when any key falls outside the SEO path parameters."""
    return any(key not in SEO_PARAMS for key in params.keys())


def listing_detail_path(listing_type: str, slug: str) -> str:
    route = TYPE_ROUTE_MAP.get(listing_type, TYPE_ROUTE_MAP[DEFAULT_TYPE])
    return f"/{route}/listing/{slug}"
