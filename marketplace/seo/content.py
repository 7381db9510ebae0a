"""Programmatic intro copy for listing type, category and location pages."""

LISTING_TYPE_CONTENT = {
    'business_sale': {
        'title': 'Buy & Sell Businesses',
        'intro': (
            'Explore verified business opportunities across emerging markets. '
            'Find established companies with proven revenue and solid fundamentals.'
        ),
        'benefits': [
            'Established revenue streams',
            'Verified financial records',
            'Owner transition support',
            'Multiple industries available',
        ],
    },
    'franchise_sale': {
        'title': 'Franchise Opportunities',
        'intro': (
            'Discover proven franchise concepts ready to scale. Get full training, '
            'operational support, and established brand recognition.'
        ),
        'benefits': [
            'Proven business model',
            'Training & support included',
            'Brand recognition',
            'Lower startup risk',
        ],
    },
    'investment_opportunity': {
        'title': 'Investment Opportunities',
        'intro': (
            'Invest in high-growth startups and scaling companies. Access equity deals, '
            'transparent financials, and vetted founders.'
        ),
        'benefits': [
            'Early-stage growth potential',
            'Transparent cap tables',
            'Founder background checks',
            'Diversified sectors',
        ],
    },
}


def generate_category_intro(industry: str, listing_count: int) -> str:
    count = f"{listing_count} " if listing_count > 0 else ''
    return (
        f"Browse {count}{industry.lower()} business opportunities. Find verified listings "
        'with complete financial transparency and seller verification.'
    )


def generate_location_intro(country: str, city, listing_count: int) -> str:
    location = f"{city}, {country}" if city else country
    count = f"{listing_count} " if listing_count > 0 else ''
    return (
        f"Discover {count}business opportunities in {location}. Curated listings from "
        'verified sellers with local market expertise.'
    )


def generate_empty_state_message(context: str, industry=None, location=None, type=None) -> str:
    messages = {
        'category': (
            f"No {industry or 'listings'} available at the moment. "
            'Browse other industries or check back soon.'
        ),
        'location': (
            f"No listings found in {location or 'this location'}. "
            'Explore opportunities in other regions.'
        ),
        'type': f"No {type or 'listings'} currently available. Try another listing type.",
        'search': 'No results found for your search. Try adjusting your filters or explore featured listings.',
    }
    return messages.get(context, 'No listings available at this time.')
