import uuid
from datetime import datetime, timedelta

import click
from flask.cli import with_appcontext

from marketplace.extensions import db
from marketplace.models import DETAIL_MODELS, BlogPost, Listing
from marketplace.seo.slugs import create_slug, generate_listing_slug
from marketplace.seo.url_mapping import BUSINESS_SALE, FRANCHISE_SALE, INVESTMENT_OPPORTUNITY
from marketplace.store.base import financial_table


DEMO_LISTINGS = [
    {
        'type': BUSINESS_SALE,
        'title': 'Profitable Coffee Roastery in Nairobi',
        'description': 'Specialty roastery supplying 40 cafes and two supermarket chains.',
        'category': 'Food & Beverage',
        'country': 'Kenya',
        'city': 'Nairobi',
        'financials': {'asking_price': 450000, 'annual_revenue': 620000, 'ebitda': 140000},
    },
    {
        'type': BUSINESS_SALE,
        'title': 'Logistics Company with 25 Trucks',
        'description': 'Regional freight operator with long-term contracts with FMCG distributors.',
        'category': 'Transport & Logistics',
        'country': 'Nigeria',
        'city': 'Lagos',
        'financials': {'asking_price': 1200000, 'annual_revenue': 2100000, 'ebitda': 380000},
    },
    {
        'type': FRANCHISE_SALE,
        'title': 'Quick Service Burger Franchise',
        'description': 'Proven burger concept with 60 units across West Africa.',
        'category': 'Food & Beverage',
        'country': 'Ghana',
        'city': 'Accra',
        'financials': {'franchise_fee': 35000, 'avg_unit_revenue': 410000, 'avg_unit_profit': 72000},
    },
    {
        'type': FRANCHISE_SALE,
        'title': 'Kids Coding Academy Franchise',
        'description': 'After-school coding programme with a full curriculum and instructor training.',
        'category': 'Education',
        'country': 'South Africa',
        'city': 'Cape Town',
        'financials': {'franchise_fee': 18000, 'avg_unit_revenue': 150000, 'avg_unit_profit': 41000},
    },
    {
        'type': INVESTMENT_OPPORTUNITY,
        'title': 'Solar Mini-Grid Developer Raising Series A',
        'description': 'Operating 14 mini-grids serving 9,000 rural households.',
        'category': 'Energy',
        'country': 'Kenya',
        'city': 'Kisumu',
        'financials': {'capital_required': 2500000, 'annual_revenue': 800000, 'equity_offered_percent': 20},
    },
    {
        'type': INVESTMENT_OPPORTUNITY,
        'title': 'Agritech Marketplace Seeking Growth Capital',
        'description': 'B2B platform connecting smallholder farmers with food processors.',
        'category': 'Agriculture',
        'country': 'Nigeria',
        'city': 'Abuja',
        'financials': {'capital_required': 750000, 'annual_revenue': 260000, 'equity_offered_percent': 15},
    },
]

DEMO_POSTS = [
    {
        'title': 'How to Value a Small Business in an Emerging Market',
        'excerpt': 'Multiples, EBITDA adjustments and currency risk explained.',
        'content': 'Valuing a business starts with normalized earnings.\n\nNext, pick a multiple that reflects local risk.',
    },
    {
        'title': 'Franchise or Independent Business: Which Fits You?',
        'excerpt': 'Trade-offs between brand support and operational freedom.',
        'content': 'Franchises trade fees for a proven playbook.\n\nIndependent businesses keep every decision with the owner.',
    },
]


@click.command('init-db')
@with_appcontext
def init_db_command() -> None:
    """Create the SQL store tables (development / tests)."""
    db.create_all()
    click.echo('Created SQL store tables.')


@click.command('seed-demo')
@click.option('--pending', is_flag=True, help='Leave demo listings pending instead of approved.')
@with_appcontext
def seed_demo_command(pending: bool) -> None:
    """Seed demo listings, financials and blog posts into the SQL store."""
    db.create_all()

    now = datetime.utcnow()
    status = Listing.STATUS_PENDING if pending else Listing.STATUS_APPROVED
    created_listings = 0

    for offset, data in enumerate(DEMO_LISTINGS):
        if Listing.query.filter_by(title=data['title']).first():
            continue

        listing_id = str(uuid.uuid4())
        listing = Listing(
            id=listing_id,
            slug=generate_listing_slug(data['title'], listing_id),
            title=data['title'],
            description=data['description'],
            category=data['category'],
            country=data['country'],
            city=data['city'],
            location=f"{data['city']}, {data['country']}",
            type=data['type'],
            status=status,
            created_at=now - timedelta(days=offset),
        )
        db.session.add(listing)

        table, _, _ = financial_table(data['type'])
        db.session.add(DETAIL_MODELS[table](listing_id=listing_id, **data['financials']))
        created_listings += 1

    created_posts = 0
    for offset, data in enumerate(DEMO_POSTS):
        slug = create_slug(data['title'])
        if BlogPost.query.filter_by(slug=slug).first():
            continue
        db.session.add(BlogPost(
            slug=slug,
            status=BlogPost.STATUS_PUBLISHED,
            created_at=now - timedelta(days=offset),
            **data,
        ))
        created_posts += 1

    db.session.commit()
    click.echo(f"Seeded {created_listings} listings and {created_posts} blog posts.")
