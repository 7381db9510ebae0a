"""Initial schema

Revision ID: 0000_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0000_initial'
down_revision = None
branch_labels = None
depends_on = None


def _detail_table(name, *columns):
    op.create_table(
        name,
        sa.Column('listing_id', sa.String(length=36), nullable=False),
        *columns,
        sa.ForeignKeyConstraint(['listing_id'], ['listings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('listing_id'),
    )


def upgrade():
    op.create_table(
        'listings',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('category', sa.String(length=120)),
        sa.Column('location', sa.String(length=200)),
        sa.Column('country', sa.String(length=120)),
        sa.Column('city', sa.String(length=120)),
        sa.Column('type', sa.String(length=40), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('image_url', sa.String(length=500)),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_listings_slug', 'listings', ['slug'], unique=True)
    op.create_index('ix_listings_category', 'listings', ['category'], unique=False)
    op.create_index('ix_listings_country', 'listings', ['country'], unique=False)
    op.create_index('ix_listings_type', 'listings', ['type'], unique=False)
    op.create_index('ix_listings_status', 'listings', ['status'], unique=False)
    op.create_index('ix_listings_created_at', 'listings', ['created_at'], unique=False)
    op.create_index('ix_listings_type_status_created', 'listings', ['type', 'status', 'created_at'], unique=False)

    _detail_table(
        'business_sale_details',
        sa.Column('asking_price', sa.Float()),
        sa.Column('annual_revenue', sa.Float()),
        sa.Column('ebitda', sa.Float()),
    )
    _detail_table(
        'franchise_sale_details',
        sa.Column('franchise_fee', sa.Float()),
        sa.Column('avg_unit_revenue', sa.Float()),
        sa.Column('avg_unit_profit', sa.Float()),
    )
    _detail_table(
        'investment_opportunity_details',
        sa.Column('capital_required', sa.Float()),
        sa.Column('annual_revenue', sa.Float()),
        sa.Column('equity_offered_percent', sa.Float()),
    )

    op.create_table(
        'blogs',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=200), nullable=False),
        sa.Column('excerpt', sa.Text()),
        sa.Column('content', sa.Text()),
        sa.Column('cover_image', sa.String(length=500)),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_blogs_slug', 'blogs', ['slug'], unique=True)
    op.create_index('ix_blogs_status', 'blogs', ['status'], unique=False)
    op.create_index('ix_blogs_created_at', 'blogs', ['created_at'], unique=False)

    op.create_table(
        'buyer_contact',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('listing_id', sa.String(length=36), nullable=False),
        sa.Column('buyer_name', sa.String(length=120), nullable=False),
        sa.Column('buyer_email', sa.String(length=255), nullable=False),
        sa.Column('company', sa.String(length=200)),
        sa.Column('budget_range', sa.String(length=60)),
        sa.Column('reason_interest', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['listing_id'], ['listings.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_buyer_contact_listing_id', 'buyer_contact', ['listing_id'], unique=False)

    op.create_table(
        'newsletter_subscribers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('source', sa.String(length=60), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('email', name='uq_newsletter_subscribers_email'),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('user_metadata', sa.JSON()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('full_name', sa.String(length=200)),
        sa.Column('user_intent', sa.String(length=20)),
        sa.Column('country', sa.String(length=120)),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade():
    op.drop_table('profiles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_table('newsletter_subscribers')
    op.drop_index('ix_buyer_contact_listing_id', table_name='buyer_contact')
    op.drop_table('buyer_contact')
    op.drop_index('ix_blogs_created_at', table_name='blogs')
    op.drop_index('ix_blogs_status', table_name='blogs')
    op.drop_index('ix_blogs_slug', table_name='blogs')
    op.drop_table('blogs')
    op.drop_table('investment_opportunity_details')
    op.drop_table('franchise_sale_details')
    op.drop_table('business_sale_details')
    op.drop_index('ix_listings_type_status_created', table_name='listings')
    op.drop_index('ix_listings_created_at', table_name='listings')
    op.drop_index('ix_listings_status', table_name='listings')
    op.drop_index('ix_listings_type', table_name='listings')
    op.drop_index('ix_listings_country', table_name='listings')
    op.drop_index('ix_listings_category', table_name='listings')
    op.drop_index('ix_listings_slug', table_name='listings')
    op.drop_table('listings')
