"""
Database Models for the SQL store backend

Local mirror of the tables the marketplace reads from its hosted backend:
listings and their per-type financial details, blog posts, buyer inquiries,
newsletter subscribers, users and profiles. Used for development and tests
when STORE_BACKEND is 'sql'.
"""

import uuid
from datetime import datetime

from sqlalchemy import false, true
from werkzeug.security import generate_password_hash, check_password_hash

from marketplace.extensions import db


def _uuid():
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if isinstance(value, datetime) else value


class SerializeMixin:
    """Row -> plain dict, matching what the hosted backend returns."""

    def to_dict(self):
        return {column.name: _iso(getattr(self, column.key)) for column in self.__table__.columns}


class Listing(SerializeMixin, db.Model):
    """Marketplace listing (business, franchise or investment)"""

    __tablename__ = 'listings'

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    slug = db.Column(db.String(120), unique=True, nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(120), index=True)
    location = db.Column(db.String(200))
    country = db.Column(db.String(120), index=True)
    city = db.Column(db.String(120))
    type = db.Column(db.String(40), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)
    image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.Index('ix_listings_type_status_created', 'type', 'status', 'created_at'),
    )

    def __repr__(self):
        return f'<Listing {self.slug}>'


class BusinessSaleDetails(SerializeMixin, db.Model):
    __tablename__ = 'business_sale_details'

    listing_id = db.Column(db.String(36), db.ForeignKey('listings.id', ondelete='CASCADE'), primary_key=True)
    asking_price = db.Column(db.Float)
    annual_revenue = db.Column(db.Float)
    ebitda = db.Column(db.Float)


class FranchiseSaleDetails(SerializeMixin, db.Model):
    __tablename__ = 'franchise_sale_details'

    listing_id = db.Column(db.String(36), db.ForeignKey('listings.id', ondelete='CASCADE'), primary_key=True)
    franchise_fee = db.Column(db.Float)
    avg_unit_revenue = db.Column(db.Float)
    avg_unit_profit = db.Column(db.Float)


class InvestmentOpportunityDetails(SerializeMixin, db.Model):
    __tablename__ = 'investment_opportunity_details'

    listing_id = db.Column(db.String(36), db.ForeignKey('listings.id', ondelete='CASCADE'), primary_key=True)
    capital_required = db.Column(db.Float)
    annual_revenue = db.Column(db.Float)
    equity_offered_percent = db.Column(db.Float)


DETAIL_MODELS = {
    'business_sale_details': BusinessSaleDetails,
    'franchise_sale_details': FranchiseSaleDetails,
    'investment_opportunity_details': InvestmentOpportunityDetails,
}


class BlogPost(SerializeMixin, db.Model):
    """Blog article"""

    __tablename__ = 'blogs'

    STATUS_DRAFT = 'draft'
    STATUS_PUBLISHED = 'published'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), unique=True, nullable=False, index=True)
    excerpt = db.Column(db.Text)
    content = db.Column(db.Text)
    cover_image = db.Column(db.String(500))
    status = db.Column(db.String(20), nullable=False, default=STATUS_DRAFT, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<BlogPost {self.slug}>'


class BuyerContact(SerializeMixin, db.Model):
    """Buyer inquiry submitted from a listing page."""

    __tablename__ = 'buyer_contact'

    id = db.Column(db.Integer, primary_key=True)
    listing_id = db.Column(db.String(36), db.ForeignKey('listings.id', ondelete='CASCADE'), nullable=False, index=True)
    buyer_name = db.Column(db.String(120), nullable=False)
    buyer_email = db.Column(db.String(255), nullable=False)
    company = db.Column(db.String(200))
    budget_range = db.Column(db.String(60))
    reason_interest = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f'<BuyerContact {self.id} listing={self.listing_id}>'


class NewsletterSubscriber(SerializeMixin, db.Model):
    __tablename__ = 'newsletter_subscribers'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    source = db.Column(db.String(60), nullable=False, default='footer')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class User(db.Model):
    """Local credential record for password sign-in."""

    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    user_metadata = db.Column(db.JSON, default=dict)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    def set_password(self, password):
        """Hash and set user password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.email}>'


class Profile(SerializeMixin, db.Model):
    __tablename__ = 'profiles'

    id = db.Column(db.String(36), primary_key=True)
    full_name = db.Column(db.String(200))
    user_intent = db.Column(db.String(20))
    country = db.Column(db.String(120))
    email_notifications = db.Column(db.Boolean, nullable=False, default=True, server_default=true())
    marketing_emails = db.Column(db.Boolean, nullable=False, default=False, server_default=false())
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
