from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import current_app
from flask_mail import Message as MailMessage
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from marketplace.extensions import db, mail
from marketplace.models import (
    DETAIL_MODELS,
    BlogPost,
    BuyerContact,
    Listing,
    NewsletterSubscriber,
    Profile,
    User,
)
from marketplace.store.base import (
    STATUS_APPROVED,
    STATUS_PUBLISHED,
    financial_table,
    match_pattern,
    normalize_search,
    page_result,
    user_payload,
)
from marketplace.store.errors import AuthError, DuplicateRecordError, StoreError


logger = logging.getLogger(__name__)

RESET_TOKEN_SALT = 'password-reset'
RESET_TOKEN_MAX_AGE = 3600


class SqlStore:
    """Same contract as :class:`SupabaseStore`, backed by Flask-SQLAlchemy.

    Password reset links are signed tokens mailed through Flask-Mail; the
    token plays the role of the hosted backend's auth code. OAuth providers
    are not available on this backend.
    """

    backend = 'sql'

    def _commit(self, action: str) -> None:
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(f'{action} failed: {exc}') from exc

    # Listings ---------------------------------------------------------------------

    def get_listing(self, listing_type: str, slug: str, *, include_pending: bool = False,
                    allow_any_type: bool = False) -> Optional[Dict[str, Any]]:
        query = Listing.query.filter_by(slug=slug, type=listing_type)
        if not include_pending:
            query = query.filter_by(status=STATUS_APPROVED)
        listing = query.first()

        if listing is None and allow_any_type:
            fallback = Listing.query.filter_by(slug=slug)
            if not include_pending:
                fallback = fallback.filter_by(status=STATUS_APPROVED)
            listing = fallback.first()

        return listing.to_dict() if listing else None

    def get_listing_financials(self, listing_type: str, listing_id: str) -> Optional[Dict[str, Any]]:
        table, columns, _ = financial_table(listing_type)
        record = db.session.get(DETAIL_MODELS[table], listing_id)
        if record is None:
            return None
        return {column: getattr(record, column) for column in columns}

    def search_listings(self, listing_type: str, **filters) -> Dict[str, Any]:
        params = normalize_search(listing_type, **filters)
        table, _, price_column = financial_table(params['listing_type'])
        detail_model = DETAIL_MODELS[table]
        price = getattr(detail_model, price_column)

        query = (
            db.session.query(Listing, price)
            .outerjoin(detail_model, detail_model.listing_id == Listing.id)
            .filter(Listing.type == params['listing_type'], Listing.status == STATUS_APPROVED)
        )
        if params['country']:
            query = query.filter(Listing.country.ilike(match_pattern(params['country'])))
        if params['industry']:
            query = query.filter(Listing.category.ilike(match_pattern(params['industry'])))
        if params['city']:
            query = query.filter(Listing.city.ilike(match_pattern(params['city'])))
        if params['q']:
            query = query.filter(Listing.title.ilike(f"%{params['q']}%"))
        if params['price_min'] is not None:
            query = query.filter(price >= params['price_min'])
        if params['price_max'] is not None:
            query = query.filter(price <= params['price_max'])

        order = Listing.created_at.desc() if params['sort'] == 'newest' else Listing.created_at.asc()

        try:
            total = query.count()
            rows = (
                query.order_by(order)
                .offset((params['page'] - 1) * params['page_size'])
                .limit(params['page_size'])
                .all()
            )
        except (SQLAlchemyError, OverflowError) as exc:
            db.session.rollback()
            raise StoreError(f'Listing search failed: {exc}') from exc

        items = [dict(listing.to_dict(), price=value) for listing, value in rows]
        return page_result(items, total, params['page'], params['page_size'])

    def list_sitemap_listings(self) -> List[Dict[str, Any]]:
        rows = (
            Listing.query.filter(Listing.status == STATUS_APPROVED, Listing.slug.isnot(None))
            .order_by(Listing.created_at.desc())
            .all()
        )
        return [{'slug': row.slug, 'type': row.type, 'updated_at': row.to_dict()['updated_at']} for row in rows]

    def create_listing(self, listing_type: str, fields: Dict[str, Any],
                       financials: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        listing = Listing(type=listing_type, **fields)
        db.session.add(listing)
        if financials:
            table, _, _ = financial_table(listing_type)
            db.session.flush()
            db.session.add(DETAIL_MODELS[table](listing_id=listing.id, **financials))
        try:
            self._commit('Create listing')
        except IntegrityError as exc:
            raise DuplicateRecordError(fields.get('slug')) from exc
        return listing.to_dict()

    # Blog -------------------------------------------------------------------------

    def list_blog_posts(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = BlogPost.query.filter_by(status=STATUS_PUBLISHED).order_by(BlogPost.created_at.desc())
        if limit:
            query = query.limit(limit)
        return [post.to_dict() for post in query.all()]

    def get_blog_post(self, slug: str) -> Optional[Dict[str, Any]]:
        post = BlogPost.query.filter_by(slug=slug, status=STATUS_PUBLISHED).first()
        return post.to_dict() if post else None

    def list_sitemap_posts(self) -> List[Dict[str, Any]]:
        return [
            {'slug': post['slug'], 'created_at': post['created_at'], 'updated_at': post['updated_at']}
            for post in self.list_blog_posts()
        ]

    # Inquiries / subscribers -------------------------------------------------------

    def create_inquiry(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        record = BuyerContact(
            listing_id=payload['listing_id'],
            buyer_name=payload['buyer_name'],
            buyer_email=payload['buyer_email'],
            company=payload.get('company') or None,
            budget_range=payload.get('budget_range') or None,
            reason_interest=payload['reason_interest'],
        )
        db.session.add(record)
        try:
            self._commit('Store inquiry')
        except IntegrityError as exc:
            raise StoreError(f'Failed to store inquiry: {exc}') from exc
        return record.to_dict()

    def add_subscriber(self, email: str, source: str = 'footer') -> Dict[str, Any]:
        record = NewsletterSubscriber(email=email, source=source)
        db.session.add(record)
        try:
            self._commit('Subscribe')
        except IntegrityError as exc:
            raise DuplicateRecordError(email) from exc
        return record.to_dict()

    def email_exists(self, email: str) -> bool:
        return User.query.filter(db.func.lower(User.email) == email.lower()).first() is not None

    # Profiles ---------------------------------------------------------------------

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        profile = db.session.get(Profile, user_id)
        return profile.to_dict() if profile else None

    def upsert_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        profile = db.session.get(Profile, user_id)
        if profile is None:
            profile = Profile(id=user_id)
            db.session.add(profile)
        for key, value in fields.items():
            setattr(profile, key, value)
        self._commit('Save profile')
        return profile.to_dict()

    # Auth -------------------------------------------------------------------------

    def _serializer(self) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=RESET_TOKEN_SALT)

    @staticmethod
    def _user(user: User) -> Dict[str, Any]:
        return user_payload(user.id, user.email, user.user_metadata)

    def sign_up(self, email: str, password: str, metadata: Dict[str, Any],
                redirect_to: Optional[str] = None) -> Dict[str, Any]:
        if self.email_exists(email):
            raise AuthError('This email is already registered. Please try logging in instead.')
        user = User(email=email.lower(), user_metadata=dict(metadata or {}))
        user.set_password(password)
        db.session.add(user)
        try:
            self._commit('Sign up')
        except IntegrityError as exc:
            raise AuthError('This email is already registered. Please try logging in instead.') from exc
        payload = self._user(user)
        payload['confirmed'] = True
        return payload

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        user = User.query.filter(db.func.lower(User.email) == email.lower()).first()
        if user is None or not user.check_password(password):
            raise AuthError('Invalid email or password.')
        user.last_login = datetime.utcnow()
        self._commit('Sign in')
        return self._user(user)

    def oauth_url(self, provider: str, redirect_to: str) -> str:
        raise AuthError(f'Sign in with {provider} is not available right now.')

    def exchange_code(self, code: str) -> Dict[str, Any]:
        try:
            data = self._serializer().loads(code, max_age=RESET_TOKEN_MAX_AGE)
        except (BadSignature, SignatureExpired) as exc:
            raise AuthError('This sign-in link is invalid or has expired.') from exc
        user = db.session.get(User, data.get('uid'))
        # a reset link dies once the password it was issued for changes
        if user is None or data.get('pw') != user.password_hash[-8:]:
            raise AuthError('This sign-in link is invalid or has expired.')
        return self._user(user)

    def send_password_reset(self, email: str, redirect_to: str) -> None:
        user = User.query.filter(db.func.lower(User.email) == email.lower()).first()
        if user is None:
            return
        token = self._serializer().dumps({'uid': user.id, 'pw': user.password_hash[-8:]})
        separator = '&' if '?' in redirect_to else '?'
        link = f'{redirect_to}{separator}code={token}'

        message = MailMessage(subject='Reset your password', recipients=[user.email])
        message.body = (
            'We received a request to reset your password.\n\n'
            f'Open this link within one hour to choose a new password:\n{link}\n\n'
            'If you did not ask for this, you can ignore this email.'
        )
        try:
            mail.send(message)
        except Exception as exc:
            raise StoreError(f'Failed to send password reset email: {exc}') from exc

    def update_password(self, user_id: str, password: str) -> None:
        user = db.session.get(User, user_id)
        if user is None:
            raise AuthError('Account not found.')
        user.set_password(password)
        self._commit('Update password')

    def ping(self) -> None:
        try:
            db.session.execute(text('SELECT 1'))
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(f'Database is unreachable: {exc}') from exc
