from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from postgrest import APIError
from supabase import AuthError as SupabaseAuthError
from supabase import Client, create_client
from supabase.client import ClientOptions

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

UNIQUE_VIOLATION = '23505'
BLOG_LIST_COLUMNS = 'id, title, slug, excerpt, cover_image, created_at, updated_at'


class SupabaseStore:
    """Listing, content and auth access through the Supabase platform.

    Table reads/writes go through a client that never signs users in, so it
    keeps the service key for every request. Sign-in flows use a second
    client whose session state is disposable.
    """

    backend = 'supabase'

    def __init__(self, url: str, key: str, *, client: Optional[Client] = None,
                 auth_client: Optional[Client] = None) -> None:
        options = ClientOptions(auto_refresh_token=False, persist_session=False)
        self.client: Client = client or create_client(url, key, options=options)
        self.auth_client: Client = auth_client or create_client(url, key, options=options)
        self._max_retries = 3
        self._retry_backoff_seconds = 0.25

    def _table(self, name: str):
        return self.client.table(name)

    def _with_retry(self, fn: Callable[[], Any]) -> Any:
        delay = self._retry_backoff_seconds
        for attempt in range(self._max_retries):
            try:
                return fn()
            except (httpx.RemoteProtocolError, httpx.WriteError, httpx.ConnectError) as exc:
                if attempt >= self._max_retries - 1:
                    raise StoreError(f'Supabase request failed: {exc}') from exc
                time.sleep(delay)
                delay *= 2

    def _execute(self, query, action: str):
        try:
            return self._with_retry(lambda: query.execute())
        except APIError as exc:
            raise StoreError(f'{action} failed: {exc}') from exc

    def _maybe_single(self, query) -> Optional[Dict[str, Any]]:
        try:
            resp = self._with_retry(lambda: query.maybe_single().execute())
        except APIError as exc:
            logger.warning('Supabase single-row lookup failed: %s', exc)
            return None
        # maybe_single() returns None instead of an empty response on some client versions.
        if resp is None:
            return None
        return resp.data or None

    # Listings ---------------------------------------------------------------------

    def get_listing(self, listing_type: str, slug: str, *, include_pending: bool = False,
                    allow_any_type: bool = False) -> Optional[Dict[str, Any]]:
        query = self._table('listings').select('*').eq('slug', slug).eq('type', listing_type)
        if not include_pending:
            query = query.eq('status', STATUS_APPROVED)

        listing = self._maybe_single(query)
        if listing:
            return listing

        if allow_any_type:
            fallback = self._table('listings').select('*').eq('slug', slug)
            if not include_pending:
                fallback = fallback.eq('status', STATUS_APPROVED)
            return self._maybe_single(fallback)

        return None

    def get_listing_financials(self, listing_type: str, listing_id: str) -> Optional[Dict[str, Any]]:
        table, columns, _ = financial_table(listing_type)
        query = self._table(table).select(', '.join(columns)).eq('listing_id', listing_id)
        return self._maybe_single(query)

    def search_listings(self, listing_type: str, **filters) -> Dict[str, Any]:
        params = normalize_search(listing_type, **filters)
        table, _, price_column = financial_table(params['listing_type'])

        has_price_filter = params['price_min'] is not None or params['price_max'] is not None
        embed = f"{table}{'!inner' if has_price_filter else ''}({price_column})"

        query = (
            self._table('listings')
            .select(f'*, {embed}', count='exact')
            .eq('type', params['listing_type'])
            .eq('status', STATUS_APPROVED)
        )
        if params['country']:
            query = query.ilike('country', match_pattern(params['country']))
        if params['industry']:
            query = query.ilike('category', match_pattern(params['industry']))
        if params['city']:
            query = query.ilike('city', match_pattern(params['city']))
        if params['q']:
            query = query.ilike('title', f"%{params['q']}%")
        if params['price_min'] is not None:
            query = query.gte(f'{table}.{price_column}', params['price_min'])
        if params['price_max'] is not None:
            query = query.lte(f'{table}.{price_column}', params['price_max'])

        start = (params['page'] - 1) * params['page_size']
        query = query.order('created_at', desc=params['sort'] == 'newest').range(
            start, start + params['page_size'] - 1
        )

        resp = self._execute(query, 'Listing search')
        items = [self._flatten_price(row, table, price_column) for row in (resp.data or [])]
        return page_result(items, resp.count or 0, params['page'], params['page_size'])

    @staticmethod
    def _flatten_price(row: Dict[str, Any], table: str, price_column: str) -> Dict[str, Any]:
        details = row.pop(table, None)
        if isinstance(details, list):
            details = details[0] if details else None
        row['price'] = (details or {}).get(price_column)
        return row

    def list_sitemap_listings(self) -> List[Dict[str, Any]]:
        query = (
            self._table('listings')
            .select('slug, type, updated_at')
            .eq('status', STATUS_APPROVED)
            .not_.is_('slug', 'null')
        )
        return self._execute(query, 'Sitemap listing query').data or []

    # Blog -------------------------------------------------------------------------

    def list_blog_posts(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = (
            self._table('blogs')
            .select(BLOG_LIST_COLUMNS)
            .eq('status', STATUS_PUBLISHED)
            .order('created_at', desc=True)
        )
        if limit:
            query = query.limit(limit)
        return self._execute(query, 'Blog query').data or []

    def get_blog_post(self, slug: str) -> Optional[Dict[str, Any]]:
        return self._maybe_single(
            self._table('blogs').select('*').eq('slug', slug).eq('status', STATUS_PUBLISHED)
        )

    def list_sitemap_posts(self) -> List[Dict[str, Any]]:
        query = (
            self._table('blogs')
            .select('slug, created_at, updated_at')
            .eq('status', STATUS_PUBLISHED)
            .not_.is_('slug', 'null')
        )
        return self._execute(query, 'Sitemap blog query').data or []

    # Inquiries / subscribers -------------------------------------------------------

    def create_inquiry(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        record = {
            'listing_id': payload['listing_id'],
            'buyer_name': payload['buyer_name'],
            'buyer_email': payload['buyer_email'],
            'company': payload.get('company') or None,
            'budget_range': payload.get('budget_range') or None,
            'reason_interest': payload['reason_interest'],
        }
        try:
            resp = self._with_retry(lambda: self._table('buyer_contact').insert(record).execute())
        except APIError as exc:
            raise StoreError(f'Failed to store inquiry: {exc}') from exc
        if not resp.data:
            raise StoreError('Failed to store inquiry')
        return resp.data[0]

    def add_subscriber(self, email: str, source: str = 'footer') -> Dict[str, Any]:
        try:
            resp = self._with_retry(
                lambda: self._table('newsletter_subscribers').insert({'email': email, 'source': source}).execute()
            )
        except APIError as exc:
            if getattr(exc, 'code', None) == UNIQUE_VIOLATION:
                raise DuplicateRecordError(email) from exc
            raise StoreError(f'Failed to subscribe: {exc}') from exc
        return resp.data[0] if resp.data else {'email': email, 'source': source}

    def email_exists(self, email: str) -> bool:
        try:
            resp = self._with_retry(
                lambda: self.client.rpc('check_email_exists', {'input_email': email}).execute()
            )
        except APIError as exc:
            raise StoreError(f'Failed to check email: {exc}') from exc
        return bool(resp.data)

    # Profiles ---------------------------------------------------------------------

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._maybe_single(self._table('profiles').select('*').eq('id', user_id))

    def upsert_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        record = {'id': user_id, **fields}
        try:
            resp = self._with_retry(
                lambda: self._table('profiles').upsert(record, on_conflict='id').execute()
            )
        except APIError as exc:
            raise StoreError(f'Failed to save profile: {exc}') from exc
        return resp.data[0] if resp.data else record

    # Auth -------------------------------------------------------------------------

    @staticmethod
    def _user(user) -> Dict[str, Any]:
        return user_payload(user.id, user.email, getattr(user, 'user_metadata', None))

    def sign_up(self, email: str, password: str, metadata: Dict[str, Any],
                redirect_to: Optional[str] = None) -> Dict[str, Any]:
        options: Dict[str, Any] = {'data': metadata}
        if redirect_to:
            options['email_redirect_to'] = redirect_to
        try:
            resp = self.auth_client.auth.sign_up({'email': email, 'password': password, 'options': options})
        except SupabaseAuthError as exc:
            raise AuthError(str(exc)) from exc
        if resp.user is None:
            raise AuthError('Sign up did not return a user.')
        user = self._user(resp.user)
        user['confirmed'] = resp.session is not None
        return user

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        try:
            resp = self.auth_client.auth.sign_in_with_password({'email': email, 'password': password})
        except SupabaseAuthError as exc:
            raise AuthError('Invalid email or password.') from exc
        if resp.user is None:
            raise AuthError('Invalid email or password.')
        return self._user(resp.user)

    def oauth_url(self, provider: str, redirect_to: str) -> str:
        try:
            resp = self.auth_client.auth.sign_in_with_oauth(
                {'provider': provider, 'options': {'redirect_to': redirect_to}}
            )
        except SupabaseAuthError as exc:
            raise AuthError(str(exc)) from exc
        return resp.url

    def exchange_code(self, code: str) -> Dict[str, Any]:
        try:
            resp = self.auth_client.auth.exchange_code_for_session({'auth_code': code})
        except SupabaseAuthError as exc:
            raise AuthError('This sign-in link is invalid or has expired.') from exc
        if resp.user is None:
            raise AuthError('This sign-in link is invalid or has expired.')
        return self._user(resp.user)

    def send_password_reset(self, email: str, redirect_to: str) -> None:
        try:
            self.auth_client.auth.reset_password_for_email(email, {'redirect_to': redirect_to})
        except SupabaseAuthError as exc:
            raise AuthError(str(exc)) from exc

    def update_password(self, user_id: str, password: str) -> None:
        try:
            self.client.auth.admin.update_user_by_id(user_id, {'password': password})
        except SupabaseAuthError as exc:
            raise AuthError(str(exc)) from exc

    def ping(self) -> None:
        self._execute(self._table('listings').select('id').limit(1), 'Supabase ping')
