"""Supabase store against an in-memory fake of the fluent client API."""

from types import SimpleNamespace

import httpx
import pytest
from postgrest import APIError
from supabase import AuthError as SupabaseAuthError

from marketplace.store import AuthError, DuplicateRecordError, StoreError
from marketplace.store.supabase_store import SupabaseStore


class FakeQuery:
    """Records the chained filter calls and returns a canned response."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        def _chain(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return _chain

    @property
    def not_(self):
        self.calls.append(('not_', (), {}))
        return self

    def execute(self):
        self.client.executed.append(self)
        response = self.client.responses.get(self.table)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(self)
        return response or SimpleNamespace(data=[], count=0)

    def called(self, name):
        return [args for call, args, _ in self.calls if call == name]


class FakeAuth:
    def __init__(self):
        self.calls = []
        self.result = None
        self.error = None
        self.admin = self

    def _call(self, name, *args):
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return self.result

    def sign_up(self, credentials):
        return self._call('sign_up', credentials)

    def sign_in_with_password(self, credentials):
        return self._call('sign_in_with_password', credentials)

    def sign_in_with_oauth(self, credentials):
        return self._call('sign_in_with_oauth', credentials)

    def exchange_code_for_session(self, params):
        return self._call('exchange_code_for_session', params)

    def reset_password_for_email(self, email, options):
        return self._call('reset_password_for_email', email, options)

    def update_user_by_id(self, user_id, attributes):
        return self._call('update_user_by_id', user_id, attributes)


class FakeClient:
    def __init__(self):
        self.responses = {}
        self.executed = []
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        query = FakeQuery(self, f'rpc:{name}')
        query.calls.append(('rpc', (name, params), {}))
        return query

    @property
    def last(self):
        return self.executed[-1]


def _auth_error(message):
    return SupabaseAuthError.__new__(SupabaseAuthError, message)


def _user(user_id='u-1', email='ada@example.com', **metadata):
    return SimpleNamespace(id=user_id, email=email, user_metadata=metadata)


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def auth_client():
    return FakeClient()


@pytest.fixture
def store(client, auth_client):
    store = SupabaseStore('https://project.supabase.co', 'service-key', client=client, auth_client=auth_client)
    store._retry_backoff_seconds = 0
    return store


def test_get_listing_filters(store, client):
    client.responses['listings'] = SimpleNamespace(data={'id': 'l-1', 'slug': 'cafe-1234abcd'})

    listing = store.get_listing('business_sale', 'cafe-1234abcd')
    assert listing['id'] == 'l-1'
    query = client.last
    assert query.called('eq') == [('slug', 'cafe-1234abcd'), ('type', 'business_sale'), ('status', 'approved')]
    assert query.called('maybe_single') == [()]


def test_get_listing_any_type_fallback(store, client):
    responses = iter([None, SimpleNamespace(data={'id': 'l-2', 'type': 'franchise_sale'})])
    client.responses['listings'] = lambda query: next(responses)

    listing = store.get_listing('business_sale', 'burger', include_pending=True, allow_any_type=True)
    assert listing['type'] == 'franchise_sale'
    assert client.last.called('eq') == [('slug', 'burger')]


def test_get_listing_miss_returns_none(store, client):
    client.responses['listings'] = SimpleNamespace(data=None)
    assert store.get_listing('business_sale', 'missing') is None


def test_lookup_api_error_is_a_miss(store, client):
    client.responses['listings'] = APIError({'message': 'bad request', 'code': 'PGRST100'})
    assert store.get_listing('business_sale', 'x') is None


def test_get_listing_financials_selects_type_columns(store, client):
    client.responses['franchise_sale_details'] = SimpleNamespace(data={'franchise_fee': 35000})

    assert store.get_listing_financials('franchise_sale', 'l-1') == {'franchise_fee': 35000}
    query = client.last
    assert query.table == 'franchise_sale_details'
    assert query.called('select') == [('franchise_fee, avg_unit_revenue, avg_unit_profit',)]
    assert query.called('eq') == [('listing_id', 'l-1')]


def test_search_listings_builds_query_and_flattens_price(store, client):
    client.responses['listings'] = SimpleNamespace(
        data=[{'id': 'l-1', 'title': 'Cafe', 'business_sale_details': [{'asking_price': 80000}]}],
        count=13,
    )

    result = store.search_listings('business_sale', country='south africa', industry='food beverage',
                                   price_min='50000', page=2, page_size=12)

    assert result['items'] == [{'id': 'l-1', 'title': 'Cafe', 'price': 80000}]
    assert result['total'] == 13
    assert result['total_pages'] == 2

    query = client.last
    assert query.calls[0] == ('select', ('*, business_sale_details!inner(asking_price)',), {'count': 'exact'})
    assert ('country', 'south%africa') in query.called('ilike')
    assert ('category', 'food%beverage') in query.called('ilike')
    assert query.called('gte') == [('business_sale_details.asking_price', 50000.0)]
    assert query.called('range') == [(12, 23)]


def test_search_listings_without_price_filter_uses_left_embed(store, client):
    client.responses['listings'] = SimpleNamespace(data=[{'id': 'l-1', 'franchise_sale_details': None}], count=1)

    result = store.search_listings('franchise_sale', sort='oldest')
    assert result['items'][0]['price'] is None
    query = client.last
    assert query.calls[0][1] == ('*, franchise_sale_details(franchise_fee)',)
    assert [call for call in query.calls if call[0] == 'order'] == [('order', ('created_at',), {'desc': False})]


def test_search_api_error_raises_store_error(store, client):
    client.responses['listings'] = APIError({'message': 'timeout', 'code': '57014'})
    with pytest.raises(StoreError):
        store.search_listings('business_sale')


def test_transient_network_errors_are_retried(store, client):
    attempts = []

    def _flaky(query):
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ConnectError('connection reset')
        return SimpleNamespace(data=[{'slug': 'a', 'type': 'business_sale', 'updated_at': None}])

    client.responses['listings'] = _flaky
    assert store.list_sitemap_listings() == [{'slug': 'a', 'type': 'business_sale', 'updated_at': None}]
    assert len(attempts) == 3


def test_retries_are_bounded(store, client):
    client.responses['listings'] = httpx.ConnectError('down')
    with pytest.raises(StoreError, match='Supabase request failed'):
        store.ping()
    assert len(client.executed) == 3


def test_blog_queries(store, client):
    client.responses['blogs'] = SimpleNamespace(data=[{'slug': 'post'}])

    assert store.list_blog_posts(limit=3) == [{'slug': 'post'}]
    query = client.last
    assert query.called('eq') == [('status', 'published')]
    assert query.called('limit') == [(3,)]

    client.responses['blogs'] = SimpleNamespace(data={'slug': 'post', 'title': 'Post'})
    assert store.get_blog_post('post')['title'] == 'Post'


def test_sitemap_queries_exclude_null_slugs(store, client):
    store.list_sitemap_posts()
    query = client.last
    assert ('not_', (), {}) in query.calls
    assert query.called('is_') == [('slug', 'null')]


def test_create_inquiry(store, client):
    client.responses['buyer_contact'] = SimpleNamespace(data=[{'id': 1}])
    payload = {
        'listing_id': 'l-1',
        'buyer_name': 'Ada',
        'buyer_email': 'ada@example.com',
        'company': '',
        'budget_range': 'under-100k',
        'reason_interest': 'Interested.',
    }
    assert store.create_inquiry(payload) == {'id': 1}
    inserted = client.last.called('insert')[0][0]
    assert inserted['company'] is None

    client.responses['buyer_contact'] = SimpleNamespace(data=[])
    with pytest.raises(StoreError):
        store.create_inquiry(payload)


def test_add_subscriber_duplicate(store, client):
    client.responses['newsletter_subscribers'] = APIError({'message': 'duplicate key', 'code': '23505'})
    with pytest.raises(DuplicateRecordError):
        store.add_subscriber('reader@example.com')

    client.responses['newsletter_subscribers'] = APIError({'message': 'denied', 'code': '42501'})
    with pytest.raises(StoreError) as excinfo:
        store.add_subscriber('reader@example.com')
    assert not isinstance(excinfo.value, DuplicateRecordError)


def test_email_exists_uses_rpc(store, client):
    client.responses['rpc:check_email_exists'] = SimpleNamespace(data=True)
    assert store.email_exists('ada@example.com') is True
    assert client.last.called('rpc') == [('check_email_exists', {'input_email': 'ada@example.com'})]


def test_upsert_profile(store, client):
    client.responses['profiles'] = SimpleNamespace(data=[{'id': 'u-1', 'country': 'Kenya'}])
    assert store.upsert_profile('u-1', {'country': 'Kenya'}) == {'id': 'u-1', 'country': 'Kenya'}
    assert client.last.called('upsert') == [({'id': 'u-1', 'country': 'Kenya'},)]


def test_sign_up_reports_confirmation_state(store, auth_client):
    auth_client.auth.result = SimpleNamespace(user=_user(full_name='Ada'), session=None)

    user = store.sign_up('ada@example.com', 'secret123', metadata={'full_name': 'Ada'},
                         redirect_to='https://acquityapp.com/auth/callback')
    assert user == {'id': 'u-1', 'email': 'ada@example.com', 'full_name': 'Ada', 'confirmed': False}
    credentials = auth_client.auth.calls[0][1][0]
    assert credentials['options'] == {
        'data': {'full_name': 'Ada'},
        'email_redirect_to': 'https://acquityapp.com/auth/callback',
    }


def test_sign_in_maps_auth_errors(store, auth_client):
    auth_client.auth.error = _auth_error('Invalid login credentials')
    with pytest.raises(AuthError, match='Invalid email or password.'):
        store.sign_in('ada@example.com', 'wrong')


def test_oauth_and_code_exchange(store, auth_client):
    auth_client.auth.result = SimpleNamespace(url='https://project.supabase.co/auth/v1/authorize?provider=google')
    assert store.oauth_url('google', 'https://acquityapp.com/auth/callback').endswith('provider=google')

    auth_client.auth.result = SimpleNamespace(user=_user(name='Ada L'), session=object())
    assert store.exchange_code('abc')['full_name'] == 'Ada L'
    assert auth_client.auth.calls[-1] == ('exchange_code_for_session', ({'auth_code': 'abc'},))

    auth_client.auth.error = _auth_error('invalid flow state')
    with pytest.raises(AuthError):
        store.exchange_code('expired')


def test_password_reset_and_update(store, client, auth_client):
    store.send_password_reset('ada@example.com', 'https://acquityapp.com/reset-password')
    assert auth_client.auth.calls[-1] == (
        'reset_password_for_email',
        ('ada@example.com', {'redirect_to': 'https://acquityapp.com/reset-password'}),
    )

    store.update_password('u-1', 'new-secret')
    assert client.auth.calls[-1] == ('update_user_by_id', ('u-1', {'password': 'new-secret'}))
