"""JSON API: listing search, newsletter and email lookup."""


def test_listings_get(client, make_listing):
    make_listing(title='Coffee Roastery', country='Kenya', financials={'asking_price': 450000})
    make_listing(title='Lagos Logistics', country='Nigeria')

    resp = client.get('/api/listings?type=business_sale&country=Kenya')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['success'] is True
    assert [item['title'] for item in body['data']] == ['Coffee Roastery']
    assert body['data'][0]['price'] == 450000
    assert body['pagination'] == {'page': 1, 'pageSize': 12, 'total': 1, 'totalPages': 1}


def test_listings_accepts_segment_names(client, make_listing):
    make_listing('franchise_sale', title='Burger Franchise')
    body = client.get('/api/listings?type=franchises').get_json()
    assert [item['title'] for item in body['data']] == ['Burger Franchise']


def test_listings_post_with_filters(client, make_listing):
    make_listing('investment_opportunity', title='Small Raise', financials={'capital_required': 100000})
    make_listing('investment_opportunity', title='Big Raise', financials={'capital_required': 5000000})

    resp = client.post('/api/listings', json={
        'type': 'investment_opportunity',
        'filters': {'price_min': 1000000},
        'page': 1,
        'pageSize': 5,
    })
    body = resp.get_json()
    assert resp.status_code == 200
    assert [item['title'] for item in body['data']] == ['Big Raise']
    assert body['pagination']['pageSize'] == 5


def test_listings_page_size_is_clamped(client):
    body = client.get('/api/listings?pageSize=500').get_json()
    assert body['pagination']['pageSize'] == 48


def test_listings_unknown_type(client):
    resp = client.get('/api/listings?type=yachts')
    assert resp.status_code == 400
    assert resp.get_json()['success'] is False


def test_listings_huge_page_is_empty(client, make_listing):
    make_listing(title='Coffee Roastery')
    resp = client.get('/api/listings', query_string={'type': 'business_sale', 'page': '9' * 20})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['data'] == []
    assert body['pagination']['total'] == 1


def test_listings_rejects_non_string_filters(client):
    resp = client.post('/api/listings', json={'type': 'business_sale', 'country': 5})
    assert resp.status_code == 400
    assert resp.get_json() == {'success': False, 'error': 'country must be a string'}

    resp = client.post('/api/listings', json={'type': 'business_sale', 'filters': {'q': ['x']}})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'q must be a string'

    resp = client.post('/api/listings', json={'type': ['business_sale']})
    assert resp.status_code == 400


def test_subscribe(client):
    resp = client.post('/api/subscribe', json={'email': 'Reader@Example.com'})
    assert resp.status_code == 200
    assert resp.get_json()['message'] == 'Thanks for subscribing!'

    resp = client.post('/api/subscribe', json={'email': 'reader@example.com'})
    assert resp.status_code == 200
    assert resp.get_json()['message'] == "You're already subscribed."


def test_subscribe_invalid_email(client):
    resp = client.post('/api/subscribe', json={'email': 'not-an-email'})
    assert resp.status_code == 400

    resp = client.post('/api/subscribe', data='garbage', content_type='application/json')
    assert resp.status_code == 400


def test_check_email(client, make_user):
    make_user(email='known@example.com')

    assert client.post('/api/auth/check-email', json={'email': 'KNOWN@example.com'}).get_json() == {'exists': True}
    assert client.post('/api/auth/check-email', json={'email': 'new@example.com'}).get_json() == {'exists': False}
    assert client.post('/api/auth/check-email', json={'email': 'bad'}).status_code == 400
