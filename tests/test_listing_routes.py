"""Listing browse and detail pages."""

import json
import re

from marketplace.extensions import mail
from marketplace.models import BuyerContact


def _jsonld(html):
    return [json.loads(block) for block in re.findall(
        r'<script type="application/ld\+json">(.*?)</script>', html, re.S
    )]


def _robots(html):
    return re.search(r'<meta name="robots" content="([^"]+)">', html).group(1)


def _canonical(html):
    return re.search(r'<link rel="canonical" href="([^"]+)">', html).group(1)


def test_clean_browse_page_is_indexable(client, make_listing):
    make_listing('franchise_sale', title='Retail Franchise', country='United Arab Emirates',
                 category='Retail', financials={'franchise_fee': 25000})

    resp = client.get('/listings/franchises/united-arab-emirates/retail')
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert 'Retail Franchise' in html
    assert _canonical(html) == 'https://acquityapp.com/listings/franchises/united-arab-emirates/retail'
    assert _robots(html) == 'index, follow'

    types = [schema['@type'] for schema in _jsonld(html)]
    assert 'BreadcrumbList' in types
    assert types.count('CollectionPage') == 2


def test_empty_browse_page_is_noindex(client):
    resp = client.get('/listings/investments/kenya')
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert _robots(html) == 'noindex, follow'


def test_browse_filters_by_country_slug(client, make_listing):
    make_listing(title='Nairobi Roastery', country='Kenya', category='Food & Beverage')
    make_listing(title='Lagos Logistics', country='Nigeria', category='Logistics')

    html = client.get('/listings/businesses/kenya/food-beverage').get_data(as_text=True)
    assert 'Nairobi Roastery' in html
    assert 'Lagos Logistics' not in html


def test_pending_listings_are_not_browsable(client, make_listing):
    make_listing(title='Hidden Gym', status='pending')
    html = client.get('/listings/businesses').get_data(as_text=True)
    assert 'Hidden Gym' not in html


def test_unknown_segment_is_404(client):
    assert client.get('/listings/yachts').status_code == 404


def test_query_params_page_is_noindex_with_clean_canonical(client, make_listing):
    make_listing(title='Cheap Cafe', country='Kenya', financials={'asking_price': 50000})
    make_listing(title='Pricey Hotel', country='Kenya', financials={'asking_price': 900000})

    resp = client.get('/listings/businesses/kenya?price_max=100000')
    html = resp.get_data(as_text=True)
    assert resp.status_code == 200
    assert 'Cheap Cafe' in html
    assert 'Pricey Hotel' not in html
    assert _robots(html) == 'noindex, follow'
    assert _canonical(html) == 'https://acquityapp.com/listings/businesses/kenya'


def test_second_page_is_noindex_with_prev_link(app, client, make_listing):
    app.config['LISTINGS_PER_PAGE'] = 1
    make_listing(title='First Listing', age_days=0)
    make_listing(title='Second Listing', age_days=1)

    html = client.get('/listings/businesses?page=2').get_data(as_text=True)
    assert 'Second Listing' in html
    assert 'First Listing' not in html
    assert _robots(html) == 'noindex, follow'
    assert '<link rel="prev" href="/listings/businesses">' in html


def test_out_of_range_page_renders_empty(client, make_listing):
    make_listing(title='Coffee Roastery')

    resp = client.get('/listings/businesses', query_string={'page': '9' * 20})
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert 'Coffee Roastery' not in html
    assert _robots(html) == 'noindex, follow'


def test_query_string_browse_redirects_to_clean_url(client):
    resp = client.get('/listings', query_string={
        'type': 'franchise_sale',
        'country': 'South Africa',
        'industry': 'Food & Beverage',
    })
    assert resp.status_code == 301
    assert resp.headers['Location'].endswith('/listings/franchises/south-africa/food-beverage')


def test_query_string_browse_with_filters_renders(client):
    resp = client.get('/listings?type=investments&q=solar')
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert _robots(html) == 'noindex, follow'
    assert _canonical(html) == 'https://acquityapp.com/listings/investments'


def test_legacy_roots_redirect(client):
    resp = client.get('/businesses-for-sale/kenya?sort=oldest')
    assert resp.status_code == 301
    assert resp.headers['Location'].endswith('/listings/businesses/kenya?sort=oldest')

    resp = client.get('/investments-for-sale')
    assert resp.status_code == 301
    assert resp.headers['Location'].endswith('/listings/investments')


def test_listing_detail_page(client, make_listing):
    listing = make_listing(title='Coffee Roastery', country='Kenya', category='Food & Beverage',
                           description='Specialty roastery.',
                           financials={'asking_price': 450000, 'annual_revenue': 620000, 'ebitda': 140000})

    resp = client.get(f"/businesses-for-sale/listing/{listing['slug']}")
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert 'Coffee Roastery' in html
    assert '$450K' in html
    assert _robots(html) == 'index, follow'
    assert _canonical(html) == f"https://acquityapp.com/businesses-for-sale/listing/{listing['slug']}"

    offers = [schema for schema in _jsonld(html) if schema['@type'] == 'Offer']
    assert offers and offers[0]['price'] == '450000.0'


def test_pending_listing_detail_is_noindex_without_offer(client, make_listing):
    listing = make_listing(title='Quiet Sale', status='pending')
    html = client.get(f"/businesses-for-sale/listing/{listing['slug']}").get_data(as_text=True)
    assert _robots(html) == 'noindex, follow'
    assert 'pending review' in html
    assert 'Offer' not in [schema['@type'] for schema in _jsonld(html)]


def test_detail_under_wrong_type_redirects(client, make_listing):
    listing = make_listing('franchise_sale', title='Burger Franchise')
    resp = client.get(f"/businesses-for-sale/listing/{listing['slug']}")
    assert resp.status_code == 301
    assert resp.headers['Location'].endswith(f"/franchises-for-sale/listing/{listing['slug']}")


def test_missing_listing_is_404(client):
    resp = client.get('/businesses-for-sale/listing/does-not-exist')
    assert resp.status_code == 404
    assert 'noindex' in _robots(resp.get_data(as_text=True))


def _inquiry_form(**overrides):
    data = {
        'name': 'Ada Buyer',
        'company': 'Ada Capital',
        'budget_range': '100k-500k',
        'email': 'buyer@example.com',
        'reason': 'Looking to expand into East Africa.',
    }
    data.update(overrides)
    return data


def test_inquiry_requires_login(client, make_listing):
    listing = make_listing(title='Coffee Roastery')
    resp = client.post(f"/businesses-for-sale/listing/{listing['slug']}", data=_inquiry_form())
    assert resp.status_code == 302
    assert '/login' in resp.headers['Location']


def test_inquiry_is_stored_and_emailed(app, client, make_listing, login):
    listing = make_listing(title='Coffee Roastery')
    login()
    path = f"/businesses-for-sale/listing/{listing['slug']}"

    with mail.record_messages() as outbox:
        resp = client.post(path, data=_inquiry_form())

    assert resp.status_code == 302
    assert resp.headers['Location'].endswith(path)
    assert {tuple(message.recipients) for message in outbox} == {
        (app.config['ADMIN_EMAIL'],),
        ('buyer@example.com',),
    }

    with app.app_context():
        stored = BuyerContact.query.one()
        assert stored.listing_id == listing['id']
        assert stored.budget_range == '100k-500k'


def test_invalid_inquiry_shows_errors(client, make_listing, login):
    listing = make_listing(title='Coffee Roastery')
    login()
    resp = client.post(f"/businesses-for-sale/listing/{listing['slug']}", data=_inquiry_form(reason='short'))
    assert resp.status_code == 200
    assert 'Reason must be between 10 and 2000 characters' in resp.get_data(as_text=True)
