"""
JSON API Blueprint

- /api/listings: listing search (GET query string or POST JSON body)
- /api/subscribe: newsletter signup
- /api/auth/check-email: does an account exist for an email
"""

from flask import Blueprint, jsonify, request, current_app

from marketplace.extensions import limiter
from marketplace.seo.url_mapping import DEFAULT_TYPE, LISTING_TYPES, segment_to_type
from marketplace.store import DuplicateRecordError, StoreError, get_store
from marketplace.store.base import DEFAULT_PAGE_SIZE, EMAIL_RE


TEXT_FILTERS = ('country', 'industry', 'city', 'q', 'sort')


api_bp = Blueprint('api', __name__)


def _api_rate_limit():
    return current_app.config['API_RATE_LIMIT']


def _listing_type(value):
    if not value:
        return DEFAULT_TYPE
    if value in LISTING_TYPES:
        return value
    return segment_to_type(value)


def _json_body():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@api_bp.route('/listings', methods=['GET', 'POST'])
@limiter.limit(_api_rate_limit)
def listings():
    """Listing search

    GET: ?type=business_sale&country=Kenya&industry=Energy&city=Nairobi
         &price_min=100000&price_max=500000&sort=newest&page=1&pageSize=12
    POST: {type, country, industry, filters: {city, price_min, price_max, sort}, page, pageSize}
    """

    if request.method == 'POST':
        body = _json_body()
        filters = body.get('filters') if isinstance(body.get('filters'), dict) else {}
        params = {
            'type': body.get('type'),
            'country': body.get('country'),
            'industry': body.get('industry'),
            'city': filters.get('city'),
            'q': filters.get('q'),
            'price_min': filters.get('price_min'),
            'price_max': filters.get('price_max'),
            'sort': filters.get('sort'),
            'page': body.get('page', 1),
            'page_size': body.get('pageSize', DEFAULT_PAGE_SIZE),
        }
    else:
        args = request.args
        params = {
            'type': args.get('type'),
            'country': args.get('country'),
            'industry': args.get('industry'),
            'city': args.get('city'),
            'q': args.get('q'),
            'price_min': args.get('price_min'),
            'price_max': args.get('price_max'),
            'sort': args.get('sort'),
            'page': args.get('page', 1),
            'page_size': args.get('pageSize', DEFAULT_PAGE_SIZE),
        }

    invalid = [key for key in ('type',) + TEXT_FILTERS
               if params[key] is not None and not isinstance(params[key], str)]
    if invalid:
        return jsonify({'success': False, 'error': f'{invalid[0]} must be a string'}), 400

    listing_type = _listing_type(params.pop('type'))
    if listing_type is None:
        return jsonify({'success': False, 'error': 'Unknown listing type'}), 400

    try:
        result = get_store().search_listings(listing_type, **params)
    except StoreError as exc:
        current_app.logger.error('Listing API error: %s', exc, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to fetch listings'}), 500

    return jsonify({
        'success': True,
        'data': result['items'],
        'pagination': {
            'page': result['page'],
            'pageSize': result['page_size'],
            'total': result['total'],
            'totalPages': result['total_pages'],
        },
    })


@api_bp.route('/subscribe', methods=['POST'])
@limiter.limit(_api_rate_limit)
def subscribe():
    body = _json_body()
    email = str(body.get('email') or '').strip().lower()
    source = str(body.get('source') or 'footer').strip()

    if not EMAIL_RE.match(email):
        return jsonify({'message': 'Please provide a valid email address.'}), 400

    try:
        get_store().add_subscriber(email, source)
    except DuplicateRecordError:
        return jsonify({'message': "You're already subscribed."})
    except StoreError as exc:
        current_app.logger.warning('Subscribe API error: %s', exc)
        return jsonify({'message': 'Unable to subscribe right now.'}), 500

    return jsonify({'message': 'Thanks for subscribing!'})


@api_bp.route('/auth/check-email', methods=['POST'])
@limiter.limit(_api_rate_limit)
def check_email():
    body = _json_body()
    email = str(body.get('email') or '').strip().lower()

    if not EMAIL_RE.match(email):
        return jsonify({'message': 'Please enter a valid email address.'}), 400

    try:
        exists = get_store().email_exists(email)
    except StoreError as exc:
        current_app.logger.error('Check email error: %s', exc, exc_info=True)
        return jsonify({'message': 'Failed to check email.'}), 500

    return jsonify({'exists': bool(exists)})
