"""
Listings Blueprint - Browse and Detail Routes

- Clean SEO browse pages: /listings/<segment>[/<country>[/<industry>]]
- Query-string browse (/listings?type=...), canonicalized to the clean URL
- Legacy /<type>-for-sale roots, 301 to the clean URL
- Listing detail pages with the buyer inquiry form
"""

from flask import Blueprint, render_template, request, flash, redirect, url_for, current_app, abort
from flask_login import current_user
from flask_mail import Message as MailMessage

from marketplace.extensions import limiter, mail
from marketplace.forms import ContactInquiryForm
from marketplace.seo import build_breadcrumbs, get_seo
from marketplace.seo.content import (
    LISTING_TYPE_CONTENT,
    generate_category_intro,
    generate_empty_state_message,
    generate_location_intro,
)
from marketplace.seo.url_mapping import (
    DEFAULT_TYPE,
    LISTING_TYPES,
    TYPE_LABELS,
    TYPE_ROUTE_MAP,
    build_query_string,
    from_slug,
    generate_canonical_url,
    generate_clean_url,
    get_robots_directive,
    has_non_seo_query_params,
    listing_detail_path,
    parse_clean_url,
    segment_to_type,
    to_slug,
)
from marketplace.store import StoreError, get_store
from marketplace.store.base import MAX_PAGE, financial_table


listings_bp = Blueprint('listings', __name__)

ROUTE_TYPE_MAP = {route: key for key, route in TYPE_ROUTE_MAP.items()}
TYPE_ROUTES = ', '.join(f"'{route}'" for route in TYPE_ROUTE_MAP.values())

# Query parameters that narrow a browse page without changing its clean URL.
BROWSE_FILTER_PARAMS = ('q', 'city', 'price_min', 'price_max', 'sort')


def _display(value):
    """Readable label for a value recovered from a slug."""
    return from_slug(value).title() if value else None


def _resolve_type(value):
    """Accept either a type key or a path segment from the query string."""
    if value in LISTING_TYPES:
        return value
    return segment_to_type(value) or DEFAULT_TYPE


def _page_arg():
    page = request.args.get('page', 1, type=int) or 1
    return min(MAX_PAGE, max(1, page))


def _browse_filters():
    return {key: request.args.get(key, '').strip() for key in BROWSE_FILTER_PARAMS}


def _search(listing_type, country, industry, filters, page):
    try:
        return get_store().search_listings(
            listing_type,
            country=from_slug(country) if country else None,
            industry=from_slug(industry) if industry else None,
            page=page,
            page_size=current_app.config['LISTINGS_PER_PAGE'],
            **filters,
        )
    except StoreError as e:
        current_app.logger.warning('Listing search failed for %s: %s. Returning empty results.', listing_type, e)
        return {'items': [], 'total': 0, 'page': page, 'page_size': 0, 'total_pages': 1}


def _browse_copy(listing_type, country, industry, total):
    label = TYPE_LABELS[listing_type]
    country_name = _display(country)
    industry_name = _display(industry)

    if country and industry:
        title = f"{industry_name} {label} in {country_name}"
        intro = generate_category_intro(industry_name, total)
        empty = generate_empty_state_message('category', industry=industry_name)
    elif country:
        title = f"{label} in {country_name}"
        intro = generate_location_intro(country_name, None, total)
        empty = generate_empty_state_message('location', location=country_name)
    else:
        title = label
        intro = LISTING_TYPE_CONTENT[listing_type]['intro']
        empty = generate_empty_state_message('type', type=label.lower())
    return title, intro, empty


def _pagination_links(path, filters, page, total_pages):
    links = {}
    if page > 1:
        prev_filters = dict(filters, page=page - 1 if page > 2 else None)
        links['prev'] = path + build_query_string(prev_filters)
    if page < total_pages:
        links['next'] = path + build_query_string(dict(filters, page=page + 1))
    return links


def _render_browse(listing_type, country=None, industry=None, query_browse=False):
    """Shared renderer for the clean and query-string browse pages."""

    seo = get_seo()
    page = _page_arg()
    filters = _browse_filters()
    result = _search(listing_type, country, industry, filters, page)

    clean_path = generate_clean_url(listing_type, country=country, industry=industry)
    extra_params = {key: value for key, value in request.args.items() if key != 'page'}
    has_query_params = query_browse or has_non_seo_query_params(extra_params)

    canonical = generate_canonical_url(listing_type, country, industry, has_query_params=has_query_params)
    robots = get_robots_directive(
        has_query_params=has_query_params,
        has_content=result['total'] > 0,
        current_page=page,
    )

    title, intro, empty_message = _browse_copy(listing_type, country, industry, result['total'])

    meta = seo.meta.generate_meta(
        title,
        intro,
        canonical=canonical,
        noindex=robots.startswith('noindex'),
    )

    breadcrumbs = build_breadcrumbs(listing_type, country=_display(country), industry=_display(industry))

    items = result['items']
    schemas = [
        seo.schema.generate_breadcrumb_schema(breadcrumbs),
        seo.schema.generate_collection_schema(
            listing_type, result['total'], country=_display(country), industry=_display(industry)
        ),
    ]
    if items:
        schemas.append(seo.schema.generate_item_list_schema([
            {
                'name': item.get('title'),
                'url': listing_detail_path(item.get('type') or listing_type, item.get('slug')),
                'price': str(item['price']) if item.get('price') is not None else None,
            }
            for item in items
        ]))

    active_filters = {key: value for key, value in filters.items() if value}
    return render_template(
        'listings/browse.html',
        meta=meta,
        schemas=schemas,
        breadcrumbs=breadcrumbs,
        listing_type=listing_type,
        country=country,
        industry=industry,
        country_name=_display(country),
        industry_name=_display(industry),
        heading=title,
        intro=intro,
        benefits=LISTING_TYPE_CONTENT[listing_type]['benefits'],
        empty_message=empty_message,
        listings=items,
        result=result,
        filters=filters,
        clean_path=clean_path,
        pagination_links=_pagination_links(clean_path, active_filters, page, result['total_pages']),
    )


@listings_bp.route('/listings')
def browse_query():
    """Query-string browse page.

    With only SEO parameters it redirects to the clean URL; any other
    filter keeps the page here as noindex with the clean URL as canonical.
    """

    listing_type = _resolve_type(request.args.get('type', ''))
    country = request.args.get('country', '').strip() or None
    industry = request.args.get('industry', '').strip() or None
    country_slug = to_slug(country) if country else None
    industry_slug = to_slug(industry) if country and industry else None

    if not has_non_seo_query_params(request.args):
        return redirect(generate_clean_url(listing_type, country=country_slug, industry=industry_slug), code=301)

    return _render_browse(listing_type, country_slug, industry_slug, query_browse=True)


@listings_bp.route('/listings/<segment>')
@listings_bp.route('/listings/<segment>/<country>')
@listings_bp.route('/listings/<segment>/<country>/<industry>')
def browse(segment, country=None, industry=None):
    """Clean hierarchical browse page"""

    if segment_to_type(segment) is None:
        abort(404)
    params = parse_clean_url(segment, country=country, industry=industry)
    return _render_browse(params['type'], country, industry)


@listings_bp.route(f'/<any({TYPE_ROUTES}):type_route>')
@listings_bp.route(f'/<any({TYPE_ROUTES}):type_route>/<country>')
@listings_bp.route(f'/<any({TYPE_ROUTES}):type_route>/<country>/<industry>')
def legacy_browse(type_route, country=None, industry=None):
    """Old /<type>-for-sale browse roots"""
    target = generate_clean_url(ROUTE_TYPE_MAP[type_route], country=country, industry=industry)
    query = request.query_string.decode('utf-8')
    return redirect(f"{target}?{query}" if query else target, code=301)


def _notify_inquiry(listing, inquiry):
    """Best-effort emails for a stored inquiry"""

    admin_email = current_app.config.get('ADMIN_EMAIL')
    listing_url = get_seo().settings.absolute(listing_detail_path(listing['type'], listing['slug']))

    messages = []
    if admin_email:
        admin_msg = MailMessage(
            subject=f"New inquiry: {listing.get('title')}",
            recipients=[admin_email],
            reply_to=inquiry['buyer_email'],
        )
        admin_msg.body = (
            f"Listing: {listing.get('title')}\n"
            f"URL: {listing_url}\n\n"
            f"Name: {inquiry['buyer_name']}\n"
            f"Email: {inquiry['buyer_email']}\n"
            f"Company: {inquiry.get('company') or '-'}\n"
            f"Budget: {inquiry.get('budget_range') or '-'}\n\n"
            f"{inquiry['reason_interest']}\n"
        )
        messages.append(admin_msg)

    buyer_msg = MailMessage(
        subject=f"We received your inquiry about {listing.get('title')}",
        recipients=[inquiry['buyer_email']],
    )
    buyer_msg.body = (
        f"Hi {inquiry['buyer_name']},\n\n"
        f"Thanks for your interest in \"{listing.get('title')}\". "
        'The seller has been notified and will contact you soon.\n\n'
        f"{listing_url}\n"
    )
    messages.append(buyer_msg)

    for message in messages:
        try:
            mail.send(message)
        except Exception as exc:
            current_app.logger.warning('Failed to send inquiry email for listing %s: %s', listing.get('id'), exc)


@listings_bp.route(f'/<any({TYPE_ROUTES}):type_route>/listing/<slug>', methods=['GET', 'POST'])
@limiter.limit(lambda: current_app.config['INQUIRY_RATE_LIMIT'], methods=['POST'])
def detail(type_route, slug):
    """Listing detail page"""

    listing_type = ROUTE_TYPE_MAP[type_route]
    store = get_store()

    try:
        listing = store.get_listing(listing_type, slug, include_pending=True, allow_any_type=True)
    except StoreError as exc:
        current_app.logger.error('Listing lookup failed type=%s slug=%s: %s', listing_type, slug, exc, exc_info=True)
        abort(500)

    if listing is None:
        abort(404)

    actual_type = listing.get('type') if listing.get('type') in LISTING_TYPES else listing_type
    listing_path = listing_detail_path(actual_type, listing['slug'])
    if request.method == 'GET' and actual_type != listing_type:
        return redirect(listing_path, code=301)

    is_approved = listing.get('status') == 'approved'

    form = ContactInquiryForm()
    if request.method == 'GET' and current_user.is_authenticated:
        form.name.data = form.name.data or current_user.full_name
        form.email.data = form.email.data or current_user.email

    if request.method == 'POST':
        if not current_user.is_authenticated:
            flash('Please log in to contact the seller.', 'info')
            return redirect(url_for('auth.login', next=listing_path))

        if form.validate_on_submit():
            payload = {
                'listing_id': listing['id'],
                'buyer_name': form.name.data.strip(),
                'buyer_email': form.email.data.strip(),
                'company': (form.company.data or '').strip(),
                'budget_range': form.budget_range.data,
                'reason_interest': form.reason.data.strip(),
            }
            try:
                store.create_inquiry(payload)
            except StoreError as exc:
                current_app.logger.exception('Failed to store inquiry for listing %s: %s', listing['id'], exc)
                flash('We could not send your inquiry right now. Please try again.', 'danger')
            else:
                _notify_inquiry(listing, payload)
                flash('Your inquiry has been sent successfully! The seller will contact you soon.', 'success')
                return redirect(listing_path)

    try:
        financials = store.get_listing_financials(actual_type, listing['id']) or {}
    except StoreError as exc:
        current_app.logger.warning('Failed to load financials for listing %s: %s', listing['id'], exc)
        financials = {}

    _, _, price_column = financial_table(actual_type)
    price = financials.get(price_column)

    seo = get_seo()
    title = listing.get('title') or 'Business Listing'
    description = listing.get('description') or 'Explore this business listing and connect with the seller.'
    meta = seo.meta.generate_meta(
        title,
        description,
        canonical=listing_path,
        og_image=listing.get('image_url'),
        noindex=not is_approved,
        og_type='article',
    )

    breadcrumbs = build_breadcrumbs(
        actual_type,
        country=listing.get('country'),
        industry=listing.get('category'),
        listing_title=title,
        listing_path=listing_path,
    )
    schemas = [seo.schema.generate_breadcrumb_schema(breadcrumbs)]
    if is_approved:
        schemas.append(seo.schema.generate_offer_schema(
            listing,
            price=str(price) if price is not None else None,
            url=listing_path,
        ))

    return render_template(
        'listings/detail.html',
        meta=meta,
        schemas=schemas,
        breadcrumbs=breadcrumbs,
        listing=listing,
        listing_type=actual_type,
        financials=financials,
        price=price,
        price_column=price_column,
        is_approved=is_approved,
        form=form,
    )
