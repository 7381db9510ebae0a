"""
Main Blueprint - Public Routes

This blueprint handles the public pages that are not listings or blog:
- Homepage
- Legal pages, help center, success stories and acquisition guides
- Sitemap and robots.txt
"""

from flask import Blueprint, render_template, current_app, Response, abort

from marketplace.seo import get_seo
from marketplace.seo.content import LISTING_TYPE_CONTENT
from marketplace.seo.sitemap import generate_robots_txt, generate_sitemap
from marketplace.seo.url_mapping import BUSINESS_SALE, FRANCHISE_SALE, INVESTMENT_OPPORTUNITY, LISTING_TYPES
from marketplace.store import StoreError, get_store


main_bp = Blueprint('main', __name__)


LEGAL_PAGES = {
    'terms': {
        'title': 'Terms of Service',
        'description': 'The terms that govern your use of the Acquity marketplace.',
    },
    'privacy': {
        'title': 'Privacy Policy',
        'description': 'How Acquity collects, uses and protects your personal data.',
    },
    'cookies': {
        'title': 'Cookies Policy',
        'description': 'Which cookies Acquity uses and how to control them.',
    },
    'help-center': {
        'title': 'Help Center',
        'description': 'Answers and guidance for using Acquity.',
    },
}

RESOURCE_GUIDES = {
    'how-to-sell-my-business': {
        'title': 'How to Sell Your Business',
        'description': (
            'A practical overview of the small-business sale process, from readiness to '
            'finalizing ownership transfer.'
        ),
        'listing_type': BUSINESS_SALE,
        'sections': [
            ('Get your financials in order', [
                'Buyers start with three years of revenue, profit and cash flow. Clean, '
                'reconciled accounts shorten due diligence and support your asking price.',
            ]),
            ('Value the business', [
                'Most small businesses sell on a multiple of EBITDA or seller discretionary '
                'earnings. Compare recent sales in your industry and region.',
            ]),
            ('Prepare the handover', [
                'Document key processes, supplier terms and customer contracts so a new '
                'owner can run the business from day one.',
            ]),
        ],
    },
    'how-to-buy-a-business': {
        'title': 'How to Buy a Business',
        'description': (
            'Complete step-by-step guide to acquiring your first business, from finding '
            'opportunities to closing the deal.'
        ),
        'listing_type': BUSINESS_SALE,
        'sections': [
            ('Define what you are looking for', [
                'Set a budget, target industries and the level of involvement you want. '
                'It narrows the search and keeps you out of deals that do not fit.',
            ]),
            ('Evaluate opportunities', [
                'Compare asking price against revenue and EBITDA, and ask why the owner is selling.',
            ]),
            ('Close the deal', [
                'Agree on price and structure, complete due diligence, then sign the purchase '
                'agreement and plan the transition with the seller.',
            ]),
        ],
    },
    'due-diligence-checklist': {
        'title': 'Due Diligence Checklist',
        'description': (
            'Essential checklist for investigating a business before purchase. Avoid costly '
            'mistakes and hidden liabilities.'
        ),
        'listing_type': BUSINESS_SALE,
        'sections': [
            ('Financial', [
                'Tax returns, bank statements, accounts receivable ageing and outstanding debt.',
            ]),
            ('Legal', [
                'Company registration, licences, leases, pending litigation and employment contracts.',
            ]),
            ('Operational', [
                'Key staff, supplier dependence, customer concentration and condition of equipment.',
            ]),
        ],
    },
    'franchise-vs-business': {
        'title': 'Franchise vs Business Acquisition',
        'description': (
            'Compare the pros and cons of buying a franchise versus an independent business '
            'to make the right choice.'
        ),
        'listing_type': FRANCHISE_SALE,
        'sections': [
            ('Franchises', [
                'A proven model, training and brand recognition in exchange for fees, royalties '
                'and less freedom over how you operate.',
            ]),
            ('Independent businesses', [
                'Full control and no royalties, but you carry the brand and the playbook yourself.',
            ]),
        ],
    },
    'understanding-ebitda': {
        'title': 'Understanding EBITDA',
        'description': (
            'Master EBITDA and other financial metrics crucial for evaluating business '
            'profitability and value.'
        ),
        'listing_type': BUSINESS_SALE,
        'sections': [
            ('What is EBITDA?', [
                'Earnings before interest, taxes, depreciation and amortization: operating '
                'profit before financing and accounting choices.',
            ]),
            ('Using EBITDA for valuation', [
                'Businesses are often priced at a multiple of EBITDA. A company with $200K '
                'EBITDA at a 3x multiple is valued around $600K.',
            ]),
            ('Limitations', [
                'EBITDA ignores capital expenditure and working capital needs, so always read '
                'it alongside cash flow.',
            ]),
        ],
    },
}


# metrics are (label, value) pairs
SUCCESS_STORIES = [
    {
        'title': 'Acquiring a Profitable Tech Business',
        'summary': 'How a software engineer acquired a profitable web agency',
        'listing_type': BUSINESS_SALE,
        'challenge': (
            'Marcus, a software engineer with ten years of experience, wanted to move into ownership. '
            'He looked for an established tech business with steady revenue but little growth effort.'
        ),
        'solution': (
            'He found a five-year-old web agency with $450K annual revenue, 12 employees and strong client '
            'retention. The retiring owner shared financials, client contracts and employee agreements '
            'under NDA.'
        ),
        'outcome': (
            'Marcus paid $850K, a 1.9x revenue multiple. He added digital marketing services, kept every '
            'employee and grew revenue to $680K within 18 months.'
        ),
        'metrics': [
            ('Acquisition Price', '$850K'),
            ('Revenue Multiple', '1.9x'),
            ('Post-Acquisition Growth', '+50% in 18 months'),
            ('Employees Retained', '12/12'),
        ],
    },
    {
        'title': 'Buying an Established Franchise',
        'summary': 'How a former operations director became a franchise owner',
        'listing_type': FRANCHISE_SALE,
        'challenge': (
            'Sarah wanted a business with proven systems and brand recognition, and manageable risk.'
        ),
        'solution': (
            'She chose a quick-service franchise with eight years of history. The franchisor provided audited '
            'statements, equipment costs and training details, and Sarah spoke with other owners before '
            'committing.'
        ),
        'outcome': (
            'Sarah invested $320K including working capital. The unit earned $95K EBITDA in year one and '
            '$140K in year two, 20% above projections.'
        ),
        'metrics': [
            ('Initial Investment', '$320K'),
            ('Year 1 EBITDA', '$95K'),
            ('Year 2 EBITDA', '$140K'),
            ('ROI (Year 2)', '43.75%'),
        ],
    },
    {
        'title': 'Minority Investment in a Growing SME',
        'summary': 'How an investor partnered with a high-growth manufacturer',
        'listing_type': INVESTMENT_OPPORTUNITY,
        'challenge': (
            'David, an accredited investor, wanted growth-stage exposure without running the business day to day.'
        ),
        'solution': (
            'He backed a specialty manufacturer with $2.2M revenue and 22% EBITDA margins, taking a 30% stake '
            'for $550K with clear governance and exit terms.'
        ),
        'outcome': (
            'Over three years the company entered three new territories and reached $4.1M revenue. '
            "A competitor's offer valued David's stake at $2.1M."
        ),
        'metrics': [
            ('Initial Investment', '$550K'),
            ('Equity Stake', '30%'),
            ('Revenue Growth', '$2.2M to $4.1M'),
            ('Exit Valuation (Stake)', '$2.1M'),
        ],
    },
]

SUCCESS_PATTERNS = [
    ('Thorough Due Diligence',
     'Successful buyers review financial records, contracts and employee agreements before committing capital.'),
    ('Clear Value Drivers',
     'Buyers name the growth, cost or expansion opportunity that justifies the price.'),
    ('Realistic Financial Modeling',
     'Conservative projections with clear assumptions lead to better outcomes.'),
    ('Transparent Communication',
     'Open dialogue with sellers about expectations and timelines speeds up negotiation.'),
]


@main_bp.route('/')
def index():
    """Homepage route"""

    store = get_store()
    featured = {}
    limit = current_app.config['FEATURED_LISTINGS_PER_TYPE']
    for listing_type in LISTING_TYPES:
        try:
            featured[listing_type] = store.search_listings(listing_type, page_size=limit)['items']
        except StoreError as e:
            current_app.logger.warning('Database query failed on homepage: %s. Returning empty results.', e)
            featured[listing_type] = []

    try:
        posts = store.list_blog_posts(limit=3)
    except StoreError as e:
        current_app.logger.warning('Blog query failed on homepage: %s. Returning empty results.', e)
        posts = []

    seo = get_seo()
    meta = seo.meta.generate_meta(
        f"{seo.settings.site_name} - Buy, Sell & Invest in Businesses",
        seo.settings.description,
        canonical='/',
    )

    return render_template('home.html',
                           meta=meta,
                           featured=featured,
                           type_content=LISTING_TYPE_CONTENT,
                           posts=posts,
                           guides=RESOURCE_GUIDES)


def _static_page(key):
    page = LEGAL_PAGES[key]
    meta = get_seo().meta.generate_meta(page['title'], page['description'], canonical=f'/{key}')
    return render_template(f"pages/{key.replace('-', '_')}.html", meta=meta, page=page)


@main_bp.route('/terms')
def terms():
    return _static_page('terms')


@main_bp.route('/privacy')
def privacy():
    return _static_page('privacy')


@main_bp.route('/cookies')
def cookies():
    return _static_page('cookies')


@main_bp.route('/help-center')
def help_center():
    return _static_page('help-center')


@main_bp.route('/success-stories')
def success_stories():
    """Acquisition case studies"""
    meta = get_seo().meta.generate_meta(
        'Business Acquisition Success Stories',
        'Realistic business acquisition scenarios showing how buyers evaluate, acquire, '
        'and grow businesses using Acquity.',
        canonical='/success-stories',
    )
    return render_template('pages/success_stories.html',
                           meta=meta,
                           stories=SUCCESS_STORIES,
                           patterns=SUCCESS_PATTERNS)


@main_bp.route('/resources')
def resources():
    """Acquisition guides index"""
    meta = get_seo().meta.generate_meta(
        'Business Acquisition Resources',
        "Learn how to buy a business, evaluate franchises, understand EBITDA, and perform due "
        "diligence with Acquity's acquisition resources.",
        canonical='/resources',
    )
    return render_template('pages/resources.html', meta=meta, guides=RESOURCE_GUIDES)


@main_bp.route('/resources/<slug>')
def resource_detail(slug):
    guide = RESOURCE_GUIDES.get(slug)
    if guide is None:
        abort(404)

    seo = get_seo()
    path = f'/resources/{slug}'
    meta = seo.meta.generate_meta(guide['title'], guide['description'], canonical=path, og_type='article')
    breadcrumbs = [('Home', '/'), ('Resources', '/resources'), (guide['title'], path)]
    schemas = [seo.schema.generate_breadcrumb_schema(breadcrumbs)]
    return render_template(
        'pages/resource_detail.html',
        meta=meta,
        schemas=schemas,
        breadcrumbs=breadcrumbs,
        guide=guide,
        slug=slug,
    )


@main_bp.route('/sitemap.xml')
def sitemap():
    """XML sitemap of static pages, browse roots, listings and posts"""

    store = get_store()
    try:
        listings = store.list_sitemap_listings()
    except StoreError as e:
        current_app.logger.warning('Sitemap listing query failed: %s', e)
        listings = []
    try:
        posts = store.list_sitemap_posts()
    except StoreError as e:
        current_app.logger.warning('Sitemap blog query failed: %s', e)
        posts = []

    sitemap_xml = generate_sitemap(get_seo().settings, listings=listings, posts=posts)
    return Response(sitemap_xml, mimetype='application/xml')


@main_bp.route('/robots.txt')
def robots():
    return Response(generate_robots_txt(get_seo().settings), mimetype='text/plain')
