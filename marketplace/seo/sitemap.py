"""
Sitemap and robots.txt generation.
"""

from datetime import datetime
from xml.sax.saxutils import escape

from marketplace.seo.settings import SeoSettings
from marketplace.seo.url_mapping import LISTING_TYPES, generate_clean_url, listing_detail_path


# (path, changefreq, priority)
STATIC_PAGES = [
    ('/', 'weekly', 1.0),
    ('/resources', 'weekly', 0.8),
    ('/resources/how-to-sell-my-business', 'monthly', 0.7),
    ('/resources/how-to-buy-a-business', 'monthly', 0.7),
    ('/resources/due-diligence-checklist', 'monthly', 0.7),
    ('/resources/franchise-vs-business', 'monthly', 0.7),
    ('/resources/understanding-ebitda', 'monthly', 0.7),
    ('/blog', 'weekly', 0.8),
    ('/success-stories', 'monthly', 0.7),
    ('/help-center', 'monthly', 0.6),
    ('/terms', 'yearly', 0.3),
    ('/privacy', 'yearly', 0.3),
    ('/cookies', 'yearly', 0.3),
]

ROBOTS_DISALLOW = [
    '/admin',
    '/api',
    '/auth',
    '/dashboard',
    '/login',
    '/signup',
    '/profile',
    '/settings',
    '/list-business',
    '/forgot-password',
    '/reset-password',
]


def _lastmod(value, fallback):
    """Normalize ISO strings / datetimes to YYYY-MM-DD."""
    if not value:
        return fallback
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d')
    return str(value)[:10]


def _url_entry(loc, lastmod, changefreq, priority):
    return [
        '<url>',
        f'<loc>{escape(loc)}</loc>',
        f'<lastmod>{lastmod}</lastmod>',
        f'<changefreq>{changefreq}</changefreq>',
        f'<priority>{priority:.2f}</priority>',
        '</url>',
    ]


def generate_sitemap(settings: SeoSettings, listings=None, posts=None, today=None):
    """
    Generate XML sitemap content

    Args:
        settings: SEO settings (base URL)
        listings: approved listings as ``{slug, type, updated_at}`` mappings
        posts: published blog posts as ``{slug, updated_at}`` mappings
        today: date string used when a record has no timestamp

    Returns:
        str: XML sitemap content
    """

    today = today or datetime.utcnow().strftime('%Y-%m-%d')

    xml_lines = ['<?xml version="1.0" encoding="UTF-8"?>']
    xml_lines.append('<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">')

    for path, changefreq, priority in STATIC_PAGES:
        xml_lines.extend(_url_entry(settings.absolute(path), today, changefreq, priority))

    # Type browse pages
    for listing_type in LISTING_TYPES:
        xml_lines.extend(_url_entry(settings.absolute(generate_clean_url(listing_type)), today, 'daily', 0.95))

    for listing in listings or []:
        slug = listing.get('slug')
        if not slug:
            continue
        path = listing_detail_path(listing.get('type'), slug)
        lastmod = _lastmod(listing.get('updated_at'), today)
        xml_lines.extend(_url_entry(settings.absolute(path), lastmod, 'weekly', 0.7))

    for post in posts or []:
        slug = post.get('slug')
        if not slug:
            continue
        lastmod = _lastmod(post.get('updated_at') or post.get('created_at'), today)
        xml_lines.extend(_url_entry(settings.absolute(f'/blog/{slug}'), lastmod, 'weekly', 0.6))

    xml_lines.append('</urlset>')

    return '\n'.join(xml_lines)


def generate_robots_txt(settings: SeoSettings) -> str:
    lines = ['User-agent: *', 'Allow: /']
    lines.extend(f'Disallow: {path}' for path in ROBOTS_DISALLOW)
    lines.append('')
    lines.append(f'Sitemap: {settings.absolute("/sitemap.xml")}')
    return '\n'.join(lines) + '\n'
