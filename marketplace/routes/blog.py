"""Blog Blueprint - Public Routes."""

import re

from flask import Blueprint, render_template, request, current_app, abort
from markupsafe import Markup, escape

from marketplace.seo import get_seo, should_noindex
from marketplace.store import StoreError, get_store

blog_bp = Blueprint('blog', __name__)

BLOG_DESCRIPTION = 'Guides, market insights and success stories for business buyers, sellers and investors.'


@blog_bp.app_template_filter('richtext')
def render_richtext(value):
    """Render post content with paragraph breaks.

    Content that already contains tags is trusted as HTML; plain text is
    split on blank lines into <p> blocks with single newlines kept as <br>.
    """

    if value is None:
        return ''

    text_value = str(value)
    if '<' in text_value and '>' in text_value:
        return Markup(text_value)

    paragraphs = [p for p in re.split(r'\n\s*\n', text_value) if p.strip()]
    rendered = []
    for p in paragraphs:
        safe_p = escape(p.strip()).replace('\n', Markup('<br>'))
        rendered.append(Markup('<p>') + safe_p + Markup('</p>'))
    return Markup('').join(rendered)


@blog_bp.route('/blog')
def index():
    page = max(1, request.args.get('page', 1, type=int) or 1)
    per_page = current_app.config['BLOG_POSTS_PER_PAGE']

    try:
        all_posts = get_store().list_blog_posts()
    except StoreError as e:
        current_app.logger.warning('Database query failed on blog index: %s. Returning empty results.', e)
        all_posts = []

    total_pages = max(1, -(-len(all_posts) // per_page))
    if page > total_pages:
        abort(404)
    posts = all_posts[(page - 1) * per_page:page * per_page]

    meta = get_seo().meta.generate_pagination_meta(
        'Blog',
        BLOG_DESCRIPTION,
        current_page=page,
        total_pages=total_pages,
        base_path='/blog',
        noindex=should_noindex(has_content=bool(all_posts)),
    )

    return render_template('blog/index.html', meta=meta, posts=posts, page=page, total_pages=total_pages)


@blog_bp.route('/blog/<slug>')
def detail(slug):
    try:
        post = get_store().get_blog_post(slug)
    except StoreError as e:
        current_app.logger.error('Blog post lookup failed slug=%s: %s', slug, e, exc_info=True)
        abort(500)

    if post is None:
        abort(404)

    seo = get_seo()
    path = f"/blog/{post['slug']}"
    meta = seo.meta.generate_meta(
        post.get('title') or 'Blog',
        post.get('excerpt') or BLOG_DESCRIPTION,
        canonical=path,
        og_image=post.get('cover_image'),
        og_type='article',
    )
    breadcrumbs = [('Home', '/'), ('Blog', '/blog'), (post.get('title') or slug, path)]
    schemas = [
        seo.schema.generate_breadcrumb_schema(breadcrumbs),
        seo.schema.generate_article_schema(post, path),
    ]

    return render_template('blog/detail.html', meta=meta, schemas=schemas, breadcrumbs=breadcrumbs, post=post)
