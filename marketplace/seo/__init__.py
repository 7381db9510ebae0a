"""
SEO package

- URL mapping between clean routes and filter parameters
- Meta tag generation (title, description, canonical, robots)
- Structured data (JSON-LD)
- Sitemap / robots.txt
"""

from dataclasses import dataclass

from flask import current_app

from marketplace.seo.meta import MetaGenerator, should_noindex
from marketplace.seo.schema import SchemaBuilder, build_breadcrumbs
from marketplace.seo.settings import SeoSettings, resolve_base_url


@dataclass(frozen=True)
class SeoToolkit:
    settings: SeoSettings
    meta: MetaGenerator
    schema: SchemaBuilder


def init_seo(app):
    """Build the generators once from the app config."""
    settings = SeoSettings.from_config(app.config)
    toolkit = SeoToolkit(settings=settings, meta=MetaGenerator(settings), schema=SchemaBuilder(settings))
    app.extensions['seo'] = toolkit
    return toolkit


def get_seo() -> SeoToolkit:
    return current_app.extensions['seo']


__all__ = [
    'MetaGenerator',
    'SchemaBuilder',
    'SeoSettings',
    'SeoToolkit',
    'build_breadcrumbs',
    'get_seo',
    'init_seo',
    'resolve_base_url',
    'should_noindex',
]
