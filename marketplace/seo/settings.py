"""Explicit SEO configuration passed to the meta and schema generators."""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple


DEFAULT_SITE_URL = 'https://acquityapp.com'


def resolve_base_url(environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve the public base URL.

    Priority: explicit ``SITE_URL`` -> platform deployment URL
    (``RENDER_EXTERNAL_URL``) -> hardcoded default.
    """

    env = os.environ if environ is None else environ

    configured = (env.get('SITE_URL') or '').strip()
    if configured:
        return configured.rstrip('/')

    deployment = (env.get('RENDER_EXTERNAL_URL') or '').strip()
    if deployment:
        if not deployment.startswith(('http://', 'https://')):
            deployment = f"https://{deployment}"
        return deployment.rstrip('/')

    return DEFAULT_SITE_URL


def join_url(base_url: str, path_or_url: str) -> str:
    if not path_or_url:
        return base_url.rstrip('/') if base_url else ''
    if path_or_url.startswith(('http://', 'https://')):
        return path_or_url
    base = (base_url or '').rstrip('/')
    path = path_or_url if path_or_url.startswith('/') else '/' + path_or_url
    return base + path


@dataclass(frozen=True)
class SeoSettings:
    base_url: str = DEFAULT_SITE_URL
    site_name: str = 'Acquity'
    organization_name: str = 'Acquity - Global Business Marketplace'
    description: str = (
        'Global marketplace for buying, selling, and investing in businesses across emerging markets.'
    )
    logo_path: str = '/static/images/logo.svg'
    support_email: str = 'support@acquityapp.com'
    same_as: Tuple[str, ...] = field(default_factory=lambda: (
        'https://twitter.com/acquity',
        'https://linkedin.com/company/acquity',
    ))

    @classmethod
    def from_config(cls, config: Mapping) -> 'SeoSettings':
        """Build settings from a Flask config mapping."""
        defaults = cls()
        return cls(
            base_url=(config.get('SITE_URL') or defaults.base_url).rstrip('/'),
            site_name=config.get('SITE_NAME') or defaults.site_name,
            organization_name=config.get('SITE_ORGANIZATION_NAME') or defaults.organization_name,
            description=config.get('SITE_DESCRIPTION') or defaults.description,
            logo_path=config.get('SITE_LOGO_PATH') or defaults.logo_path,
            support_email=config.get('SUPPORT_EMAIL') or defaults.support_email,
            same_as=tuple(config.get('SITE_SAME_AS') or defaults.same_as),
        )

    def absolute(self, path_or_url: str) -> str:
        return join_url(self.base_url, path_or_url)
