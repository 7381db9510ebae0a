"""
Meta Generator

Builds title, description, canonical, robots and social card metadata for
templates. Titles and descriptions are hard-capped by a straight character
cut so downstream length checks stay exact.
"""

from marketplace.seo.settings import SeoSettings


MAX_TITLE_LENGTH = 60
MAX_DESCRIPTION_LENGTH = 155
MAX_FILTER_PARAMS = 3


def robots_value(noindex=False, nofollow=False) -> str:
    return f"{'noindex' if noindex else 'index'}, {'nofollow' if nofollow else 'follow'}"


class MetaGenerator:
    """Meta tag builder bound to one :class:`SeoSettings`."""

    def __init__(self, settings: SeoSettings):
        self.settings = settings

    def generate_meta(self, title, description, canonical=None, og_image=None,
                      noindex=False, nofollow=False, og_type='website'):
        """
        Generate SEO meta tags.

        Args:
            title: Page title (cut at 60 characters)
            description: Meta description (cut at 155 characters)
            canonical: Canonical path or absolute URL; defaults to the site root
            og_image: Open Graph image URL
            noindex: Ask crawlers not to index the page
            nofollow: Ask crawlers not to follow links on the page
            og_type: Open Graph type (website, article, ...)

        Returns:
            dict: title, description, canonical, robots, open_graph, twitter
        """

        limited_title = (title or '')[:MAX_TITLE_LENGTH]
        limited_description = (description or '')[:MAX_DESCRIPTION_LENGTH]
        canonical_url = self.settings.absolute(canonical) if canonical else self.settings.base_url

        open_graph = {
            'title': limited_title,
            'description': limited_description,
            'url': canonical_url,
            'type': og_type,
            'site_name': self.settings.site_name,
        }
        if og_image:
            open_graph['image'] = og_image

        return {
            'title': limited_title,
            'description': limited_description,
            'canonical': canonical_url,
            'robots': robots_value(noindex=noindex, nofollow=nofollow),
            'open_graph': open_graph,
            'twitter': {
                'card': 'summary_large_image',
                'title': limited_title,
                'description': limited_description,
            },
        }

    def generate_pagination_meta(self, title, description, current_page, total_pages,
                                 base_path, noindex=False):
        """Meta for one page of a paginated result set.

        Pages beyond the first are always noindex. Page 1 has no ``prev``
        link and page 2 points back at the bare base path.
        """

        base_url = self.settings.absolute(base_path)
        canonical = f"{base_url}?page={current_page}" if current_page > 1 else base_url

        meta = self.generate_meta(
            title,
            description,
            canonical=canonical,
            noindex=current_page > 1 or bool(noindex),
        )

        links = {}
        if current_page > 1:
            links['prev'] = base_url if current_page == 2 else f"{base_url}?page={current_page - 1}"
        if current_page < total_pages:
            links['next'] = f"{base_url}?page={current_page + 1}"

        meta['pagination_links'] = links
        return meta


def should_noindex(has_content, is_draft=False, filter_param_count=0) -> bool:
    """True for empty pages, drafts and heavily filtered pages."""
    if not has_content:
        return True
    if is_draft:
        return True
    # crawl budget
    if (filter_param_count or 0) > MAX_FILTER_PARAMS:
        return True
    return False
