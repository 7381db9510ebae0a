"""
Structured Data (JSON-LD)

Plain schema.org objects for templates. Nothing here validates against the
schema.org vocabulary; callers pass conformant values (e.g. prices as strings).
"""

from marketplace.seo.settings import SeoSettings
from marketplace.seo.url_mapping import (
    TYPE_LABELS,
    TYPE_SHORT_LABELS,
    generate_clean_url,
)


SCHEMA_CONTEXT = 'https://schema.org'


def build_breadcrumbs(listing_type, country=None, industry=None, listing_title=None, listing_path=None):
    """
    Breadcrumb trail following the clean URL hierarchy.

    Returns:
        list: ``[(name, path), ...]`` starting at Home. Industry is only
        added when a country is present, matching the URL hierarchy.
    """

    label = TYPE_LABELS.get(listing_type)
    if label is None:
        return [('Home', '/'), ('Listings', '/listings')]

    crumbs = [
        ('Home', '/'),
        (label, generate_clean_url(listing_type)),
    ]
    if country:
        crumbs.append((country, generate_clean_url(listing_type, country=country)))
    if country and industry:
        crumbs.append((industry, generate_clean_url(listing_type, country=country, industry=industry)))
    if listing_title:
        crumbs.append((listing_title, listing_path or ''))
    return crumbs


def _compact(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not None}


class SchemaBuilder:
    """JSON-LD builders bound to one :class:`SeoSettings`."""

    def __init__(self, settings: SeoSettings):
        self.settings = settings

    def generate_breadcrumb_schema(self, items):
        """
        Generate a BreadcrumbList.

        Args:
            items: ``[(name, path_or_url), ...]``; an empty path points the
                item at the site root.
        """

        return {
            '@context': SCHEMA_CONTEXT,
            '@type': 'BreadcrumbList',
            'itemListElement': [
                {
                    '@type': 'ListItem',
                    'position': position,
                    'name': name,
                    'item': self.settings.absolute(url),
                }
                for position, (name, url) in enumerate(items, start=1)
            ],
        }

    def generate_item_list_schema(self, items):
        """CollectionPage listing items as ``{name, url, price?}`` mappings."""

        elements = []
        for position, item in enumerate(items, start=1):
            element = {
                '@type': 'ListItem',
                'position': position,
                'url': self.settings.absolute(item['url']),
                'name': item['name'],
            }
            if item.get('price'):
                element['price'] = item['price']
            elements.append(element)

        return {
            '@context': SCHEMA_CONTEXT,
            '@type': 'CollectionPage',
            'itemListElement': elements,
        }

    def generate_collection_schema(self, listing_type, total_results, country=None, industry=None):
        path = generate_clean_url(listing_type, country=country, industry=industry)
        name = f"{industry or 'All'} {TYPE_SHORT_LABELS.get(listing_type, 'Listings')}"
        if country:
            name += f" in {country}"
        return {
            '@context': SCHEMA_CONTEXT,
            '@type': 'CollectionPage',
            'name': name,
            'url': self.settings.absolute(path),
            'mainEntity': {
                '@type': 'ItemList',
                'numberOfItems': total_results,
            },
        }

    def generate_offer_schema(self, listing, price=None, url=None, image=None):
        """
        Offer for a single listing.

        Args:
            listing: listing mapping (title, description, location/country, type)
            price: asking price / fee / capital required, already a string
            url: listing path or absolute URL
            image: image URL
        """

        return _compact({
            '@context': SCHEMA_CONTEXT,
            '@type': 'Offer',
            'name': listing.get('title'),
            'description': listing.get('description') or None,
            'url': self.settings.absolute(url) if url else None,
            'image': image or listing.get('image_url') or None,
            'price': price,
            'priceCurrency': 'USD' if price else None,
            'availability': 'https://schema.org/InStock',
            'areaServed': listing.get('location') or listing.get('country') or None,
            'businessType': listing.get('type'),
            'itemOffered': {
                '@type': 'Organization',
                'name': listing.get('title'),
            },
        })

    def generate_organization_schema(self):
        base_url = self.settings.base_url
        return {
            '@context': SCHEMA_CONTEXT,
            '@type': 'Organization',
            '@id': f"{base_url}#organization",
            'name': self.settings.organization_name,
            'url': base_url,
            'logo': self.settings.absolute(self.settings.logo_path),
            'description': self.settings.description,
            'sameAs': list(self.settings.same_as),
            'contactPoint': {
                '@type': 'ContactPoint',
                'contactType': 'Customer Service',
                'email': self.settings.support_email,
            },
        }

    def generate_website_schema(self):
        """WebSite schema with a SearchAction pointing at the listings browser."""
        base_url = self.settings.base_url
        return {
            '@context': SCHEMA_CONTEXT,
            '@type': 'WebSite',
            '@id': f"{base_url}#website",
            'url': base_url,
            'name': self.settings.site_name,
            'publisher': {'@id': f"{base_url}#organization"},
            'potentialAction': {
                '@type': 'SearchAction',
                'target': {
                    '@type': 'EntryPoint',
                    'urlTemplate': f"{base_url}/listings?q={{search_term_string}}",
                },
                'query-input': 'required name=search_term_string',
            },
        }

    def generate_article_schema(self, post, url):
        return _compact({
            '@context': SCHEMA_CONTEXT,
            '@type': 'BlogPosting',
            'headline': post.get('title'),
            'description': post.get('excerpt') or None,
            'image': post.get('cover_image') or None,
            'datePublished': post.get('created_at') or None,
            'dateModified': post.get('updated_at') or post.get('created_at') or None,
            'url': self.settings.absolute(url),
            'publisher': {'@id': f"{self.settings.base_url}#organization"},
        })
