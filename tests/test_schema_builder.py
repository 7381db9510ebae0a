import unittest

from marketplace.seo.schema import SchemaBuilder, build_breadcrumbs
from marketplace.seo.settings import SeoSettings


class BreadcrumbTests(unittest.TestCase):
    def test_follows_url_hierarchy(self):
        crumbs = build_breadcrumbs('franchise_sale', country='Kenya', industry='Retail')
        self.assertEqual(crumbs, [
            ('Home', '/'),
            ('Franchises for Sale', '/listings/franchises'),
            ('Kenya', '/listings/franchises/kenya'),
            ('Retail', '/listings/franchises/kenya/retail'),
        ])

    def test_industry_needs_country(self):
        crumbs = build_breadcrumbs('business_sale', industry='Retail')
        self.assertEqual([name for name, _ in crumbs], ['Home', 'Businesses for Sale'])

    def test_listing_crumb(self):
        crumbs = build_breadcrumbs('business_sale', listing_title='Coffee Roastery',
                                   listing_path='/businesses-for-sale/listing/coffee-roastery-1234abcd')
        self.assertEqual(crumbs[-1], ('Coffee Roastery', '/businesses-for-sale/listing/coffee-roastery-1234abcd'))

    def test_unknown_type(self):
        self.assertEqual(build_breadcrumbs('yacht_sale'), [('Home', '/'), ('Listings', '/listings')])


class SchemaBuilderTests(unittest.TestCase):
    def setUp(self):
        self.builder = SchemaBuilder(SeoSettings(base_url='https://example.test'))

    def test_breadcrumb_schema(self):
        schema = self.builder.generate_breadcrumb_schema([('Home', '/'), ('Blog', '/blog')])
        self.assertEqual(schema['@context'], 'https://schema.org')
        self.assertEqual(schema['@type'], 'BreadcrumbList')
        self.assertEqual(schema['itemListElement'][1], {
            '@type': 'ListItem',
            'position': 2,
            'name': 'Blog',
            'item': 'https://example.test/blog',
        })

    def test_breadcrumb_empty_path_points_at_root(self):
        schema = self.builder.generate_breadcrumb_schema([('Home', '')])
        self.assertEqual(schema['itemListElement'][0]['item'], 'https://example.test')

    def test_item_list_schema(self):
        schema = self.builder.generate_item_list_schema([
            {'name': 'A', 'url': '/a', 'price': '1000'},
            {'name': 'B', 'url': '/b'},
        ])
        self.assertEqual(schema['@type'], 'CollectionPage')
        self.assertEqual(schema['itemListElement'][0]['price'], '1000')
        self.assertNotIn('price', schema['itemListElement'][1])
        self.assertEqual(schema['itemListElement'][1]['url'], 'https://example.test/b')

    def test_collection_schema(self):
        schema = self.builder.generate_collection_schema('business_sale', 4, country='Kenya', industry='Energy')
        self.assertEqual(schema['name'], 'Energy Businesses in Kenya')
        self.assertEqual(schema['url'], 'https://example.test/listings/businesses/kenya/energy')
        self.assertEqual(schema['mainEntity'], {'@type': 'ItemList', 'numberOfItems': 4})

    def test_offer_schema(self):
        listing = {
            'title': 'Coffee Roastery',
            'description': 'Specialty roastery',
            'country': 'Kenya',
            'type': 'business_sale',
            'image_url': '',
        }
        schema = self.builder.generate_offer_schema(listing, price='450000', url='/businesses-for-sale/listing/x')
        self.assertEqual(schema['@type'], 'Offer')
        self.assertEqual(schema['price'], '450000')
        self.assertEqual(schema['priceCurrency'], 'USD')
        self.assertEqual(schema['areaServed'], 'Kenya')
        self.assertEqual(schema['url'], 'https://example.test/businesses-for-sale/listing/x')
        self.assertNotIn('image', schema)

    def test_offer_without_price(self):
        schema = self.builder.generate_offer_schema({'title': 'X'})
        self.assertNotIn('price', schema)
        self.assertNotIn('priceCurrency', schema)

    def test_organization_and_website(self):
        org = self.builder.generate_organization_schema()
        site = self.builder.generate_website_schema()
        self.assertEqual(org['@type'], 'Organization')
        self.assertEqual(org['logo'], 'https://example.test/static/images/logo.svg')
        self.assertEqual(site['publisher'], {'@id': org['@id']})
        self.assertEqual(
            site['potentialAction']['target']['urlTemplate'],
            'https://example.test/listings?q={search_term_string}',
        )

    def test_article_schema(self):
        schema = self.builder.generate_article_schema(
            {'title': 'Post', 'created_at': '2026-01-01T00:00:00', 'updated_at': None}, '/blog/post'
        )
        self.assertEqual(schema['@type'], 'BlogPosting')
        self.assertEqual(schema['dateModified'], '2026-01-01T00:00:00')
        self.assertNotIn('image', schema)


if __name__ == '__main__':
    unittest.main()
