from marketplace.cli import DEMO_LISTINGS, DEMO_POSTS
from marketplace.models import BlogPost, Listing
from marketplace.seo.slugs import validate_slug_format


def test_init_db(runner):
    result = runner.invoke(args=['init-db'])
    assert result.exit_code == 0
    assert 'Created SQL store tables.' in result.output


def test_seed_demo_is_idempotent(app, runner):
    result = runner.invoke(args=['seed-demo'])
    assert result.exit_code == 0
    assert f'Seeded {len(DEMO_LISTINGS)} listings and {len(DEMO_POSTS)} blog posts.' in result.output

    result = runner.invoke(args=['seed-demo'])
    assert 'Seeded 0 listings and 0 blog posts.' in result.output

    with app.app_context():
        listings = Listing.query.all()
        assert len(listings) == len(DEMO_LISTINGS)
        assert all(listing.status == Listing.STATUS_APPROVED for listing in listings)
        assert all(validate_slug_format(listing.slug) for listing in listings)
        assert all(listing.slug.endswith(listing.id[:8]) for listing in listings)
        assert BlogPost.query.filter_by(status=BlogPost.STATUS_PUBLISHED).count() == len(DEMO_POSTS)


def test_seed_demo_pending(app, runner, client):
    runner.invoke(args=['seed-demo', '--pending'])
    with app.app_context():
        assert Listing.query.filter_by(status=Listing.STATUS_APPROVED).count() == 0

    html = client.get('/listings/businesses').get_data(as_text=True)
    assert 'Coffee Roastery' not in html
