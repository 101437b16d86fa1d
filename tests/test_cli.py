# tests/test_cli.py
from inkpress.models import Author, Category, Tag, Post, SiteSetting, get_setting


def test_seed_populates_fixture_data(runner, app):
    result = runner.invoke(args=['init', 'seed'])

    assert result.exit_code == 0, result.output
    assert '初期データの投入が完了しました' in result.output
    with app.app_context():
        assert Author.query.count() == 2
        assert Category.query.count() == 3
        assert Tag.query.count() == 4
        assert Post.query.count() == 3
        assert get_setting('site_name') == 'Inkpress'
        post = Post.query.filter_by(slug='building-json-apis-with-flask').one()
        assert post.reading_time == 3
        assert sorted(tag.slug for tag in post.tags) == ['flask', 'python']


def test_seed_is_idempotent(runner, app):
    runner.invoke(args=['init', 'seed'])
    result = runner.invoke(args=['init', 'seed'])

    assert result.exit_code == 0, result.output
    assert '(0 件作成)' in result.output
    with app.app_context():
        assert Post.query.count() == 3
        assert SiteSetting.query.count() == 4


def test_seeded_posts_are_listed(runner, client):
    runner.invoke(args=['init', 'seed'])

    data = client.get('/api/posts?sort=featured').get_json()

    assert data['pagination']['total'] == 2


def test_reset_db(runner, app):
    runner.invoke(args=['init', 'seed'])

    result = runner.invoke(args=['init', 'reset-db', '--drop-db'])

    assert result.exit_code == 0, result.output
    with app.app_context():
        assert Post.query.count() == 0
