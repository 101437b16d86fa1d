# tests/conftest.py
import sys
import os
import uuid
from datetime import datetime, timedelta

# プロジェクトのルートディレクトリをPythonのパスに追加
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import pytz

from config import TestConfig
from inkpress import create_app
from inkpress.extensions import db
from inkpress.models import Author, Category, Tag, Post, PostStatus

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=pytz.utc)


@pytest.fixture(scope='function')
def app():
    """テスト用Flaskアプリケーションのインスタンスを生成するフィクスチャ (テストごとに空のDB)"""
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """テストクライアントを生成するフィクスチャ"""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """CLIコマンドランナーを生成するフィクスチャ"""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def author(app):
    """テスト用の執筆者を作成し、その ID (文字列) を返すフィクスチャ"""
    with app.app_context():
        author = Author(name='Jane Writer', email='jane.writer@example.com')
        db.session.add(author)
        db.session.commit()
        return str(author.id)


@pytest.fixture(scope='function')
def make_category(app):
    def _make_category(name, slug, **kwargs):
        with app.app_context():
            category = Category(name=name, slug=slug, **kwargs)
            db.session.add(category)
            db.session.commit()
            return str(category.id)
    return _make_category


@pytest.fixture(scope='function')
def make_tag(app):
    def _make_tag(name, slug):
        with app.app_context():
            tag = Tag(name=name, slug=slug)
            db.session.add(tag)
            db.session.commit()
            return str(tag.id)
    return _make_tag


@pytest.fixture(scope='function')
def make_post(app, author):
    """
    記事を直接DBに作成するフィクスチャ。
    days で公開日 (BASE_TIME からの日数) を、categories / tags でスラッグのリストを指定します。
    """
    def _make_post(title, slug=None, content='Some body text', excerpt=None, days=0,
                   status=PostStatus.PUBLISHED, featured=False, reading_time=1,
                   categories=(), tags=()):
        with app.app_context():
            post = Post(
                title=title,
                slug=slug or title.lower().replace(' ', '-'),
                content=content,
                excerpt=excerpt,
                status=status,
                featured=featured,
                reading_time=reading_time,
                published_at=BASE_TIME + timedelta(days=days),
                author=db.session.get(Author, uuid.UUID(author)),
                categories=[Category.query.filter_by(slug=s).one() for s in categories],
                tags=[Tag.query.filter_by(slug=s).one() for s in tags],
            )
            db.session.add(post)
            db.session.commit()
            return str(post.id)
    return _make_post
