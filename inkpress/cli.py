# inkpress/cli.py

import json
from datetime import datetime, timedelta

import click
import pytz
from flask import current_app
from flask.cli import with_appcontext

from inkpress.extensions import db
from inkpress.models import Author, Category, Tag, Post, PostStatus, SiteSetting
from inkpress.utils import calculate_reading_time


AUTHORS = [
    {
        'name': 'Sarah Johnson',
        'email': 'sarah.johnson@example.com',
        'bio': 'Tech writer and digital marketing specialist.',
        'website': 'https://sarahjohnson.dev',
        'twitter': '@sarahjohnson',
    },
    {
        'name': 'Michael Chen',
        'email': 'michael.chen@example.com',
        'bio': 'Full-stack developer and startup advisor.',
        'website': 'https://michaelchen.tech',
        'linkedin': 'in/michael-chen-dev',
    },
]

CATEGORIES = [
    {'name': 'Technology', 'slug': 'technology', 'color': '#3B82F6',
     'description': 'Software development and digital innovation.'},
    {'name': 'Design', 'slug': 'design', 'color': '#8B5CF6',
     'description': 'UI/UX design principles and design thinking.'},
    {'name': 'Business', 'slug': 'business', 'color': '#10B981',
     'description': 'Entrepreneurship and business growth.'},
]

TAGS = [
    {'name': 'Python', 'slug': 'python'},
    {'name': 'Flask', 'slug': 'flask'},
    {'name': 'UI Design', 'slug': 'ui-design'},
    {'name': 'Startup', 'slug': 'startup'},
]

POSTS = [
    {
        'title': 'Building JSON APIs with Flask',
        'slug': 'building-json-apis-with-flask',
        'excerpt': 'Blueprints, request validation and error envelopes.',
        'content': 'Flask keeps small APIs small. ' * 120,
        'author': 'michael.chen@example.com',
        'categories': ['technology'],
        'tags': ['python', 'flask'],
        'featured': True,
    },
    {
        'title': 'Design Systems for Small Teams',
        'slug': 'design-systems-for-small-teams',
        'excerpt': 'Start with tokens, not components.',
        'content': 'A design system is a shared vocabulary. ' * 80,
        'author': 'sarah.johnson@example.com',
        'categories': ['design'],
        'tags': ['ui-design'],
        'featured': False,
    },
    {
        'title': 'Validating a Startup Idea in a Week',
        'slug': 'validating-a-startup-idea-in-a-week',
        'excerpt': 'Talk to customers before writing code.',
        'content': 'Most ideas fail for lack of customers, not code. ' * 60,
        'author': 'sarah.johnson@example.com',
        'categories': ['business'],
        'tags': ['startup'],
        'featured': True,
    },
]

SETTINGS = [
    {'key': 'site_name', 'value': 'Inkpress', 'type': 'string'},
    {'key': 'posts_per_page', 'value': '20', 'type': 'number'},
    {'key': 'comments_enabled', 'value': 'false', 'type': 'boolean'},
    {'key': 'social_links', 'value': json.dumps({'twitter': '@inkpress'}), 'type': 'json'},
]


@click.group()
def init():
    """データベースの初期化と初期データ投入コマンド."""
    pass


@init.command("reset-db")
@click.option('--drop-db', is_flag=True, help='既存のテーブルを削除してから作成します。')
@with_appcontext
def reset_db(drop_db):
    """データベーステーブルを作成します。"""
    if drop_db:
        click.echo("既存のテーブルを削除中...")
        db.drop_all()

    click.echo("データベーステーブルを作成中...")
    db.create_all()
    click.echo("データベースの作成が完了しました。")


def _find_or_create(model, lookup, defaults):
    instance = model.query.filter_by(**lookup).first()
    if instance is not None:
        return instance, False
    instance = model(**lookup, **defaults)
    db.session.add(instance)
    return instance, True


def seed_database():
    """
    初期データを投入します。email / slug / key が既に存在するレコードはそのまま残すので、
    何度実行しても重複しません。

    :return: 新しく作成したレコード数
    """
    created = 0

    authors = {}
    for data in AUTHORS:
        data = dict(data)
        author, was_created = _find_or_create(Author, {'email': data.pop('email')}, data)
        authors[author.email] = author
        created += was_created

    categories = {}
    for data in CATEGORIES:
        data = dict(data)
        category, was_created = _find_or_create(Category, {'slug': data.pop('slug')}, data)
        categories[category.slug] = category
        created += was_created

    tags = {}
    for data in TAGS:
        data = dict(data)
        tag, was_created = _find_or_create(Tag, {'slug': data.pop('slug')}, data)
        tags[tag.slug] = tag
        created += was_created

    words_per_minute = current_app.config.get('WORDS_PER_MINUTE', 200)
    now = datetime.now(pytz.utc)
    for offset, data in enumerate(POSTS):
        if Post.query.filter_by(slug=data['slug']).first() is not None:
            continue
        post = Post(
            title=data['title'],
            slug=data['slug'],
            excerpt=data['excerpt'],
            content=data['content'],
            reading_time=calculate_reading_time(data['content'], words_per_minute),
            status=PostStatus.PUBLISHED,
            featured=data['featured'],
            published_at=now - timedelta(days=offset),
            author=authors[data['author']],
            categories=[categories[slug] for slug in data['categories']],
            tags=[tags[slug] for slug in data['tags']],
        )
        db.session.add(post)
        created += 1

    for data in SETTINGS:
        data = dict(data)
        _, was_created = _find_or_create(SiteSetting, {'key': data.pop('key')}, data)
        created += was_created

    db.session.commit()
    return created


@init.command("seed")
@with_appcontext
def seed():
    """執筆者・カテゴリ・タグ・記事・サイト設定の初期データを投入します。"""
    try:
        created = seed_database()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Seeding failed: {e}", exc_info=True)
        click.echo(f"初期データの投入中にエラーが発生しました: {e}", err=True)
        click.echo("データベースのロールバックが実行されました。", err=True)
        raise click.exceptions.Exit(1)
    click.echo(f"初期データの投入が完了しました。({created} 件作成)")
