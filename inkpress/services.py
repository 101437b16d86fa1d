# inkpress/services.py
"""
検証済みフォームからレコードを作成する書き込み処理。

どの関数も1回の commit で完結し、失敗した場合はロールバックしてから例外を再送出します。
"""

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from inkpress.extensions import db
from inkpress.models import Post, PostStatus, Category, Tag, Contact, ContactStatus
from inkpress.utils import calculate_reading_time, slugify

logger = logging.getLogger(__name__)


class DuplicateSlugError(Exception):
    """一意制約に違反するスラッグでの作成 (同時リクエストの競合など)"""


def _commit_or_rollback(what, slug=None):
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if slug is not None and 'slug' in str(e.orig).lower():
            raise DuplicateSlugError(f'{what} with this slug already exists') from e
        raise
    except Exception:
        db.session.rollback()
        raise


def create_post(form):
    """
    記事とカテゴリ・タグの関連付けを1つのトランザクションで作成します。
    関連付けの途中で失敗した場合、記事そのものも残りません。
    """
    content = form.content.data
    post = Post(
        title=form.title.data.strip(),
        slug=form.slug.data,
        excerpt=form.excerpt.data or None,
        content=content,
        featured_image=form.featuredImage.data or None,
        reading_time=calculate_reading_time(content, current_app.config.get('WORDS_PER_MINUTE', 200)),
        status=PostStatus(form.status.data),
        featured=form.featured.data,
        author=form.authorId.data,
    )
    post.categories = list(form.categoryIds.data or [])
    post.tags = list(form.tagIds.data or [])

    db.session.add(post)
    _commit_or_rollback('Post', slug=post.slug)
    logger.info(f"Post created: {post.slug} (ID: {post.id}, categories: {len(post.categories)}, tags: {len(post.tags)})")
    return post


def create_category(form):
    category = Category(
        name=form.name.data.strip(),
        slug=form.slug.data,
        description=form.description.data or None,
        color=form.color.data or current_app.config.get('DEFAULT_CATEGORY_COLOR', '#3B82F6'),
    )
    db.session.add(category)
    _commit_or_rollback('Category', slug=category.slug)
    logger.info(f"Category created: {category.slug} (ID: {category.id})")
    return category


def create_tag(form):
    """タグを作成します。スラッグが無ければ名前から生成します。"""
    slug = form.slug.data or slugify(form.name.data)
    if not slug:
        raise ValueError('Could not derive a slug from the tag name')
    if Tag.query.filter_by(slug=slug).first() is not None:
        raise DuplicateSlugError('Tag with this slug already exists')

    tag = Tag(name=form.name.data.strip(), slug=slug)
    db.session.add(tag)
    _commit_or_rollback('Tag', slug=slug)
    logger.info(f"Tag created: {tag.slug} (ID: {tag.id})")
    return tag


def create_contact(form):
    contact = Contact(
        name=form.name.data.strip(),
        email=form.email.data.strip(),
        subject=form.subject.data or None,
        message=form.message.data,
        status=ContactStatus.UNREAD,
    )
    db.session.add(contact)
    _commit_or_rollback('Contact')
    logger.info(f"Contact message received: {contact.id} from {contact.email}")
    return contact
