# inkpress/models.py

import enum
import json
import uuid
from datetime import datetime

import pytz
from sqlalchemy.orm import relationship
from sqlalchemy_utils import UUIDType

from inkpress.extensions import db


def utcnow():
    return datetime.now(pytz.utc)


def _isoformat(value):
    return value.isoformat() if value else None


# 多対多のリレーションシップ用ヘルパーテーブル
post_categories = db.Table(
    'post_categories',
    db.Column('post_id', UUIDType(binary=False), db.ForeignKey('post.id', ondelete='CASCADE'), primary_key=True),
    db.Column('category_id', UUIDType(binary=False), db.ForeignKey('category.id', ondelete='CASCADE'), primary_key=True)
)

post_tags = db.Table(
    'post_tags',
    db.Column('post_id', UUIDType(binary=False), db.ForeignKey('post.id', ondelete='CASCADE'), primary_key=True),
    db.Column('tag_id', UUIDType(binary=False), db.ForeignKey('tag.id', ondelete='CASCADE'), primary_key=True)
)


class PostStatus(enum.Enum):
    DRAFT = 'DRAFT'
    PUBLISHED = 'PUBLISHED'


class ContactStatus(enum.Enum):
    UNREAD = 'UNREAD'
    READ = 'READ'


class Author(db.Model):
    """
    記事の執筆者を表します。1人の執筆者は0件以上の記事を持ちます。
    """
    __tablename__ = 'author'
    id = db.Column(UUIDType(binary=False), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    bio = db.Column(db.Text, nullable=True)
    avatar = db.Column(db.String(500), nullable=True)
    website = db.Column(db.String(255), nullable=True)
    twitter = db.Column(db.String(64), nullable=True)
    linkedin = db.Column(db.String(128), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    posts = relationship('Post', back_populates='author', lazy='dynamic')

    def published_post_count(self):
        return self.posts.filter(Post.status == PostStatus.PUBLISHED).count()

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'email': self.email,
            'bio': self.bio,
            'avatar': self.avatar,
            'website': self.website,
            'twitter': self.twitter,
            'linkedin': self.linkedin,
            'createdAt': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Author {self.name}>'


class Category(db.Model):
    """
    記事を整理するためのカテゴリ。スラッグはサイト全体で一意です。
    """
    __tablename__ = 'category'
    id = db.Column(UUIDType(binary=False), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(128), nullable=False)
    slug = db.Column(db.String(128), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    color = db.Column(db.String(7), nullable=False, default='#3B82F6')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def published_post_count(self):
        return self.posts.filter(Post.status == PostStatus.PUBLISHED).count()

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'color': self.color,
            'createdAt': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Category {self.name}>'


class Tag(db.Model):
    __tablename__ = 'tag'
    id = db.Column(UUIDType(binary=False), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(64), nullable=False)
    slug = db.Column(db.String(64), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def published_post_count(self):
        return self.posts.filter(Post.status == PostStatus.PUBLISHED).count()

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'slug': self.slug,
            'createdAt': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Tag {self.name}>'


class Post(db.Model):
    """
    ブログ記事を表し、そのコンテンツ、公開ステータス、
    および執筆者、カテゴリ、タグとの関係を含みます。
    公開一覧に出るのは status が PUBLISHED の記事だけです。
    """
    __tablename__ = 'post'
    id = db.Column(UUIDType(binary=False), primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String(256), nullable=False)
    slug = db.Column(db.String(256), unique=True, nullable=False)
    excerpt = db.Column(db.Text, nullable=True)
    content = db.Column(db.Text, nullable=False)
    featured_image = db.Column(db.String(500), nullable=True)
    # 本文の単語数から算出 (utils.calculate_reading_time)
    reading_time = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.Enum(PostStatus), nullable=False, default=PostStatus.PUBLISHED)
    featured = db.Column(db.Boolean, nullable=False, default=False)
    published_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    author_id = db.Column(UUIDType(binary=False), db.ForeignKey('author.id'), nullable=False)

    # リレーションシップ
    author = relationship('Author', back_populates='posts')
    categories = relationship('Category', secondary=post_categories, backref=db.backref('posts', lazy='dynamic'))
    tags = relationship('Tag', secondary=post_tags, backref=db.backref('posts', lazy='dynamic'))

    @property
    def is_published(self):
        return self.status == PostStatus.PUBLISHED

    def to_dict(self):
        return {
            'id': str(self.id),
            'title': self.title,
            'slug': self.slug,
            'excerpt': self.excerpt,
            'content': self.content,
            'featuredImage': self.featured_image,
            'readingTime': self.reading_time,
            'status': self.status.value,
            'featured': self.featured,
            'publishedAt': _isoformat(self.published_at),
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
            'authorId': str(self.author_id),
            'author': self.author.to_dict() if self.author else None,
            'categories': [category.to_dict() for category in self.categories],
            'tags': [tag.to_dict() for tag in self.tags],
        }

    def __repr__(self):
        return f'<Post {self.title}>'


class Contact(db.Model):
    """
    お問い合わせフォームから送信されたメッセージ。
    作成後に変更されるのは status だけです。
    """
    __tablename__ = 'contact'
    id = db.Column(UUIDType(binary=False), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    subject = db.Column(db.String(256), nullable=True)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.Enum(ContactStatus), nullable=False, default=ContactStatus.UNREAD)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'email': self.email,
            'subject': self.subject,
            'message': self.message,
            'status': self.status.value,
            'createdAt': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Contact {self.id} from {self.email}>'


class SiteSetting(db.Model):
    """key → value の設定レコード。value は type に従って解釈します。"""
    __tablename__ = 'site_setting'
    key = db.Column(db.String(128), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(16), nullable=False, default='string')
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def typed_value(self):
        if self.type == 'number':
            number = float(self.value)
            return int(number) if number.is_integer() else number
        if self.type == 'boolean':
            return self.value.strip().lower() in ('true', '1', 'yes', 'on')
        if self.type == 'json':
            return json.loads(self.value)
        return self.value

    def __repr__(self):
        return f'<SiteSetting {self.key}={self.value!r}>'


def get_setting(key, default=None):
    setting = db.session.get(SiteSetting, key)
    if setting is None:
        return default
    return setting.typed_value


class Newsletter(db.Model):
    __tablename__ = 'newsletter'
    id = db.Column(UUIDType(binary=False), primary_key=True, default=uuid.uuid4)
    email = db.Column(db.String(120), unique=True, nullable=False)
    status = db.Column(db.String(16), nullable=False, default='ACTIVE')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f'<Newsletter {self.email}>'
