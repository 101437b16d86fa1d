# inkpress/queries.py
"""
公開記事の一覧・検索・絞り込み・並び替え・ページネーションを組み立てるモジュール。

API (/api/posts) と公開ページの両方から使われます。
どの関数も status=PUBLISHED の条件を必ず付け、呼び出し側から外すことはできません。
"""

import logging
import sys

from flask import current_app
from sqlalchemy.orm import joinedload, selectinload

from inkpress.extensions import db
from inkpress.models import Post, PostStatus, Category, Tag, Author

logger = logging.getLogger(__name__)

# category / tag の「絞り込みなし」を表す値
ALL = 'all'

SORT_LATEST = 'latest'
SORT_OLDEST = 'oldest'
SORT_FEATURED = 'featured'
# 閲覧数は記録していないので reading_time を人気度の代わりに使う
SORT_POPULAR = 'popular'
SORT_OPTIONS = (SORT_LATEST, SORT_OLDEST, SORT_FEATURED, SORT_POPULAR)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20


def _with_relations(query):
    return query.options(
        joinedload(Post.author),
        selectinload(Post.categories),
        selectinload(Post.tags),
    )


def published_posts():
    """公開済み記事だけを対象にしたベースクエリ。"""
    return Post.query.filter(Post.status == PostStatus.PUBLISHED)


def normalize_sort(sort):
    return sort if sort in SORT_OPTIONS else SORT_LATEST


def build_post_query(search=None, category=ALL, tag=ALL, sort=SORT_LATEST):
    """
    リクエストパラメータから記事一覧のクエリを組み立てます。

    :param search: タイトル・抜粋・本文のいずれかに含まれる文字列 (大文字小文字を区別しない)。
                   空文字は「検索なし」として扱います。
    :param category: カテゴリのスラッグ。'all' または空なら絞り込みなし。
    :param tag: タグのスラッグ。'all' または空なら絞り込みなし。
    :param sort: latest / oldest / featured / popular。未知の値は latest。
    """
    query = published_posts()

    search = (search or '').strip()
    if search:
        query = query.filter(db.or_(
            Post.title.icontains(search, autoescape=True),
            Post.excerpt.icontains(search, autoescape=True),
            Post.content.icontains(search, autoescape=True),
        ))

    if category and category != ALL:
        query = query.filter(Post.categories.any(Category.slug == category))

    if tag and tag != ALL:
        query = query.filter(Post.tags.any(Tag.slug == tag))

    sort = normalize_sort(sort)
    if sort == SORT_FEATURED:
        query = query.filter(Post.featured.is_(True))

    if sort == SORT_OLDEST:
        order = Post.published_at.asc()
    elif sort == SORT_POPULAR:
        order = Post.reading_time.desc()
    else:
        order = Post.published_at.desc()

    # 同じ値が並んだときも結果が毎回同じ順になるよう id を最後に付ける
    return query.order_by(order, Post.id.asc())


def _positive_int(value, default):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def list_posts(search=None, category=ALL, tag=ALL, sort=SORT_LATEST, page=DEFAULT_PAGE, limit=None):
    """
    絞り込み済みの記事一覧から 1 ページ分を取り出します。

    :return: (posts, pagination) のタプル。pagination は API でそのまま返せる辞書です。
    """
    page = _positive_int(page, DEFAULT_PAGE)
    limit = _positive_int(limit, current_app.config.get('POSTS_PER_PAGE', DEFAULT_LIMIT))
    max_per_page = current_app.config.get('POSTS_MAX_PER_PAGE')
    if max_per_page:
        limit = min(limit, max_per_page)
    # OFFSET が DB の整数範囲を超えないように抑える (範囲外のページは空になるだけ)
    page = min(page, sys.maxsize // limit)

    query = _with_relations(build_post_query(search=search, category=category, tag=tag, sort=sort))
    posts_pagination = query.paginate(
        page=page,
        per_page=limit,
        max_per_page=max_per_page,
        error_out=False
    )
    logger.debug(
        "Post listing: search=%r category=%r tag=%r sort=%r page=%s limit=%s total=%s",
        search, category, tag, sort, posts_pagination.page, posts_pagination.per_page, posts_pagination.total
    )
    return posts_pagination.items, pagination_to_dict(posts_pagination)


def pagination_to_dict(posts_pagination):
    # Flask-SQLAlchemy の Pagination は pages = ceil(total / per_page)、
    # has_next = page < pages、has_prev = page > 1 を満たします
    return {
        'page': posts_pagination.page,
        'limit': posts_pagination.per_page,
        'total': posts_pagination.total,
        'totalPages': posts_pagination.pages,
        'hasNextPage': posts_pagination.has_next,
        'hasPrevPage': posts_pagination.has_prev,
    }


# --- 公開ページ用のクエリ ---

def featured_posts(limit=3):
    query = published_posts().filter(Post.featured.is_(True)).order_by(Post.published_at.desc())
    return _with_relations(query).limit(limit).all()


def recent_posts(limit=6):
    query = published_posts().order_by(Post.published_at.desc())
    return _with_relations(query).limit(limit).all()


def get_published_post(slug):
    """スラッグで公開済み記事を取得します。下書きや存在しない場合は None。"""
    return _with_relations(published_posts().filter(Post.slug == slug)).first()


def related_posts(post, limit=3):
    """同じカテゴリに属する他の公開記事 (新しい順)。"""
    category_ids = [category.id for category in post.categories]
    if not category_ids:
        return []
    query = published_posts().filter(
        Post.id != post.id,
        Post.categories.any(Category.id.in_(category_ids))
    ).order_by(Post.published_at.desc())
    return _with_relations(query).limit(limit).all()


def get_category(slug):
    return Category.query.filter_by(slug=slug).first()


def get_tag(slug):
    return Tag.query.filter_by(slug=slug).first()


def category_posts(category, limit=20):
    query = published_posts().filter(Post.categories.any(Category.id == category.id)).order_by(Post.published_at.desc())
    return _with_relations(query).limit(limit).all()


def tag_posts(tag, limit=20):
    query = published_posts().filter(Post.tags.any(Tag.id == tag.id)).order_by(Post.published_at.desc())
    return _with_relations(query).limit(limit).all()


# --- 参照系エンティティの一覧 (公開記事数つき) ---

def categories_with_counts():
    categories = Category.query.order_by(Category.name.asc()).all()
    return [dict(category.to_dict(), postCount=category.published_post_count()) for category in categories]


def tags_with_counts():
    tags = Tag.query.order_by(Tag.name.asc()).all()
    return [dict(tag.to_dict(), postCount=tag.published_post_count()) for tag in tags]


def authors_with_counts():
    authors = Author.query.order_by(Author.created_at.asc(), Author.name.asc()).all()
    return [dict(author.to_dict(), postCount=author.published_post_count()) for author in authors]


def site_stats():
    """ホーム画面に表示する集計値。実際に数えられるものだけを返します。"""
    return {
        'totalPosts': published_posts().count(),
        'totalAuthors': Author.query.count(),
        'totalCategories': Category.query.count(),
    }
