# inkpress/routes/home.py

from flask import Blueprint, render_template, current_app, request, abort
import logging

from inkpress import queries
from inkpress.models import get_setting

logger = logging.getLogger(__name__)

# 公開ページのブループリント
home_bp = Blueprint('home', __name__)


@home_bp.app_context_processor
def inject_site_name():
    return dict(site_name=get_setting('site_name', 'Inkpress'))


# ホームページ（注目記事・最新記事・カテゴリ）
@home_bp.route('/')
@home_bp.route('/index')
def index():
    return render_template('home/index.html',
                           featured_posts=queries.featured_posts(),
                           recent_posts=queries.recent_posts(),
                           categories=queries.categories_with_counts(),
                           stats=queries.site_stats())


# 記事一覧ページ (検索・カテゴリ・タグ・並び替え)
@home_bp.route('/blog')
def blog_index():
    filters = {
        'search': request.args.get('search', '').strip(),
        'category': request.args.get('category', queries.ALL),
        'tag': request.args.get('tag', queries.ALL),
        'sort': queries.normalize_sort(request.args.get('sort')),
    }
    # ?featured=true は注目記事の並び替えと同じ扱い
    if request.args.get('featured') == 'true':
        filters['sort'] = queries.SORT_FEATURED

    posts, pagination = queries.list_posts(page=request.args.get('page', 1), **filters)

    return render_template('home/blog.html',
                           posts=posts,
                           pagination=pagination,
                           filters=filters,
                           sort_options=queries.SORT_OPTIONS,
                           categories=queries.categories_with_counts(),
                           tags=queries.tags_with_counts())


# 記事詳細ページ
@home_bp.route('/blog/<slug>')
def post_detail(slug):
    post = queries.get_published_post(slug)
    if post is None:
        current_app.logger.warning(f"Attempted to access non-existent or unpublished post with slug: {slug}")
        abort(404)

    return render_template('home/post_detail.html',
                           post=post,
                           related_posts=queries.related_posts(post))


# カテゴリ別記事一覧
@home_bp.route('/category/<slug>')
def posts_by_category(slug):
    category = queries.get_category(slug)
    if category is None:
        abort(404)

    return render_template('home/posts_by_category.html',
                           category=category,
                           post_count=category.published_post_count(),
                           posts=queries.category_posts(category))


# タグ別記事一覧
@home_bp.route('/tag/<slug>')
def posts_by_tag(slug):
    tag = queries.get_tag(slug)
    if tag is None:
        abort(404)

    return render_template('home/posts_by_tag.html',
                           tag=tag,
                           posts=queries.tag_posts(tag))


# 検索結果ページ
@home_bp.route('/search')
def search_results():
    query = request.args.get('q', '').strip()
    page = request.args.get('page', 1, type=int)

    if query:
        posts, pagination = queries.list_posts(search=query, page=page)
    else:
        posts, pagination = [], None

    return render_template('home/search_results.html',
                           query=query,
                           posts=posts,
                           pagination=pagination)
