# inkpress/api/routes.py

from flask import request, jsonify, current_app
from werkzeug.exceptions import HTTPException

from inkpress.extensions import db
from inkpress.forms import PostForm, CategoryForm, TagForm, ContactForm, InvalidPayload
from inkpress.models import Contact
from inkpress import queries, services
from inkpress.services import DuplicateSlugError

from . import bp

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
}


@bp.after_request
def add_cors_headers(response):
    for header, value in CORS_HEADERS.items():
        response.headers[header] = value
    return response


def json_error(message, status):
    return jsonify(success=False, error=message), status


@bp.errorhandler(HTTPException)
def handle_http_error(e):
    return json_error(e.description or e.name, e.code)


@bp.errorhandler(Exception)
def handle_unexpected_error(e):
    db.session.rollback()
    current_app.logger.error(f"INTERNAL_SERVER_ERROR on {request.method} {request.path}: {e}", exc_info=True)
    return json_error('Internal server error', 500)


def validation_failed(form, missing_message):
    missing = form.missing_fields()
    message = missing_message if missing else form.error_message()
    current_app.logger.warning(f"Validation failed on {request.method} {request.path}: {form.errors}")
    return json_error(message, 400)


# --- 記事 ---

@bp.route('/posts', methods=['GET'])
def list_posts():
    posts, pagination = queries.list_posts(
        search=request.args.get('search'),
        category=request.args.get('category', queries.ALL),
        tag=request.args.get('tag', queries.ALL),
        sort=request.args.get('sort', queries.SORT_LATEST),
        page=request.args.get('page', queries.DEFAULT_PAGE),
        limit=request.args.get('limit'),
    )
    return jsonify(success=True, posts=[post.to_dict() for post in posts], pagination=pagination)


@bp.route('/posts', methods=['POST'])
def create_post():
    try:
        form = PostForm.from_json(request.get_json(silent=True))
    except InvalidPayload as e:
        return json_error(str(e), 400)

    if not form.validate():
        return validation_failed(form, 'Missing required fields')

    try:
        post = services.create_post(form)
    except DuplicateSlugError as e:
        return json_error(str(e), 400)
    except Exception as e:
        current_app.logger.error(f"Error creating post {form.slug.data}: {e}", exc_info=True)
        return json_error('Failed to create post', 500)

    return jsonify(success=True, post=post.to_dict())


# --- カテゴリ ---

@bp.route('/categories', methods=['GET'])
def list_categories():
    return jsonify(success=True, categories=queries.categories_with_counts())


@bp.route('/categories', methods=['POST'])
def create_category():
    try:
        form = CategoryForm.from_json(request.get_json(silent=True))
    except InvalidPayload as e:
        return json_error(str(e), 400)

    if not form.validate():
        return validation_failed(form, 'Name and slug are required')

    try:
        category = services.create_category(form)
    except DuplicateSlugError as e:
        return json_error(str(e), 400)
    except Exception as e:
        current_app.logger.error(f"Error creating category {form.slug.data}: {e}", exc_info=True)
        return json_error('Failed to create category', 500)

    return jsonify(success=True, category=category.to_dict())


# --- タグ ---

@bp.route('/tags', methods=['GET'])
def list_tags():
    return jsonify(success=True, tags=queries.tags_with_counts())


@bp.route('/tags', methods=['POST'])
def create_tag():
    try:
        form = TagForm.from_json(request.get_json(silent=True))
    except InvalidPayload as e:
        return json_error(str(e), 400)

    if not form.validate():
        return validation_failed(form, 'Name is required')

    try:
        tag = services.create_tag(form)
    except (DuplicateSlugError, ValueError) as e:
        return json_error(str(e), 400)
    except Exception as e:
        current_app.logger.error(f"Error creating tag {form.name.data}: {e}", exc_info=True)
        return json_error('Failed to create tag', 500)

    return jsonify(success=True, tag=tag.to_dict())


# --- 執筆者 ---

@bp.route('/authors', methods=['GET'])
def list_authors():
    return jsonify(success=True, authors=queries.authors_with_counts())


# --- お問い合わせ ---

@bp.route('/contact', methods=['GET'])
def list_contacts():
    contacts = Contact.query.order_by(Contact.created_at.desc()).all()
    return jsonify(success=True, contacts=[contact.to_dict() for contact in contacts])


@bp.route('/contact', methods=['POST'])
def create_contact():
    try:
        form = ContactForm.from_json(request.get_json(silent=True))
    except InvalidPayload as e:
        return json_error(str(e), 400)

    if not form.validate():
        return validation_failed(form, 'Name, email, and message are required')

    try:
        contact = services.create_contact(form)
    except Exception as e:
        current_app.logger.error(f"Error creating contact from {form.email.data}: {e}", exc_info=True)
        return json_error('Failed to send message. Please try again.', 500)

    return jsonify(
        success=True,
        message='Your message has been sent successfully. We will get back to you soon!',
        contactId=str(contact.id)
    )
