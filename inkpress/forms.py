# inkpress/forms.py
"""
JSON API のリクエストスキーマ。

フィールド名は API の JSON キー (camelCase) と一致させています。
データストアへの書き込みは、これらのフォームの validate() が通った後にだけ行います。
"""

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, TextAreaField, BooleanField, SelectField
from wtforms.fields.core import UnboundField
from wtforms.validators import DataRequired, InputRequired, Length, Optional, Regexp, URL, ValidationError
from wtforms_sqlalchemy.fields import QuerySelectField, QuerySelectMultipleField

from inkpress.models import Post, Category, Tag, Author, PostStatus

# ローカル部、"@"、"." を1つ以上含むドメイン。RFC 準拠の検証ではありません
EMAIL_PATTERN = r'^[^\s@]+@[^\s@]+\.[^\s@]+$'
SLUG_PATTERN = r'^[a-z0-9]+(?:-[a-z0-9]+)*$'
COLOR_PATTERN = r'^#[0-9A-Fa-f]{6}$'

SLUG_MESSAGE = 'Slug may only contain lowercase letters, numbers and hyphens.'


class InvalidPayload(Exception):
    """JSON ボディの形や型がフォームの期待と合わないときに送出します。"""


class ApiForm(FlaskForm):
    """JSON API 用の基底フォーム (CSRFトークン不要)"""

    class Meta:
        csrf = False

    # 必須項目が欠けているときにまとめて返すためのフィールド名
    required_fields = ()
    # JSON の true / false だけを受け付けるフィールド
    boolean_fields = ()
    # 文字列の配列だけを受け付けるフィールド。それ以外のフィールドは文字列のみ
    list_fields = ()

    @classmethod
    def from_json(cls, payload):
        """
        JSON ボディの型を確認し、MultiDict に変換してフォームを作ります。
        null の値は未指定として扱い、フォームに無いキーは無視します。
        """
        if not isinstance(payload, dict):
            raise InvalidPayload('Request body must be a JSON object')

        formdata = MultiDict()
        for key, value in payload.items():
            if value is None or not isinstance(getattr(cls, key, None), UnboundField):
                continue
            if key in cls.boolean_fields:
                if not isinstance(value, bool):
                    raise InvalidPayload(f'{key} must be a boolean')
                formdata.add(key, 'true' if value else 'false')
            elif key in cls.list_fields:
                if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                    raise InvalidPayload(f'{key} must be an array of strings')
                for item in value:
                    formdata.add(key, item)
            else:
                if not isinstance(value, str):
                    raise InvalidPayload(f'{key} must be a string')
                formdata.add(key, value)
        return cls(formdata=formdata)

    def missing_fields(self):
        missing = []
        for name in self.required_fields:
            field = self[name]
            if not field.raw_data or field.raw_data[0] in (None, ''):
                missing.append(name)
        return missing

    def error_message(self):
        """最初のフォームエラーを API のエラーメッセージとして返します。"""
        for errors in self.errors.values():
            if errors:
                return errors[0]
        return 'Invalid request'


def _str_pk(obj):
    return str(obj.id)


def _check_known_ids(field):
    # QuerySelectMultipleField は未知の ID を黙って捨てるので、受け取った ID 数と突き合わせる
    if field.raw_data and len(set(field.raw_data)) != len(field.data):
        raise ValidationError('Not a valid choice.')


class PostForm(ApiForm):
    """記事作成フォーム"""
    required_fields = ('title', 'slug', 'content', 'authorId')
    boolean_fields = ('featured',)
    list_fields = ('categoryIds', 'tagIds')

    title = StringField('Title', validators=[DataRequired(), Length(max=256)])
    slug = StringField('Slug', validators=[DataRequired(), Length(max=256), Regexp(SLUG_PATTERN, message=SLUG_MESSAGE)])
    excerpt = TextAreaField('Excerpt', validators=[Optional()])
    content = TextAreaField('Content', validators=[DataRequired()])
    featuredImage = StringField('Featured image', validators=[Optional(), URL(), Length(max=500)])
    authorId = QuerySelectField(
        'Author',
        query_factory=lambda: Author.query.all(),
        get_pk=_str_pk,
        validators=[InputRequired()]
    )
    categoryIds = QuerySelectMultipleField(
        'Categories',
        query_factory=lambda: Category.query.all(),
        get_pk=_str_pk,
        validators=[Optional()]
    )
    tagIds = QuerySelectMultipleField(
        'Tags',
        query_factory=lambda: Tag.query.all(),
        get_pk=_str_pk,
        validators=[Optional()]
    )
    status = SelectField(
        'Status',
        choices=[(status.value, status.value) for status in PostStatus],
        default=PostStatus.PUBLISHED.value
    )
    featured = BooleanField('Featured')

    def validate_slug(self, slug):
        if Post.query.filter_by(slug=slug.data).first() is not None:
            raise ValidationError('Post with this slug already exists')

    def validate_categoryIds(self, field):
        _check_known_ids(field)

    def validate_tagIds(self, field):
        _check_known_ids(field)


class CategoryForm(ApiForm):
    """カテゴリ作成フォーム"""
    required_fields = ('name', 'slug')

    name = StringField('Name', validators=[DataRequired(), Length(max=128)])
    slug = StringField('Slug', validators=[DataRequired(), Length(max=128), Regexp(SLUG_PATTERN, message=SLUG_MESSAGE)])
    description = TextAreaField('Description', validators=[Optional()])
    color = StringField('Color', validators=[Optional(), Regexp(COLOR_PATTERN, message='Color must be a hex value like #3B82F6.')])

    def validate_slug(self, slug):
        if Category.query.filter_by(slug=slug.data).first() is not None:
            raise ValidationError('Category with this slug already exists')


class TagForm(ApiForm):
    """タグ作成フォーム (スラッグ省略時は名前から生成)"""
    required_fields = ('name',)

    name = StringField('Name', validators=[DataRequired(), Length(min=1, max=64)])
    slug = StringField('Slug', validators=[Optional(), Length(max=64), Regexp(SLUG_PATTERN, message=SLUG_MESSAGE)])


class ContactForm(ApiForm):
    """お問い合わせフォーム"""
    required_fields = ('name', 'email', 'message')

    name = StringField('Name', validators=[DataRequired(), Length(max=128)])
    email = StringField('Email', validators=[
        DataRequired(),
        Length(max=120),
        Regexp(EMAIL_PATTERN, message='Please provide a valid email address')
    ])
    subject = StringField('Subject', validators=[Optional(), Length(max=256)])
    message = TextAreaField('Message', validators=[DataRequired()])
