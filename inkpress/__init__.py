# inkpress/__init__.py

import os
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
import pytz # datetime.now(pytz.utc) を使用するため

from flask import Flask, render_template, request, jsonify

import config # config モジュールをインポート

# inkpress.extensions から拡張機能をインポート
from inkpress.extensions import db, migrate, csrf

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'


def configure_logging(app):
    """app.logger にファイル (ローテーション) と標準出力のハンドラを設定します。"""
    # app.logger は 'inkpress' ロガーなので、各モジュールの logging.getLogger(__name__) もここに流れる。
    # create_app() を繰り返し呼んでもハンドラが重複しないよう、前回分を外してから付け直す
    for handler in list(app.logger.handlers):
        if isinstance(handler, logging.StreamHandler):
            app.logger.removeHandler(handler)
            handler.close()

    if app.config.get('LOG_TO_FILE', True):
        log_dir = app.config.get('LOG_DIR', 'logs')
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(os.path.join(log_dir, 'inkpress.log'), maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

    # stdout へのロギング設定 (Gunicorn などでコンソール出力を見るため)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    stream_handler.setLevel(logging.INFO)
    app.logger.addHandler(stream_handler)
    app.logger.setLevel(logging.INFO)


# アプリケーションファクトリ関数
def create_app(config_class=config.Config):
    # Flaskアプリケーションのインスタンスを作成
    app = Flask(__name__)
    app.config.from_object(config_class)

    # SQLite ファイルを置く instance フォルダを作成しておく
    os.makedirs(app.instance_path, exist_ok=True)

    configure_logging(app)

    # 拡張機能の初期化 (DB接続はここでアプリに紐付け、セッションはアプリコンテキスト単位)
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    # コンテキストプロセッサ: 全てのテンプレートで 'current_year' を利用可能にする
    @app.context_processor
    def inject_globals():
        return dict(current_year=datetime.now(pytz.utc).year)

    # 各種ブループリントの登録
    from inkpress.routes.home import home_bp
    from inkpress.api import bp as api_bp

    app.register_blueprint(home_bp)
    app.register_blueprint(api_bp)
    # JSON API は CSRF トークンを使わない
    csrf.exempt(api_bp)

    register_error_handlers(app)

    # CLI コマンドの登録
    from inkpress import cli
    app.cli.add_command(cli.init)

    app.logger.info('Inkpress startup')
    return app


def _wants_json():
    return request.path.startswith('/api/')


def register_error_handlers(app):
    from inkpress.api.routes import CORS_HEADERS

    def api_error(message, status):
        response = jsonify(success=False, error=message)
        response.status_code = status
        response.headers.update(CORS_HEADERS)
        return response

    @app.errorhandler(404)
    def page_not_found(e):
        app.logger.warning(f"PAGE_NOT_FOUND: {request.path}")
        if _wants_json():
            return api_error('Not found', 404)
        return render_template('errors/404.html'), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        if _wants_json():
            return api_error('Method not allowed', 405)
        return e

    @app.errorhandler(500)
    def internal_server_error(e):
        db.session.rollback()
        app.logger.error(f"INTERNAL_SERVER_ERROR: {request.path}: {e}", exc_info=True)
        if _wants_json():
            return api_error('Internal server error', 500)
        return render_template('errors/500.html'), 500
