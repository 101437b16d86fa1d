# config.py
import os

# BASE_DIR はプロジェクトのルートディレクトリを指します
BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    # アプリケーションのセキュリティキー (セッション管理などに使用)
    # 本番環境では環境変数 SECRET_KEY を必ず設定してください。
    SECRET_KEY = os.environ.get('SECRET_KEY', 'inkpress-dev-secret')

    SESSION_COOKIE_SECURE = False

    # データベースのURI設定
    # DATABASE_URL が無い場合は 'instance' フォルダ内の SQLite ファイルを使います
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///' + os.path.join(BASE_DIR, 'instance', 'inkpress.db')
    )
    # SQLAlchemyのイベントトラッキングを無効にします (リソース節約のため)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'

    # --- 記事一覧 (ページネーション) ---
    POSTS_PER_PAGE = 20
    # limit パラメータの上限
    POSTS_MAX_PER_PAGE = 100

    # 読了時間の計算に使う 1分あたりの単語数
    WORDS_PER_MINUTE = 200

    # カテゴリ作成時に色が指定されなかった場合の既定値
    DEFAULT_CATEGORY_COLOR = '#3B82F6'

    # --- ロギング ---
    LOG_TO_FILE = True
    LOG_DIR = os.path.join(BASE_DIR, 'logs')


class TestConfig(Config):
    TESTING = True
    DEBUG = False
    # メモリ上のDBを使用
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    # テスト中はCSRFを無効にする
    WTF_CSRF_ENABLED = False
    LOG_TO_FILE = False
