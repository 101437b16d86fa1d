from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect

# 各拡張機能のインスタンスを生成
# アプリへの紐付けは create_app() 内の init_app() で行います
db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()
