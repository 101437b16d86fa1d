# inkpress/api/__init__.py

from flask import Blueprint

# JSON API 用のブループリント (/api/...)
bp = Blueprint('api', __name__, url_prefix='/api')

# ★重要★ このインポートは、bpが定義された後に行う必要があります。
from . import routes
