# inkpress/utils.py

import math
import re

# 読了時間計算の既定値 (1分あたりの単語数)
WORDS_PER_MINUTE = 200


def slugify(text):
    """タイトルや名前から URL で使えるスラッグを生成します。"""
    text = (text or '').lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_-]+', '-', text)
    text = re.sub(r'^-+|-+$', '', text)
    return text


def count_words(text):
    """空白区切りで単語数を数えます。"""
    if not text:
        return 0
    return len(text.split())


def calculate_reading_time(content, words_per_minute=WORDS_PER_MINUTE):
    """
    本文の単語数から読了時間 (分) を推定します。
    どんなに短い本文でも最低 1 分とします。
    """
    return max(1, math.ceil(count_words(content) / words_per_minute))
