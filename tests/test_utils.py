# tests/test_utils.py
from inkpress.utils import slugify, count_words, calculate_reading_time


def test_slugify():
    assert slugify('Remote Work') == 'remote-work'
    assert slugify('  Next.js 14: What\'s New?  ') == 'nextjs-14-whats-new'
    assert slugify('a -- b__c') == 'a-b-c'
    assert slugify('') == ''


def test_count_words_splits_on_any_whitespace():
    assert count_words('one two\nthree\tfour  five') == 5
    assert count_words('') == 0
    assert count_words(None) == 0


def test_reading_time_rounds_up_per_200_words():
    assert calculate_reading_time(' '.join(['word'] * 400)) == 2
    assert calculate_reading_time(' '.join(['word'] * 401)) == 3
    assert calculate_reading_time(' '.join(['word'] * 200)) == 1


def test_reading_time_is_at_least_one_minute():
    assert calculate_reading_time(' '.join(['word'] * 50)) == 1
    assert calculate_reading_time('') == 1


def test_reading_time_custom_words_per_minute():
    assert calculate_reading_time(' '.join(['word'] * 300), words_per_minute=100) == 3
