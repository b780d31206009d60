"""Unit tests for example parsing and collection."""

import unittest

from kanji_lib.domain.entry import Example
from kanji_lib.schema.examples import (
    ExampleSet, coerce_example, collect_examples, parse_example,
)
from kanji_lib.schema.normalizer import normalize


class TestParseExample(unittest.TestCase):
    """Tests for free-text example parsing."""

    def test_word_reading_gloss_fullwidth(self):
        self.assertEqual(parse_example('日本（にほん）：Nhật Bản'),
                         Example('日本', 'にほん', 'Nhật Bản'))

    def test_word_reading_gloss_ascii(self):
        self.assertEqual(parse_example('日本(にほん): Japan'),
                         Example('日本', 'にほん', 'Japan'))

    def test_word_reading(self):
        self.assertEqual(parse_example('毎日（まいにち）'), Example('毎日', 'まいにち', ''))

    def test_word_gloss(self):
        self.assertEqual(parse_example('日曜日: chủ nhật'), Example('日曜日', '', 'chủ nhật'))

    def test_bare_word(self):
        self.assertEqual(parse_example('  今日 '), Example('今日', '', ''))

    def test_blank(self):
        self.assertIsNone(parse_example('   '))
        self.assertIsNone(parse_example(''))


class TestCoerceExample(unittest.TestCase):
    """Tests for coercing the accepted example shapes."""

    def test_vietnamese_keys(self):
        ex = coerce_example({'tu': '日本', 'hiragana': 'にほん', 'nghia': 'Nhật Bản'})
        self.assertEqual(ex, Example('日本', 'にほん', 'Nhật Bản'))

    def test_english_keys(self):
        ex = coerce_example({'word': '日本', 'reading': 'にほん', 'meaning': 'Japan'})
        self.assertEqual(ex, Example('日本', 'にほん', 'Japan'))

    def test_no_headword(self):
        self.assertIsNone(coerce_example({'hiragana': 'にほん'}))
        self.assertIsNone(coerce_example(42))


class TestExampleSet(unittest.TestCase):
    """Tests for ordered, structural uniqueness."""

    def test_structural_duplicates_are_suppressed(self):
        examples = ExampleSet()
        self.assertTrue(examples.add({'tu': '日本', 'hiragana': 'にほん', 'nghia': 'x'}))
        self.assertFalse(examples.add('日本（にほん）: x'))
        self.assertEqual(len(examples), 1)

    def test_different_gloss_is_distinct(self):
        examples = ExampleSet(['日本: a', '日本: b'])
        self.assertEqual([e.nghia for e in examples], ['a', 'b'])

    def test_contains(self):
        examples = ExampleSet(['日本: a'])
        self.assertIn(Example('日本', '', 'a'), examples)
        self.assertNotIn('日本: b', examples)


class TestCollectExamples(unittest.TestCase):
    """Tests for walking every example field of a record."""

    def test_field_order_and_dedupe(self):
        record = {
            'kun': [{'am': 'ひ', 'viDu': ['日（ひ）: ngày']}],
            'on': [{'am': 'ニチ', 'viDu': [{'tu': '日本', 'hiragana': 'にほん', 'nghia': 'Nhật'}]}],
            'viDuKun': ['日（ひ）: ngày', '日々: mỗi ngày'],
            'viDuOn': ['日本（にほん）: Nhật'],
            'viDu': ['今日'],
            'examples': {'kun': ['朝日（あさひ）'], 'on': ['毎日']},
        }
        self.assertEqual([e.tu for e in collect_examples(record)],
                         ['日', '日本', '日々', '今日', '朝日', '毎日'])

    def test_examples_list(self):
        self.assertEqual(len(collect_examples({'examples': ['a', 'b', 'a']})), 2)

    def test_entry_input(self):
        entry = normalize({'chu': '日', 'kun': [{'am': 'ひ', 'viDu': ['日: ngày']}],
                           'on': [{'am': 'ニチ', 'viDu': ['日: ngày', '日本']}]})
        self.assertEqual([e.tu for e in collect_examples(entry)], ['日', '日本'])

    def test_none(self):
        self.assertEqual(collect_examples(None), [])
