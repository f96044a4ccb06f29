"""Tests for vocabulary.py - extraction, enhancement and expansion."""

import pytest

import lesson_core.vocabulary as vocabulary_module
from lesson_core.errors import NotLoadedError
from lesson_core.dictionary import DictionaryStore
from lesson_core.models import VocabularyItem
from lesson_core.vocabulary import LongestMatchSegmenter, VocabularyExtractor


def _pairs(items):
    return [(it.chinese, it.type) for it in items]


class TestExtractFromText:
    def test_characters_then_words(self, extractor):
        items = extractor.extract_from_text("你好！我很好。")

        assert _pairs(items) == [
            ("你", "character"),
            ("好", "character"),
            ("很", "character"),
            ("我", "character"),
            ("你好", "word"),
        ]

    def test_translations_and_pinyin(self, extractor):
        items = {it.chinese: it for it in extractor.extract_from_text("你好！我很好。")}

        assert items["你"].english == "you"
        assert items["好"].english == "good"
        assert items["你好"].english == "hello"
        assert items["你好"].pinyin == "nǐ hǎo"

    def test_unknown_characters_dropped(self, extractor):
        items = extractor.extract_from_text("猫很好")

        assert [it.chinese for it in items] == ["好", "很"]

    def test_repeats_appear_once(self, extractor):
        items = extractor.extract_from_text("好好好你好你好")

        chinese = [it.chinese for it in items]
        assert chinese == ["你", "好", "你好"]

    def test_ignores_non_cjk(self, extractor):
        assert extractor.extract_from_text("Hello, 123!") == []

    def test_single_character_segments_not_words(self, store):
        extractor = VocabularyExtractor(store, segmenter=lambda text: list(text))

        items = extractor.extract_from_text("我很好")

        assert all(it.type == "character" for it in items)

    def test_repeated_word_appears_once(self, store):
        # the same word twice from the segmenter
        extractor = VocabularyExtractor(store, segmenter=lambda text: ["谢谢", "谢谢"])

        items = extractor.extract_from_text("谢谢")

        assert _pairs(items) == [("谢", "character"), ("谢谢", "word")]

    def test_extension_a_character(self):
        last_ext_a = chr(0x4DBF)
        past_ext_a = chr(0x4DC0)
        store = DictionaryStore.from_mapping(
            {last_ext_a: {"definitions": {"0": "rare"}}, past_ext_a: {"definitions": {"0": "hexagram"}}}
        )
        store.load()
        extractor = VocabularyExtractor(store, segmenter=lambda text: [])

        items = extractor.extract_from_text(last_ext_a + past_ext_a)

        assert [it.chinese for it in items] == [last_ext_a]

    def test_not_loaded(self, sample_dict):
        store = DictionaryStore.from_mapping(sample_dict)
        extractor = VocabularyExtractor(store, segmenter=lambda text: [])

        with pytest.raises(NotLoadedError):
            extractor.extract_from_text("你好")


class TestSegmentationFailure:
    def test_falls_back_to_characters(self, store):
        def broken(text):
            raise RuntimeError("segmenter exploded")

        extractor = VocabularyExtractor(store, segmenter=broken)

        result = extractor.extract("你好！我很好。")

        assert result.status == "characters_only"
        assert "segmenter exploded" in result.error
        assert _pairs(result.items) == [
            ("你", "character"),
            ("好", "character"),
            ("很", "character"),
            ("我", "character"),
        ]

    def test_complete_status(self, extractor):
        result = extractor.extract("你好")

        assert result.status == "complete"
        assert result.error is None

    def test_failure_is_logged(self, store, caplog):
        def broken(text):
            raise ValueError("bad dictionary")

        extractor = VocabularyExtractor(store, segmenter=broken)

        with caplog.at_level("WARNING", logger="lesson_core"):
            extractor.extract("你好")

        assert "segmentation failed" in caplog.text


class TestSegmenters:
    def test_longest_match(self, store):
        segment = LongestMatchSegmenter(store)

        assert segment("你好！我在中国。") == ["你好", "！", "我", "在", "中国", "。"]

    def test_default_segmenter_is_jieba(self, store, monkeypatch):
        seen = []

        def fake_lcut(text, cut_all=False):
            seen.append((text, cut_all))
            return ["你好", "我"]

        monkeypatch.setattr(vocabulary_module.jieba, "lcut", fake_lcut)
        extractor = VocabularyExtractor(store)

        items = extractor.extract_from_text("你好我")

        assert seen == [("你好我", False)]
        assert ("你好", "word") in _pairs(items)


    def test_jieba_finds_words(self, store):
        extractor = VocabularyExtractor(store)

        items = extractor.extract_from_text("你好！我很好。")

        assert _pairs(items) == [
            ("你", "character"),
            ("好", "character"),
            ("很", "character"),
            ("我", "character"),
            ("你好", "word"),
        ]


class TestEnhance:
    def test_replaces_with_dictionary(self, extractor):
        out = extractor.enhance([{"chinese": "你好", "english": "hi there"}])

        assert out == [VocabularyItem(chinese="你好", english="hello")]

    def test_keeps_caller_english_when_unknown(self, extractor):
        out = extractor.enhance([{"chinese": "不存在的词", "english": "non-existent word"}])

        assert out[0].english == "non-existent word"
        assert out[0].type is None

    def test_never_drops(self, extractor):
        base = [
            {"chinese": "我", "english": "me"},
            {"chinese": "猫", "english": "cat"},
            {"chinese": "我", "english": "myself"},
        ]

        out = extractor.enhance(base)

        assert [it.chinese for it in out] == ["我", "猫", "我"]


LESSON = {
    "chinese": "你好！我很好，谢谢你。",
    "sentences": [
        {"chinese": "你好！", "english": "Hello!"},
        {"chinese": "我很好，谢谢你。", "english": "I'm fine, thank you."},
    ],
}


class TestExpand:
    def test_unique_keys(self, extractor):
        base = [{"chinese": "你好", "english": "hi"}, {"chinese": "猫", "english": "cat"}]

        items = extractor.expand(LESSON, base)

        keys = [it.chinese for it in items]
        assert len(keys) == len(set(keys))

    def test_base_entry_wins(self, extractor):
        base = [{"chinese": "你好", "english": "hi"}, {"chinese": "好", "english": "fine"}]

        items = {it.chinese: it for it in extractor.expand(LESSON, base)}

        # enhanced base entries, untyped
        assert items["你好"].english == "hello"
        assert items["你好"].type is None
        assert items["好"].english == "good"
        assert items["好"].type is None

    def test_unknown_base_entry_kept(self, extractor):
        base = [{"chinese": "猫", "english": "cat"}]

        items = {it.chinese: it for it in extractor.expand(LESSON, base)}

        assert items["猫"].english == "cat"

    def test_sort_order(self, extractor):
        base = [{"chinese": "猫", "english": "cat"}, {"chinese": "你好", "english": "hi"}]

        items = extractor.expand(LESSON, base)

        assert _pairs(items) == [
            ("你", "character"),
            ("好", "character"),
            ("很", "character"),
            ("我", "character"),
            ("谢", "character"),
            ("谢谢", "word"),
            ("你好", None),
            ("猫", None),
        ]

    def test_accepts_models(self, extractor):
        from lesson_core.models import BaseVocabularyItem, LessonContent

        items = extractor.expand(
            LessonContent.model_validate(LESSON),
            [BaseVocabularyItem(chinese="猫", english="cat")],
        )

        assert items[-1].chinese == "猫"

    def test_report_counts(self, extractor):
        base = [{"chinese": "你好", "english": "hi"}, {"chinese": "猫", "english": "cat"}]

        report = extractor.expand_report(LESSON, base)

        assert report.original_count == 2
        assert report.expanded_count == len(report.items) == 8
        assert report.new_items_count == 6
        assert report.characters_added == 5
        assert report.words_added == 1
        # 6 new items + 你好 (hi -> hello); 猫 unchanged
        assert report.enhanced_count == 7
        assert report.status == "complete"

    def test_empty_lesson(self, extractor):
        assert extractor.expand({"chinese": "", "sentences": []}, []) == []
