"""Test configuration and fixtures.

Provides reusable fixtures for:
- A small in-memory dictionary in the all_cedict.json shape
- Loaded DictionaryStore / VocabularyExtractor instances
- Evenly spaced character timings for alignment tests
"""

import json
from pathlib import Path

import pytest

from lesson_core.dictionary import DictionaryStore
from lesson_core.vocabulary import LongestMatchSegmenter, VocabularyExtractor


def _entry(simplified, pinyin, *definitions, traditional=None):
    return {
        "simplified": simplified,
        "traditional": traditional or simplified,
        "pinyin": list(pinyin),
        "definitions": {str(i): d for i, d in enumerate(definitions)},
    }


SAMPLE_DICT = {
    "你": _entry("你", ["nǐ"], "you"),
    "好": _entry("好", ["hǎo", "hào"], "good;", "well"),
    "我": _entry("我", ["wǒ"], "I"),
    "很": _entry("很", ["hěn"], "very"),
    "你好": _entry("你好", ["nǐ hǎo"], "hello"),
    "谢": _entry("谢", ["xiè"], "to thank"),
    "谢谢": _entry("谢谢", ["xiè xie"], "to thank; thanks ; "),
    "中国": _entry("中国", ["Zhōng guó"], "China"),
    "中": _entry("中", ["zhōng"], "within"),
    "国": _entry("国", ["guó"], "country", traditional="國"),
}


def make_timings(text, step=0.2, start=0.0):
    """One timing per code point of `text`, back to back."""
    out = []
    for i, ch in enumerate(text):
        out.append({"text": ch, "start": start + i * step, "end": start + (i + 1) * step})
    return out


@pytest.fixture
def sample_dict():
    return json.loads(json.dumps(SAMPLE_DICT))


@pytest.fixture
def store(sample_dict):
    s = DictionaryStore.from_mapping(sample_dict)
    s.load()
    return s


@pytest.fixture
def extractor(store):
    return VocabularyExtractor(store, segmenter=LongestMatchSegmenter(store))


@pytest.fixture
def dict_file(tmp_path, sample_dict) -> Path:
    path = tmp_path / "all_cedict.json"
    path.write_text(json.dumps(sample_dict, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def timings_for():
    return make_timings
