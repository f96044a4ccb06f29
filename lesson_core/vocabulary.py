"""Lesson vocabulary: every known character and word in the text, with English.

Extraction is two passes over the text:

1. every CJK character, first occurrence wins;
2. every multi-character segment from the word segmenter.

Anything the dictionary cannot translate is dropped. Results are sorted
characters first, then words, each group by Chinese string (code point order).

`expand()` merges that with a lesson's existing vocabulary. Existing entries
win on conflict and sort after everything discovered.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Union

import jieba
from pydantic import BaseModel

from .cjk import is_cjk_char
from .dictionary import DictionaryStore
from .errors import NotLoadedError, SegmentationFailure
from .logging_utils import get_logger
from .models import BaseVocabularyItem, LessonContent, VocabularyItem

logger = get_logger(__name__)

Segmenter = Callable[[str], Iterable[str]]

TYPE_ORDER = {"character": 0, "word": 1, None: 2}

# Longest headword considered by LongestMatchSegmenter
MAX_WORD_LENGTH = 12


class ExtractionResult(BaseModel):
    items: List[VocabularyItem]
    status: Literal["complete", "characters_only"] = "complete"
    error: Optional[str] = None


class VocabularyReport(BaseModel):
    items: List[VocabularyItem]
    status: Literal["complete", "characters_only"] = "complete"
    error: Optional[str] = None
    original_count: int
    expanded_count: int
    enhanced_count: int
    new_items_count: int
    characters_added: int
    words_added: int


def jieba_segmenter(text: str) -> List[str]:
    return jieba.lcut(text, cut_all=False)


class LongestMatchSegmenter:
    """Forward maximum matching against the dictionary's headwords.

    Unknown characters come out as single-character segments.
    """

    def __init__(self, store: DictionaryStore, max_length: int = MAX_WORD_LENGTH):
        self.store = store
        self.max_length = max_length

    def __call__(self, text: str) -> List[str]:
        window = max(1, min(self.max_length, self.store.max_key_length))
        out: List[str] = []
        i = 0
        n = len(text)
        while i < n:
            step = 1
            for end in range(min(n, i + window), i + 1, -1):
                if text[i:end] in self.store:
                    step = end - i
                    break
            out.append(text[i:i + step])
            i += step
        return out


def _sort_key(item: VocabularyItem):
    return (TYPE_ORDER[item.type], item.chinese)


def _coerce_base(vocabulary) -> List[Union[BaseVocabularyItem, VocabularyItem]]:
    return [
        raw if isinstance(raw, (BaseVocabularyItem, VocabularyItem)) else BaseVocabularyItem.model_validate(raw)
        for raw in vocabulary
    ]


BaseVocabulary = Sequence[Union[BaseVocabularyItem, VocabularyItem, Mapping[str, str]]]
ContentLike = Union[LessonContent, Mapping]


class VocabularyExtractor:
    def __init__(self, store: DictionaryStore, segmenter: Optional[Segmenter] = None):
        self.store = store
        self.segmenter = segmenter or jieba_segmenter

    def _item(self, chinese: str, english: str, kind: str) -> VocabularyItem:
        return VocabularyItem(
            chinese=chinese,
            english=english,
            type=kind,
            pinyin=self.store.pronounce(chinese),
        )

    def _segment(self, text: str) -> List[str]:
        try:
            return list(self.segmenter(text))
        except NotLoadedError:
            raise
        except Exception as e:
            raise SegmentationFailure(f"{type(e).__name__}: {e}") from e

    def extract(self, text: str) -> ExtractionResult:
        items: List[VocabularyItem] = []
        processed = set()

        # 1. characters
        for ch in text:
            if not is_cjk_char(ch) or ch in processed:
                continue
            translation = self.store.translate(ch)
            if translation:
                items.append(self._item(ch, translation, "character"))
                processed.add(ch)

        # 2. words
        status = "complete"
        error = None
        try:
            segments = self._segment(text)
        except SegmentationFailure as e:
            logger.warning(f"Word segmentation failed, keeping characters only: {e}")
            segments = []
            status = "characters_only"
            error = str(e)

        for word in segments:
            if len(word) <= 1 or word in processed:
                continue
            translation = self.store.translate(word)
            if translation:
                items.append(self._item(word, translation, "word"))
                processed.add(word)

        items.sort(key=_sort_key)
        return ExtractionResult(items=items, status=status, error=error)

    def extract_from_text(self, text: str) -> List[VocabularyItem]:
        return self.extract(text).items

    def enhance(self, vocabulary: BaseVocabulary) -> List[VocabularyItem]:
        """Swap in the dictionary translation where there is one. Never drops items."""
        out: List[VocabularyItem] = []
        for item in _coerce_base(vocabulary):
            translation = self.store.translate(item.chinese)
            out.append(VocabularyItem(chinese=item.chinese, english=translation or item.english))
        return out

    def expand_report(self, content: ContentLike, base_vocabulary: BaseVocabulary) -> VocabularyReport:
        lesson = content if isinstance(content, LessonContent) else LessonContent.model_validate(content)

        base = _coerce_base(base_vocabulary)
        enhanced = self.enhance(base)

        all_text = "".join([lesson.chinese] + [s.chinese for s in lesson.sentences])
        extracted = self.extract(all_text)

        combined: Dict[str, VocabularyItem] = {}
        for item in enhanced:
            combined[item.chinese] = item
        for item in extracted.items:
            if item.chinese not in combined:
                combined[item.chinese] = item

        items = sorted(combined.values(), key=_sort_key)

        # first base entry per key, as supplied
        original_english: Dict[str, str] = {}
        for item in base:
            original_english.setdefault(item.chinese, item.english)
        enhanced_count = sum(1 for it in items if original_english.get(it.chinese) != it.english)

        return VocabularyReport(
            items=items,
            status=extracted.status,
            error=extracted.error,
            original_count=len(base),
            expanded_count=len(items),
            enhanced_count=enhanced_count,
            new_items_count=len(items) - len(base),
            characters_added=sum(1 for it in items if it.type == "character"),
            words_added=sum(1 for it in items if it.type == "word"),
        )

    def expand(self, content: ContentLike, base_vocabulary: BaseVocabulary) -> List[VocabularyItem]:
        return self.expand_report(content, base_vocabulary).items
