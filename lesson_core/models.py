from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

VocabType = Literal["character", "word"]


class DictionaryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    simplified: str
    traditional: str = ""
    pinyin: List[str] = []
    definitions: Dict[str, str] = {}


class DictionaryStats(BaseModel):
    entry_count: int
    loaded: bool


class VocabularyItem(BaseModel):
    chinese: str
    english: str
    # None = caller-supplied entry; set = discovered by extraction
    type: Optional[VocabType] = None
    pinyin: Optional[str] = None


class BaseVocabularyItem(BaseModel):
    chinese: str
    english: str = ""


class CharacterTiming(BaseModel):
    text: str
    start: float
    end: float


class SentenceTiming(BaseModel):
    start: float
    end: float
    duration: float


class WordTiming(BaseModel):
    word: str
    start: float
    end: float
    duration: float


class TimedSentence(BaseModel):
    # Unknown lesson fields ride along untouched.
    model_config = ConfigDict(extra="allow")

    chinese: str
    english: str = ""
    timing: Optional[SentenceTiming] = None
    words: Optional[List[WordTiming]] = None


class LessonContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    chinese: str
    sentences: List[TimedSentence] = []


class ProviderWord(CharacterTiming):
    loss: Optional[float] = None


class AlignmentResponse(BaseModel):
    characters: Optional[List[CharacterTiming]] = None
    words: Optional[List[ProviderWord]] = None
    loss: Optional[float] = None


class AlignmentCacheRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: str = "eleven_labs"
    timestamp: str
    response: AlignmentResponse
    text_length: int = Field(alias="textLength")
    audio_file: str = Field(alias="audioFile")


# all_cedict.json format: { "你好": {"simplified": "你好", "traditional": "你好",
#                                    "pinyin": ["nǐ hǎo"], "definitions": {"0": "hello"}}, ... }
DictJson = Dict[str, Dict[str, Any]]


# --- request bodies for the HTTP API ---

class ExtractRequest(BaseModel):
    text: str


class ExpandRequest(BaseModel):
    content: LessonContent
    vocabulary: List[BaseVocabularyItem] = []


class ReconcileRequest(BaseModel):
    content: LessonContent
    # cache record, provider response, or bare timing list
    alignment: Any
    strategy: Optional[Literal["cursor", "first_match"]] = None
