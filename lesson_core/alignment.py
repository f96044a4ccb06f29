"""Map forced-alignment timings back onto a lesson's sentences.

The provider returns a flat, position-ordered list of timed tokens (usually one
per character). Their concatenation is the provider's transcript, the
"aligned text", which can differ from the authored lesson text: punctuation is
usually missing and the odd character may be dropped.

The same character shows up many times in a lesson, so timings are matched by
position, never by content: each sentence is located as a substring of the
aligned text and the timings under that span are sliced out.

Matching compares letters, digits and ideographs only; punctuation and
whitespace on either side are ignored.

Two search strategies:

  cursor       each search starts where the previous matched sentence ended,
               so repeated sentences land on successive occurrences (default)
  first_match  each search starts at the beginning of the aligned text

A sentence that cannot be found keeps whatever timing it already had; the rest
of the lesson is still processed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ValidationError

from . import config
from .cjk import is_matchable, normalize_for_match
from .errors import AlignmentPayloadError, EmptyTimingInput, SentenceMatchFailure
from .logging_utils import get_logger
from .models import (
    AlignmentCacheRecord,
    AlignmentResponse,
    CharacterTiming,
    LessonContent,
    SentenceTiming,
    TimedSentence,
    WordTiming,
)

logger = get_logger(__name__)

STRATEGIES = ("cursor", "first_match")

TimingLike = Union[CharacterTiming, Mapping[str, Any]]
SentenceLike = Union[TimedSentence, Mapping[str, Any]]


# -----------------------------
# Payload parsing
# -----------------------------

def _from_char_arrays(payload: Mapping[str, Any]) -> List[CharacterTiming]:
    """{"chars": [...], "char_start_times_ms": [...], "char_end_times_ms": [...]}"""
    chars = payload.get("chars") or []
    starts = payload.get("char_start_times_ms") or []
    ends = payload.get("char_end_times_ms") or []
    if not (len(chars) == len(starts) == len(ends)):
        raise AlignmentPayloadError(
            f"Character arrays differ in length: {len(chars)} chars, "
            f"{len(starts)} starts, {len(ends)} ends"
        )
    return [
        CharacterTiming(text=str(c), start=s / 1000.0, end=e / 1000.0)
        for c, s, e in zip(chars, starts, ends)
    ]


def _coerce_timing(raw: Any) -> CharacterTiming:
    if isinstance(raw, CharacterTiming):
        return raw
    if isinstance(raw, Mapping) and "text" not in raw and "word" in raw:
        raw = {**raw, "text": raw["word"]}
    return CharacterTiming.model_validate(raw)


def timings_from_payload(payload: Any) -> List[CharacterTiming]:
    """
    Pull the position-ordered timing list out of whatever was stored.

    Accepts a cache record ({"provider", "response", ...}), a provider response
    ({"characters": [...], "words": [...]}; characters preferred), an
    {"alignment": ...} wrapper, the millisecond array form, or a bare list.
    """
    if isinstance(payload, AlignmentCacheRecord):
        payload = payload.response
    if isinstance(payload, AlignmentResponse):
        payload = payload.model_dump(exclude_none=True)

    if isinstance(payload, list):
        raw = payload
    elif isinstance(payload, Mapping):
        if isinstance(payload.get("response"), Mapping):
            return timings_from_payload(payload["response"])
        if isinstance(payload.get("alignment"), Mapping):
            return timings_from_payload(payload["alignment"])
        if payload.get("characters"):
            raw = payload["characters"]
        elif payload.get("words"):
            raw = payload["words"]
        elif "chars" in payload:
            raw = _from_char_arrays(payload)
        elif "characters" in payload or "words" in payload:
            raw = []
        else:
            raise AlignmentPayloadError(
                f"Unable to find characters or words in alignment payload (keys: {sorted(payload)})"
            )
    else:
        raise AlignmentPayloadError(f"Unsupported alignment payload type: {type(payload).__name__}")

    try:
        timings = [_coerce_timing(t) for t in raw]
    except ValidationError as e:
        raise AlignmentPayloadError(f"Invalid timing entry: {e}") from e

    if not timings:
        raise EmptyTimingInput("Alignment payload contains no character or word timings")
    return timings


# -----------------------------
# Reconciliation
# -----------------------------

class SentenceOutcome(BaseModel):
    index: int
    status: Literal["timing_assigned", "skipped_no_match"]
    reason: Optional[str] = None
    # inclusive timing indexes of the matched span
    first_timing: Optional[int] = None
    last_timing: Optional[int] = None


class ReconcileResult(BaseModel):
    sentences: List[TimedSentence]
    outcomes: List[SentenceOutcome]
    has_timings: bool = True
    total_duration: Optional[float] = None

    @property
    def matched_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "timing_assigned")

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"sentences"}, exclude_none=True)
        data["sentences"] = [dump_sentence(s) for s in self.sentences]
        return data


class AlignedText:
    """The provider transcript with a map from each matchable character to its timing."""

    def __init__(self, timings: Sequence[CharacterTiming]):
        self.timings = list(timings)
        self.text = "".join(t.text for t in self.timings)

        chars: List[str] = []
        owners: List[int] = []
        for i, t in enumerate(self.timings):
            for ch in t.text:
                if is_matchable(ch):
                    chars.append(ch)
                    owners.append(i)
        self.normalized = "".join(chars)
        self.owners = owners

    def find(self, needle: str, start: int = 0) -> int:
        return self.normalized.find(needle, start)

    def timing_indexes(self, pos: int, length: int) -> List[int]:
        """Timing indexes under normalized span [pos, pos+length), in order, no repeats."""
        out: List[int] = []
        for owner in self.owners[pos:pos + length]:
            if not out or out[-1] != owner:
                out.append(owner)
        return out


def dump_sentence(sentence: TimedSentence) -> Dict[str, Any]:
    """Sentence as a plain dict. Caller fields keep their nulls; unset timing/words are left out."""
    return sentence.model_dump(exclude={k for k in ("timing", "words") if getattr(sentence, k) is None})


def _coerce_sentence(raw: SentenceLike) -> TimedSentence:
    if isinstance(raw, TimedSentence):
        return raw
    return TimedSentence.model_validate(raw)


class AlignmentReconciler:
    def __init__(self, strategy: Optional[str] = None):
        strategy = (strategy or config.MATCH_STRATEGY).strip().lower()
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown match strategy {strategy!r}; expected one of {STRATEGIES}")
        self.strategy = strategy

    def _locate(
        self,
        index: int,
        sentence: TimedSentence,
        authored: str,
        aligned: AlignedText,
        cursor: int,
    ) -> Tuple[int, int]:
        needle = normalize_for_match(sentence.chinese)
        if not needle:
            raise SentenceMatchFailure(index, sentence.chinese, "no matchable characters")

        if authored.find(needle) == -1:
            raise SentenceMatchFailure(index, sentence.chinese, "not found in authored text")

        start = cursor if self.strategy == "cursor" else 0
        pos = aligned.find(needle, start)
        if pos == -1:
            raise SentenceMatchFailure(index, sentence.chinese, "not found in aligned text")
        return pos, len(needle)

    def reconcile(
        self,
        original_text: str,
        sentences: Sequence[SentenceLike],
        timings: Sequence[TimingLike],
    ) -> ReconcileResult:
        if not timings:
            raise EmptyTimingInput("No character or word timings supplied")

        try:
            aligned = AlignedText([_coerce_timing(t) for t in timings])
        except ValidationError as e:
            raise AlignmentPayloadError(f"Invalid timing entry: {e}") from e
        authored = normalize_for_match(original_text or "")

        logger.info(
            f"Reconciling {len(sentences)} sentences against {len(aligned.timings)} timings "
            f"({self.strategy})"
        )

        out: List[TimedSentence] = []
        outcomes: List[SentenceOutcome] = []
        cursor = 0

        for idx, raw in enumerate(sentences):
            sentence = _coerce_sentence(raw)
            try:
                pos, length = self._locate(idx, sentence, authored, aligned, cursor)
            except SentenceMatchFailure as e:
                logger.warning(f"Leaving timing unchanged for {e}")
                out.append(sentence.model_copy(deep=True))
                outcomes.append(SentenceOutcome(index=idx, status="skipped_no_match", reason=e.reason))
                continue

            cursor = pos + length
            indexes = aligned.timing_indexes(pos, length)
            first = aligned.timings[indexes[0]]
            last = aligned.timings[indexes[-1]]

            timing = SentenceTiming(
                start=first.start,
                end=last.end,
                duration=max(0.0, last.end - first.start),
            )
            words = [
                WordTiming(
                    word=t.text,
                    start=t.start,
                    end=t.end,
                    duration=max(0.0, t.end - t.start),
                )
                for t in (aligned.timings[i] for i in indexes)
            ]

            out.append(sentence.model_copy(update={"timing": timing, "words": words}))
            outcomes.append(
                SentenceOutcome(
                    index=idx,
                    status="timing_assigned",
                    first_timing=indexes[0],
                    last_timing=indexes[-1],
                )
            )

        ends = [s.timing.end for s in out if s.timing is not None]
        result = ReconcileResult(
            sentences=out,
            outcomes=outcomes,
            total_duration=max(ends) if ends else None,
        )
        logger.info(f"Timed {result.matched_count}/{len(out)} sentences")
        return result

    def reconcile_content(
        self,
        content: Union[LessonContent, Mapping[str, Any]],
        timings: Sequence[TimingLike],
    ) -> ReconcileResult:
        lesson = content if isinstance(content, LessonContent) else LessonContent.model_validate(content)
        return self.reconcile(lesson.chinese, lesson.sentences, timings)


def apply_to_lesson(
    lesson: Mapping[str, Any],
    result: ReconcileResult,
    source: str = config.ALIGNMENT_PROVIDER,
    timestamp: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Return a copy of a lesson document ({"content", "audio", "metadata", ...})
    with reconciled sentences and the timing flags set.
    """
    now = timestamp or datetime.now(timezone.utc).isoformat()

    content = dict(lesson.get("content") or {})
    content["sentences"] = [dump_sentence(s) for s in result.sentences]

    audio = {**(lesson.get("audio") or {}), "hasTimings": result.has_timings}
    if result.total_duration is not None:
        audio["totalDuration"] = result.total_duration

    metadata = {
        **(lesson.get("metadata") or {}),
        "timingsUpdated": True,
        "timingsSource": source,
        "dateModified": now,
    }

    return {**lesson, "content": content, "audio": audio, "metadata": metadata}
