"""Exceptions raised by lesson_core."""


class LessonCoreError(Exception):
    """Base exception for lesson_core."""
    pass


class DictionaryLoadError(LessonCoreError):
    """The dictionary table could not be read or parsed."""
    pass


class DictionaryNotFoundError(DictionaryLoadError):
    """The dictionary file does not exist."""
    pass


class NotLoadedError(LessonCoreError):
    """A dictionary lookup ran before load() completed."""
    pass


class SegmentationFailure(LessonCoreError):
    """The word segmenter raised while splitting text."""
    pass


class SentenceMatchFailure(LessonCoreError):
    """A sentence could not be located in the authored or aligned text."""

    def __init__(self, index: int, chinese: str, reason: str):
        self.index = index
        self.chinese = chinese
        self.reason = reason
        super().__init__(f"sentence {index} ({chinese!r}): {reason}")


class EmptyTimingInput(LessonCoreError):
    """No character or word timings were supplied."""
    pass


class AlignmentPayloadError(LessonCoreError):
    """The alignment payload has no recognisable timing array."""
    pass
