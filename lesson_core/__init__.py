"""Sentence timing and vocabulary expansion for Chinese reading lessons."""

from .alignment import AlignmentReconciler, apply_to_lesson, timings_from_payload
from .dictionary import DictionaryStore
from .vocabulary import VocabularyExtractor

__all__ = [
    "AlignmentReconciler",
    "DictionaryStore",
    "VocabularyExtractor",
    "apply_to_lesson",
    "timings_from_payload",
]
