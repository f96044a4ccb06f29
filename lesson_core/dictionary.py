"""Chinese -> {pinyin, definitions} lookup table.

The table is a precomputed JSON file (see scripts/build_cedict_json.py):

    {
      "你好": {
        "simplified": "你好",
        "traditional": "你好",
        "pinyin": ["nǐ hǎo"],
        "definitions": {"0": "hello", "1": "hi"}
      },
      ...
    }

A list of entries keyed by "simplified" / "word" / "headword" is accepted too,
and pinyin/definitions may be stored as a plain string or a list of strings.

The store is loaded once, lazily, and never mutated afterwards. Build one per
process (or per test) and pass it to whatever needs lookups.
"""

from __future__ import annotations

import json
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from . import config
from .errors import DictionaryLoadError, DictionaryNotFoundError, NotLoadedError
from .logging_utils import get_logger
from .models import DictionaryEntry, DictionaryStats

logger = get_logger(__name__)

RE_TRAILING_SEMICOLONS = re.compile(r"[;\s]+$")


def _as_str_list(v) -> List[str]:
    """Normalize a field that may be a str or list[str] into list[str]."""
    if v is None:
        return []
    if isinstance(v, str):
        s = v.strip()
        return [s] if s else []
    if isinstance(v, list):
        out: List[str] = []
        for x in v:
            if x is None:
                continue
            s = str(x).strip()
            if s:
                out.append(s)
        return out
    return [str(v)]


def _as_definition_map(v) -> Dict[str, str]:
    """Definitions as an ordered {index: text} mapping.

    Numeric indexes are ordered numerically ("2" before "10"); anything else
    keeps its stored order after the numeric ones.
    """
    if isinstance(v, dict):
        items = [(str(k), "" if d is None else str(d)) for k, d in v.items()]
        numeric = sorted((kv for kv in items if kv[0].isdigit()), key=lambda kv: int(kv[0]))
        other = [kv for kv in items if not kv[0].isdigit()]
        return dict(numeric + other)
    return {str(i): d for i, d in enumerate(_as_str_list(v))}


def _to_entry(headword: str, raw: Any) -> Optional[DictionaryEntry]:
    if not isinstance(raw, dict):
        return None
    return DictionaryEntry(
        simplified=str(raw.get("simplified") or headword),
        traditional=str(raw.get("traditional") or ""),
        pinyin=_as_str_list(raw.get("pinyin")),
        definitions=_as_definition_map(raw.get("definitions")),
    )


def _index_entries(raw: Any) -> Dict[str, DictionaryEntry]:
    if isinstance(raw, dict):
        pairs = raw.items()
    elif isinstance(raw, list):
        pairs = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            head = item.get("simplified") or item.get("word") or item.get("headword")
            if head and isinstance(head, str):
                pairs.append((head, item))
    else:
        raise DictionaryLoadError(
            f"Expected a JSON object or list of entries, got {type(raw).__name__}"
        )

    out: Dict[str, DictionaryEntry] = {}
    for head, item in pairs:
        entry = _to_entry(head, item)
        if entry is not None:
            out[head] = entry
    return out


class DictionaryStore:
    """Read-only Chinese dictionary with translation and pinyin lookups."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path is not None else config.CEDICT_PATH
        self._entries: Optional[Dict[str, DictionaryEntry]] = None
        self._raw: Optional[Mapping[str, Any]] = None
        self._lock = threading.Lock()
        self._max_key_length = 0

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "DictionaryStore":
        """Build a store from an in-memory table (same shape as the JSON file).

        The store still needs load(); nothing is read from disk.
        """
        store = cls(path="<memory>")
        store._raw = mapping
        return store

    @property
    def loaded(self) -> bool:
        return self._entries is not None

    def load(self) -> None:
        if self._entries is not None:
            return
        with self._lock:
            if self._entries is not None:
                return
            raw = self._raw if self._raw is not None else self._read_file()
            entries = _index_entries(raw)
            self._max_key_length = max((len(k) for k in entries), default=0)
            self._entries = entries
        logger.info(f"Dictionary loaded with {len(entries)} entries from {self.path}")

    def _read_file(self) -> Any:
        if not self.path.exists():
            raise DictionaryNotFoundError(f"Dictionary file not found: {self.path}")
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DictionaryLoadError(f"Failed to load dictionary {self.path}: {e}") from e

    def _require_entries(self) -> Dict[str, DictionaryEntry]:
        if self._entries is None:
            raise NotLoadedError("Dictionary not loaded. Call load() first.")
        return self._entries

    def lookup(self, key: str) -> Optional[DictionaryEntry]:
        return self._require_entries().get(key)

    def translate(self, key: str) -> Optional[str]:
        """First definition for `key`, trailing semicolons and whitespace removed."""
        entry = self.lookup(key)
        if entry is None or not entry.definitions:
            return None
        first = next(iter(entry.definitions.values()))
        cleaned = RE_TRAILING_SEMICOLONS.sub("", first).strip()
        return cleaned or None

    def pronounce(self, key: str) -> Optional[str]:
        entry = self.lookup(key)
        if entry is None or not entry.pinyin:
            return None
        return entry.pinyin[0]

    def __contains__(self, key: object) -> bool:
        return key in self._require_entries()

    @property
    def max_key_length(self) -> int:
        self._require_entries()
        return self._max_key_length

    def stats(self) -> DictionaryStats:
        return DictionaryStats(
            entry_count=len(self._entries) if self._entries is not None else 0,
            loaded=self._entries is not None,
        )
