#!/usr/bin/env python3
"""
Expand the vocabulary of lesson JSON files with every character and word in the text.

Each lesson's "vocabulary" list is replaced by:
  - its existing entries, with English swapped for the dictionary's first definition where known,
  - plus every character/word from content.chinese and the sentences that the dictionary can translate.

Usage:
  python3 scripts/update_translations.py data/lessons/*.json
  python3 scripts/update_translations.py lesson.json --dict data/all_cedict.json --dry-run
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from lesson_core import config
from lesson_core.dictionary import DictionaryStore
from lesson_core.logging_utils import setup_logging
from lesson_core.vocabulary import VocabularyExtractor


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("lessons", type=Path, nargs="+", help="Lesson JSON files")
    ap.add_argument("--dict", dest="dict_path", type=Path, default=config.CEDICT_PATH, help="all_cedict.json path")
    ap.add_argument("--dry-run", action="store_true", help="Report counts without writing")
    args = ap.parse_args()

    logger = setup_logging(config.LOG_LEVEL)

    store = DictionaryStore(args.dict_path)
    store.load()
    extractor = VocabularyExtractor(store)

    failed = 0
    for path in args.lessons:
        try:
            lesson = json.loads(path.read_text(encoding="utf-8"))
            report = extractor.expand_report(lesson["content"], lesson.get("vocabulary") or [])
        except (OSError, KeyError, ValueError) as e:
            logger.error(f"Failed to update translations for {path}: {e}")
            failed += 1
            continue

        if report.status != "complete":
            logger.warning(f"{path}: word segmentation failed, characters only ({report.error})")

        logger.info(
            f"{path}: {report.original_count} -> {report.expanded_count} vocabulary items "
            f"({report.enhanced_count} enhanced, {report.new_items_count} new, "
            f"{report.characters_added} characters, {report.words_added} words)"
        )
        if args.dry_run:
            continue

        lesson["vocabulary"] = [it.model_dump(exclude_none=True) for it in report.items]
        path.write_text(json.dumps(lesson, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")

    if failed:
        raise SystemExit(f"{failed} lesson(s) failed")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
