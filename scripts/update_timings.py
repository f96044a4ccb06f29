#!/usr/bin/env python3
"""
Write sentence and per-character timings into a lesson JSON file.

Input:
  - lesson file:     {"content": {"chinese": "...", "sentences": [{"chinese", "english", ...}]},
                      "audio": {...}, "metadata": {...}, ...}
  - alignment file:  a cached alignment record
                       {"provider": "eleven_labs", "timestamp": "...", "response": {...},
                        "textLength": 42, "audioFile": "lesson.mp3"}
                     or a raw provider response ({"characters": [...], "words": [...], "loss": 0.1})

Behavior:
- Copies the lesson to <lesson>.json.backup before writing.
- Sentences that cannot be located keep their previous timing.
- Sets audio.hasTimings / audio.totalDuration and metadata.timingsUpdated.

Usage:
  python3 scripts/update_timings.py data/lessons/coffee_and_cake.json
  python3 scripts/update_timings.py lesson.json --alignment lesson-alignment.json --strategy first_match
"""

from __future__ import annotations

import argparse
import json
import shutil
import sys
from pathlib import Path
from typing import Any

from lesson_core import config
from lesson_core.alignment import STRATEGIES, AlignmentReconciler, apply_to_lesson, timings_from_payload
from lesson_core.logging_utils import setup_logging


def load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def save_json(path: Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def default_alignment_path(lesson_path: Path) -> Path:
    """lessons/coffee_and_cake.json -> lessons/coffee_and_cake-alignment.json"""
    return lesson_path.with_name(f"{lesson_path.stem}-alignment.json")


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("lesson", type=Path, help="Lesson JSON file to update in place")
    ap.add_argument("--alignment", type=Path, default=None, help="Alignment JSON (default: <lesson>-alignment.json)")
    ap.add_argument("--strategy", choices=STRATEGIES, default=config.MATCH_STRATEGY)
    ap.add_argument("--no-backup", action="store_true", help="Do not write <lesson>.json.backup")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logger = setup_logging(config.LOG_LEVEL, verbose=args.verbose)

    alignment_path = args.alignment or default_alignment_path(args.lesson)
    if not args.lesson.exists():
        raise SystemExit(f"Lesson file not found: {args.lesson}")
    if not alignment_path.exists():
        raise SystemExit(f"Alignment file not found: {alignment_path}")

    lesson = load_json(args.lesson)
    content = lesson.get("content") if isinstance(lesson, dict) else None
    if not isinstance(content, dict) or "sentences" not in content:
        raise SystemExit(f"Invalid lesson file structure: {args.lesson}")

    timings = timings_from_payload(load_json(alignment_path))
    logger.info(f"Found {len(timings)} timings in {alignment_path}")

    result = AlignmentReconciler(args.strategy).reconcile_content(content, timings)
    updated = apply_to_lesson(lesson, result)

    if not args.no_backup:
        backup = args.lesson.with_name(args.lesson.name + ".backup")
        shutil.copyfile(args.lesson, backup)
        logger.info(f"Backup created: {backup}")

    save_json(args.lesson, updated)
    logger.info(f"Updated lesson saved to: {args.lesson}")

    for outcome, sentence in zip(result.outcomes, result.sentences):
        if outcome.status == "timing_assigned" and sentence.timing is not None:
            chars = len(sentence.words or [])
            logger.info(f"  {outcome.index + 1}. {sentence.chinese} - {chars} chars, {sentence.timing.duration:.3f}s")
        else:
            logger.info(f"  {outcome.index + 1}. {sentence.chinese} - skipped ({outcome.reason})")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
