#!/usr/bin/env python3
"""
Build all_cedict.json (the DictionaryStore table) from CC-CEDICT.

- downloads the latest CC-CEDICT zip from MDBG once (cached),
- parses it locally,
- writes {headword: {simplified, traditional, pinyin[], definitions{index: text}}}.

Usage:
  python3 scripts/build_cedict_json.py --out data/all_cedict.json
  python3 scripts/build_cedict_json.py --cedict-file cedict_ts.u8

CC-CEDICT is under CC BY-SA 3.0 (make sure you attribute in your app/repo).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from lesson_core import config
from lesson_core.cedict import download_if_needed, extract_cedict_txt, parse_cedict_file
from lesson_core.logging_utils import setup_logging


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", type=Path, default=config.CEDICT_PATH, help="Output JSON path")
    ap.add_argument("--cedict-file", type=Path, default=None, help="Use a local cedict_ts.u8 instead of downloading")
    ap.add_argument("--cache-dir", type=Path, default=Path(".cache/cedict"), help="Cache directory for CC-CEDICT download")
    ap.add_argument("--force-download", action="store_true", help="Redownload CC-CEDICT even if cached")
    args = ap.parse_args()

    logger = setup_logging(config.LOG_LEVEL)

    if args.cedict_file:
        cedict_txt = args.cedict_file
    else:
        zip_path = download_if_needed(args.cache_dir, force=args.force_download)
        cedict_txt = extract_cedict_txt(zip_path, args.cache_dir)
    logger.info(f"Using CC-CEDICT file: {cedict_txt}")

    table = parse_cedict_file(cedict_txt)

    args.out.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = args.out.with_suffix(args.out.suffix + ".tmp")
    tmp_path.write_text(json.dumps(table, ensure_ascii=False) + "\n", encoding="utf-8")
    tmp_path.replace(args.out)

    logger.info(f"Wrote: {args.out}  (headwords={len(table)})")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
