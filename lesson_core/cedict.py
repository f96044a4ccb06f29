"""Convert CC-CEDICT into the dictionary JSON used by DictionaryStore.

CC-CEDICT lines look like:

    你好 你好 [ni3 hao3] /hello/hi/

Output (all_cedict.json):

    {"你好": {"simplified": "你好", "traditional": "你好",
              "pinyin": ["nǐ hǎo"], "definitions": {"0": "hello", "1": "hi"}}}

Both simplified and traditional forms are indexed. A headword with several
readings keeps every distinct pinyin (first reading first) and all of its
senses, numbered in file order.

CC-CEDICT is CC BY-SA 3.0; include attribution wherever the generated file ships.
"""

from __future__ import annotations

import re
import zipfile
from pathlib import Path
from typing import Iterable, List

import requests
from pypinyin.contrib.tone_convert import to_tone

from .logging_utils import get_logger
from .models import DictJson

logger = get_logger(__name__)

CEDICT_ZIP_URL = "https://www.mdbg.net/chinese/export/cedict/cedict_1_0_ts_utf-8_mdbg.zip"
CEDICT_TXT_NAME = "cedict_ts.u8"  # contained in the zip (most common name)

RE_CEDICT_LINE = re.compile(
    r"^(?P<trad>\S+)\s+(?P<simp>\S+)\s+\[(?P<pinyin>[^\]]+)\]\s+/(?P<defs>.+)/\s*$"
)
RE_NUMBERED_SYLLABLE = re.compile(r"^[a-zü:v]+[1-5]$", flags=re.IGNORECASE)


def numbered_to_tone_marks(pinyin_raw: str) -> str:
    """
    "ni3 hao3" -> "nǐ hǎo", "lu:4" -> "lǜ", "Bei3 jing1" -> "Běi jīng".
    Tokens that are not numbered syllables (",", "xx", "·") pass through.
    """
    out: List[str] = []
    for syl in pinyin_raw.split():
        if not RE_NUMBERED_SYLLABLE.match(syl):
            out.append(syl)
            continue
        lower = syl.lower().replace("u:", "v")
        marked = to_tone(lower)
        if syl[0].isupper():
            marked = marked[:1].upper() + marked[1:]
        out.append(marked)
    return " ".join(out)


def parse_cedict_lines(lines: Iterable[str]) -> DictJson:
    index: DictJson = {}

    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        m = RE_CEDICT_LINE.match(line)
        if not m:
            continue

        trad = m.group("trad")
        simp = m.group("simp")
        pinyin = numbered_to_tone_marks(m.group("pinyin").strip())
        senses = [d.strip() for d in m.group("defs").split("/") if d.strip()]

        for head in (simp, trad) if trad != simp else (simp,):
            rec = index.setdefault(
                head,
                {"simplified": simp, "traditional": trad, "pinyin": [], "definitions": {}},
            )
            if pinyin and pinyin not in rec["pinyin"]:
                rec["pinyin"].append(pinyin)
            defs = rec["definitions"]
            for sense in senses:
                defs[str(len(defs))] = sense

    return index


def parse_cedict_file(path: Path) -> DictJson:
    with path.open("r", encoding="utf-8", errors="replace") as f:
        return parse_cedict_lines(f)


def download_if_needed(cache_dir: Path, force: bool = False, timeout: int = 60) -> Path:
    cache_dir.mkdir(parents=True, exist_ok=True)
    zip_path = cache_dir / "cedict_1_0_ts_utf-8_mdbg.zip"

    if zip_path.exists() and not force:
        return zip_path

    logger.info(f"Downloading CC-CEDICT from: {CEDICT_ZIP_URL}")
    resp = requests.get(CEDICT_ZIP_URL, timeout=timeout)
    resp.raise_for_status()
    zip_path.write_bytes(resp.content)
    return zip_path


def extract_cedict_txt(zip_path: Path, cache_dir: Path) -> Path:
    out_txt = cache_dir / CEDICT_TXT_NAME
    if out_txt.exists():
        return out_txt

    with zipfile.ZipFile(zip_path, "r") as z:
        # Try expected filename first; otherwise pick the first .u8/.txt entry
        names = z.namelist()
        target = None
        if CEDICT_TXT_NAME in names:
            target = CEDICT_TXT_NAME
        else:
            for n in names:
                if n.endswith(".u8") or n.endswith(".txt"):
                    target = n
                    break
        if target is None:
            raise RuntimeError(f"Could not find CEDICT text inside zip. Files: {names[:20]}")

        with z.open(target) as f_in:
            out_txt.write_bytes(f_in.read())

    return out_txt
