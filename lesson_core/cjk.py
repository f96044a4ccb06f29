from __future__ import annotations

# CJK Unified Ideographs and Extensions A-E (inclusive code point ranges)
CJK_RANGES = (
    (0x4E00, 0x9FFF),
    (0x3400, 0x4DBF),
    (0x20000, 0x2A6DF),
    (0x2A700, 0x2B73F),
    (0x2B740, 0x2B81F),
    (0x2B820, 0x2CEAF),
)


def is_cjk_char(ch: str) -> bool:
    """True if the single code point `ch` is a Chinese ideograph."""
    if len(ch) != 1:
        return False
    code = ord(ch)
    return any(lo <= code <= hi for lo, hi in CJK_RANGES)


def is_matchable(ch: str) -> bool:
    """Characters that count when lining up authored text with a transcript.

    Punctuation and whitespace are dropped; ideographs, letters and digits stay.
    """
    return ch.isalnum()


def normalize_for_match(text: str) -> str:
    return "".join(ch for ch in text if is_matchable(ch))
