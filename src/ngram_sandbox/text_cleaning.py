from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

import regex  # type: ignore


_WHITESPACE_RE = re.compile(r"\s+")
_CONTROL_RE = regex.compile(r"\p{Cc}+")
_COMBINING_RE = regex.compile(r"\p{Mn}+")


@dataclass(frozen=True)
class NormalizeConfig:
    unicode_form: str = "NFKC"
    lowercase: bool = True
    strip_accents: bool = False
    remove_control_chars: bool = True
    normalize_whitespace: bool = True


def normalize_text(text: str, config: NormalizeConfig | None = None) -> str:
    """Canonicalize raw corpus or seed text before tokenization.

    Defaults keep diacritics, so "està" and "esta" stay distinct tokens.
    """

    cfg = config or NormalizeConfig()
    if not text:
        return ""

    s = unicodedata.normalize(cfg.unicode_form, text)

    if cfg.lowercase:
        s = s.lower()

    if cfg.strip_accents:
        s = _COMBINING_RE.sub("", unicodedata.normalize("NFKD", s))
        s = unicodedata.normalize("NFC", s)

    if cfg.remove_control_chars:
        s = _CONTROL_RE.sub(" ", s)

    if cfg.normalize_whitespace:
        s = _WHITESPACE_RE.sub(" ", s).strip()

    return s
