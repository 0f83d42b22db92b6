"""File format parsers and language code helpers."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union

# ISO 639-1 codes plus a few common three-letter ones without a two-letter code
KNOWN_LANGUAGES = frozenset("""
aa ab ae af ak am an ar as av ay az ba be bg bh bi bm bn bo br bs ca ce ch co
cr cs cu cv cy da de dv dz ee el en eo es et eu fa ff fi fj fo fr fy ga gd gl
gn gu gv ha he hi ho hr ht hu hy hz ia id ie ig ii ik io is it iu ja jv ka kg
ki kj kk kl km kn ko kr ks ku kv kw ky la lb lg li ln lo lt lu lv mg mh mi mk
ml mn mr ms mt my na nb nd ne ng nl nn no nr nv ny oc oj om or os pa pi pl ps
pt qu rm rn ro ru rw sa sc sd se sg si sk sl sm sn so sq sr ss st su sv sw ta
te tg th ti tk tl tn to tr ts tt tw ty ug uk ur uz ve vi vo wa wo xh yi yo za
zh zu
ast ckb fil haw yue
""".split())

_TAG_RE = re.compile(
    r"^(?P<lang>[A-Za-z]{2,3})"
    r"(?:[-_](?P<script>[A-Za-z]{4}))?"
    r"(?:[-_](?P<region>[A-Za-z]{2}|\d{3}))?$"
)


def normalize_language(code: str) -> str:
    """Normalize a language tag: ``pt_br`` -> ``pt-BR``, ``zh_hans`` -> ``zh-Hans``."""
    m = _TAG_RE.match((code or "").strip())
    if not m:
        raise ValueError(f"Not a language code: {code!r}")
    parts = [m.group("lang").lower()]
    if m.group("script"):
        parts.append(m.group("script").title())
    if m.group("region"):
        parts.append(m.group("region").upper())
    return "-".join(parts)


def _as_known_language(candidate: str) -> Optional[str]:
    try:
        code = normalize_language(candidate)
    except ValueError:
        return None
    return code if code.split("-", 1)[0] in KNOWN_LANGUAGES else None


def detect_language(path: Union[str, Path]) -> Optional[str]:
    """Guess the language of a localization file from its name.

    Recognizes ``fr.json``, ``pt_BR.json``, ``messages.fr.json``,
    ``messages_fr.json`` and ``locales/fr/common.json``. Returns None when
    nothing looks like a language code.
    """
    path = Path(path)
    tokens = [t for t in re.split(r"[._-]", path.stem) if t]
    # Longest trailing run first so that "pt_BR" wins over "BR"
    for n in (3, 2, 1):
        if len(tokens) < n:
            continue
        code = _as_known_language("-".join(tokens[-n:]))
        if code:
            return code
    return _as_known_language(path.parent.name) if path.parent.name else None


def languages_match(expected: str, detected: Optional[str]) -> bool:
    """True if *detected* is compatible with *expected*.

    A bare language matches any regional variant of itself (``fr`` vs
    ``fr-CA``), two different regions do not.
    """
    if not detected:
        return False
    a = normalize_language(expected)
    b = normalize_language(detected)
    if a == b:
        return True
    if "-" in a and "-" in b:
        return False
    return a.split("-", 1)[0] == b.split("-", 1)[0]
