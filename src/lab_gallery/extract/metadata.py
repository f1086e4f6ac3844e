# src/lab_gallery/extract/metadata.py
from __future__ import annotations

import re
from dataclasses import dataclass

GENERIC_DESCRIPTION = "standalone HTML artwork"

# tokens the gallery template puts into <title>
TITLE_DECORATIONS = ("🎨", "AI 創意作品", "-")

H1_EMOJI = (
    "🎨", "✨", "🚀", "💎", "🔥", "🌟", "⚡", "🎯", "🌈", "🔮", "🌿", "🏗️", "🔤",
    "🌌", "💥", "🌋", "🧬", "🌊", "🥃", "🎭", "📝", "🎖️", "💫", "🏆", "🎪",
)

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE)
_H1_RE = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE)
_META_DESC_RE = re.compile(
    r"""<meta[^>]*name=["']description["'][^>]*content=["']([^"']*?)["']""",
    re.IGNORECASE,
)
# <p> or <p ...>, not <pre>/<path>/<param>
_P_RE = re.compile(r"<p(?:\s[^>]*)?>(.*?)</p>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")

_DESC_MIN_EXCLUSIVE = 10
_DESC_MAX_EXCLUSIVE = 200


@dataclass(frozen=True)
class PieceMetadata:
    title: str
    description: str


def strip_tags(fragment: str) -> str:
    return _TAG_RE.sub("", fragment or "")


def _remove_tokens(text: str, tokens: tuple[str, ...]) -> str:
    for tok in tokens:
        text = text.replace(tok, "")
    return text


def title_from_filename(filename: str) -> str:
    """
    "neon_dreams.html" -> "Neon Dreams"

    Only the first character of each space-separated word is upper-cased;
    the rest of the word is kept as-is.
    """
    stem = filename[: -len(".html")] if filename.endswith(".html") else filename
    words = stem.replace("_", " ").split(" ")
    return " ".join(w[:1].upper() + w[1:] for w in words)


def extract_title(html: str, filename: str) -> str:
    """<title> -> first <h1> -> filename."""
    m = _TITLE_RE.search(html)
    if m:
        title = _remove_tokens(m.group(1), TITLE_DECORATIONS).strip()
        if title:
            return title

    m = _H1_RE.search(html)
    if m:
        title = _remove_tokens(strip_tags(m.group(1)), H1_EMOJI).strip()
        if title:
            return title

    return title_from_filename(filename)


def extract_description(html: str, title: str) -> str:
    """meta description -> first <p> (10 < len < 200) -> synthesized."""
    m = _META_DESC_RE.search(html)
    if m and m.group(1).strip():
        return m.group(1)

    m = _P_RE.search(html)
    if m:
        text = strip_tags(m.group(1)).strip()
        if _DESC_MIN_EXCLUSIVE < len(text) < _DESC_MAX_EXCLUSIVE:
            return text

    return f"{title} - {GENERIC_DESCRIPTION}"


def extract_metadata(html: str, filename: str) -> PieceMetadata:
    """
    Best-effort metadata for one HTML piece. First match wins at every step;
    malformed markup falls through to the filename-derived values.
    """
    html = html or ""
    title = extract_title(html, filename)
    return PieceMetadata(title=title, description=extract_description(html, title))
