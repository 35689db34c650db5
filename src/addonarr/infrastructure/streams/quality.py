"""Regex taxonomy for quality labels and display hints in stream titles."""

from __future__ import annotations

import re

# --- Resolution (first match wins) ---

_RESOLUTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(4k|2160p)\b", re.I), "4K"),
    (re.compile(r"\b(1080p)\b", re.I), "1080p"),
    (re.compile(r"\b(720p)\b", re.I), "720p"),
    (re.compile(r"\b(480p|sd)\b", re.I), "480p"),
)

# --- Dynamic range and audio (all matches collected) ---

_FEATURES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(dv|dolby\s*vision)\b", re.I), "DV"),
    (re.compile(r"\bhdr\b", re.I), "HDR"),
    (re.compile(r"\bhdr10\+?\b", re.I), "HDR10+"),
    (re.compile(r"\b(dd\+?|dolby\s*digital)\b", re.I), "DD+"),
    (re.compile(r"\b(dts|dts-hd)\b", re.I), "DTS-HD"),
    (re.compile(r"\b(atmos)\b", re.I), "ATMOS"),
)

QUALITY_SEPARATOR = " | "

# --- Display hints ---

_SIZE_RE = re.compile(r"\b(\d+(?:\.\d+)?\s*(?:GB|MB))\b", re.I)
_SEEDS_RE = re.compile(r"👤\s*(\d+)|\b(\d+)x\b", re.I)
_SOURCE_RE = re.compile(r"\b(ThePirateBay|RARBG|1337x|YTS)\b", re.I)
_SOURCE_MARKER_RE = re.compile(r"⚙️?\s*([\w.\-]+)")


def detect_quality(text: str | None) -> str | None:
    """Return the quality label for *text* or None if nothing matches.

    Labels are ordered resolution first, then dynamic range, then audio,
    joined with ``" | "`` (e.g. ``"4K | HDR | ATMOS"``).
    """
    if not text:
        return None

    labels: list[str] = []
    for pattern, label in _RESOLUTIONS:
        if pattern.search(text):
            labels.append(label)
            break
    labels.extend(label for pattern, label in _FEATURES if pattern.search(text))

    return QUALITY_SEPARATOR.join(labels) if labels else None


def size_hint(*texts: str | None) -> str | None:
    """First ``N.N GB|MB`` figure found in *texts*."""
    for text in texts:
        if not text:
            continue
        m = _SIZE_RE.search(text)
        if m:
            return m.group(1)
    return None


def seed_hint(text: str | None) -> int | None:
    if not text:
        return None
    m = _SEEDS_RE.search(text)
    if m is None:
        return None
    return int(m.group(1) or m.group(2))


def source_hint(text: str | None) -> str | None:
    """Known tracker site name, or the value after a ``⚙️`` marker."""
    if not text:
        return None
    m = _SOURCE_RE.search(text) or _SOURCE_MARKER_RE.search(text)
    return m.group(1) if m else None
