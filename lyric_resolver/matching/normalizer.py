"""
Query normalization for free-text track and artist names

This module turns the raw (track name, artist name) pair a user typed into the
comparable tokens the matching engine scores against. Streaming services and
media players report titles with a lot of decoration: live and remix
annotations in parentheses, "- Remastered 2011" suffixes, soundtrack credits,
Chinese book-title brackets and run-on dash separators. None of that exists in
the catalog entry we are looking for, so it has to go before searching.

Key Functions:
- normalize_track_name: ordered noise-pattern removal with a non-empty fallback
- normalize_artists: split multi-artist strings on comma, ampersand and "和"
- extract_core_name: reduce a title to its semantic core (CJK run for CJK titles)
- NormalizedQuery: immutable bundle of the above, built once per lookup

Pattern Ordering:
The noise patterns in TRACK_NOISE_PATTERNS are NOT mutually exclusive. Each one
runs exactly once, in list order, against the output of the previous one, so
reordering the list changes results. For example " - .*version.*$" must run
before the parenthesis pattern so that "Song - Japanese Version (Live)" loses
the whole suffix rather than only "(Live)".

All functions here are pure and safe to call concurrently.
"""

import re
from dataclasses import dataclass
from typing import List, Tuple


# Noise patterns applied in order by normalize_track_name
TRACK_NOISE_PATTERNS: List[re.Pattern] = [
    re.compile(r" - genshin impact's.*$", re.IGNORECASE),
    re.compile(r" - .*anniversary.*$", re.IGNORECASE),
    re.compile(r" - .*theme song.*$", re.IGNORECASE),
    re.compile(r" - .*japanese.*$", re.IGNORECASE),
    re.compile(r" - .*version.*$", re.IGNORECASE),
    re.compile(r" - 《.*?》.*$"),
    re.compile(r" - .*动画.*$"),
    re.compile(r" - .*剧集.*$"),
    re.compile(r" - .*主题曲.*$"),
    re.compile(r"\(.*?\)"),
    re.compile(r" - from the.*$", re.IGNORECASE),
    re.compile(r" - official.*$", re.IGNORECASE),
    re.compile(r" \(from.*\)", re.IGNORECASE),
    re.compile(r" - remastered.*$", re.IGNORECASE),
    re.compile(r" - .*mix.*$", re.IGNORECASE),
    re.compile(r" - .*edit.*$", re.IGNORECASE),
    re.compile(r"《(.*?)》"),
    re.compile(r"---"),
    re.compile(r"———"),
    re.compile(r" - $"),
]

# Separators used by the fallback "text before the first separator" rules
_FALLBACK_SEPARATOR = re.compile(r"[-\s–—]")
_CORE_FALLBACK_SEPARATOR = re.compile(r"[-\s–—|]")

# Multi-artist separators: comma, ampersand, Chinese conjunction "和"
ARTIST_SEPARATOR = re.compile(r"\s*,\s*|\s*&\s*|\s*和\s*")

# Titles made only of these characters are treated as Latin-script titles
_ASCII_TITLE = re.compile(r"^[a-zA-Z\s.,!?'\"-]+$")

# Hiragana, katakana and CJK unified ideographs
CJK_RUN = re.compile(r"[぀-ゟ゠-ヿ一-鿿]+")
_CJK_CHAR = re.compile(r"[぀-ゟ゠-ヿ一-鿿]")


def contains_cjk(text: str) -> bool:
    """Check whether text contains at least one CJK codepoint"""
    return bool(text) and _CJK_CHAR.search(text) is not None


def leading_cjk_run(text: str) -> str:
    """
    Return the first contiguous CJK run in text

    Falls back to the first whitespace-separated word when the text has no
    CJK characters at all.
    """
    match = CJK_RUN.search(text or "")
    if match:
        return match.group(0)
    parts = (text or "").split()
    return parts[0] if parts else ""


def longest_cjk_run(text: str) -> str:
    """Return the longest contiguous CJK run (first one wins on ties)"""
    longest = ""
    for match in CJK_RUN.finditer(text or ""):
        if len(match.group(0)) > len(longest):
            longest = match.group(0)
    return longest


def _text_before_separator(text: str, separator: re.Pattern) -> str:
    """Substring of text before the first separator match, trimmed"""
    return separator.split(text, maxsplit=1)[0].strip()


def normalize_track_name(raw: str) -> str:
    """
    Strip annotation noise from a track title

    Applies every pattern in TRACK_NOISE_PATTERNS once, in order, against the
    result of the previous pattern. Afterwards whitespace runs are collapsed and
    trailing dashes/whitespace are removed.

    Args:
        raw: Track title as supplied by the caller

    Returns:
        Cleaned title. Never empty when raw is non-empty: if cleaning removes
        everything, the text before the first dash or whitespace of the
        original is returned instead, and failing that the trimmed original.

    Examples:
        "無條件 (Live)"                    -> "無條件"
        "Yesterday - Remastered 2009"      -> "Yesterday"
        "Song - Japanese Version"          -> "Song"
    """
    if not raw:
        return ""

    processed = raw
    for pattern in TRACK_NOISE_PATTERNS:
        processed = pattern.sub("", processed)

    processed = re.sub(r"\s+", " ", processed)
    processed = re.sub(r"[-\s]+$", "", processed).strip()
    if processed:
        return processed

    # Everything was noise, keep the first token of the original
    fallback = _text_before_separator(raw, _FALLBACK_SEPARATOR)
    return fallback or raw.strip() or raw


def normalize_artists(raw: str) -> Tuple[str, ...]:
    """
    Split a multi-artist string into individual artist names

    Splits on comma, ampersand and the Chinese conjunction "和" (each with
    optional surrounding whitespace), trims every piece, drops empty pieces and
    removes case-insensitive duplicates while keeping the first-seen casing.

    Args:
        raw: Artist string such as "Jay Chou, 周杰伦 & Lara"

    Returns:
        Ordered tuple of unique artist names; at least one element when raw
        is non-empty.
    """
    if not raw:
        return ()

    artists: List[str] = []
    seen = set()
    for piece in ARTIST_SEPARATOR.split(raw):
        name = piece.strip()
        if not name:
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        artists.append(name)

    if not artists:
        # Input was only separators (e.g. "&"), keep it verbatim
        artists.append(raw.strip() or raw)

    return tuple(artists)


def extract_core_name(text: str) -> str:
    """
    Reduce a title to the part that carries its meaning

    Latin-only titles are normalized and the shorter of raw/normalized is kept.
    Titles containing CJK characters are reduced to their longest contiguous
    CJK run, because trailing Latin annotations on CJK titles are noise.
    Anything else goes through the fallback chain: normalized title (if it is
    shorter), text before the first separator, raw text.

    Args:
        text: Track title

    Returns:
        Core title, never empty when text is non-empty
    """
    if not text:
        return ""

    if _ASCII_TITLE.match(text):
        processed = normalize_track_name(text)
        return processed if processed and len(processed) < len(text) else text

    cjk = longest_cjk_run(text)
    if cjk:
        return cjk

    processed = normalize_track_name(text)
    if processed and len(processed) < len(text):
        return processed

    return _text_before_separator(text, _CORE_FALLBACK_SEPARATOR) or text


@dataclass(frozen=True)
class NormalizedQuery:
    """
    Cleaned, comparable representation of one lookup request

    Built fresh for every request and never mutated afterwards. The matching
    engine compares candidates against both this object and the raw request
    text, so the raw values are not stored here.

    Attributes:
        core_title: normalize_track_name() of the raw title
        title_variants: ordered, de-duplicated search titles
                        (normalized, core name, raw)
        artists: ordered unique artist names; compare case-insensitively
    """
    core_title: str
    title_variants: Tuple[str, ...]
    artists: Tuple[str, ...]

    @classmethod
    def from_raw(cls, track_name: str, artist_name: str) -> "NormalizedQuery":
        """
        Build a query from the raw request fields

        Args:
            track_name: Raw track title
            artist_name: Raw artist string (may list several artists)

        Returns:
            NormalizedQuery instance
        """
        core_title = normalize_track_name(track_name)

        variants: List[str] = []
        for candidate in (core_title, extract_core_name(track_name), (track_name or "").strip()):
            if candidate and candidate not in variants:
                variants.append(candidate)

        return cls(
            core_title=core_title,
            title_variants=tuple(variants),
            artists=normalize_artists(artist_name),
        )

    def has_artist(self, name: str) -> bool:
        """Case-insensitive membership test against the artist set"""
        lowered = name.lower()
        return any(artist.lower() == lowered for artist in self.artists)
