"""
Ciphertext extraction from the lyrics provider's malformed XML documents

The lyric download endpoint answers with an XML-ish document along the lines of:

    <?xml version="1.0" encoding="utf-8"?>
    <!-- comment that is not always closed -->
    <QrcInfos>
      <LyricInfo LyricCount="3">
        <Lyric_1 LyricType="1" LyricContent="...hex..."/>
      </LyricInfo>
      <content>...hex...</content>
      <contentts>...hex...</contentts>
      <contentroma>...hex...</contentroma>
    </QrcInfos>

Attribute quoting and comments are frequently broken, so a strict XML parser
is not an option. Instead a prioritized list of regular expressions is tried in
order; the first capture that is a valid hex string wins. Several tags can be
present at once, and only the hex-looking one is usable ciphertext.
"""

import re
from typing import List, Optional, Sequence, Tuple

from ..utils.helpers import is_hex


ExtractionPattern = Tuple[str, re.Pattern]


def _element(tag: str) -> re.Pattern:
    return re.compile(rf"<{tag}(?:\s[^>]*)?>(.*?)</{tag}>", re.DOTALL)


_CONTENT = ("content", _element("content"))
_CONTENT_TS = ("contentts", _element("contentts"))
_CONTENT_ROMA = ("contentroma", _element("contentroma"))
_LYRIC_BODY = ("Lyric_1", _element("Lyric_1"))
_LYRIC_ATTRIBUTE = ("LyricContent", re.compile(r"<Lyric_1\b[^>]*?LyricContent=([\"'])(.*?)\1", re.DOTALL))

# Default priority order for the main lyric
CIPHERTEXT_PATTERNS: List[ExtractionPattern] = [
    _CONTENT,
    _CONTENT_TS,
    _CONTENT_ROMA,
    _LYRIC_BODY,
    _LYRIC_ATTRIBUTE,
]

# Single-tag lists for the translation and romanization tracks
TRANSLATION_PATTERNS: List[ExtractionPattern] = [_CONTENT_TS]
ROMANIZATION_PATTERNS: List[ExtractionPattern] = [_CONTENT_ROMA]

_CDATA = re.compile(r"^<!\[CDATA\[(.*?)\]\]>$", re.DOTALL)


def _clean_capture(capture: str) -> str:
    """Strip whitespace and a CDATA wrapper from a captured value"""
    text = capture.strip()
    match = _CDATA.match(text)
    if match:
        text = match.group(1).strip()
    return text


def _captures(pattern: re.Pattern, document: str) -> List[str]:
    """All captured values of a pattern; the last group holds the value"""
    captures = []
    for match in pattern.finditer(document):
        captures.append(match.group(match.lastindex or 0))
    return captures


def extract_ciphertext(
    document: Optional[str],
    patterns: Sequence[ExtractionPattern] = CIPHERTEXT_PATTERNS
) -> Optional[str]:
    """
    Find the hex ciphertext in a lyrics document

    Args:
        document: Raw document returned by the lyrics provider
        patterns: (name, regex) pairs in priority order

    Returns:
        The first captured value that is a valid hex string, or None
    """
    if not document:
        return None

    text = document.replace("<!--", "").replace("-->", "")

    for _name, pattern in patterns:
        for capture in _captures(pattern, text):
            candidate = _clean_capture(capture)
            if is_hex(candidate):
                return candidate

    return None


def extract_all_ciphertexts(document: Optional[str]) -> dict:
    """
    Extract the main, translation and romanization ciphertexts at once

    Returns:
        Dictionary with 'lyrics', 'trans' and 'roma' keys (None when missing)
    """
    return {
        'lyrics': extract_ciphertext(document, CIPHERTEXT_PATTERNS),
        'trans': extract_ciphertext(document, TRANSLATION_PATTERNS),
        'roma': extract_ciphertext(document, ROMANIZATION_PATTERNS),
    }
