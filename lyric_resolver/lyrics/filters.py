"""
LRC clean-up for decoded lyrics

Decoded catalog lyrics carry a lot of non-lyric material in front of and
between the sung lines: ID tags, "Title - Artist" headers, credit blocks
("词：...", "Producer: ..."), bracketed section markers and licence warnings.
filter_lyrics() removes them and returns the remaining timestamped lines
unchanged.

Rules, applied in this order:

1. Tag lines ([ti:], [ar:], [al:], [by:], [offset:], [t_time:], [kana:],
   [lang:], [total:]) are dropped, and only "[mm:ss.xx] text" lines are kept
2. Among the first three lines, lines whose text contains "-" are dropped
3. Among the first three lines, lines whose text contains a colon are dropped
4. A leading run of colon lines is dropped when it is at least two lines long
   (at least one line long if step 3 already removed something)
5. Any run of two or more consecutive colon lines is dropped
6. Lines containing a [] or 【】 pair are dropped
7. Among the first two lines, lines containing a () or （） pair are dropped
8. Licence warning lines are dropped
9. Empty, "//" and bare timestamp lines are dropped

Colon lines removed by steps 3 to 5 are collected so that credits can be
recovered with extract_credits().
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List

from ..utils.logger import get_logger


logger = get_logger(__name__)

_TAG_LINE = re.compile(r"^\[(ti|ar|al|by|offset|t_time|kana|lang|total):.*\]$", re.IGNORECASE)
_TIMED_LINE = re.compile(r"^(\[[0-9:.]+\])(.*)$")
_INLINE_TAG = re.compile(r"\[.*?\]")
_BARE_TIMESTAMP = re.compile(r"^\[\d+:\d+(\.\d+)?\]\s*$")
_SLASHES_ONLY = re.compile(r"^\[\d+:\d+(\.\d+)?\]\s*//\s*$")

# QRC: "[start_ms,duration_ms]word(start_ms,duration_ms)..."
_QRC_LINE = re.compile(r"^\[(\d+),\d+\](.*)$")
_QRC_WORD_TIMING = re.compile(r"\(\d+,\d+(?:,\d+)?\)")

# Any one of these marks a licence line on its own
LICENSE_KEYWORDS = ("文曲大模型", "享有本翻译作品的著作权")

# Generic prohibition wording; LICENSE_TOKEN_THRESHOLD hits mark a licence line
LICENSE_TOKENS = ("未经", "许可", "授权", "不得", "请勿", "使用", "版权", "翻唱")
LICENSE_TOKEN_THRESHOLD = 3

CREDIT_KEYWORDS = (
    "lyrics", "lyric", "composed", "compose", "producer", "produce", "produced",
    "词", "曲", "制作人",
)

HEADER_SCAN_LINES = 3
PAREN_SCAN_LINES = 2


@dataclass
class LrcLine:
    """One timestamped LRC line"""
    raw: str
    timestamp: str
    text: str

    @property
    def plain_text(self) -> str:
        """Line text with inline [..] tags removed"""
        return _INLINE_TAG.sub("", self.text)


@dataclass
class FilterResult:
    """
    Output of the LRC filter

    Attributes:
        lines: Surviving lines, in original order
        removed_colon_lines: Plain text of the colon lines removed as credits
    """
    lines: List[LrcLine] = field(default_factory=list)
    removed_colon_lines: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(line.raw for line in self.lines)

    @property
    def credits(self) -> List[str]:
        return extract_credits(self.removed_colon_lines)


def contains_colon(text: str) -> bool:
    return ":" in text or "：" in text


def contains_bracket_pair(text: str) -> bool:
    return ("[" in text and "]" in text) or ("【" in text and "】" in text)


def contains_paren_pair(text: str) -> bool:
    return ("(" in text and ")" in text) or ("（" in text and "）" in text)


def is_license_warning(text: str) -> bool:
    """True for copyright and "do not use without permission" notices"""
    if not text:
        return False
    if any(keyword in text for keyword in LICENSE_KEYWORDS):
        return True
    hits = sum(1 for token in LICENSE_TOKENS if token in text)
    return hits >= LICENSE_TOKEN_THRESHOLD


def _format_timestamp(milliseconds: int) -> str:
    """Milliseconds as an LRC [mm:ss.xx] timestamp"""
    minutes, remainder = divmod(milliseconds, 60000)
    seconds, millis = divmod(remainder, 1000)
    return f"[{minutes:02d}:{seconds:02d}.{millis // 10:02d}]"


def qrc_to_lrc(lyric: str) -> str:
    """
    Convert word-timed QRC lines to line-timed LRC

    "[12340,3000]Hello(12340,500) world(12840,700)" becomes
    "[00:12.34]Hello world". Lines that are not QRC timed lines (ID tags,
    lines that already are LRC) pass through unchanged.

    Args:
        lyric: Decoded QRC or LRC text

    Returns:
        LRC text
    """
    if not lyric:
        return ""

    converted = []
    for line in lyric.splitlines():
        match = _QRC_LINE.match(line.strip())
        if match:
            text = _QRC_WORD_TIMING.sub("", match.group(2))
            converted.append(f"{_format_timestamp(int(match.group(1)))}{text}")
        else:
            converted.append(line)
    return "\n".join(converted)


def parse_lrc(lyric: str) -> List[LrcLine]:
    """Parse timestamped lines, skipping ID tags and untimed text"""
    parsed = []
    for line in lyric.splitlines():
        if _TAG_LINE.match(line.strip()):
            continue
        match = _TIMED_LINE.match(line)
        if match:
            parsed.append(LrcLine(raw=line, timestamp=match.group(1), text=match.group(2).strip()))
    return parsed


def _drop_in_head(lines: List[LrcLine], limit: int, predicate) -> List[LrcLine]:
    """
    Remove matching lines among the first `limit` lines

    The window is re-evaluated after each removal, so a line shifted into the
    head is examined too. Removed lines are returned.
    """
    removed = []
    i = 0
    while i < min(limit, len(lines)):
        if predicate(lines[i].plain_text):
            removed.append(lines.pop(i))
        else:
            i += 1
    return removed


def _drop_colon_runs(lines: List[LrcLine], removed: List[str]) -> List[LrcLine]:
    """Drop every run of two or more consecutive colon lines"""
    kept = []
    i = 0
    while i < len(lines):
        if not contains_colon(lines[i].plain_text):
            kept.append(lines[i])
            i += 1
            continue

        j = i
        while j < len(lines) and contains_colon(lines[j].plain_text):
            j += 1

        if j - i >= 2:
            removed.extend(line.plain_text for line in lines[i:j])
        else:
            kept.append(lines[i])
        i = j
    return kept


def _is_filler(line: LrcLine) -> bool:
    text = line.plain_text
    if text in ("", "//") or re.match(r"^//\s*$", text):
        return True
    return bool(_SLASHES_ONLY.match(line.raw) or _BARE_TIMESTAMP.match(line.raw))


def filter_lyrics_detailed(lyric: str) -> FilterResult:
    """
    Apply every clean-up rule and keep track of removed credit lines

    Args:
        lyric: Decoded LRC text

    Returns:
        FilterResult with surviving lines and removed colon lines
    """
    result = FilterResult()
    if not lyric:
        return result

    lines = parse_lrc(lyric)

    _drop_in_head(lines, HEADER_SCAN_LINES, lambda text: "-" in text)

    removed_head = _drop_in_head(lines, HEADER_SCAN_LINES, contains_colon)
    result.removed_colon_lines.extend(line.plain_text for line in removed_head)

    leading = 0
    while leading < len(lines) and contains_colon(lines[leading].plain_text):
        leading += 1
    if leading >= (1 if removed_head else 2):
        result.removed_colon_lines.extend(line.plain_text for line in lines[:leading])
        lines = lines[leading:]

    lines = _drop_colon_runs(lines, result.removed_colon_lines)
    lines = [line for line in lines if not contains_bracket_pair(line.plain_text)]
    _drop_in_head(lines, PAREN_SCAN_LINES, contains_paren_pair)
    lines = [line for line in lines if not is_license_warning(line.plain_text)]
    lines = [line for line in lines if not _is_filler(line)]

    result.lines = lines
    logger.debug(
        f"LRC filter kept {len(lines)} lines, "
        f"removed {len(result.removed_colon_lines)} credit lines"
    )
    return result


def filter_lyrics(lyric: str) -> str:
    """
    Strip headers, credits, markers and licence notices from LRC text

    Args:
        lyric: Decoded LRC text

    Returns:
        Surviving raw lines joined with newlines ("" for empty input)
    """
    return filter_lyrics_detailed(lyric).text


def extract_credits(removed_lines: Iterable[str]) -> List[str]:
    """Removed colon lines that name lyricists, composers or producers"""
    credits = []
    for line in removed_lines:
        lowered = line.lower()
        if any(keyword in lowered for keyword in CREDIT_KEYWORDS):
            credits.append(line)
    return credits
