"""
Candidate matching engine with rule-table title scoring and weighted ranking

This module picks the single catalog entry that best matches a free-text
(track, artist) request out of the handful of records a search call returns.
Requests arrive from media players and scrobblers in every script and
decoration style imaginable ("無條件 (Live)", "Yesterday - Remastered 2009",
"July" by "Kris Wu, 吳亦凡"), and the catalog search itself is fuzzy, so the
top search hit is frequently the wrong song.

Matching Algorithm Overview:

1. Exact Pass:
   - Case-insensitive comparison of each record's title and flattened artist
     string against the raw, unnormalized request text
   - The first record matching both wins immediately
   - Exists because the provider sometimes returns the literal query, which a
     heuristic score could otherwise mis-rank

2. Scored Pass (only when the exact pass finds nothing):
   - Title score (0-100) from the first matching rule in TITLE_RULES
   - Artist score (0-100) as the best pair score over query artists x record artists
   - Weighted combination with dynamic weights:
     * base: title 0.6 / artist 0.4
     * artist >= 80 and title >= 40: title 0.4 / artist 0.6
     * title >= 90 and artist >= 40: title 0.8 / artist 0.2 (checked last, wins)
   - Additive bonuses (all stackable):
     * title equals the raw request title: total raised to at least 95
     * title >= 70 and artist >= 80: +15
     * artist == 100 and title >= 40: +10

3. Selection:
   - Strictly highest total wins, ties keep the earlier record
   - Every record scoring 0 still returns the first record: the provider
     returning something is treated as weak evidence
   - An empty candidate list returns None

The engine keeps no state between calls. The same instance can rank several
candidate lists in a row (one per retrieval strategy) and can be shared across
threads.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..utils.logger import get_logger
from .normalizer import NormalizedQuery, contains_cjk, leading_cjk_run
from .records import CatalogRecord


# Decorations ignored by the close-match comparison
_CLOSE_MATCH_DECORATION = re.compile(r"\(.*?\)| - .*|【.*?】")

# Record artist strings are split on comma and ampersand
_RECORD_ARTIST_SEPARATOR = re.compile(r"\s*,\s*|\s*&\s*")

# Minimum length for substring title rules to apply
_MIN_CONTAINMENT_LENGTH = 3


def is_close_match(song_title: str, target_title: str) -> bool:
    """
    Title equality that tolerates decorative suffixes and brackets

    Both sides lose parenthesised text, " - ..." suffixes and 【...】 tags before
    comparison. For CJK targets the record title may also simply contain the
    target's leading CJK run.

    Args:
        song_title: Lower-cased record title
        target_title: Lower-cased request title (raw or normalized)

    Returns:
        True if the titles are a close match
    """
    clean_song = _CLOSE_MATCH_DECORATION.sub("", song_title).strip()
    clean_target = _CLOSE_MATCH_DECORATION.sub("", target_title).strip()
    if clean_song == clean_target:
        return True

    if contains_cjk(target_title):
        core = leading_cjk_run(target_title)
        if core and core in song_title:
            return True

    return False


@dataclass(frozen=True)
class TitleContext:
    """Lower-cased titles a title rule is evaluated against"""
    title: str
    original: str
    normalized: str


TitleRule = Tuple[str, Callable[[TitleContext], bool], int]

# Title scoring rules, most specific first; the first matching rule wins
TITLE_RULES: List[TitleRule] = [
    ("exact_original", lambda c: c.title == c.original, 100),
    ("exact_normalized", lambda c: c.title == c.normalized, 90),
    ("close_original", lambda c: is_close_match(c.title, c.original), 80),
    ("close_normalized", lambda c: is_close_match(c.title, c.normalized), 70),
    ("contains_original",
     lambda c: c.original in c.title and len(c.original) > _MIN_CONTAINMENT_LENGTH, 60),
    ("within_original",
     lambda c: c.title in c.original and len(c.title) > _MIN_CONTAINMENT_LENGTH, 50),
    ("contains_normalized",
     lambda c: c.normalized in c.title and len(c.normalized) > _MIN_CONTAINMENT_LENGTH, 40),
    ("within_normalized",
     lambda c: c.title in c.normalized and len(c.title) > _MIN_CONTAINMENT_LENGTH, 30),
]


def score_title(song_title: str, original_track: str, normalized_track: str) -> Tuple[int, str]:
    """
    Score a record title against the request title

    Args:
        song_title: Record display title
        original_track: Raw request title
        normalized_track: Normalized request title

    Returns:
        Tuple of (score, rule name); (0, "none") when no rule applies
    """
    if not song_title:
        return 0, "none"

    context = TitleContext(
        title=song_title.lower(),
        original=(original_track or "").lower(),
        normalized=(normalized_track or "").lower(),
    )
    for name, predicate, score in TITLE_RULES:
        if predicate(context):
            return score, name
    return 0, "none"


def _artist_pair_score(song_artist: str, original_artist: str, query_artist: str) -> int:
    """Score one (record artist, query artist) pair; all inputs lower-cased"""
    if song_artist == original_artist:
        return 100
    if song_artist == query_artist:
        return 80
    if song_artist in original_artist or original_artist in song_artist:
        return 60
    if song_artist in query_artist or query_artist in song_artist:
        return 40
    return 0


def score_artist(song_artists: str, original_artist: str, query_artists: Iterable[str]) -> int:
    """
    Score a record's artist string against the requested artists

    The record artist string is split on comma/ampersand. Each record artist is
    paired with each normalized query artist; the pair score is 100 for an exact
    match of the raw artist string, 80 for an exact match of the query artist,
    60 for containment either way with the raw string and 40 for containment
    either way with the query artist. The result is the best pair score, so one
    strong artist match is enough.

    Args:
        song_artists: Flattened record artist string
        original_artist: Raw request artist string
        query_artists: Normalized request artists

    Returns:
        Artist score between 0 and 100
    """
    original = (original_artist or "").lower()
    pieces = [piece for piece in _RECORD_ARTIST_SEPARATOR.split(song_artists.lower()) if piece]

    best = 0
    for query_artist in query_artists:
        target = query_artist.lower()
        for song_artist in pieces:
            best = max(best, _artist_pair_score(song_artist, original, target))
            if best == 100:
                return best
    return best


def combine_scores(title_score: int, artist_score: int, exact_original_title: bool) -> float:
    """
    Combine title and artist scores into a ranking total

    Args:
        title_score: Title score (0-100)
        artist_score: Artist score (0-100)
        exact_original_title: Record title equals the raw request title

    Returns:
        Total score, practically between 0 and 115
    """
    title_weight, artist_weight = 0.6, 0.4

    # Near-exact artist dominates a merely decent title
    if artist_score >= 80 and title_score >= 40:
        title_weight, artist_weight = 0.4, 0.6

    # Exact title dominates a weak artist signal
    if title_score >= 90 and artist_score >= 40:
        title_weight, artist_weight = 0.8, 0.2

    total = title_score * title_weight + artist_score * artist_weight

    if exact_original_title:
        total = max(total, 95.0)

    if title_score >= 70 and artist_score >= 80:
        total += 15

    if artist_score == 100 and title_score >= 40:
        total += 10

    return total


@dataclass
class ScoredCandidate:
    """
    Ranking entry for one candidate record

    Attributes:
        record: Candidate catalog record
        position: Index of the record in the candidate list (tie-breaker)
        title_score: Title score (0-100)
        title_rule: Name of the title rule that produced title_score
        artist_score: Artist score (0-100)
        total_score: Combined ranking score
    """
    record: CatalogRecord
    position: int
    title_score: int = 0
    title_rule: str = "none"
    artist_score: int = 0
    total_score: float = 0.0


CandidateInput = Union[CatalogRecord, Any]


class MatchingEngine:
    """
    Stateless ranker turning a raw candidate list into one best match

    Accepts raw provider records (mappings) or CatalogRecord instances.
    Entries that are neither are skipped as malformed.
    """

    def __init__(self):
        """Initialize the engine; only the logger is kept on the instance"""
        self.logger = get_logger(__name__)

    def _coerce_candidates(self, raw_candidates: Sequence[CandidateInput]) -> List[CatalogRecord]:
        """Convert the candidate list to CatalogRecord instances"""
        records: List[CatalogRecord] = []
        for index, candidate in enumerate(raw_candidates):
            if isinstance(candidate, CatalogRecord):
                records.append(candidate)
            elif isinstance(candidate, Mapping):
                records.append(CatalogRecord.from_raw(candidate))
            else:
                self.logger.debug(f"Skipping malformed candidate at index {index}: {type(candidate).__name__}")
        return records

    def find_exact_match(
        self,
        records: Sequence[CatalogRecord],
        original_track: str,
        original_artist: str
    ) -> Optional[CatalogRecord]:
        """
        Return the first record whose title and artist string equal the raw request

        Args:
            records: Candidate records in provider order
            original_track: Raw request title
            original_artist: Raw request artist string

        Returns:
            Matching record or None
        """
        track_lower = (original_track or "").lower()
        artist_lower = (original_artist or "").lower()

        for record in records:
            if not record.name or not record.artist:
                continue
            if record.name.lower() == track_lower and record.artist.lower() == artist_lower:
                return record
        return None

    def score_candidate(
        self,
        record: CatalogRecord,
        position: int,
        query: NormalizedQuery,
        original_track: str,
        original_artist: str
    ) -> ScoredCandidate:
        """
        Compute title, artist and total scores for one record

        Args:
            record: Candidate record
            position: Index in the candidate list
            query: Normalized request
            original_track: Raw request title
            original_artist: Raw request artist string

        Returns:
            ScoredCandidate with all score components filled in
        """
        scored = ScoredCandidate(record=record, position=position)
        if not record.name:
            return scored

        scored.title_score, scored.title_rule = score_title(
            record.name, original_track, query.core_title
        )
        scored.artist_score = score_artist(record.artist, original_artist, query.artists)
        scored.total_score = combine_scores(
            scored.title_score,
            scored.artist_score,
            record.name.lower() == (original_track or "").lower(),
        )
        return scored

    def rank(
        self,
        raw_candidates: Sequence[CandidateInput],
        query: NormalizedQuery,
        original_track: str,
        original_artist: str
    ) -> List[ScoredCandidate]:
        """
        Score every candidate and sort best first

        The sort is stable, so equal totals keep provider order.

        Returns:
            List of ScoredCandidate, best first
        """
        records = self._coerce_candidates(raw_candidates)
        scored = [
            self.score_candidate(record, position, query, original_track, original_artist)
            for position, record in enumerate(records)
        ]
        return sorted(scored, key=lambda entry: entry.total_score, reverse=True)

    def resolve(
        self,
        raw_candidates: Sequence[CandidateInput],
        query: NormalizedQuery,
        original_track: str,
        original_artist: str
    ) -> Optional[CatalogRecord]:
        """
        Pick the best matching record for a request

        Args:
            raw_candidates: Provider records in provider order
            query: Normalized request built from the raw fields
            original_track: Raw request title
            original_artist: Raw request artist string

        Returns:
            Best matching CatalogRecord, the first record if nothing scores,
            or None for an empty candidate list
        """
        records = self._coerce_candidates(raw_candidates)
        if not records:
            return None

        exact = self.find_exact_match(records, original_track, original_artist)
        if exact is not None:
            self.logger.debug(f"Exact match: {exact.name} - {exact.artist}")
            return exact

        best: Optional[ScoredCandidate] = None
        for position, record in enumerate(records):
            scored = self.score_candidate(record, position, query, original_track, original_artist)
            self.logger.debug(
                f"Candidate {position}: {record.name} - {record.artist} "
                f"(title={scored.title_score}/{scored.title_rule}, "
                f"artist={scored.artist_score}, total={scored.total_score:.1f})"
            )
            if scored.total_score > 0 and (best is None or scored.total_score > best.total_score):
                best = scored

        if best is None:
            self.logger.debug("No candidate scored, falling back to first result")
            return records[0]

        return best.record


# Global engine instance management
_engine_instance: Optional[MatchingEngine] = None


def get_matching_engine() -> MatchingEngine:
    """
    Get the global matching engine instance (singleton pattern)

    The engine is stateless, so sharing one instance is purely a convenience.
    """
    global _engine_instance
    if not _engine_instance:
        _engine_instance = MatchingEngine()
    return _engine_instance


def resolve(
    raw_candidates: Sequence[CandidateInput],
    query: NormalizedQuery,
    original_track: str,
    original_artist: str
) -> Optional[CatalogRecord]:
    """Module-level shortcut for MatchingEngine.resolve on the global engine"""
    return get_matching_engine().resolve(raw_candidates, query, original_track, original_artist)
