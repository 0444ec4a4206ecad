"""
Lyric lookup service

Orchestrates a complete lookup for a free-text (track name, artist name) pair:

1. Validate and normalize the request (NormalizedQuery)
2. Id override: a hit in the override table skips search and matching; only a
   best-effort metadata lookup runs for the forced identifier
3. Title override: English release titles of Chinese songs are swapped for
   the catalog title before searching
4. Retrieval strategies, first success wins:
     a) core name + " " + artist, for each artist
     b) normalized title + " " + artist, for each artist
     c) core name alone
   A strategy succeeds when a search returns candidates and the matching
   engine picks one. A keyword already searched in this lookup is not sent
   again. Between failed strategies the service waits matching.strategy_delay
   seconds.
5. Lyric document download, ciphertext extraction, decryption, QRC to LRC
   conversion and (optionally) LRC clean-up for the main, translated and
   romanized lyrics. When the encrypted document yields nothing, the plain
   lyric endpoint supplies ready-made LRC instead
6. Result assembly (LyricsLookupResult)

Failures inside matching and decoding only degrade the result (no match, no
lyric). A lookup fails with TrackNotFoundError when no strategy produced a
match, and with InvalidQueryError when the request is incomplete.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config.overrides import OverrideTable, get_override_table
from .config.settings import get_settings
from .exceptions import InvalidQueryError, TrackNotFoundError
from .lyrics.decoder import LyricDecoder, get_lyric_decoder
from .lyrics.extractor import extract_all_ciphertexts
from .lyrics.filters import filter_lyrics_detailed, qrc_to_lrc
from .matching.engine import MatchingEngine, get_matching_engine
from .matching.normalizer import NormalizedQuery, extract_core_name
from .matching.records import CatalogRecord
from .providers.lyrics import LyricsProvider, get_lyrics_provider
from .providers.search import SearchProvider, get_search_provider
from .utils.helpers import is_blank
from .utils.logger import get_logger, log_performance


SOURCE_OVERRIDE = "override"
SOURCE_SEARCH = "search"


@dataclass
class LyricsLookupResult:
    """
    Outcome of a successful lookup

    Attributes:
        id: Numeric catalog identifier (may be empty for mid-only overrides)
        mid: External catalog identifier
        name: Catalog title, or the requested title when the catalog has none
        track_name: Same as name
        artist_name: Comma-joined catalog artists
        album_name: Catalog album title
        duration: Duration in whole seconds
        instrumental: True when both synced and translated lyrics are blank
        plain_lyrics: Always empty; only synced lyrics are provided
        synced_lyrics: LRC lyrics
        translated_lyrics: LRC translation
        romanized_lyrics: LRC romanization (only when enabled)
        source: "override" or "search"
        keyword: Search keyword that produced the match
        credits: Credit lines removed by the LRC filter
    """
    id: str
    mid: str
    name: str
    track_name: str
    artist_name: str
    album_name: str
    duration: int
    instrumental: bool
    plain_lyrics: str = ""
    synced_lyrics: str = ""
    translated_lyrics: str = ""
    romanized_lyrics: str = ""
    source: str = SOURCE_SEARCH
    keyword: Optional[str] = None
    credits: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Caller-visible result shape"""
        return {
            'id': self.id or self.mid,
            'name': self.name,
            'trackName': self.track_name,
            'artistName': self.artist_name,
            'albumName': self.album_name,
            'duration': self.duration,
            'instrumental': self.instrumental,
            'plainLyrics': self.plain_lyrics,
            'syncedLyrics': self.synced_lyrics,
            'translatedLyrics': self.translated_lyrics,
        }


@dataclass
class DecodedLyrics:
    """Decoded lyric texts of one catalog entry"""
    synced: str = ""
    translated: str = ""
    romanized: str = ""
    credits: List[str] = field(default_factory=list)

    @property
    def instrumental(self) -> bool:
        return is_blank(self.synced) and is_blank(self.translated)


def build_search_plan(search_title: str, artists: Tuple[str, ...]) -> List[List[str]]:
    """
    Keywords of each retrieval strategy, in strategy order

    Args:
        search_title: Normalized (or override-aliased) title
        artists: Normalized artist names

    Returns:
        One keyword list per strategy; empty keywords are left out
    """
    core_name = extract_core_name(search_title)

    strategies = [
        [f"{core_name} {artist}".strip() for artist in artists],
        [f"{search_title} {artist}".strip() for artist in artists],
        [core_name.strip()],
    ]
    return [[keyword for keyword in keywords if keyword] for keywords in strategies]


class LyricsService:
    """
    Lookup orchestration over providers, matching engine and decoder

    Collaborators default to the global instances and can be injected for
    testing or embedding.
    """

    def __init__(
        self,
        search_provider: Optional[SearchProvider] = None,
        lyrics_provider: Optional[LyricsProvider] = None,
        override_table: Optional[OverrideTable] = None,
        engine: Optional[MatchingEngine] = None,
        decoder: Optional[LyricDecoder] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        self.search_provider = search_provider or get_search_provider()
        self.lyrics_provider = lyrics_provider or get_lyrics_provider()
        self.overrides = override_table if override_table is not None else get_override_table()
        self.engine = engine or get_matching_engine()
        self.decoder = decoder or get_lyric_decoder()
        self.sleep = sleep

        self.strategy_delay = self.settings.matching.strategy_delay
        self.search_limit = self.settings.provider.search_limit

    @staticmethod
    def _validate_request(track_name: str, artist_name: str) -> Tuple[str, str]:
        track = (track_name or "").strip()
        artist = (artist_name or "").strip()
        if not track or not artist:
            raise InvalidQueryError(
                "Both track name and artist name are required",
                details={'track_name': track_name, 'artist_name': artist_name}
            )
        return track, artist

    def resolve_override(self, track_name: str, artist_name: str) -> Optional[CatalogRecord]:
        """
        Catalog record forced by the id override table, if any

        Metadata is fetched best effort; without it the record only carries
        the identifier.
        """
        identifier = self.overrides.lookup_id(track_name, artist_name)
        if not identifier:
            return None

        self.logger.info(f"Override hit: '{track_name}' / '{artist_name}' -> {identifier}")

        metadata = self.search_provider.get_song(identifier)
        if metadata:
            record = CatalogRecord.from_raw(metadata)
            if record.id or record.mid:
                return record

        if identifier.isdigit():
            return CatalogRecord(id=identifier, mid="", name="", artist="", album="")
        return CatalogRecord(id="", mid=identifier, name="", artist="", album="")

    def search_title_for(self, query: NormalizedQuery) -> str:
        """Title to search with: the override alias, else the normalized title"""
        alias = self.overrides.lookup_title(query.core_title, query.artists)
        if alias:
            self.logger.info(f"Title alias: '{query.core_title}' -> '{alias}'")
            return alias
        return query.core_title

    def search(
        self,
        query: NormalizedQuery,
        original_track: str,
        original_artist: str
    ) -> Tuple[Optional[CatalogRecord], List[str]]:
        """
        Run the retrieval strategies until one yields a match

        Args:
            query: Normalized request
            original_track: Raw request title
            original_artist: Raw request artist string

        Returns:
            (matched record or None, keywords searched in order)
        """
        search_title = self.search_title_for(query)
        if search_title != query.core_title:
            query = NormalizedQuery.from_raw(search_title, original_artist)
        plan = build_search_plan(search_title, query.artists)

        searched: List[str] = []
        for index, keywords in enumerate(plan, start=1):
            requested = False

            for keyword in keywords:
                if keyword in searched:
                    continue
                searched.append(keyword)
                requested = True

                candidates = self.search_provider.search(keyword, self.search_limit)
                if not candidates:
                    self.logger.debug(f"Strategy {index}: no candidates for '{keyword}'")
                    continue

                match = self.engine.resolve(candidates, query, original_track, original_artist)
                if match is not None:
                    self.logger.debug(f"Strategy {index} matched '{match.name}' via '{keyword}'")
                    return match, searched

            if requested and index < len(plan) and self.strategy_delay > 0:
                self.sleep(self.strategy_delay)

        return None, searched

    def fetch_lyrics(self, record: CatalogRecord, filter_enabled: Optional[bool] = None) -> DecodedLyrics:
        """
        Download and decode the lyrics of a catalog record

        The encrypted QRC document is tried first. When it yields no lyric
        text the plain lyric endpoint is asked for ready-made LRC.

        Args:
            record: Matched catalog record
            filter_enabled: Apply the LRC clean-up (defaults to lyrics.filter_lyrics)

        Returns:
            DecodedLyrics (all empty when nothing could be decoded)
        """
        if filter_enabled is None:
            filter_enabled = self.settings.lyrics.filter_lyrics

        decoded = self._fetch_qrc_lyrics(record, filter_enabled)
        if not decoded.instrumental:
            return decoded

        plain = self.lyrics_provider.fetch_plain_lyrics(record.lyric_id)
        if is_blank(plain.get('lrc')) and is_blank(plain.get('trans')):
            self.logger.debug(f"No lyrics available for {record.lyric_id}")
            return decoded

        self.logger.debug(f"Using plain lyrics for {record.lyric_id}")
        decoded = DecodedLyrics()
        decoded.synced, decoded.credits = self._clean_track(plain.get('lrc') or "", filter_enabled)
        decoded.translated, _ = self._clean_track(plain.get('trans') or "", filter_enabled)
        return decoded

    def _fetch_qrc_lyrics(self, record: CatalogRecord, filter_enabled: bool) -> DecodedLyrics:
        document = self.lyrics_provider.fetch_document(record.lyric_id)
        ciphertexts = extract_all_ciphertexts(document)
        if not ciphertexts['lyrics']:
            self.logger.debug(f"No ciphertext in lyric document for {record.lyric_id}")
            return DecodedLyrics()

        # The main lyric falls back to contentts/contentroma; never report it twice
        for track in ('trans', 'roma'):
            if ciphertexts[track] == ciphertexts['lyrics']:
                ciphertexts[track] = None

        decoded = DecodedLyrics()
        decoded.synced, decoded.credits = self._decode_track(ciphertexts['lyrics'], filter_enabled)
        decoded.translated, _ = self._decode_track(ciphertexts['trans'], filter_enabled)
        if self.settings.lyrics.include_romanization:
            decoded.romanized, _ = self._decode_track(ciphertexts['roma'], filter_enabled)
        return decoded

    def _decode_track(self, ciphertext: Optional[str], filter_enabled: bool) -> Tuple[str, List[str]]:
        if not ciphertext:
            return "", []

        return self._clean_track(self.decoder.decode(ciphertext), filter_enabled)

    @staticmethod
    def _clean_track(lyric: str, filter_enabled: bool) -> Tuple[str, List[str]]:
        """QRC to LRC conversion (a no-op on LRC) followed by the optional filter"""
        text = qrc_to_lrc(lyric)
        if not filter_enabled or not text:
            return text, []

        filtered = filter_lyrics_detailed(text)
        return filtered.text, filtered.credits

    @log_performance
    def lookup(
        self,
        track_name: str,
        artist_name: str,
        filter_enabled: Optional[bool] = None
    ) -> LyricsLookupResult:
        """
        Resolve a request to a catalog entry and return its decoded lyrics

        Args:
            track_name: Raw track title
            artist_name: Raw artist string
            filter_enabled: Override lyrics.filter_lyrics for this lookup

        Returns:
            LyricsLookupResult

        Raises:
            InvalidQueryError: If track or artist name is blank
            TrackNotFoundError: If no strategy produced a match
        """
        track, artist = self._validate_request(track_name, artist_name)

        keyword = None
        record = self.resolve_override(track, artist)
        if record is not None:
            source = SOURCE_OVERRIDE
        else:
            query = NormalizedQuery.from_raw(track, artist)
            record, searched = self.search(query, track, artist)
            if record is None:
                raise TrackNotFoundError(
                    "Song not found",
                    details={'track_name': track, 'artist_name': artist, 'keywords': searched}
                )
            source = SOURCE_SEARCH
            keyword = searched[-1] if searched else None

        lyrics = self.fetch_lyrics(record, filter_enabled)
        name = record.name or track

        result = LyricsLookupResult(
            id=record.id,
            mid=record.mid,
            name=name,
            track_name=name,
            artist_name=record.artist,
            album_name=record.album,
            duration=record.duration,
            instrumental=lyrics.instrumental,
            synced_lyrics=lyrics.synced,
            translated_lyrics=lyrics.translated,
            romanized_lyrics=lyrics.romanized,
            source=source,
            keyword=keyword,
            credits=lyrics.credits,
        )

        self.logger.info(
            f"Resolved '{track}' / '{artist}' -> {result.name} - {result.artist_name} "
            f"[{record.lyric_id}] ({source}, instrumental={result.instrumental})"
        )
        return result


# Global service instance management
_service_instance: Optional[LyricsService] = None


def get_lyrics_service() -> LyricsService:
    """Get the global lookup service (singleton pattern)"""
    global _service_instance
    if not _service_instance:
        _service_instance = LyricsService()
    return _service_instance


def reset_lyrics_service() -> None:
    """Reset the global lookup service (after settings changes, in tests)"""
    global _service_instance
    _service_instance = None
