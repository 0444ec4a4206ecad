"""
Catalog record accessors for search provider results

The search provider returns loosely shaped JSON records: depending on the
endpoint and API version the title lives in "song", "name", "songname",
"title" or "songName", and the artist list can be a list of objects, a list of
strings, a single object or a plain string. Rather than fixing a schema, the
matching engine reads records through the accessor functions in this module.

Accessor Contract:
- Every accessor takes the raw record (any mapping) and returns a string.
- Missing or unexpected fields produce an empty string, never an exception.
- Multi-artist values are flattened to a comma-joined string ("A, B").

CatalogRecord wraps a raw record together with the accessor results, in the
same way for every provider payload.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from ..utils.helpers import first_non_empty, parse_duration


# Candidate keys holding the display title, in priority order
TITLE_KEYS = ("song", "name", "songname", "title", "songName")

# Candidate keys inside artist/album objects
ARTIST_NAME_KEYS = ("name", "title", "singer_name")
ALBUM_NAME_KEYS = ("name", "title")


def get_song_name(record: Mapping[str, Any]) -> str:
    """Display title of a raw record, or "" when absent"""
    if not isinstance(record, Mapping):
        return ""
    return first_non_empty(*(record.get(key) for key in TITLE_KEYS))


def _artist_entry_name(entry: Any) -> str:
    """Name of a single entry of a "singer" list"""
    if isinstance(entry, Mapping):
        return first_non_empty(*(entry.get(key) for key in ARTIST_NAME_KEYS))
    if entry is None:
        return ""
    return str(entry)


def extract_artists(record: Mapping[str, Any]) -> str:
    """
    Flattened artist string of a raw record

    Args:
        record: Raw search result

    Returns:
        Comma-joined artist names ("周杰伦, 费玉清"), or "" when absent
    """
    if not isinstance(record, Mapping):
        return ""

    singer = record.get("singer")
    if not singer:
        return ""

    if isinstance(singer, (list, tuple)):
        names = [_artist_entry_name(entry) for entry in singer]
        return ", ".join(name for name in names if name)

    return _artist_entry_name(singer)


def extract_album_name(record: Mapping[str, Any]) -> str:
    """Album title of a raw record, or "" when absent"""
    if not isinstance(record, Mapping):
        return ""

    album = record.get("album")
    if not album:
        return ""
    if isinstance(album, Mapping):
        return first_non_empty(*(album.get(key) for key in ALBUM_NAME_KEYS))
    return str(album)


def get_record_id(record: Mapping[str, Any]) -> str:
    """Numeric catalog identifier (used for the lyric download)"""
    if not isinstance(record, Mapping):
        return ""
    return first_non_empty(record.get("id"), record.get("songid"), record.get("musicid"))


def get_record_mid(record: Mapping[str, Any]) -> str:
    """External "mid" identifier of a raw record"""
    if not isinstance(record, Mapping):
        return ""
    return first_non_empty(record.get("mid"), record.get("songmid"))


@dataclass(frozen=True)
class CatalogRecord:
    """
    Accessor view of one search provider result

    Attributes:
        id: Numeric catalog identifier
        mid: External identifier (songmid)
        name: Display title
        artist: Comma-joined artist string
        album: Album title
        duration_raw: Duration value exactly as the provider sent it
        raw: The original record, kept for callers that need extra fields
    """
    id: str
    mid: str
    name: str
    artist: str
    album: str
    duration_raw: Any = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_raw(cls, record: Mapping[str, Any]) -> "CatalogRecord":
        """
        Create a CatalogRecord from a raw provider result

        Args:
            record: Raw search result mapping

        Returns:
            CatalogRecord with empty strings for missing fields
        """
        if not isinstance(record, Mapping):
            record = {}
        return cls(
            id=get_record_id(record),
            mid=get_record_mid(record),
            name=get_song_name(record),
            artist=extract_artists(record),
            album=extract_album_name(record),
            duration_raw=record.get("interval"),
            raw=dict(record),
        )

    @property
    def duration(self) -> int:
        """Duration in whole seconds (0 when unknown)"""
        return parse_duration(self.duration_raw)

    @property
    def lyric_id(self) -> str:
        """Identifier to use for the lyric download: id, falling back to mid"""
        return self.id or self.mid
