"""
Static override table for queries the matching engine gets wrong

Two kinds of overrides exist:

ids:
    "title_artist" -> catalog identifier. A hit bypasses search and matching
    entirely. Keys are tried in several variants (raw and normalized title,
    raw and per-artist names, original and lower case), so an entry written
    as "無條件_陳奕迅" also matches "無條件 (Live)" by "陳奕迅 & 其他".

titles:
    "normalizedtitle_artist" (lower case) -> alternate search title. Used for
    English release titles of Chinese songs ("unrequited_林宥嘉" -> "浪费");
    the search then runs with the alternate title.

The packaged overrides.yaml is always loaded. A user file configured through
overrides.file (or LYRIC_RESOLVER_OVERRIDES) is merged over it. The table is
immutable once built and is injected into the lookup service.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import yaml

from ..exceptions import ConfigError
from ..matching.normalizer import normalize_artists, normalize_track_name
from ..utils.logger import get_logger
from .settings import get_settings


PACKAGED_OVERRIDES = Path(__file__).parent / "overrides.yaml"

SECTIONS = ('ids', 'titles')


def _make_key(title: str, artist: str) -> str:
    return f"{title}_{artist}"


def override_key_variants(track_name: str, artist_name: str) -> List[str]:
    """
    Build the ordered, de-duplicated list of id override keys for a query

    Titles: raw, then normalized. Artists: the raw string, then each
    normalized artist. Every combination is tried in original case, then
    lower case.

    Args:
        track_name: Raw track name
        artist_name: Raw artist string

    Returns:
        Keys in lookup order
    """
    raw_title = (track_name or "").strip()
    raw_artist = (artist_name or "").strip()

    titles = [raw_title, normalize_track_name(raw_title)] if raw_title else []
    artists = [raw_artist, *normalize_artists(raw_artist)] if raw_artist else []

    keys = []
    for title in titles:
        for artist in artists:
            key = _make_key(title, artist)
            for variant in (key, key.lower()):
                if variant not in keys:
                    keys.append(variant)
    return keys


class OverrideTable:
    """
    Immutable id and title override mappings

    Attributes:
        ids: "title_artist" -> catalog identifier (id or mid)
        titles: lower-case "title_artist" -> alternate search title
    """

    def __init__(self, ids: Optional[Mapping[str, Any]] = None, titles: Optional[Mapping[str, Any]] = None):
        self.ids = MappingProxyType({str(k): str(v) for k, v in (ids or {}).items() if v})
        self.titles = MappingProxyType({str(k).lower(): str(v) for k, v in (titles or {}).items() if v})

    def __len__(self) -> int:
        return len(self.ids) + len(self.titles)

    def __repr__(self) -> str:
        return f"OverrideTable(ids={len(self.ids)}, titles={len(self.titles)})"

    def lookup_id(self, track_name: str, artist_name: str) -> Optional[str]:
        """
        Catalog identifier forced for this query, if any

        Returns:
            The identifier of the first matching key variant, or None
        """
        for key in override_key_variants(track_name, artist_name):
            identifier = self.ids.get(key)
            if identifier:
                return identifier
        return None

    def lookup_title(self, normalized_title: str, artists: Iterable[str]) -> Optional[str]:
        """
        Alternate search title for a normalized title and its artists

        Args:
            normalized_title: Output of normalize_track_name
            artists: Normalized artist names

        Returns:
            Alternate title of the first artist with an entry, or None
        """
        for artist in artists:
            alias = self.titles.get(_make_key(normalized_title, artist).lower())
            if alias:
                return alias
        return None

    def merged(self, other: "OverrideTable") -> "OverrideTable":
        """New table with the entries of other taking precedence"""
        return OverrideTable(
            ids={**self.ids, **other.ids},
            titles={**self.titles, **other.titles},
        )

    @classmethod
    def from_mapping(cls, data: Any, source: str = "<mapping>") -> "OverrideTable":
        """
        Build a table from parsed YAML data

        Raises:
            ConfigError: If the document or one of its sections is not a mapping
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("Override file must contain a mapping", details={'file_path': source})

        sections: Dict[str, Mapping[str, Any]] = {}
        for name in SECTIONS:
            section = data.get(name) or {}
            if not isinstance(section, dict):
                raise ConfigError(
                    f"Override section '{name}' must be a mapping",
                    details={'file_path': source, 'section': name}
                )
            sections[name] = section

        return cls(ids=sections['ids'], titles=sections['titles'])

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "OverrideTable":
        """
        Load a table from a YAML file

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        path = Path(path).expanduser()
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read override file {path}: {e}", details={'file_path': str(path)})
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in override file {path}: {e}", details={'file_path': str(path)})

        return cls.from_mapping(data, source=str(path))


def load_override_table(user_path: Optional[Union[str, Path]] = None) -> OverrideTable:
    """
    Load the packaged table and merge an optional user table over it

    Args:
        user_path: User override file; defaults to the overrides.file setting

    Returns:
        Merged OverrideTable
    """
    logger = get_logger(__name__)

    table = OverrideTable.from_yaml(PACKAGED_OVERRIDES)

    if user_path is None:
        user_path = get_settings().get_overrides_path()

    if user_path:
        table = table.merged(OverrideTable.from_yaml(user_path))
        logger.debug(f"Merged user overrides from {user_path}")

    logger.debug(f"Loaded {table!r}")
    return table


# Global override table instance management
_override_table: Optional[OverrideTable] = None


def get_override_table() -> OverrideTable:
    """Get the global override table (singleton pattern)"""
    global _override_table
    if _override_table is None:
        _override_table = load_override_table()
    return _override_table


def reset_override_table() -> None:
    """Drop the global table so it is reloaded on next access"""
    global _override_table
    _override_table = None
