"""
Candidate matching: query normalization, record accessors and scoring

    query = NormalizedQuery.from_raw("無條件 (Live)", "陳奕迅")
    record = resolve(candidates, query, "無條件 (Live)", "陳奕迅")
"""

from .normalizer import (
    NormalizedQuery,
    normalize_track_name,
    normalize_artists,
    extract_core_name,
    contains_cjk,
)
from .records import CatalogRecord, get_song_name, extract_artists, extract_album_name
from .engine import MatchingEngine, ScoredCandidate, get_matching_engine, resolve

__all__ = [
    'NormalizedQuery',
    'normalize_track_name',
    'normalize_artists',
    'extract_core_name',
    'contains_cjk',
    'CatalogRecord',
    'get_song_name',
    'extract_artists',
    'extract_album_name',
    'MatchingEngine',
    'ScoredCandidate',
    'get_matching_engine',
    'resolve',
]
