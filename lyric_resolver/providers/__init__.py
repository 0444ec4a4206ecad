"""
Catalog providers: keyword search, song metadata and lyric documents

Both providers own a requests.Session and never raise on transport errors;
failures are logged and reported as empty results.
"""

from .search import SearchProvider, get_search_provider, reset_search_provider
from .lyrics import LyricsProvider, get_lyrics_provider, reset_lyrics_provider

__all__ = [
    'SearchProvider',
    'get_search_provider',
    'reset_search_provider',
    'LyricsProvider',
    'get_lyrics_provider',
    'reset_lyrics_provider',
]
