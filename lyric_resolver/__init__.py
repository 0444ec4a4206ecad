"""
lyric-resolver: resolve free-text track/artist queries to catalog lyrics

Given a (track name, artist name) pair as reported by a media player or a
streaming service, lyric-resolver finds the matching entry in the QQ Music
catalog and returns its decoded, cleaned-up synchronized lyrics.

## Core Components

**Matching (`lyric_resolver.matching`)**
- Query normalization: noise removal for titles, multi-artist splitting
- Candidate scoring and selection with exact, close and partial title rules

**Lyrics (`lyric_resolver.lyrics`)**
- Ciphertext extraction from malformed lyric documents
- Decryption pipeline: hex, triple-DES, zlib, UTF-8, XML recovery
- LRC clean-up removing headers, credits and licence notices

**Orchestration (`lyric_resolver.service`)**
- Override table, retrieval strategies, lyric download and result assembly

## Usage

    from lyric_resolver.service import get_lyrics_service

    result = get_lyrics_service().lookup("無條件 (Live)", "陳奕迅")
    print(result.synced_lyrics)

or from the command line:

    lyric-resolver lookup "無條件 (Live)" "陳奕迅"
"""

__version__ = "1.0.0"
__author__ = "lyric-resolver contributors"
__license__ = "MIT"
