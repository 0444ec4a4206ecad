"""
Lyric payload handling

- extractor: find the hex ciphertext in a lyric document
- decoder: hex -> triple-DES -> zlib -> UTF-8 -> lyric text
- filters: QRC to LRC conversion and LRC clean-up
"""

from .decoder import LyricDecoder, StageResult, decode_lyric, get_lyric_decoder
from .extractor import extract_ciphertext, extract_all_ciphertexts
from .filters import filter_lyrics, extract_credits, qrc_to_lrc

__all__ = [
    'LyricDecoder',
    'StageResult',
    'decode_lyric',
    'get_lyric_decoder',
    'extract_ciphertext',
    'extract_all_ciphertexts',
    'filter_lyrics',
    'extract_credits',
    'qrc_to_lrc',
]
