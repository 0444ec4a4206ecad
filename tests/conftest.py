"""Test configuration and fixtures"""

import tempfile
import zlib
from pathlib import Path

import pytest
from Crypto.Cipher import DES3
from Crypto.Util.Padding import pad

from lyric_resolver.lyrics.decoder import QRC_KEY


def encrypt_payload(plaintext, compress=True, raw_deflate=False, key=QRC_KEY):
    """
    Produce a hex ciphertext the way the catalog does

    Args:
        plaintext: str or bytes payload
        compress: zlib-compress before encrypting
        raw_deflate: use a raw deflate stream instead of a zlib stream
        key: triple-DES key
    """
    data = plaintext.encode("utf-8") if isinstance(plaintext, str) else plaintext
    if compress:
        if raw_deflate:
            compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
            data = compressor.compress(data) + compressor.flush()
        else:
            data = zlib.compress(data)
    cipher = DES3.new(key, DES3.MODE_ECB)
    return cipher.encrypt(pad(data, 8)).hex().upper()


def qrc_fragment(lyric_text):
    """Decrypted QRC XML fragment carrying lyric_text in its LyricContent attribute"""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<QrcInfos>\n'
        '<QrcHeadInfo SaveTime="1" Version="100"/>\n'
        '<LyricInfo LyricCount="1">\n'
        f'<Lyric_1 LyricType="1" LyricContent="{lyric_text}"/>\n'
        '</LyricInfo>\n'
        '</QrcInfos>'
    )


def lyric_document(content_hex="", trans_hex="", roma_hex=""):
    """Lyric download response wrapping the given ciphertexts"""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<!-- lyric download -->\n'
        '<QrcInfos>\n'
        f'<content><![CDATA[{content_hex}]]></content>\n'
        f'<contentts><![CDATA[{trans_hex}]]></contentts>\n'
        f'<contentroma><![CDATA[{roma_hex}]]></contentroma>\n'
        '</QrcInfos>'
    )


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def encrypt():
    """Encryption helper producing catalog-style hex ciphertexts"""
    return encrypt_payload


@pytest.fixture
def sample_lrc():
    """Decoded lyric with header, credits, markers and filler lines"""
    return "\n".join([
        "[ti:無條件]",
        "[ar:陳奕迅]",
        "[00:00.00]無條件 - 陳奕迅",
        "[00:01.00]词：Writer",
        "[00:02.00]曲：Composer",
        "[00:03.00]编曲：Arranger",
        "[00:10.00]First line",
        "[00:12.00]",
        "[00:13.00]//",
        "[00:14.00]Second line",
        "[00:20.00]【Chorus】",
        "[00:30.00]Third line",
    ])


@pytest.fixture
def sample_records():
    """Raw search results for ("無條件 (Live)", "陳奕迅")"""
    return [
        {
            'id': 1001,
            'mid': '000aaa',
            'song': '無條件 (Live)',
            'singer': [{'name': 'Cover Singer'}],
            'album': {'name': 'Covers'},
            'interval': '4分05秒',
        },
        {
            'id': 97773,
            'mid': '001HpGqo4daJ21',
            'song': '無條件',
            'singer': [{'name': '陳奕迅'}],
            'album': {'name': 'Eason Live'},
            'interval': '4分05秒',
        },
    ]


@pytest.fixture
def make_fragment():
    """Builder for decrypted QRC XML fragments"""
    return qrc_fragment


@pytest.fixture
def make_document():
    """Builder for lyric download documents"""
    return lyric_document
