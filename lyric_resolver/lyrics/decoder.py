"""
Lyric payload decoder for the catalog's encrypted QRC lyric format

The lyrics provider delivers every lyric as a hex string embedded in a loosely
formed XML document. Behind the hex is a triple-DES encrypted, usually
zlib-compressed, UTF-8 XML fragment whose LyricContent attribute holds the
actual lyric text. This module reverses that encoding.

Pipeline Stages:

    RawHex -> CipherBytes -> PlainBytes -> NormalizedXmlText -> ExtractedContent

1. validate_hex: trimmed input must be even-length [0-9a-fA-F]+
2. hex_to_bytes: bytes.fromhex
3. decrypt: 3DES-ECB with the fixed 24-byte key, PKCS#7 padding removed
4. decompress: zlib stream, then raw deflate; on failure the decrypted bytes
   are used as-is (not fatal to the pipeline)
5. strip_bom: drop a leading UTF-8 byte-order mark
6. decode_utf8: strict UTF-8 decoding
7. extract_lyric_content: LyricContent attribute, else Lyric_1 body, else raw text

Error Handling:
Every fallible stage returns a StageResult instead of raising. The pipeline
stops at the first failed stage and the public decode() returns an empty
string: a partial plaintext is never returned. Failures are expected and
frequent (many catalog entries carry no lyric at all), so they are logged at
DEBUG level only.

XML Recovery:
The decrypted fragment is extracted with regular expressions, not an XML
parser. The feed is known to emit broken attribute quoting and comments that a
conformant parser rejects outright.
"""

import html
import re
import zlib
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from Crypto.Cipher import DES3
from Crypto.Util.Padding import unpad

from ..utils.helpers import is_hex
from ..utils.logger import get_logger


# Well-known 24-byte key of the QRC lyric format
QRC_KEY = b"!@#)(*$%123ZXC!@!@#)(NHL"

DES_BLOCK_SIZE = 8
UTF8_BOM = b"\xef\xbb\xbf"

# LyricContent="..." or LyricContent='...'
_LYRIC_CONTENT_ATTRIBUTE = re.compile(r"LyricContent=([\"'])(.*?)\1", re.DOTALL)
_LYRIC_CONTAINER_BODY = re.compile(r"<Lyric_1[^>]*>(.*?)</Lyric_1>", re.DOTALL)
_XML_MARKERS = ("<?xml", "<Lyric_1", "LyricContent=")

T = TypeVar("T")


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """
    Outcome of one decoding stage

    Attributes:
        value: Stage output when the stage succeeded
        error: Failure description when it did not
        stage: Name of the stage that produced this result
    """
    value: Optional[T] = None
    error: Optional[str] = None
    stage: str = ""

    @property
    def ok(self) -> bool:
        """True if the stage produced a value"""
        return self.error is None and self.value is not None

    @classmethod
    def success(cls, value: T, stage: str) -> "StageResult[T]":
        return cls(value=value, stage=stage)

    @classmethod
    def failure(cls, error: str, stage: str) -> "StageResult[T]":
        return cls(error=error, stage=stage)


def validate_hex(raw: Optional[str]) -> StageResult[str]:
    """Accept only trimmed, even-length hexadecimal text"""
    text = (raw or "").strip()
    if not text:
        return StageResult.failure("empty ciphertext", "validate_hex")
    if not is_hex(text):
        return StageResult.failure("ciphertext is not an even-length hex string", "validate_hex")
    return StageResult.success(text, "validate_hex")


def hex_to_bytes(text: str) -> StageResult[bytes]:
    """Decode validated hex text to bytes"""
    try:
        return StageResult.success(bytes.fromhex(text), "hex_to_bytes")
    except ValueError as e:
        return StageResult.failure(f"hex decoding failed: {e}", "hex_to_bytes")


def decrypt(cipher_bytes: bytes, key: bytes = QRC_KEY) -> StageResult[bytes]:
    """
    Decrypt with triple-DES in ECB mode and remove PKCS#7 padding

    Fails closed: misaligned input, a bad key or invalid padding all produce
    a failed StageResult and no plaintext.

    Args:
        cipher_bytes: Raw ciphertext
        key: 24-byte triple-DES key

    Returns:
        StageResult holding the unpadded plaintext
    """
    if not cipher_bytes or len(cipher_bytes) % DES_BLOCK_SIZE:
        return StageResult.failure(
            f"ciphertext length {len(cipher_bytes)} is not a multiple of {DES_BLOCK_SIZE}",
            "decrypt",
        )

    try:
        cipher = DES3.new(key, DES3.MODE_ECB)
        plain = unpad(cipher.decrypt(cipher_bytes), DES_BLOCK_SIZE, style="pkcs7")
    except ValueError as e:
        return StageResult.failure(f"triple-DES decryption failed: {e}", "decrypt")

    return StageResult.success(plain, "decrypt")


def decompress(plain_bytes: bytes) -> StageResult[bytes]:
    """
    Inflate decrypted bytes, trying a zlib stream first and raw deflate second

    A failure here only means the payload was not compressed (or is corrupt);
    the caller falls back to the input bytes.
    """
    try:
        return StageResult.success(zlib.decompress(plain_bytes), "decompress")
    except zlib.error as zlib_error:
        try:
            return StageResult.success(zlib.decompress(plain_bytes, -zlib.MAX_WBITS), "decompress")
        except zlib.error as deflate_error:
            return StageResult.failure(
                f"zlib: {zlib_error}; raw deflate: {deflate_error}", "decompress"
            )


def strip_bom(data: bytes) -> bytes:
    """Drop a leading UTF-8 byte-order mark"""
    return data[len(UTF8_BOM):] if data.startswith(UTF8_BOM) else data


def decode_utf8(data: bytes) -> StageResult[str]:
    """Strict UTF-8 decoding"""
    try:
        return StageResult.success(data.decode("utf-8"), "decode_utf8")
    except UnicodeDecodeError as e:
        return StageResult.failure(f"payload is not valid UTF-8: {e}", "decode_utf8")


def looks_like_xml(text: str) -> bool:
    """True if text carries an XML declaration or the lyric container markup"""
    return any(marker in text for marker in _XML_MARKERS)


def extract_lyric_content(text: str) -> str:
    """
    Pull the lyric text out of a decrypted QRC XML fragment

    Prefers the LyricContent attribute, then the inner text of the Lyric_1
    element. Text that does not look like XML, or XML matching neither
    pattern, is returned unchanged.

    Args:
        text: Decoded payload

    Returns:
        Extracted lyric text
    """
    if not looks_like_xml(text):
        return text

    match = _LYRIC_CONTENT_ATTRIBUTE.search(text)
    if match:
        return html.unescape(match.group(2))

    match = _LYRIC_CONTAINER_BODY.search(text)
    if match:
        return html.unescape(match.group(1).strip())

    return text


class LyricDecoder:
    """
    Decoder for hex-encoded, triple-DES encrypted lyric payloads

    Holds only its key and logger, so one instance can be shared freely.
    """

    def __init__(self, key: bytes = QRC_KEY):
        """
        Initialize the decoder

        Args:
            key: 24-byte triple-DES key (defaults to the QRC key)
        """
        self.key = key
        self.logger = get_logger(__name__)

    def decode_detailed(self, raw_hex: Optional[str]) -> StageResult[str]:
        """
        Run the full pipeline and return the final stage result

        Useful for diagnostics: a failed result names the stage that failed.

        Args:
            raw_hex: Hex-encoded ciphertext

        Returns:
            StageResult holding the extracted lyric text
        """
        validated = validate_hex(raw_hex)
        if not validated.ok:
            return validated

        cipher_bytes = hex_to_bytes(validated.value)
        if not cipher_bytes.ok:
            return StageResult.failure(cipher_bytes.error, cipher_bytes.stage)

        plain = decrypt(cipher_bytes.value, self.key)
        if not plain.ok:
            return StageResult.failure(plain.error, plain.stage)

        inflated = decompress(plain.value)
        if inflated.ok:
            payload = inflated.value
        else:
            self.logger.debug(f"Payload not compressed, using decrypted bytes ({inflated.error})")
            payload = plain.value

        text = decode_utf8(strip_bom(payload))
        if not text.ok:
            return text

        return StageResult.success(extract_lyric_content(text.value), "extract")

    def decode(self, raw_hex: Optional[str]) -> str:
        """
        Decode a hex ciphertext to lyric text

        Args:
            raw_hex: Hex-encoded ciphertext

        Returns:
            Decoded lyric text, or an empty string if any stage failed
        """
        result = self.decode_detailed(raw_hex)
        if not result.ok:
            self.logger.debug(f"Lyric decoding failed at {result.stage}: {result.error}")
            return ""
        return result.value


# Global decoder instance management
_decoder_instance: Optional[LyricDecoder] = None


def get_lyric_decoder() -> LyricDecoder:
    """Get the global lyric decoder instance (singleton pattern)"""
    global _decoder_instance
    if not _decoder_instance:
        _decoder_instance = LyricDecoder()
    return _decoder_instance


def decode_lyric(raw_hex: Optional[str]) -> str:
    """Decode a hex ciphertext with the global decoder; "" on any failure"""
    return get_lyric_decoder().decode(raw_hex)
