"""
Tests for the lyric payload decoder
"""

import pytest

from lyric_resolver.lyrics.decoder import (
    LyricDecoder,
    StageResult,
    decode_lyric,
    decompress,
    decrypt,
    extract_lyric_content,
    strip_bom,
    validate_hex,
)


@pytest.fixture
def decoder():
    return LyricDecoder()


class TestDecodePipeline:
    """Test full decoding of catalog ciphertexts"""

    def test_round_trip_compressed(self, decoder, encrypt):
        """Test a zlib-compressed payload decodes to the original text"""
        text = "[00:01.00]無條件 為你\n[00:05.00]Second line"
        assert decoder.decode(encrypt(text)) == text

    def test_round_trip_raw_deflate(self, decoder, encrypt):
        """Test a raw deflate stream is inflated as well"""
        text = "[00:01.00]Raw deflate line"
        assert decoder.decode(encrypt(text, raw_deflate=True)) == text

    def test_round_trip_uncompressed(self, decoder, encrypt):
        """Test an uncompressed payload is used as-is"""
        text = "Hello lyric without compression"
        assert decoder.decode(encrypt(text, compress=False)) == text

    def test_lowercase_and_whitespace(self, decoder, encrypt):
        """Test lower-case hex surrounded by whitespace is accepted"""
        text = "[00:01.00]Line"
        assert decoder.decode(f"  {encrypt(text).lower()}\n") == text

    def test_bom_stripped(self, decoder, encrypt):
        """Test a leading UTF-8 byte-order mark is removed"""
        payload = b"\xef\xbb\xbf" + "hello".encode("utf-8")
        assert decoder.decode(encrypt(payload, compress=False)) == "hello"

    def test_xml_attribute_extracted(self, decoder, encrypt, make_fragment):
        """Test the LyricContent attribute is extracted and unescaped"""
        fragment = make_fragment("[ti:Song]&#10;[00:01.00]Hello &amp; bye")
        assert decoder.decode(encrypt(fragment)) == "[ti:Song]\n[00:01.00]Hello & bye"

    def test_xml_body_extracted(self, decoder, encrypt):
        """Test the Lyric_1 body is used when there is no attribute"""
        fragment = "<Lyric_1 LyricType=\"1\">  [00:01.00]Body text </Lyric_1>"
        assert decoder.decode(encrypt(fragment)) == "[00:01.00]Body text"

    def test_module_shortcut(self, encrypt):
        """Test decode_lyric uses the global decoder"""
        assert decode_lyric(encrypt("[00:01.00]Shortcut")) == "[00:01.00]Shortcut"


class TestDecodeFailures:
    """Test every failure yields an empty string"""

    @pytest.mark.parametrize("raw", [None, "", "   ", "xyz", "abc", "0g"])
    def test_invalid_hex(self, decoder, raw):
        """Test non-hex and odd-length input"""
        assert decoder.decode(raw) == ""

    def test_invalid_hex_stage(self, decoder):
        """Test the failing stage is reported"""
        result = decoder.decode_detailed("zz")
        assert not result.ok
        assert result.stage == "validate_hex"

    def test_misaligned_ciphertext(self, decoder):
        """Test ciphertext that is not a multiple of the block size"""
        result = decoder.decode_detailed("00" * 7)
        assert result.stage == "decrypt"
        assert decoder.decode("00" * 7) == ""

    def test_invalid_padding(self, decoder):
        """Test a block without valid PKCS#7 padding"""
        from Crypto.Cipher import DES3
        from lyric_resolver.lyrics.decoder import QRC_KEY

        ciphertext = DES3.new(QRC_KEY, DES3.MODE_ECB).encrypt(b"ABCDEFGH").hex()
        result = decoder.decode_detailed(ciphertext)
        assert result.stage == "decrypt"
        assert decoder.decode(ciphertext) == ""

    def test_invalid_utf8(self, decoder, encrypt):
        """Test a payload that is not UTF-8"""
        ciphertext = encrypt(b"\xff\xfe\xfa", compress=False)
        result = decoder.decode_detailed(ciphertext)
        assert result.stage == "decode_utf8"
        assert decoder.decode(ciphertext) == ""


class TestStages:
    """Test individual pipeline stages"""

    def test_validate_hex(self):
        """Test hex validation trims and rejects odd lengths"""
        assert validate_hex(" ABcd ").value == "ABcd"
        assert not validate_hex("ABC").ok

    def test_decrypt_degenerate_key(self):
        """Test a key that degenerates to single DES fails closed"""
        result = decrypt(bytes(8), key=b"12345678" * 3)
        assert not result.ok
        assert result.value is None

    def test_decompress_failure(self):
        """Test uncompressed bytes report a decompress failure"""
        result = decompress(b"Hello")
        assert not result.ok
        assert result.stage == "decompress"

    def test_strip_bom(self):
        """Test only a leading BOM is stripped"""
        assert strip_bom(b"\xef\xbb\xbfabc") == b"abc"
        assert strip_bom(b"abc") == b"abc"

    def test_extract_passthrough(self):
        """Test plain text is returned unchanged"""
        assert extract_lyric_content("[00:01.00]Plain") == "[00:01.00]Plain"

    def test_extract_single_quotes(self):
        """Test single-quoted attributes"""
        assert extract_lyric_content("<Lyric_1 LyricContent='a &quot;b&quot;'/>") == 'a "b"'

    def test_stage_result(self):
        """Test StageResult constructors"""
        assert StageResult.success("x", "s").ok
        failed = StageResult.failure("boom", "s")
        assert not failed.ok
        assert failed.error == "boom"
