"""
Tests for query normalization
"""

import pytest

from lyric_resolver.matching.normalizer import (
    NormalizedQuery,
    contains_cjk,
    extract_core_name,
    leading_cjk_run,
    longest_cjk_run,
    normalize_artists,
    normalize_track_name,
)


class TestNormalizeTrackName:
    """Test noise removal from track titles"""

    @pytest.mark.parametrize("raw,expected", [
        ("無條件 (Live)", "無條件"),
        ("Yesterday - Remastered 2009", "Yesterday"),
        ("Song - Japanese Version (Live)", "Song"),
        ("Title - 《Drama》主题曲", "Title"),
        ("Paradise - From the Motion Picture", "Paradise"),
        ("Song (feat. Someone) - Radio Edit", "Song"),
        ("Plain Title", "Plain Title"),
    ])
    def test_noise_removal(self, raw, expected):
        """Test annotation suffixes and brackets are stripped"""
        assert normalize_track_name(raw) == expected

    def test_whitespace_collapsed(self):
        """Test internal whitespace runs collapse to one space"""
        assert normalize_track_name("Hello   (Live)   World") == "Hello World"

    def test_empty_input(self):
        """Test empty input stays empty"""
        assert normalize_track_name("") == ""

    @pytest.mark.parametrize("raw", ["《七里香》", "(Live)", "---", "   ", "- Remastered"])
    def test_never_empty_for_non_empty_input(self, raw):
        """Test a title that is entirely noise still normalizes to something"""
        assert normalize_track_name(raw) != ""

    def test_all_noise_falls_back_to_original_token(self):
        """Test the fallback keeps the original text before the first separator"""
        assert normalize_track_name("(Live)") == "(Live)"
        assert normalize_track_name("---") == "---"

    def test_idempotent_on_clean_title(self):
        """Test a normalized title normalizes to itself"""
        once = normalize_track_name("無條件 (Live) - Remastered")
        assert normalize_track_name(once) == once


class TestNormalizeArtists:
    """Test multi-artist splitting"""

    def test_split_on_separators(self):
        """Test comma, ampersand and the Chinese conjunction split artists"""
        assert normalize_artists("A & B, C") == ("A", "B", "C")
        assert normalize_artists("周杰伦和费玉清") == ("周杰伦", "费玉清")

    def test_case_insensitive_dedup_keeps_first_casing(self):
        """Test duplicates differing only by case are dropped"""
        assert normalize_artists("Jay Chou, jay chou") == ("Jay Chou",)

    def test_separator_only_input(self):
        """Test input made only of separators is kept verbatim"""
        assert normalize_artists("&") == ("&",)

    def test_empty_input(self):
        """Test empty input yields no artists"""
        assert normalize_artists("") == ()


class TestCoreName:
    """Test core name extraction and CJK helpers"""

    def test_ascii_title(self):
        """Test Latin titles keep the shorter normalized form"""
        assert extract_core_name("Hello World") == "Hello World"
        assert extract_core_name("Yesterday - Remastered") == "Yesterday"

    def test_cjk_title(self):
        """Test CJK titles reduce to the longest CJK run"""
        assert extract_core_name("無條件 (Live)") == "無條件"
        assert extract_core_name("Live 好久不见 版") == "好久不见"

    def test_mixed_title_without_cjk(self):
        """Test non-Latin, non-CJK titles go through the fallback chain"""
        assert extract_core_name("Hello (Live)") == "Hello"
        assert extract_core_name("123") == "123"

    def test_cjk_helpers(self):
        """Test CJK detection and run extraction"""
        assert contains_cjk("abc 無條件")
        assert not contains_cjk("abc")
        assert not contains_cjk("")
        assert leading_cjk_run("ab 你好 世界和平") == "你好"
        assert leading_cjk_run("hello world") == "hello"
        assert longest_cjk_run("你好 世界和平") == "世界和平"
        assert longest_cjk_run("abc") == ""


class TestNormalizedQuery:
    """Test the immutable query bundle"""

    def test_from_raw(self):
        """Test the query carries normalized title, variants and artists"""
        query = NormalizedQuery.from_raw("無條件 (Live)", "陳奕迅")

        assert query.core_title == "無條件"
        assert query.title_variants == ("無條件", "無條件 (Live)")
        assert query.artists == ("陳奕迅",)

    def test_variants_are_unique(self):
        """Test duplicate variants collapse"""
        query = NormalizedQuery.from_raw("Hello", "Adele")
        assert query.title_variants == ("Hello",)

    def test_has_artist(self):
        """Test artist membership is case-insensitive"""
        query = NormalizedQuery.from_raw("Song", "Jay Chou & Lara")
        assert query.has_artist("jay chou")
        assert query.has_artist("LARA")
        assert not query.has_artist("Someone")

    def test_frozen(self):
        """Test the query cannot be mutated"""
        query = NormalizedQuery.from_raw("Song", "Artist")
        with pytest.raises(AttributeError):
            query.core_title = "Other"
