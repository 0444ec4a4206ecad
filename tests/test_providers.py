"""
Tests for the catalog HTTP providers
"""

from unittest.mock import Mock, patch

import pytest
import requests

from lyric_resolver.exceptions import ProviderError
from lyric_resolver.providers.lyrics import LyricsProvider
from lyric_resolver.providers.search import SearchProvider, strip_jsonp


def make_session(json_payload=None, text="", error=None, status_code=200):
    """Mock requests.Session answering every request the same way"""
    session = Mock()
    session.headers = {}

    response = Mock()
    response.json.return_value = json_payload
    response.text = text
    response.encoding = 'utf-8'
    response.status_code = status_code
    response.raise_for_status.return_value = None

    if error is not None:
        session.request.side_effect = error
    else:
        session.request.return_value = response
    return session


class TestSearchProvider:
    """Test keyword search"""

    def test_session_headers(self):
        """Test the catalog headers are set on the session"""
        session = make_session()
        SearchProvider(session=session)
        assert 'User-Agent' in session.headers
        assert session.headers['Referer'].startswith('https://')

    def test_search_returns_records(self, sample_records):
        """Test records are returned in provider order"""
        session = make_session({'code': 200, 'data': sample_records + ['junk']})
        provider = SearchProvider(session=session)

        assert provider.search("無條件 陳奕迅", limit=5) == sample_records

        method, url = session.request.call_args[0]
        assert method == 'GET'
        assert url == provider.search_url
        assert session.request.call_args[1]['params'] == {'word': '無條件 陳奕迅', 'num': 5}

    def test_nested_data(self, sample_records):
        """Test data nested under a list key"""
        session = make_session({'code': 200, 'data': {'list': sample_records}})
        assert SearchProvider(session=session).search("keyword") == sample_records

    def test_error_code(self):
        """Test a non-success code yields no records"""
        session = make_session({'code': 500, 'data': [{'name': 'x'}]})
        assert SearchProvider(session=session).search("keyword") == []

    def test_malformed_json(self):
        """Test an unparsable body yields no records"""
        session = make_session()
        session.request.return_value.json.side_effect = ValueError("bad json")
        assert SearchProvider(session=session).search("keyword") == []

    @patch('lyric_resolver.utils.helpers.time.sleep')
    def test_transport_error(self, mock_sleep):
        """Test connection failures are retried and then reported as empty"""
        session = make_session(error=requests.exceptions.ConnectionError("down"))
        provider = SearchProvider(session=session)

        assert provider.search("keyword") == []
        assert session.request.call_count == provider.max_retries

    def test_blank_keyword(self):
        """Test blank keywords are not sent"""
        session = make_session()
        assert SearchProvider(session=session).search("  ") == []
        session.request.assert_not_called()

    def test_missing_endpoint(self):
        """Test an unconfigured endpoint raises ProviderError"""
        provider = SearchProvider(session=make_session())
        provider.search_url = ""
        with pytest.raises(ProviderError):
            provider.search("keyword")


class TestSongLookup:
    """Test metadata lookup for override identifiers"""

    def test_jsonp_response(self):
        """Test a JSONP-wrapped answer is unwrapped"""
        text = 'getOneSongInfoCallback({"code": 0, "data": [{"id": 97773, "mid": "001HpGqo4daJ21"}]})'
        session = make_session(text=text)
        provider = SearchProvider(session=session)

        assert provider.get_song("001HpGqo4daJ21") == {'id': 97773, 'mid': '001HpGqo4daJ21'}
        assert session.request.call_args[1]['params']['songmid'] == '001HpGqo4daJ21'

    def test_numeric_identifier(self):
        """Test numeric identifiers are sent as songid"""
        session = make_session(text='{"code": 0, "data": []}')
        provider = SearchProvider(session=session)

        assert provider.get_song("97773") is None
        assert session.request.call_args[1]['params']['songid'] == '97773'

    def test_strip_jsonp(self):
        """Test JSONP unwrapping leaves plain JSON alone"""
        assert strip_jsonp('cb({"a": 1});') == '{"a": 1}'
        assert strip_jsonp('{"a": 1}') == '{"a": 1}'
        assert strip_jsonp(None) == ''


class TestLyricsProvider:
    """Test lyric document download"""

    def test_fetch_document(self, make_document):
        """Test the document is requested by POST with the music id"""
        document = make_document("AAAA")
        session = make_session(text=document)
        provider = LyricsProvider(session=session)

        assert provider.fetch_document("97773") == document

        method, url = session.request.call_args[0]
        assert method == 'POST'
        assert url == provider.lyric_url
        form = session.request.call_args[1]['data']
        assert form['musicid'] == '97773'
        assert form['lrctype'] == '4'

    @patch('lyric_resolver.utils.helpers.time.sleep')
    def test_server_error_retried(self, mock_sleep):
        """Test 5xx answers are retried and then yield an empty document"""
        session = make_session(text="oops", status_code=503)
        session.request.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError("503")
        provider = LyricsProvider(session=session)

        assert provider.fetch_document("1") == ""
        assert session.request.call_count == provider.max_retries

    @patch('lyric_resolver.utils.helpers.time.sleep')
    def test_client_error_not_retried(self, mock_sleep):
        """Test 4xx answers fail on the first attempt"""
        session = make_session(text="missing", status_code=404)
        session.request.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError("404")

        assert LyricsProvider(session=session).fetch_document("1") == ""
        assert session.request.call_count == 1
        mock_sleep.assert_not_called()

    def test_blank_id(self):
        """Test a blank id is not requested"""
        session = make_session()
        assert LyricsProvider(session=session).fetch_document("") == ""
        session.request.assert_not_called()

    def test_mid_not_posted(self):
        """Test a mid is never sent as the numeric music id"""
        session = make_session(text="<content>AAAA</content>")
        assert LyricsProvider(session=session).fetch_document("001HpGqo4daJ21") == ""
        session.request.assert_not_called()


class TestPlainLyrics:
    """Test the plain LRC endpoint"""

    def test_numeric_id(self):
        """Test numeric identifiers are sent as id and both texts returned"""
        session = make_session({'code': 200, 'data': {'lrc': '[00:01.00]Hi', 'trans': '[00:01.00]你好'}})
        provider = LyricsProvider(session=session)

        assert provider.fetch_plain_lyrics("97773") == {'lrc': '[00:01.00]Hi', 'trans': '[00:01.00]你好'}

        method, url = session.request.call_args[0]
        assert method == 'GET'
        assert url == provider.plain_lyric_url
        assert session.request.call_args[1]['params'] == {'id': '97773'}

    def test_mid(self):
        """Test a mid is sent as mid and a missing translation is empty"""
        session = make_session({'code': 200, 'data': {'lrc': '[00:01.00]Hi', 'trans': None}})

        result = LyricsProvider(session=session).fetch_plain_lyrics("001HpGqo4daJ21")

        assert result == {'lrc': '[00:01.00]Hi', 'trans': ''}
        assert session.request.call_args[1]['params'] == {'mid': '001HpGqo4daJ21'}

    @pytest.mark.parametrize("payload", [
        {'code': 404, 'data': {'lrc': '[00:01.00]Hi'}},
        {'code': 200, 'data': None},
        {'code': 200, 'data': 'lrc'},
        ['not', 'a', 'dict'],
    ])
    def test_unusable_answers(self, payload):
        """Test error codes and odd shapes yield empty texts"""
        session = make_session(payload)
        assert LyricsProvider(session=session).fetch_plain_lyrics("1") == {'lrc': '', 'trans': ''}

    def test_malformed_json(self):
        """Test an unparsable body yields empty texts"""
        session = make_session()
        session.request.return_value.json.side_effect = ValueError("bad json")
        assert LyricsProvider(session=session).fetch_plain_lyrics("1") == {'lrc': '', 'trans': ''}

    def test_blank_id(self):
        """Test a blank identifier is not requested"""
        session = make_session()
        assert LyricsProvider(session=session).fetch_plain_lyrics(" ") == {'lrc': '', 'trans': ''}
        session.request.assert_not_called()
