"""
Catalog search provider

Keyword search goes through the vkeys mirror of the QQ Music search API,
which answers with {"code": 200, "data": [record, ...]}. Metadata for a known
identifier (used by id overrides) comes from the catalog's single-song
endpoint, which answers with {"code": 0, "data": [record]}, sometimes wrapped
in a JSONP callback.
"""

import json
import re
from typing import Any, Dict, List, Optional

import requests

from .base import BaseProvider


SEARCH_OK_CODE = 200

# getOneSongInfoCallback({...}) / callback({...})
_JSONP_WRAPPER = re.compile(r"^\s*[\w$.]+\((.*)\)\s*;?\s*$", re.DOTALL)


def strip_jsonp(text: str) -> str:
    """Return the JSON body of a JSONP response (or the text unchanged)"""
    match = _JSONP_WRAPPER.match(text or "")
    return match.group(1) if match else (text or "")


class SearchProvider(BaseProvider):
    """Keyword search and identifier lookup against the catalog"""

    def __init__(self, session: Optional[requests.Session] = None):
        super().__init__(session)
        self.search_url = self.settings.provider.search_url
        self.song_url = self.settings.provider.song_url
        self.search_limit = self.settings.provider.search_limit

    def search(self, keyword: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Search the catalog for a keyword

        Args:
            keyword: Free-text search keyword ("title artist")
            limit: Maximum number of records (defaults to provider.search_limit)

        Returns:
            Raw candidate records in provider order; empty on any failure
        """
        url = self._require_url(self.search_url, 'provider.search_url')
        keyword = (keyword or "").strip()
        if not keyword:
            return []

        params = {'word': keyword, 'num': limit or self.search_limit}

        try:
            response = self._send('GET', url, params=params)
            payload = response.json()
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Search request failed for '{keyword}': {e}")
            return []
        except ValueError as e:
            self.logger.warning(f"Search returned malformed JSON for '{keyword}': {e}")
            return []

        if not isinstance(payload, dict) or payload.get('code') != SEARCH_OK_CODE:
            code = payload.get('code') if isinstance(payload, dict) else None
            self.logger.warning(f"Search for '{keyword}' returned code {code}")
            return []

        data = payload.get('data') or []
        if isinstance(data, dict):
            # Some API versions nest the list one level deeper
            data = data.get('list') or data.get('song') or []
        if not isinstance(data, list):
            self.logger.warning(f"Search for '{keyword}' returned an unexpected data shape")
            return []

        records = [record for record in data if isinstance(record, dict)]
        self.logger.debug(f"Search '{keyword}': {len(records)} candidates")
        return records

    def get_song(self, identifier: str) -> Optional[Dict[str, Any]]:
        """
        Fetch catalog metadata for a numeric id or a mid

        Best effort: returns None on any failure.

        Args:
            identifier: Numeric song id or alphanumeric mid

        Returns:
            Raw record or None
        """
        identifier = str(identifier or "").strip()
        if not identifier or not self.song_url:
            return None

        params = {
            'songid' if identifier.isdigit() else 'songmid': identifier,
            'tpl': 'yqq_song_detail',
            'format': 'json',
            'g_tk': '5381',
            'loginUin': '0',
            'hostUin': '0',
            'outCharset': 'utf8',
            'notice': '0',
            'platform': 'yqq',
            'needNewCode': '0',
        }

        try:
            response = self._send('GET', self.song_url, params=params)
            payload = json.loads(strip_jsonp(response.text))
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Song lookup failed for {identifier}: {e}")
            return None
        except ValueError as e:
            self.logger.warning(f"Song lookup returned malformed JSON for {identifier}: {e}")
            return None

        data = payload.get('data') if isinstance(payload, dict) else None
        if not data or not isinstance(data, list) or not isinstance(data[0], dict):
            self.logger.debug(f"No catalog entry for {identifier}")
            return None

        return data[0]


# Global search provider instance management
_search_provider: Optional[SearchProvider] = None


def get_search_provider() -> SearchProvider:
    """Get the global search provider instance (singleton pattern)"""
    global _search_provider
    if not _search_provider:
        _search_provider = SearchProvider()
    return _search_provider


def reset_search_provider() -> None:
    """Reset the global search provider (after settings changes, in tests)"""
    global _search_provider
    if _search_provider:
        _search_provider.close()
    _search_provider = None
