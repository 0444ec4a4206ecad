"""
Lyric document providers

The QRC download endpoint takes a form-encoded POST with the numeric music id
and answers with the XML-ish document described in lyrics/extractor.py.

The plain lyric endpoint is a JSON API keyed by id or mid that answers with
already decrypted LRC text. It is used when the QRC document yields nothing.
"""

from typing import Dict, Optional

import requests

from .base import BaseProvider


QRC_FORM = {
    'version': '15',
    'miniversion': '82',
    'lrctype': '4',
}

PLAIN_OK_CODE = 200


class LyricsProvider(BaseProvider):
    """Fetches encrypted lyric documents and plain LRC lyrics"""

    def __init__(self, session: Optional[requests.Session] = None):
        super().__init__(session)
        self.lyric_url = self.settings.provider.lyric_url
        self.plain_lyric_url = self.settings.provider.plain_lyric_url

    def fetch_document(self, musicid: str) -> str:
        """
        Download the lyric document of a catalog entry

        Args:
            musicid: Numeric catalog id

        Returns:
            Document text, or "" on any transport failure and for
            non-numeric identifiers (the endpoint only knows numeric ids)
        """
        url = self._require_url(self.lyric_url, 'provider.lyric_url')
        musicid = str(musicid or "").strip()
        if not musicid:
            return ""
        if not musicid.isdigit():
            self.logger.debug(f"Skipping QRC download for non-numeric id {musicid}")
            return ""

        try:
            response = self._send('POST', url, data={**QRC_FORM, 'musicid': musicid})
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Lyric download failed for {musicid}: {e}")
            return ""

        response.encoding = response.encoding or 'utf-8'
        document = response.text or ""
        self.logger.debug(f"Lyric document for {musicid}: {len(document)} characters")
        return document

    def fetch_plain_lyrics(self, identifier: str) -> Dict[str, str]:
        """
        Fetch ready-made LRC lyrics from the plain lyric endpoint

        Args:
            identifier: Numeric catalog id or mid

        Returns:
            {'lrc': ..., 'trans': ...}; both empty on any failure
        """
        empty = {'lrc': "", 'trans': ""}
        identifier = str(identifier or "").strip()
        if not identifier or not self.plain_lyric_url:
            return empty

        params = {'id' if identifier.isdigit() else 'mid': identifier}

        try:
            response = self._send('GET', self.plain_lyric_url, params=params)
            payload = response.json()
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Plain lyric request failed for {identifier}: {e}")
            return empty
        except ValueError as e:
            self.logger.warning(f"Plain lyric endpoint returned malformed JSON for {identifier}: {e}")
            return empty

        if not isinstance(payload, dict) or payload.get('code') != PLAIN_OK_CODE:
            code = payload.get('code') if isinstance(payload, dict) else None
            self.logger.debug(f"Plain lyrics for {identifier} returned code {code}")
            return empty

        data = payload.get('data')
        if not isinstance(data, dict):
            return empty

        return {
            'lrc': data.get('lrc') if isinstance(data.get('lrc'), str) else "",
            'trans': data.get('trans') if isinstance(data.get('trans'), str) else "",
        }


# Global lyrics provider instance management
_lyrics_provider: Optional[LyricsProvider] = None


def get_lyrics_provider() -> LyricsProvider:
    """Get the global lyrics provider instance (singleton pattern)"""
    global _lyrics_provider
    if not _lyrics_provider:
        _lyrics_provider = LyricsProvider()
    return _lyrics_provider


def reset_lyrics_provider() -> None:
    """Reset the global lyrics provider"""
    global _lyrics_provider
    if _lyrics_provider:
        _lyrics_provider.close()
    _lyrics_provider = None
