"""
Shared HTTP plumbing for the catalog providers
"""

import requests
from typing import Optional

from ..config.settings import get_settings
from ..exceptions import ProviderError
from ..utils.helpers import retry_on_failure
from ..utils.logger import get_logger


class ServerError(requests.exceptions.HTTPError):
    """5xx answer; the only HTTP status worth retrying"""


# Failures that may succeed on a later attempt
RETRYABLE_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    ServerError,
)


class BaseProvider:
    """
    requests.Session owner with the catalog headers and retry settings

    Subclasses call _send() for a single request with retries. Transport
    errors are re-raised after the last attempt; the public provider methods
    catch them, log a warning and return an empty result.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.settings = get_settings()
        self.logger = get_logger(self.__class__.__module__)

        self.timeout = self.settings.provider.timeout
        self.max_retries = max(1, int(self.settings.network.max_retries))
        self.retry_delay = self.settings.network.retry_delay

        # HTTP session
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': self.settings.network.user_agent,
            'Referer': self.settings.network.referer,
        })

    @staticmethod
    def _require_url(url: str, setting: str) -> str:
        if not url:
            raise ProviderError(f"Endpoint {setting} is not configured", details={'setting': setting})
        return url

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Perform one HTTP request

        Connection errors, timeouts and 5xx answers are retried; 4xx answers
        fail on the first attempt.

        Raises:
            requests.exceptions.RequestException: After the last failed attempt
        """
        @retry_on_failure(
            max_attempts=self.max_retries,
            delay=self.retry_delay,
            backoff=2.0,
            exceptions=RETRYABLE_ERRORS
        )
        def attempt() -> requests.Response:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as e:
                if response.status_code >= 500:
                    raise ServerError(str(e), response=response) from e
                raise
            return response

        return attempt()

    def close(self) -> None:
        self.session.close()
