"""
Exception classes for lyric-resolver.

This module defines the custom exceptions raised at the boundary of the
application. The matching engine and the lyric decoder never raise these:
both degrade to "no match" or "no lyric" instead. Exceptions only surface
from the orchestration service, the settings loader and the CLI.

Exception Hierarchy:
    LyricResolverError (base)
        ConfigError - Configuration file or override table issues
        ProviderError - Misconfigured search or lyrics provider
        TrackNotFoundError - No catalog entry matched the query
        InvalidQueryError - Track or artist name missing from the request
"""

from typing import Any, Dict, Optional


class LyricResolverError(Exception):
    """
    Base exception for all lyric-resolver errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every lyric-resolver error with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., query, keyword).

    Example:
        try:
            result = service.lookup(track, artist)
        except LyricResolverError as e:
            logger.error(f"Lookup failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'track_name': raw track name from the request
                     - 'artist_name': raw artist name from the request
                     - 'keywords': search keywords that were tried
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LyricResolverError):
    """
    Raised when there's an issue with the configuration or override files.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml has invalid YAML syntax
        - overrides file is not a mapping of "title_artist" keys to identifiers
        - Invalid field values (e.g., negative timeout)

    Example:
        raise ConfigError(
            "Override section 'ids' must be a mapping",
            details={'file_path': '/path/to/overrides.yaml'}
        )
    """
    pass


class ProviderError(LyricResolverError):
    """
    Raised when a search or lyrics provider cannot be used at all.

    Transport failures (timeouts, connection resets, non-200 payloads) are NOT
    reported with this exception: providers log them and return an empty
    result. ProviderError is reserved for misconfiguration that makes every
    request pointless, such as an empty endpoint URL.

    Example:
        raise ProviderError(
            "Search endpoint is not configured",
            details={'setting': 'provider.search_url'}
        )
    """
    pass


class TrackNotFoundError(LyricResolverError):
    """
    Raised when no retrieval strategy produced a matching catalog entry.

    This is the "not found" outcome of a lookup. It is not retried further.

    Example:
        raise TrackNotFoundError(
            "Song not found",
            details={'track_name': 'July', 'artist_name': 'Kris Wu',
                     'keywords': ['July Kris Wu', 'July']}
        )
    """
    pass


class InvalidQueryError(LyricResolverError):
    """
    Raised when the lookup request is missing its track or artist name.

    Example:
        raise InvalidQueryError(
            "Both track name and artist name are required",
            details={'track_name': '', 'artist_name': 'Eason Chan'}
        )
    """
    pass
