"""
Configuration package for lyric-resolver

settings.py holds the application settings (YAML files, environment
variables, .env). overrides.py holds the static override table; it is
imported directly from lyric_resolver.config.overrides because it depends on
the logging utilities, which in turn depend on the settings.

Usage:

    from lyric_resolver.config import get_settings

    settings = get_settings()
    timeout = settings.provider.timeout
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',
    'reload_settings',
    'Settings',
]
