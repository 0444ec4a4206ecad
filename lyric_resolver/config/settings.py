"""
Configuration management for lyric-resolver

Settings are loaded from the first YAML file found among the usual locations
and then overridden by environment variables (a .env file in the working
directory is honoured). The configuration is organized into dataclass
sections:

- provider: catalog search and lyric download endpoints
- matching: retrieval strategy tuning
- lyrics: post-processing of decoded lyrics
- network: HTTP headers and retry behaviour
- logging: console and file logging
- overrides: optional user override table

Environment variables:
    LYRIC_RESOLVER_SEARCH_URL   provider.search_url
    LYRIC_RESOLVER_LYRIC_URL    provider.lyric_url
    LYRIC_RESOLVER_PLAIN_URL    provider.plain_lyric_url
    LYRIC_RESOLVER_TIMEOUT      provider.timeout (seconds)
    LYRIC_RESOLVER_LOG_LEVEL    logging.level
    LYRIC_RESOLVER_OVERRIDES    overrides.file
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class ProviderConfig:
    """
    Catalog endpoints

    search_url answers keyword searches with {"code": 200, "data": [...]};
    song_url resolves a catalog id or mid to its metadata; lyric_url serves
    the encrypted lyric document; plain_lyric_url serves ready-made LRC as
    {"code": 200, "data": {"lrc": ..., "trans": ...}}.
    """
    search_url: str = "https://api.vkeys.cn/v2/music/tencent/search/song"
    song_url: str = "https://c.y.qq.com/v8/fcg-bin/fcg_play_single_song.fcg"
    lyric_url: str = "https://c.y.qq.com/qqmusic/fcgi-bin/lyric_download.fcg"
    plain_lyric_url: str = "https://api.vkeys.cn/v2/music/tencent/lyric"
    search_limit: int = 3
    timeout: float = 10


@dataclass
class MatchingConfig:
    """Retrieval strategy tuning"""
    strategy_delay: float = 0.2  # seconds between failed strategies


@dataclass
class LyricsConfig:
    """Decoded lyric post-processing"""
    filter_lyrics: bool = True
    include_romanization: bool = False


@dataclass
class NetworkConfig:
    """
    Network and HTTP configuration settings

    The lyric endpoint rejects requests without a browser-like user agent
    and a catalog referer.
    """
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; WOW64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/63.0.3239.132 Safari/537.36"
    )
    referer: str = "https://c.y.qq.com/"
    max_retries: int = 2
    retry_delay: float = 0.5


@dataclass
class LoggingConfig:
    """Logging configuration and output settings"""
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class OverridesConfig:
    """Optional user override table merged over the packaged one"""
    file: str = ""


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from YAML and environment variables and exposes them as
    dataclass sections (settings.provider.search_url, ...).
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".lyric-resolver"
        self.loaded_from: Optional[Path] = None
        self.warnings: List[str] = []

        self.provider = ProviderConfig()
        self.matching = MatchingConfig()
        self.lyrics = LyricsConfig()
        self.network = NetworkConfig()
        self.logging = LoggingConfig()
        self.overrides = OverridesConfig()

        self._load_config()
        self._load_environment_variables()

    def _sections(self) -> Dict[str, Any]:
        return {
            'provider': self.provider,
            'matching': self.matching,
            'lyrics': self.lyrics,
            'network': self.network,
            'logging': self.logging,
            'overrides': self.overrides,
        }

    def _load_config(self) -> None:
        """
        Load configuration from the first YAML file found

        An explicitly requested file that does not exist is reported as a
        warning; default locations are skipped silently.
        """
        if self.config_path and not Path(self.config_path).exists():
            self.warnings.append(f"Config file not found: {self.config_path}")

        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml"),
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    self.loaded_from = Path(path)
                    break
                except (OSError, yaml.YAMLError) as e:
                    self.warnings.append(f"Failed to load config from {path}: {e}")

        if not isinstance(config_data, dict):
            self.warnings.append("Config file must contain a mapping of sections")
            config_data = {}

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only keys that exist on the matching section are applied; unknown
        sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """Environment variables take precedence over file-based configuration"""
        env_mappings = {
            'LYRIC_RESOLVER_SEARCH_URL': lambda v: setattr(self.provider, 'search_url', v),
            'LYRIC_RESOLVER_LYRIC_URL': lambda v: setattr(self.provider, 'lyric_url', v),
            'LYRIC_RESOLVER_PLAIN_URL': lambda v: setattr(self.provider, 'plain_lyric_url', v),
            'LYRIC_RESOLVER_TIMEOUT': lambda v: setattr(self.provider, 'timeout', float(v)),
            'LYRIC_RESOLVER_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v.upper()),
            'LYRIC_RESOLVER_OVERRIDES': lambda v: setattr(self.overrides, 'file', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                try:
                    setter(value)
                except ValueError:
                    self.warnings.append(f"Ignoring invalid value for {env_var}: {value!r}")

    def get_config_directory(self) -> Path:
        """Expanded per-user configuration directory"""
        return self.config_dir.expanduser()

    def get_overrides_path(self) -> Optional[Path]:
        """Expanded path of the user override table, None when not configured"""
        if not self.overrides.file:
            return None
        return Path(self.overrides.file).expanduser()

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """All sections as plain dictionaries"""
        return {name: asdict(section) for name, section in self._sections().items()}

    def get_validation_errors(self) -> List[str]:
        """
        Check configuration values

        Returns:
            List of human-readable problems (empty when the configuration is valid)
        """
        errors = []

        for name in ('search_url', 'song_url', 'lyric_url', 'plain_lyric_url'):
            url = getattr(self.provider, name)
            if not url or not str(url).startswith(('http://', 'https://')):
                errors.append(f"provider.{name} must be an http(s) URL, got {url!r}")

        if not isinstance(self.provider.search_limit, int) or self.provider.search_limit < 1:
            errors.append(f"provider.search_limit must be a positive integer: {self.provider.search_limit}")

        if not isinstance(self.provider.timeout, (int, float)) or self.provider.timeout <= 0:
            errors.append(f"provider.timeout must be positive: {self.provider.timeout}")

        if not isinstance(self.matching.strategy_delay, (int, float)) or self.matching.strategy_delay < 0:
            errors.append(f"matching.strategy_delay must not be negative: {self.matching.strategy_delay}")

        if not isinstance(self.network.max_retries, int) or self.network.max_retries < 1:
            errors.append(f"network.max_retries must be at least 1: {self.network.max_retries}")

        if str(self.logging.level).upper() not in VALID_LOG_LEVELS:
            errors.append(f"Invalid logging level: {self.logging.level}")

        overrides_path = self.get_overrides_path()
        if overrides_path and not overrides_path.exists():
            errors.append(f"Override file not found: {overrides_path}")

        return errors

    def validate(self) -> bool:
        """
        Validate current configuration

        Returns:
            True if configuration is valid, False otherwise
        """
        errors = self.get_validation_errors()

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True

    def __str__(self) -> str:
        sections = [
            f"Search: {self.provider.search_url}",
            f"Limit: {self.provider.search_limit}",
            f"Filter: {'on' if self.lyrics.filter_lyrics else 'off'}",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance"""
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files and environment

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
