"""
Tests for settings loading and logging setup
"""

import logging

import yaml

from lyric_resolver.config.settings import Settings
from lyric_resolver.utils.logger import (
    ConsoleMessageFilter,
    get_current_log_file,
    get_logger,
    parse_size,
    setup_logging,
)


class TestSettings:
    """Test configuration loading"""

    def test_defaults(self, temp_dir):
        """Test default values without a config file"""
        settings = Settings(str(temp_dir / "absent.yaml"))

        assert settings.provider.search_limit >= 1
        assert settings.lyrics.filter_lyrics in (True, False)
        assert any("not found" in warning for warning in settings.warnings)

    def test_yaml_config(self, temp_dir):
        """Test values from a YAML file are applied"""
        config_file = temp_dir / "config.yaml"
        config_file.write_text(yaml.safe_dump({
            'provider': {'search_limit': 5, 'unknown_key': 1},
            'matching': {'strategy_delay': 0},
            'lyrics': {'filter_lyrics': False},
            'unknown_section': {'x': 1},
        }), encoding='utf-8')

        settings = Settings(str(config_file))

        assert settings.loaded_from == config_file
        assert settings.provider.search_limit == 5
        assert settings.matching.strategy_delay == 0
        assert settings.lyrics.filter_lyrics is False
        assert not hasattr(settings.provider, 'unknown_key')

    def test_environment_override(self, temp_dir, monkeypatch):
        """Test environment variables take precedence"""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("provider:\n  timeout: 3\n", encoding='utf-8')
        monkeypatch.setenv('LYRIC_RESOLVER_TIMEOUT', '7.5')
        monkeypatch.setenv('LYRIC_RESOLVER_LOG_LEVEL', 'debug')

        settings = Settings(str(config_file))

        assert settings.provider.timeout == 7.5
        assert settings.logging.level == 'DEBUG'

    def test_invalid_environment_value(self, temp_dir, monkeypatch):
        """Test unparsable environment values are ignored with a warning"""
        monkeypatch.setenv('LYRIC_RESOLVER_TIMEOUT', 'soon')

        settings = Settings(str(temp_dir / "absent.yaml"))

        assert isinstance(settings.provider.timeout, (int, float))
        assert any('LYRIC_RESOLVER_TIMEOUT' in warning for warning in settings.warnings)

    def test_validation(self, temp_dir):
        """Test invalid values are reported"""
        config_file = temp_dir / "config.yaml"
        config_file.write_text(yaml.safe_dump({
            'provider': {'search_url': 'ftp://x', 'timeout': 0},
            'logging': {'level': 'LOUD'},
            'overrides': {'file': str(temp_dir / "missing.yaml")},
        }), encoding='utf-8')

        settings = Settings(str(config_file))
        errors = settings.get_validation_errors()

        assert len(errors) == 4
        assert settings.validate() is False

    def test_plain_lyric_url(self, temp_dir, monkeypatch):
        """Test the plain lyric endpoint is configurable and validated"""
        monkeypatch.setenv('LYRIC_RESOLVER_PLAIN_URL', 'https://lrc.example.test/lyric')

        settings = Settings(str(temp_dir / "absent.yaml"))
        assert settings.provider.plain_lyric_url == 'https://lrc.example.test/lyric'

        settings.provider.plain_lyric_url = 'lyric'
        errors = settings.get_validation_errors()
        assert any('provider.plain_lyric_url' in error for error in errors)


class TestLogging:
    """Test logging setup"""

    def test_parse_size(self):
        """Test size strings"""
        assert parse_size("10MB") == 10 * 1024 ** 2
        assert parse_size("500 kb") == 500 * 1024
        assert parse_size("1.5GB") == int(1.5 * 1024 ** 3)

    def test_console_filter(self):
        """Test console filtering of technical messages"""
        console_filter = ConsoleMessageFilter()
        info = logging.LogRecord('x', logging.INFO, '', 0, 'msg', (), None)
        warning = logging.LogRecord('x', logging.WARNING, '', 0, 'msg', (), None)

        assert not console_filter.filter(info)
        assert console_filter.filter(warning)

        info.console_output = True
        assert console_filter.filter(info)
        assert ConsoleMessageFilter(verbose=True).filter(
            logging.LogRecord('x', logging.INFO, '', 0, 'msg', (), None)
        )

    def test_file_logging(self, temp_dir):
        """Test messages reach the rotating log file"""
        log_file = temp_dir / "logs" / "resolver.log"
        setup_logging(level="DEBUG", log_file=str(log_file), console_output=False)

        try:
            get_logger("lyric_resolver.test").debug("written to file")
            for handler in logging.getLogger().handlers:
                handler.flush()

            assert get_current_log_file() == log_file
            assert "written to file" in log_file.read_text(encoding='utf-8')
        finally:
            setup_logging(level="INFO", console_output=True)
