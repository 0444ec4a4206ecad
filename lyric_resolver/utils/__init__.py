"""
Utilities package
Logging setup and small helpers shared by the matching and lyrics modules
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    set_console_verbose,
    log_performance,
    get_current_log_file
)
from .helpers import (
    is_hex,
    is_blank,
    first_non_empty,
    parse_duration,
    parse_duration_string,
    retry_on_failure
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'set_console_verbose',
    'log_performance',
    'get_current_log_file',

    # Helper exports
    'is_hex',
    'is_blank',
    'first_non_empty',
    'parse_duration',
    'parse_duration_string',
    'retry_on_failure',
]
