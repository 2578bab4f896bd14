"""
uniterm Core Module

Core components shared by every layer:
- Cancellation token
- Configuration loader
"""

from .cancellation import CancellationToken, ensure_token
from .config_loader import (
    ConfigLoader,
    Config,
    PathsConfig,
    HistoryConfig,
    LoggingConfig,
    CompletionConfig,
    CommandsConfig,
)

__all__ = [
    # Cancellation
    'CancellationToken',
    'ensure_token',
    # Config
    'ConfigLoader',
    'Config',
    'PathsConfig',
    'HistoryConfig',
    'LoggingConfig',
    'CompletionConfig',
    'CommandsConfig',
]
