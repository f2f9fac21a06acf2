"""
Notifier Common Module

Shared configuration and event schemas.
"""

from .config import NotifierConfig, load_config

__all__ = [
    "NotifierConfig",
    "load_config",
]
