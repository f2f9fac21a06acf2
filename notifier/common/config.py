"""
Configuration Management for the Notifier

Loads configuration from ~/.notifier/config.json and environment variables.
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Dict, Any

from .schemas import EmissionPolicy

# Default config paths
CONFIG_DIR = Path.home() / ".notifier"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_WEBHOOK_URL = "http://host.docker.internal:3000/log-post-request"
DEFAULT_BASE_URL = "http://localhost:8080"


@dataclass
class WebhookConfig:
    """Outbound webhook endpoint"""
    url: str = DEFAULT_WEBHOOK_URL
    timeout_ms: int = 2000


@dataclass
class RelayConfig:
    """Change relay configuration"""
    emission_policy: str = EmissionPolicy.ACCUMULATE_ALL.value
    base_url: str = DEFAULT_BASE_URL  # used when the host has no permalink or base URL
    port: int = 3001
    signing_secret: str = ""


@dataclass
class DirectoryConfig:
    """Known users for resolving bare @login mentions"""
    users: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class NotifierConfig:
    """Main Notifier configuration"""
    webhook: WebhookConfig = field(default_factory=WebhookConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)
    log_level: str = "info"

    @property
    def policy(self) -> EmissionPolicy:
        return EmissionPolicy(self.relay.emission_policy)


def _parse_webhook_config(data: dict) -> WebhookConfig:
    """Parse webhook section from config dict"""
    webhook_data = data.get("webhook", {})
    return WebhookConfig(
        url=webhook_data.get("url", DEFAULT_WEBHOOK_URL),
        timeout_ms=int(webhook_data.get("timeout_ms", 2000)),
    )


def _parse_relay_config(data: dict) -> RelayConfig:
    """Parse relay section from config dict"""
    relay_data = data.get("relay", {})
    return RelayConfig(
        emission_policy=relay_data.get("emission_policy", EmissionPolicy.ACCUMULATE_ALL.value),
        base_url=relay_data.get("base_url", DEFAULT_BASE_URL),
        port=int(relay_data.get("port", 3001)),
        signing_secret=relay_data.get("signing_secret", ""),
    )


def _parse_directory_config(data: dict) -> DirectoryConfig:
    """Parse directory section from config dict"""
    directory_data = data.get("directory", {})
    return DirectoryConfig(
        users=list(directory_data.get("users", [])),
    )


def _validate_policy(config: NotifierConfig) -> None:
    """Fall back to accumulate-all on an unknown policy name"""
    try:
        EmissionPolicy(config.relay.emission_policy)
    except ValueError:
        print(f"[Config] Warning: Unknown emission policy {config.relay.emission_policy!r}, "
              f"using {EmissionPolicy.ACCUMULATE_ALL.value}")
        config.relay.emission_policy = EmissionPolicy.ACCUMULATE_ALL.value


def load_config() -> NotifierConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.notifier/config.json)
    3. Default values
    """
    config = NotifierConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.webhook = _parse_webhook_config(data)
            config.relay = _parse_relay_config(data)
            config.directory = _parse_directory_config(data)
            config.log_level = data.get("log_level", "info")
        except (json.JSONDecodeError, IOError, ValueError) as e:
            print(f"[Config] Warning: Failed to load config file: {e}")

    # Environment variable overrides
    if os.getenv("NOTIFIER_WEBHOOK_URL"):
        config.webhook.url = os.getenv("NOTIFIER_WEBHOOK_URL")
    if os.getenv("NOTIFIER_WEBHOOK_TIMEOUT_MS"):
        config.webhook.timeout_ms = int(os.getenv("NOTIFIER_WEBHOOK_TIMEOUT_MS"))

    if os.getenv("NOTIFIER_EMISSION_POLICY"):
        config.relay.emission_policy = os.getenv("NOTIFIER_EMISSION_POLICY")
    if os.getenv("NOTIFIER_BASE_URL"):
        config.relay.base_url = os.getenv("NOTIFIER_BASE_URL")
    if os.getenv("NOTIFIER_PORT"):
        config.relay.port = int(os.getenv("NOTIFIER_PORT"))
    if os.getenv("NOTIFIER_SIGNING_SECRET"):
        config.relay.signing_secret = os.getenv("NOTIFIER_SIGNING_SECRET")

    if os.getenv("NOTIFIER_LOG_LEVEL"):
        config.log_level = os.getenv("NOTIFIER_LOG_LEVEL")

    _validate_policy(config)

    return config
