"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "addonarr",
    "environment": "dev",
    "http": {
        "timeout_seconds": 8.0,
        "follow_redirects": True,
        "user_agent": "Addonarr/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "storage": {
        "dir": "./.cache/addonarr",
    },
    "addons": {
        "default_urls": ["https://v3-cinemeta.strem.io/manifest.json"],
        "fallback_stream_addon_url": "https://torrentio.strem.fun/manifest.json",
        "canonical_hosts": ["torrentio"],
        "stream_timeout_seconds": 8.0,
        "catalog_page_size": 100,
        "breaker_failure_threshold": 5,
        "breaker_cooldown_seconds": 120.0,
    },
    "debrid": {
        "agent": "addonarr",
        "timeout_seconds": 10.0,
    },
    "player": {
        "external_enabled": False,
        "external_player": "infuse",
        "fallback_player": None,
        "fallback_delay_seconds": 2.0,
        "success_callback": "addonarr://",
        "launch_mode": "client",
    },
}
