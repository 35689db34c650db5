"""Credential sources for the debrid chain."""

from __future__ import annotations

from collections.abc import Mapping

from addonarr.domain.entities.stream import DebridCredential, DebridProvider
from addonarr.infrastructure.config.schema import DebridConfig


class StaticCredentialSource:
    """Read-only credentials fixed at construction time.

    Empty or whitespace-only keys count as unconfigured.
    """

    def __init__(self, keys: Mapping[DebridProvider, str | None]) -> None:
        self._credentials = {
            provider: DebridCredential(provider=provider, api_key=key.strip())
            for provider, key in keys.items()
            if key and key.strip()
        }

    @classmethod
    def from_config(cls, config: DebridConfig) -> StaticCredentialSource:
        def _secret(value) -> str | None:
            return value.get_secret_value() if value is not None else None

        return cls(
            {
                DebridProvider.REAL_DEBRID: _secret(config.real_debrid_api_key),
                DebridProvider.ALL_DEBRID: _secret(config.all_debrid_api_key),
                DebridProvider.PREMIUMIZE: _secret(config.premiumize_api_key),
            }
        )

    def get(self, provider: DebridProvider) -> DebridCredential | None:
        return self._credentials.get(provider)

    def configured(self) -> list[DebridProvider]:
        return list(self._credentials)
