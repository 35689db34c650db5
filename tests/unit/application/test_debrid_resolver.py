"""Tests for the DebridResolver provider chain."""

from __future__ import annotations

from typing import Any

import pytest

from addonarr.application.use_cases import DebridResolver
from addonarr.domain.entities import (
    AllProvidersExhausted,
    DebridCredential,
    DebridProvider,
    NetworkFailure,
)
from addonarr.infrastructure.debrid import StaticCredentialSource

_MAGNET = "magnet:?xt=urn:btih:abc"


class FakeProvider:
    def __init__(self, provider: DebridProvider, result: Any = None) -> None:
        self.provider = provider
        self._result = result
        self.calls: list[tuple[str, str]] = []
        self.account_ok = True

    async def unrestrict(self, link: str, credential: DebridCredential) -> str | None:
        self.calls.append((link, credential.api_key))
        if isinstance(self._result, BaseException):
            raise self._result
        return self._result

    async def check_account(self, credential: DebridCredential) -> bool:
        if isinstance(self._result, BaseException):
            raise self._result
        return self.account_ok


def _credentials(**keys: str) -> StaticCredentialSource:
    mapping = {
        "rd": DebridProvider.REAL_DEBRID,
        "ad": DebridProvider.ALL_DEBRID,
        "pm": DebridProvider.PREMIUMIZE,
    }
    return StaticCredentialSource({mapping[k]: v for k, v in keys.items()})


class TestResolve:
    @pytest.mark.asyncio
    async def test_only_configured_provider_is_called(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID, "https://rd/x")
        ad = FakeProvider(DebridProvider.ALL_DEBRID, "https://ad/x")
        pm = FakeProvider(DebridProvider.PREMIUMIZE, "https://pm/x")
        resolver = DebridResolver(providers=[rd, ad, pm], credentials=_credentials(pm="pm-key"))

        resolution = await resolver.resolve(_MAGNET)

        assert resolution.url == "https://pm/x"
        assert resolution.provider is DebridProvider.PREMIUMIZE
        assert rd.calls == [] and ad.calls == []
        assert pm.calls == [(_MAGNET, "pm-key")]

    @pytest.mark.asyncio
    async def test_priority_and_short_circuit(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID, None)
        ad = FakeProvider(DebridProvider.ALL_DEBRID, "https://ad/x")
        pm = FakeProvider(DebridProvider.PREMIUMIZE, "https://pm/x")
        # Registration order must not matter.
        resolver = DebridResolver(
            providers=[pm, ad, rd],
            credentials=_credentials(rd="r", ad="a", pm="p"),
        )

        resolution = await resolver.resolve(_MAGNET)

        assert resolution.provider is DebridProvider.ALL_DEBRID
        assert len(rd.calls) == 1
        assert len(ad.calls) == 1
        assert pm.calls == []

    @pytest.mark.asyncio
    async def test_provider_error_continues_chain(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID, NetworkFailure("https://rd", "timeout"))
        ad = FakeProvider(DebridProvider.ALL_DEBRID, "https://ad/x")
        resolver = DebridResolver(providers=[rd, ad], credentials=_credentials(rd="r", ad="a"))

        resolution = await resolver.resolve(_MAGNET)

        assert resolution.url == "https://ad/x"

    @pytest.mark.asyncio
    async def test_nothing_configured(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID, "https://rd/x")
        resolver = DebridResolver(providers=[rd], credentials=_credentials())

        resolution = await resolver.resolve(_MAGNET)

        assert resolution.url is None
        assert rd.calls == []

    @pytest.mark.asyncio
    async def test_blank_key_counts_as_unconfigured(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID, "https://rd/x")
        resolver = DebridResolver(providers=[rd], credentials=_credentials(rd="   "))

        assert resolver.configured() == []
        assert (await resolver.resolve(_MAGNET)).resolved is False


class TestResolveOrRaise:
    @pytest.mark.asyncio
    async def test_raises_with_attempted_providers(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID, None)
        pm = FakeProvider(DebridProvider.PREMIUMIZE, None)
        resolver = DebridResolver(providers=[rd, pm], credentials=_credentials(rd="r", pm="p"))

        with pytest.raises(AllProvidersExhausted) as exc_info:
            await resolver.resolve_or_raise(_MAGNET)

        assert exc_info.value.attempted == ("real-debrid", "premiumize")

    @pytest.mark.asyncio
    async def test_returns_resolution(self) -> None:
        ad = FakeProvider(DebridProvider.ALL_DEBRID, "https://ad/x")
        resolver = DebridResolver(providers=[ad], credentials=_credentials(ad="a"))
        assert (await resolver.resolve_or_raise(_MAGNET)).url == "https://ad/x"


class TestResolveTarget:
    @pytest.mark.asyncio
    async def test_falls_back_to_original(self) -> None:
        resolver = DebridResolver(providers=[], credentials=_credentials())
        target = await resolver.resolve_target("https://cdn/x.mp4")
        assert target.resolved_url == "https://cdn/x.mp4"
        assert target.original_url == "https://cdn/x.mp4"
        assert target.resolving_provider is None

    @pytest.mark.asyncio
    async def test_recomputed_per_call(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID, "https://rd/x")
        resolver = DebridResolver(providers=[rd], credentials=_credentials(rd="r"))
        await resolver.resolve_target(_MAGNET)
        await resolver.resolve_target(_MAGNET)
        assert len(rd.calls) == 2


class TestCredentialCheck:
    @pytest.mark.asyncio
    async def test_valid(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID)
        resolver = DebridResolver(providers=[rd], credentials=_credentials(rd="r"))
        assert await resolver.test_credential(DebridProvider.REAL_DEBRID) is True

    @pytest.mark.asyncio
    async def test_unconfigured(self) -> None:
        rd = FakeProvider(DebridProvider.REAL_DEBRID)
        resolver = DebridResolver(providers=[rd], credentials=_credentials())
        assert await resolver.test_credential(DebridProvider.REAL_DEBRID) is False

    @pytest.mark.asyncio
    async def test_network_failure_is_invalid(self) -> None:
        pm = FakeProvider(DebridProvider.PREMIUMIZE, NetworkFailure("https://pm", "timeout"))
        resolver = DebridResolver(providers=[pm], credentials=_credentials(pm="p"))
        assert await resolver.test_credential(DebridProvider.PREMIUMIZE) is False
