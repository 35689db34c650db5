"""Tests for quality label detection and display hints."""

from __future__ import annotations

import pytest

from addonarr.infrastructure.streams.quality import (
    detect_quality,
    seed_hint,
    size_hint,
    source_hint,
)


class TestDetectQuality:
    @pytest.mark.parametrize(
        ("text", "label"),
        [
            ("Movie.2160p.WEB", "4K"),
            ("Movie 4K", "4K"),
            ("Movie.1080p", "1080p"),
            ("Movie.720p", "720p"),
            ("Movie 480p", "480p"),
            ("Movie SD", "480p"),
        ],
    )
    def test_resolution(self, text: str, label: str) -> None:
        assert detect_quality(text) == label

    def test_first_resolution_only(self) -> None:
        assert detect_quality("2160p and 1080p") == "4K"

    def test_features_ordered(self) -> None:
        assert detect_quality("Atmos 4K DV HDR") == "4K | DV | HDR | ATMOS"

    def test_hdr10_plus(self) -> None:
        assert detect_quality("Film 1080p HDR10+") == "1080p | HDR10+"

    def test_audio(self) -> None:
        assert detect_quality("720p DD+ DTS") == "720p | DD+ | DTS-HD"

    def test_no_match(self) -> None:
        assert detect_quality("Some Movie") is None
        assert detect_quality(None) is None


class TestHints:
    def test_size(self) -> None:
        assert size_hint("💾 1.4 GB") == "1.4 GB"
        assert size_hint(None, "x 700MB") == "700MB"
        assert size_hint("none") is None

    def test_seeds(self) -> None:
        assert seed_hint("👤 17") == 17
        assert seed_hint("seeds 5x") == 5
        assert seed_hint("no seeds") is None

    def test_source(self) -> None:
        assert source_hint("from RARBG") == "RARBG"
        assert source_hint("⚙️ TorrentGalaxy") == "TorrentGalaxy"
        assert source_hint("plain") is None
