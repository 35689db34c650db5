from __future__ import annotations

from .alldebrid import AllDebridClient
from .base import DebridClientBase
from .credentials import StaticCredentialSource
from .premiumize import PremiumizeClient
from .realdebrid import RealDebridClient

__all__ = [
    "AllDebridClient",
    "DebridClientBase",
    "PremiumizeClient",
    "RealDebridClient",
    "StaticCredentialSource",
]
