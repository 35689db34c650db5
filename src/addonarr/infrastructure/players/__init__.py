from .launcher import NullPlayerLauncher, SystemPlayerLauncher

__all__ = ["NullPlayerLauncher", "SystemPlayerLauncher"]
