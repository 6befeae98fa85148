"""
Screen mirroring module for VideoFlux.

Example:
    from videoflux.core.mirror import MirrorManager

    mirror = MirrorManager(CommandChannel("scrcpy"))
    mirror.start()
"""

from videoflux.core.mirror.manager import MirrorManager, MirrorState, MirrorStatus

__all__ = [
    "MirrorManager",
    "MirrorState",
    "MirrorStatus",
]
