"""
Command channel to the external device tools.

Example:
    from videoflux.core.bridge import CommandChannel

    adb = CommandChannel("adb")
    result = adb.run(["devices"])
"""

from videoflux.core.bridge.channel import CommandChannel, CommandResult
from videoflux.core.bridge.process import ManagedProcess

__all__ = [
    "CommandChannel",
    "CommandResult",
    "ManagedProcess",
]
