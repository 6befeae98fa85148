"""
Classification of failure text from external tools.

adb reports problems as free text on stderr (or stdout for shell
commands). These helpers map that text onto a small closed set of kinds
and turn the kind into the message shown in batch summaries. Text that
matches nothing is GENERIC, never an error.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FailureKind(Enum):
    """Kinds of failure the engine reports distinctly."""

    PERMISSION_DENIED = "permission-denied"
    DISK_FULL = "disk-full"
    NOT_FOUND = "not-found"
    READ_ONLY = "read-only"
    GENERIC = "generic"


# Checked in order, first match wins
_PATTERNS: list[tuple[FailureKind, tuple[str, ...]]] = [
    (FailureKind.READ_ONLY, ("read-only file system",)),
    (FailureKind.PERMISSION_DENIED, ("permission denied", "operation not permitted")),
    (FailureKind.DISK_FULL, ("no space left", "disk full")),
    (FailureKind.NOT_FOUND, ("no such file", "does not exist")),
]


def classify_failure(text: Optional[str]) -> FailureKind:
    """Map raw tool output to a FailureKind."""
    if not text:
        return FailureKind.GENERIC
    lowered = text.lower()
    for kind, needles in _PATTERNS:
        if any(needle in lowered for needle in needles):
            return kind
    return FailureKind.GENERIC


def _first_line(text: Optional[str]) -> str:
    for line in (text or "").splitlines():
        line = line.strip()
        if line:
            return line
    return ""


def describe_transfer_failure(text: Optional[str]) -> str:
    """Human-readable reason a pull failed."""
    kind = classify_failure(text)
    if kind == FailureKind.PERMISSION_DENIED:
        return "Permission denied"
    if kind == FailureKind.DISK_FULL:
        return "Disk full - not enough space on destination"
    if kind == FailureKind.NOT_FOUND:
        return "Source file not found on device"
    if kind == FailureKind.READ_ONLY:
        return "Destination is read-only"
    detail = _first_line(text)
    return f"Transfer failed: {detail}" if detail else "Transfer failed"


def describe_delete_failure(text: Optional[str]) -> str:
    """Human-readable reason a remote delete failed."""
    kind = classify_failure(text)
    if kind == FailureKind.NOT_FOUND:
        return "File not found"
    if kind == FailureKind.PERMISSION_DENIED:
        return "Permission denied"
    if kind == FailureKind.READ_ONLY:
        return "Read-only file system"
    detail = _first_line(text)
    return f"Delete failed: {detail}" if detail else "Delete failed"
