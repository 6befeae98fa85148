"""
Destination path collision handling.

unique_destination() never overwrites: if the requested name is taken it
appends " (1)", " (2)", ... before the extension until a free name turns
up.

The existence check and the later write are separate steps, so another
writer could still claim the name in between. That gap is accepted for a
single-user desktop tool.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union


def unique_destination(path: Union[str, Path]) -> Path:
    """
    Return `path`, or the first numbered variant of it that doesn't exist.

    Example:
        >>> unique_destination("/videos/a.mp4")   # a.mp4 already there
        PosixPath('/videos/a (1).mp4')
    """
    path = Path(path)
    if not path.exists():
        return path

    stem, suffix = path.stem, path.suffix
    counter = 1
    while True:
        candidate = path.with_name(f"{stem} ({counter}){suffix}")
        if not candidate.exists():
            return candidate
        counter += 1
