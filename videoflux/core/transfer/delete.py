"""Batch deletion of remote files."""

from __future__ import annotations

import logging
from typing import Sequence

from videoflux.core.transfer.browser import DeviceBrowser
from videoflux.core.transfer.models import DeleteResult, FailedFile

logger = logging.getLogger(__name__)


class BatchDeleter:
    """
    Deletes remote files one at a time.

    A failure is recorded and the next file is still attempted; nothing is
    rolled back.
    """

    def __init__(self, browser: DeviceBrowser):
        self._browser = browser

    def delete(self, paths: Sequence[str]) -> DeleteResult:
        result = DeleteResult()
        for path in paths:
            ok, error = self._browser.delete_file(path)
            if ok:
                result.deleted.append(path)
            else:
                result.failed.append(FailedFile(path, error or "Delete failed"))

        logger.info(f"Deleted {len(result.deleted)} file(s), {len(result.failed)} failed")
        return result
