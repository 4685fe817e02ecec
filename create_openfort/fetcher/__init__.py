"""Remote template acquisition.

Runs the external downloader with a timeout and classifies its failures.

Key classes:
    RemoteFetcher          - Spawns ``npx degit`` and awaits exactly one outcome
    DownloadTask           - One-shot settlement state of a single download
    TemplateDownloadError  - Categorized download failure
    TemplateTimeoutError   - Download that produced no terminal event in time
"""

from .errors import (
    Classification,
    DownloadErrorKind,
    TemplateDownloadError,
    TemplateTimeoutError,
    categorize,
    create_clone_error,
    create_spawn_error,
)
from .remote import DownloadTask, RemoteFetcher

__all__ = [
    "RemoteFetcher",
    "DownloadTask",
    "TemplateDownloadError",
    "TemplateTimeoutError",
    "DownloadErrorKind",
    "Classification",
    "categorize",
    "create_clone_error",
    "create_spawn_error",
]
