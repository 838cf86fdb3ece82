"""
Recovery Manager — Restores missing file extensions, folder by folder.

For every regular file in the chosen folder the manager reads the leading
HEADER_SIZE bytes, asks the signature table what the content is, and renames
``name`` to ``name.<ext>``.  Files whose content is not recognised are left
exactly as they are.  A failure on one file (unreadable, destination already
taken, permission denied) is logged and recorded on that file's result; the
rest of the folder is still processed.
"""

import os
import csv
import json
import time
import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Callable

from .signatures import HEADER_SIZE, classify_rule

logger = logging.getLogger(__name__)

STATUS_RENAMED = "renamed"
STATUS_PLANNED = "planned"      # preview mode: would be renamed
STATUS_UNKNOWN = "unknown"
STATUS_SKIPPED = "skipped"      # already carries the detected extension or an alias
STATUS_ERROR = "error"


@dataclass
class FileResult:
    """Outcome for a single file."""
    path: str
    extension: Optional[str] = None     # detected extension, None if unknown
    description: str = ""
    category: str = ""
    status: str = STATUS_UNKNOWN
    new_path: str = ""
    error: str = ""
    size: int = 0

    @property
    def display_name(self) -> str:
        return os.path.basename(self.path)

    @property
    def size_human(self) -> str:
        return _fmt_size(self.size)

    @property
    def is_error(self) -> bool:
        return self.status == STATUS_ERROR


@dataclass
class RecoveryProgress:
    total_files: int = 0
    processed_files: int = 0
    renamed: int = 0
    current_path: str = ""
    is_running: bool = False
    is_cancelled: bool = False
    status_message: str = "Ready"

    @property
    def progress_percent(self) -> float:
        if self.total_files == 0:
            return 0.0
        return min(100.0, (self.processed_files / self.total_files) * 100)


@dataclass
class RecoverySession:
    """One pass over a folder."""
    session_id: str
    folder: str
    preview_only: bool = False
    start_time: float = 0.0
    end_time: float = 0.0
    results: list[FileResult] = field(default_factory=list)
    was_cancelled: bool = False
    error: str = ""                 # set when the pass stopped on an exception

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def duration_human(self) -> str:
        d = self.duration
        if d < 60:
            return f"{d:.1f}s"
        if d < 3600:
            return f"{d / 60:.1f}m"
        return f"{d / 3600:.1f}h"

    def _count(self, status: str) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def renamed_count(self) -> int:
        return self._count(STATUS_RENAMED)

    @property
    def planned_count(self) -> int:
        return self._count(STATUS_PLANNED)

    @property
    def unknown_count(self) -> int:
        return self._count(STATUS_UNKNOWN)

    @property
    def skipped_count(self) -> int:
        return self._count(STATUS_SKIPPED)

    @property
    def error_count(self) -> int:
        return self._count(STATUS_ERROR)

    @property
    def files_by_extension(self) -> dict:
        r: dict[str, list] = {}
        for res in self.results:
            if res.extension:
                r.setdefault(res.extension, []).append(res)
        return r

    @property
    def summary(self) -> dict:
        by_ext = self.files_by_extension
        return {
            "total_files": len(self.results),
            "renamed": self.renamed_count,
            "planned": self.planned_count,
            "unknown": self.unknown_count,
            "skipped": self.skipped_count,
            "errors": self.error_count,
            "failed": bool(self.error),
            "duration": self.duration_human,
            "extensions": {ext: len(files) for ext, files in sorted(by_ext.items())},
        }


# ─── File-level helpers ──────────────────────────────────────

def list_files(folder: str, recursive: bool = False) -> list[str]:
    """Regular files under `folder`, sorted by path.

    Raises FileNotFoundError / NotADirectoryError for a bad folder so the
    caller can report it before any file is touched.
    """
    if not os.path.exists(folder):
        raise FileNotFoundError(f"Folder not found: {folder}")
    if not os.path.isdir(folder):
        raise NotADirectoryError(f"Not a directory: {folder}")

    paths: list[str] = []
    if recursive:
        for dirpath, dirnames, filenames in os.walk(folder):
            dirnames.sort()
            for name in filenames:
                p = os.path.join(dirpath, name)
                if os.path.isfile(p):
                    paths.append(p)
    else:
        with os.scandir(folder) as it:
            for entry in it:
                if entry.is_file():
                    paths.append(entry.path)
    return sorted(paths)


def read_header(path: str, size: int = HEADER_SIZE) -> bytes:
    with open(path, "rb") as f:
        return f.read(size)


def recover_file(path: str, preview_only: bool = False,
                 skip_matching: bool = False) -> FileResult:
    """Classify one file and append the detected extension to its name."""
    result = FileResult(path=path)
    try:
        result.size = os.path.getsize(path)
        header = read_header(path)
    except OSError as e:
        logger.error("Error while reading %s: %s", path, e)
        result.status = STATUS_ERROR
        result.error = str(e)
        return result

    rule = classify_rule(header)
    if rule is None:
        logger.debug("No signature matched: %s", path)
        result.status = STATUS_UNKNOWN
        return result

    result.extension = rule.extension
    result.description = rule.description
    result.category = rule.category

    suffix = os.path.splitext(path)[1].lower().lstrip(".")
    if skip_matching and suffix in rule.all_extensions:
        result.status = STATUS_SKIPPED
        return result

    new_path = f"{path}.{rule.extension}"
    result.new_path = new_path

    # os.rename silently replaces the target on POSIX
    if os.path.lexists(new_path):
        logger.error("Cannot move %s: destination exists: %s", path, new_path)
        result.status = STATUS_ERROR
        result.error = f"Destination exists: {new_path}"
        return result

    if preview_only:
        result.status = STATUS_PLANNED
        return result

    try:
        os.rename(path, new_path)
    except OSError as e:
        logger.error("Error while moving %s: %s", path, e)
        result.status = STATUS_ERROR
        result.error = str(e)
        return result

    logger.info("Moved %s -> %s", path, new_path)
    result.status = STATUS_RENAMED
    return result


# ─── Manager ─────────────────────────────────────────────────

class ExtensionRecovery:
    """High-level manager for extension recovery over a folder."""

    def __init__(self):
        self.progress = RecoveryProgress()
        self.current_session: Optional[RecoverySession] = None
        self._thread: Optional[threading.Thread] = None
        self._on_progress: Optional[Callable] = None
        self._on_file_done: Optional[Callable] = None
        self._on_complete: Optional[Callable] = None

    def set_callbacks(
        self,
        on_progress=None,
        on_file_done=None,
        on_complete=None,
    ):
        self._on_progress = on_progress
        self._on_file_done = on_file_done
        self._on_complete = on_complete

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def recover(
        self,
        folder: str,
        preview_only: bool = False,
        recursive: bool = False,
        skip_matching: bool = False,
    ) -> RecoverySession:
        """Run a pass in the calling thread and return the finished session."""
        paths = list_files(folder, recursive=recursive)
        session = self._begin(folder, paths, preview_only)
        return self._process(session, paths, skip_matching)

    def start(
        self,
        folder: str,
        preview_only: bool = False,
        recursive: bool = False,
        skip_matching: bool = False,
    ):
        """Run a pass on a background thread; results arrive via callbacks.

        The folder is listed and the session created before the thread
        starts, so a bad folder raises here and a cancel() issued right
        after start() returns is honoured.
        """
        if self.is_running:
            return
        paths = list_files(folder, recursive=recursive)
        session = self._begin(folder, paths, preview_only)
        self._thread = threading.Thread(
            target=self._run,
            args=(session, paths, skip_matching),
            daemon=True,
        )
        self._thread.start()

    def wait(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def cancel(self):
        self.progress.is_cancelled = True

    def _begin(self, folder, paths, preview_only) -> RecoverySession:
        session = RecoverySession(
            session_id=f"recover_{int(time.time())}",
            folder=folder,
            preview_only=preview_only,
            start_time=time.time(),
        )
        self.current_session = session
        self.progress = RecoveryProgress(
            total_files=len(paths),
            is_running=True,
            status_message="Recovering...",
        )
        return session

    def _run(self, session, paths, skip_matching):
        try:
            self._process(session, paths, skip_matching)
        except Exception as e:
            logger.error("Recovery failed: %s", e, exc_info=True)
            session.end_time = time.time()
            session.error = str(e) or type(e).__name__
            self.progress.status_message = f"Error: {e}"
            self.progress.is_running = False
            if self._on_progress:
                self._on_progress(self.progress)
        if self._on_complete:
            self._on_complete(session)

    def _process(self, session, paths, skip_matching) -> RecoverySession:
        folder = session.folder
        logger.info("Recovering extensions in folder: %s (%d files)", folder, len(paths))

        for path in paths:
            if self.progress.is_cancelled:
                session.was_cancelled = True
                break
            self.progress.current_path = path
            result = recover_file(path, preview_only=session.preview_only,
                                  skip_matching=skip_matching)
            session.results.append(result)
            self.progress.processed_files += 1
            if result.status in (STATUS_RENAMED, STATUS_PLANNED):
                self.progress.renamed += 1
            if self._on_file_done:
                self._on_file_done(result)
            if self._on_progress:
                self._on_progress(self.progress)

        session.end_time = time.time()
        self.progress.is_running = False
        self.progress.current_path = ""
        self.progress.status_message = (
            "Cancelled" if session.was_cancelled else "Done"
        )
        if self._on_progress:
            self._on_progress(self.progress)
        logger.info(
            "Finished %s: %d renamed, %d unknown, %d errors in %s",
            folder, session.renamed_count, session.unknown_count,
            session.error_count, session.duration_human,
        )
        return session

    # ─── Reports ─────────────────────────────────────────────

    def save_log(self, filepath):
        if not self.current_session:
            return
        s = self.current_session
        data = {
            "session": s.session_id,
            "date": time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(s.start_time)),
            "folder": s.folder,
            "preview": s.preview_only,
            "cancelled": s.was_cancelled,
            "error": s.error,
            "summary": s.summary,
            "log": [
                {
                    "path": r.path,
                    "status": r.status,
                    "extension": r.extension,
                    "description": r.description,
                    "new_path": r.new_path,
                    "size": r.size,
                    "error": r.error,
                }
                for r in s.results
            ],
        }
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2, default=str)

    def export_report_csv(self, filepath):
        if not self.current_session:
            return
        with open(filepath, "w", newline="") as f:
            w = csv.writer(f)
            w.writerow([
                "#", "Path", "Status", "Category", "Extension",
                "Description", "Size", "New Path", "Error",
            ])
            for i, r in enumerate(self.current_session.results, 1):
                w.writerow([
                    i, r.path, r.status, r.category, r.extension or "",
                    r.description, r.size, r.new_path, r.error,
                ])


def _fmt_size(n: int) -> str:
    s = float(n)
    for u in ("B", "KB", "MB", "GB"):
        if s < 1024:
            return f"{s:.1f} {u}"
        s /= 1024
    return f"{s:.1f} TB"
