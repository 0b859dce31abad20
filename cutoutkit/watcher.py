from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .pipeline import is_image_file, is_output_file

# (size in bytes, mtime in ns): identifies one saved version of a file
Signature = tuple[int, int]


def file_signature(path: Path) -> Signature | None:
    try:
        st = path.stat()
    except FileNotFoundError:
        return None
    return st.st_size, st.st_mtime_ns


def wait_until_stable(
    path: Path,
    stable_seconds: float,
    poll_interval: float = 0.2,
    timeout: float = 60.0,
) -> Signature | None:
    """
    Poll `path` until its signature has not changed for `stable_seconds`.

    Returns the settled signature, or None when the file is missing or still
    being written once `timeout` has passed.
    """
    deadline = time.monotonic() + timeout
    seen: Signature | None = None
    seen_at = 0.0
    while True:
        sig = file_signature(path)
        now = time.monotonic()
        if sig is not None and sig == seen:
            if now - seen_at >= stable_seconds:
                return sig
        else:
            seen, seen_at = sig, now
        if now > deadline:
            return None
        time.sleep(poll_interval)


def is_watch_candidate(path: Path) -> bool:
    """Images worth processing: no hidden or editor temp files, none of our own outputs."""
    if path.name.startswith((".", "~")):
        return False
    return is_image_file(path) and not is_output_file(path)


class _ImageEventHandler(FileSystemEventHandler):
    """
    Turns file events into one `on_ready` call per saved version of an image.

    Paths with a worker already waiting are not scheduled again, and a file
    whose signature matches the last processed one is skipped.
    """

    def __init__(
        self,
        logger: logging.Logger,
        on_ready: Callable[[Path], None],
        stable_seconds: float,
    ):
        super().__init__()
        self.logger = logger
        self.on_ready = on_ready
        self.stable_seconds = stable_seconds
        self._lock = threading.Lock()
        self._pending: set[Path] = set()
        self._processed: dict[Path, Signature] = {}

    def _schedule(self, p: Path, what: str) -> None:
        if not is_watch_candidate(p):
            self.logger.debug(f"Ignoring {p.name}")
            return
        with self._lock:
            if p in self._pending:
                return
            self._pending.add(p)
        self.logger.info(f"{what}: {p.name}")
        threading.Thread(target=self._settle_and_process, args=(p,), daemon=True).start()

    def _settle_and_process(self, p: Path) -> None:
        try:
            sig = wait_until_stable(p, self.stable_seconds)
            if sig is None:
                self.logger.warning(f"File did not become stable: {p}")
                return
            with self._lock:
                unchanged = self._processed.get(p) == sig
            if unchanged:
                self.logger.info(f"Unchanged since last run, skipping: {p.name}")
                return
            self.on_ready(p)
            with self._lock:
                self._processed[p] = sig
        finally:
            with self._lock:
                self._pending.discard(p)

    def on_created(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._schedule(Path(event.src_path), "New image detected")

    def on_modified(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._schedule(Path(event.src_path), "Image updated")

    def on_moved(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._schedule(Path(event.dest_path), "Image moved/renamed")


def watch_directory(
    input_dir: Path,
    on_image_ready: Callable[[Path], None],
    stable_seconds: float,
    logger: logging.Logger,
) -> None:
    handler = _ImageEventHandler(logger, on_image_ready, stable_seconds)
    observer = Observer()
    observer.schedule(handler, str(input_dir), recursive=False)
    observer.start()
    logger.info(f"Watching directory: {input_dir}")
    try:
        while observer.is_alive():
            observer.join(1.0)
    except KeyboardInterrupt:
        logger.info("Stopped by KeyboardInterrupt")
    finally:
        observer.stop()
        observer.join()
