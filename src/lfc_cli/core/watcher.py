"""Watch the source file and trigger debounced recompilations."""

import queue
import threading
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from ..errors import FilesystemError
from .coordinator import RecompilationCoordinator


_STOP = object()


class SourceChangeHandler(FileSystemEventHandler):
    """Forwards write events of a single file to a queue.

    watchdog observes directories, so every event of the source's
    directory reaches this handler and is filtered here.
    """

    def __init__(self, source: Path, events: queue.Queue):
        self.source = Path(source).resolve()
        self.events = events

    def _is_source(self, path) -> bool:
        return Path(path).resolve() == self.source

    def on_modified(self, event):
        if not event.is_directory and self._is_source(event.src_path):
            self.events.put(event)

    def on_created(self, event):
        # Editors that delete and rewrite the file show up as a creation.
        if not event.is_directory and self._is_source(event.src_path):
            self.events.put(event)

    def on_moved(self, event):
        # Editors that save atomically move a temp file over the source.
        if not event.is_directory and self._is_source(event.dest_path):
            self.events.put(event)


class ChangeWatchLoop:
    """Consumes change events and runs at most one cycle per burst.

    The first event of a burst claims the coordinator's single-flight
    guard and schedules the cycle after ``debounce`` seconds; events that
    arrive while the guard is held are dropped, not queued.
    """

    def __init__(self, coordinator: RecompilationCoordinator, source: Path, reporter,
                 debounce: float = 0.05, poll_interval: float = 0.0, observer=None):
        self.coordinator = coordinator
        self.source = Path(source)
        self.reporter = reporter
        self.debounce = debounce
        self.events: queue.Queue = queue.Queue()
        self.handler = SourceChangeHandler(self.source, self.events)
        if observer is None:
            observer = PollingObserver(timeout=poll_interval) if poll_interval > 0 else Observer()
        self.observer = observer
        self._pending: Optional[threading.Timer] = None
        self._pending_lock = threading.Lock()
        self._stopped = threading.Event()

    def start(self):
        """Register the watch and start the observer thread.

        Raises:
            FilesystemError: If the directory cannot be watched.
        """
        directory = str(self.source.resolve().parent)
        try:
            self.observer.schedule(self.handler, directory, recursive=False)
            self.observer.start()
        except OSError as e:
            raise FilesystemError(f"Problem watching {self.source.name}: {e}") from e
        self.coordinator.watching = True

    def run(self):
        """Consume events until :meth:`stop` is called."""
        while not self._stopped.is_set():
            try:
                # Wake up regularly so signal handlers get a chance to run.
                event = self.events.get(timeout=0.5)
            except queue.Empty:
                continue
            if event is _STOP:
                break
            self.dispatch(event)

    def dispatch(self, event=None) -> bool:
        """Handle one change event. Returns True if a cycle was scheduled."""
        if self._stopped.is_set():
            return False
        if not self.coordinator.try_begin():
            self.reporter.debug("File changed : compilation already running.")
            return False

        self.reporter.info("File changed.")
        timer = threading.Timer(self.debounce, self._run_cycle)
        timer.daemon = True
        with self._pending_lock:
            self._pending = timer
        timer.start()
        return True

    def _run_cycle(self):
        with self._pending_lock:
            if self._pending is None:
                # Cancelled by stop(), which released the claim.
                return
            self._pending = None
        self.coordinator.recompile(claimed=True)

    def stop(self):
        """Stop watching. A cycle already running is left to finish."""
        self._stopped.set()
        with self._pending_lock:
            timer, self._pending = self._pending, None
        if timer is not None:
            timer.cancel()
            self.coordinator.abandon()
        self.events.put(_STOP)
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join()
        self.coordinator.watching = False
