"""Accept loop and graceful shutdown for the server."""

from __future__ import annotations

import logging
import signal
import socket
import threading
import time
from typing import Any, Protocol

logger = logging.getLogger(__name__)

TIMEOUT = 5.0
_POLL_INTERVAL = 0.2
_SIGNALS = ("SIGTERM", "SIGHUP", "SIGQUIT", "SIGINT")


class Handler(Protocol):
    def handle(self, stop_event: threading.Event, sock: socket.socket) -> None: ...

    def close(self) -> Any: ...


class App:
    """Accepts connections and hands each one to the handler in its own thread."""

    def __init__(
        self, handler: Handler, listener: socket.socket, timeout: float = TIMEOUT
    ) -> None:
        self.handler = handler
        self.listener = listener
        self.timeout = timeout
        self._stop_event = threading.Event()
        self._shutdown = threading.Event()
        self._stop_lock = threading.Lock()
        self._workers: set[threading.Thread] = set()
        self._workers_lock = threading.Lock()

    @property
    def stopped(self) -> bool:
        """Whether shutdown has completed."""
        return self._shutdown.is_set()

    def _serve(self, conn: socket.socket) -> None:
        try:
            self.handler.handle(self._stop_event, conn)
        except Exception:
            logger.exception("connection handler failed")
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())

    def run(self) -> None:
        """Accept connections until stopped; an accept failure is raised."""
        try:
            self.listener.settimeout(_POLL_INTERVAL)
            while not self._stop_event.is_set():
                try:
                    conn, _ = self.listener.accept()
                except socket.timeout:
                    continue
                except OSError:
                    if self._stop_event.is_set():
                        return
                    raise
                worker = threading.Thread(target=self._serve, args=(conn,), daemon=True)
                with self._workers_lock:
                    self._workers.add(worker)
                worker.start()
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop accepting, close the handler and wait for workers up to the timeout."""
        with self._stop_lock:
            if self._shutdown.is_set():
                return
            self._stop_event.set()
            try:
                self.listener.close()
            except OSError as exc:
                logger.warning("closing listener failed: %s", exc)
            try:
                self.handler.close()
            except Exception:
                logger.exception("closing handler failed")
            deadline = time.monotonic() + self.timeout
            with self._workers_lock:
                workers = list(self._workers)
            for worker in workers:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                worker.join(remaining)
            self._shutdown.set()

    def _on_signal(self, signum: int, frame: Any) -> None:
        threading.Thread(target=self.stop, daemon=True).start()

    def listen_and_quit(self) -> None:
        """Block until shutdown, stopping on a termination signal."""
        previous = {}
        if threading.current_thread() is threading.main_thread():
            for name in _SIGNALS:
                signum = getattr(signal, name, None)
                if signum is None:
                    continue
                try:
                    previous[signum] = signal.signal(signum, self._on_signal)
                except (OSError, ValueError):
                    continue
        try:
            while not self._shutdown.wait(_POLL_INTERVAL):
                pass
        finally:
            for signum, old in previous.items():
                signal.signal(signum, old if old is not None else signal.SIG_DFL)