import logging
import threading
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit

from inventory.uri import path_segments

logger = logging.getLogger(__name__)

Observer = Callable[[str], None]


@dataclass(frozen=True)
class _Registration:
    observer: Observer
    notify_for_descendants: bool


def _uri_key(uri: str) -> tuple:
    """Normalize a URI to (scheme, authority, path segments...)."""
    parts = urlsplit(uri)
    return (parts.scheme, parts.netloc, *path_segments(uri))


class ChangeNotifier:
    """
    Broadcasts "data at URI changed" events to observers.

    Observers register for a URI and are called with the changed URI.
    ``notify(uri)`` reaches observers registered on that URI, on any URI
    below it, and on any URI above it that registered with
    ``notify_for_descendants=True``. So an observer on the collection URI
    sees changes to single items, and an observer on an item URI sees
    collection-wide changes.

    Delivery is synchronous and best-effort: an observer that raises is
    logged and the others are still called.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._observers: dict[tuple, list[_Registration]] = {}

    def register(self, uri: str, observer: Observer, notify_for_descendants: bool = True) -> None:
        key = _uri_key(uri)
        with self._lock:
            self._observers.setdefault(key, []).append(
                _Registration(observer, notify_for_descendants)
            )
        logger.debug(f"Observer registered for {uri}")

    def unregister(self, observer: Observer) -> None:
        """Remove every registration of an observer."""
        with self._lock:
            for key in list(self._observers):
                remaining = [r for r in self._observers[key] if r.observer != observer]
                if remaining:
                    self._observers[key] = remaining
                else:
                    del self._observers[key]

    def observer_count(self, uri: str = None) -> int:
        with self._lock:
            if uri is None:
                return sum(len(regs) for regs in self._observers.values())
            return len(self._observers.get(_uri_key(uri), []))

    def _collect(self, uri: str) -> list[Observer]:
        changed = _uri_key(uri)
        observers: list[Observer] = []
        with self._lock:
            for key, registrations in self._observers.items():
                if key[:len(changed)] == changed:
                    # Same URI or a descendant of it
                    matching = registrations
                elif changed[:len(key)] == key:
                    matching = [r for r in registrations if r.notify_for_descendants]
                else:
                    continue
                for registration in matching:
                    if registration.observer not in observers:
                        observers.append(registration.observer)
        return observers

    def notify(self, uri: str) -> int:
        """
        Tell observers that the data at a URI changed.

        Args:
            uri: URI whose data changed

        Returns:
            Number of observers that were called
        """
        observers = self._collect(uri)
        logger.debug(f"Notifying {len(observers)} observer(s) of change to {uri}")

        for observer in observers:
            try:
                observer(uri)
            except Exception as e:
                logger.error(f"Observer {observer!r} failed for {uri}: {e}")

        return len(observers)
