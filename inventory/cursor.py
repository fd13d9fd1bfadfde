import logging
import threading
from typing import Any, Callable, Iterator, Optional, Sequence

from inventory.exceptions import InvalidQueryError, ResultSetClosedError

logger = logging.getLogger(__name__)


class ResultSet:
    """
    Forward-moving view over the rows returned by a query.

    The result-set starts positioned before the first row; call
    ``move_to_next()`` to advance. It can be tagged with a notification
    URI, after which any change notified for that URI marks it stale and
    is forwarded to its content observers. The caller owns the result-set
    and must close it, which also drops the notifier registration.
    """

    def __init__(self, columns: Sequence[str], rows: Sequence[Sequence[Any]]):
        self._columns = list(columns)
        self._index = {name: i for i, name in enumerate(self._columns)}
        self._rows = [tuple(row) for row in rows]
        self._position = -1
        self._closed = False
        self._stale = False
        self._lock = threading.Lock()
        self._content_observers: list[Callable[[str], None]] = []
        self._notifier = None
        self._notification_uri: Optional[str] = None

    def __repr__(self):
        return f"<ResultSet(count={len(self._rows)}, uri='{self._notification_uri}')>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __len__(self):
        return self.count

    def __iter__(self) -> Iterator[dict]:
        """Iterate the remaining rows as dictionaries, advancing the position."""
        while self.move_to_next():
            yield self.row()

    def _check_open(self) -> None:
        if self._closed:
            raise ResultSetClosedError("Result-set is closed")

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def count(self) -> int:
        self._check_open()
        return len(self._rows)

    @property
    def position(self) -> int:
        return self._position

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_stale(self) -> bool:
        """True once a change has been notified for the notification URI."""
        return self._stale

    @property
    def notification_uri(self) -> Optional[str]:
        return self._notification_uri

    def move_to_first(self) -> bool:
        self._check_open()
        self._position = 0 if self._rows else -1
        return bool(self._rows)

    def move_to_next(self) -> bool:
        self._check_open()
        if self._position + 1 >= len(self._rows):
            self._position = len(self._rows)
            return False
        self._position += 1
        return True

    def column_index(self, column: str) -> int:
        """Return the index of a column, or -1 if it was not projected."""
        return self._index.get(column, -1)

    def _current(self) -> tuple:
        self._check_open()
        if not 0 <= self._position < len(self._rows):
            raise IndexError(f"No row at position {self._position}")
        return self._rows[self._position]

    def get(self, column: str) -> Any:
        """Return a column value of the current row."""
        index = self.column_index(column)
        if index < 0:
            raise InvalidQueryError(f"Column '{column}' is not part of the result")
        return self._current()[index]

    def row(self) -> dict:
        """Return the current row as a dictionary."""
        return dict(zip(self._columns, self._current()))

    def all(self) -> list[dict]:
        """Return every row as a dictionary, regardless of position."""
        self._check_open()
        return [dict(zip(self._columns, row)) for row in self._rows]

    def set_notification_uri(self, notifier, uri: str) -> None:
        """
        Watch a URI for changes.

        Args:
            notifier: ChangeNotifier that delivers the changes
            uri: URI this result-set was produced for
        """
        self._check_open()
        with self._lock:
            if self._notifier is not None:
                self._notifier.unregister(self._on_change)
            self._notifier = notifier
            self._notification_uri = uri
        notifier.register(uri, self._on_change, notify_for_descendants=True)

    def register_content_observer(self, observer: Callable[[str], None]) -> None:
        with self._lock:
            self._content_observers.append(observer)

    def unregister_content_observer(self, observer: Callable[[str], None]) -> None:
        with self._lock:
            if observer in self._content_observers:
                self._content_observers.remove(observer)

    def _on_change(self, uri: str) -> None:
        with self._lock:
            if self._closed:
                return
            self._stale = True
            observers = list(self._content_observers)
        logger.debug(f"Result-set for {self._notification_uri} is stale after change to {uri}")
        for observer in observers:
            observer(uri)

    def close(self) -> None:
        """Release the result-set. Closing twice is allowed."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            notifier = self._notifier
            self._notifier = None
            self._content_observers.clear()
        if notifier is not None:
            notifier.unregister(self._on_change)
        self._rows = []
