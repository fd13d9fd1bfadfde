import logging
import re
import threading
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import create_engine, delete, insert, select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql.elements import TextClause

from inventory.config import get_settings
from inventory.cursor import ResultSet
from inventory.exceptions import InvalidQueryError

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()

_SORT_TERM = re.compile(r"^\s*(\w+)(?:\s+(ASC|DESC))?\s*$", re.IGNORECASE)


def create_db_engine(url: str) -> Engine:
    """
    Create the SQLAlchemy engine for a database URL.

    SQLite connections are shared across threads; an in-memory database
    keeps a single connection so every caller sees the same data.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def bind_selection(selection: Optional[str], selection_args: Optional[Sequence[Any]]) -> Optional[TextClause]:
    """
    Turn a selection with positional ``?`` placeholders into a bound clause.

    Placeholders inside quoted literals are left alone. Literal colons are
    escaped so they are never read as named parameters.

    Raises:
        InvalidQueryError: If the number of placeholders and arguments differ
    """
    args = list(selection_args or [])
    if not selection:
        if args:
            raise InvalidQueryError(f"{len(args)} selection argument(s) given without a selection")
        return None

    sql = []
    params = {}
    quote = None
    for char in selection:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "?":
            name = f"arg{len(params)}"
            if len(params) >= len(args):
                raise InvalidQueryError(
                    f"Selection has more placeholders than the {len(args)} argument(s) given"
                )
            params[name] = args[len(params)]
            sql.append(f":{name}")
            continue
        sql.append("\\:" if char == ":" else char)

    if len(params) != len(args):
        raise InvalidQueryError(
            f"Selection has {len(params)} placeholder(s) but {len(args)} argument(s) were given"
        )
    return text("".join(sql)).bindparams(**params)


class InventoryDatabase:
    """
    Storage engine owning the database behind the inventory table.

    Every operation runs in its own transaction. Selections are opaque
    predicates whose ``?`` placeholders are always bound as parameters.
    Projection and sort columns are checked against the table because
    identifiers cannot be bound.
    """

    def __init__(self, url: str = None, version: int = None):
        settings = get_settings()
        self.url = url or settings.DATABASE_URL
        self.version = version if version is not None else settings.DATABASE_VERSION
        self.engine: Optional[Engine] = None
        self._lock = threading.RLock()

        # Imported here because the model module needs Base from this one
        from inventory.models.product import Product
        self._tables = {Product.__tablename__: Product.__table__}

    def __repr__(self):
        return f"<InventoryDatabase(url='{self.url}', version={self.version}, open={self.is_open})>"

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "InventoryDatabase":
        """Open the database and create the schema if needed. Idempotent."""
        with self._lock:
            if self.engine is not None:
                return self
            self.engine = create_db_engine(self.url)
            try:
                self._apply_schema()
            except Exception:
                self.engine.dispose()
                self.engine = None
                raise
            logger.info(f"Database opened at {self.url}")
        return self

    def _apply_schema(self) -> None:
        metadata = Base.metadata
        if self.engine.dialect.name != "sqlite":
            metadata.create_all(bind=self.engine)
            return

        with self.engine.begin() as conn:
            stored = conn.exec_driver_sql("PRAGMA user_version").scalar() or 0
            if stored not in (0, self.version):
                # One-shot destructive upgrade: stored rows are discarded
                logger.warning(
                    f"Schema version {stored} differs from {self.version}; recreating tables"
                )
                metadata.drop_all(bind=conn)
            metadata.create_all(bind=conn)
            conn.exec_driver_sql(f"PRAGMA user_version = {int(self.version)}")

    def recreate(self) -> None:
        """Drop and recreate every table."""
        with self._lock:
            self._ensure_open()
            with self.engine.begin() as conn:
                Base.metadata.drop_all(bind=conn)
                Base.metadata.create_all(bind=conn)
            logger.info("Database tables recreated")

    def close(self) -> None:
        with self._lock:
            if self.engine is not None:
                self.engine.dispose()
                self.engine = None
                logger.info(f"Database closed at {self.url}")

    def _ensure_open(self) -> None:
        if self.engine is None:
            self.open()

    def _table(self, name: str):
        try:
            return self._tables[name]
        except KeyError:
            raise InvalidQueryError(f"Unknown table '{name}'")

    def _columns(self, table, names: Sequence[str]) -> list:
        unknown = [name for name in names if name not in table.c]
        if unknown:
            raise InvalidQueryError(f"Unknown column(s) for {table.name}: {', '.join(unknown)}")
        return [table.c[name] for name in names]

    def _order_by(self, table, sort_order: Optional[str]) -> list:
        if not sort_order:
            return []
        clauses = []
        for term in sort_order.split(","):
            found = _SORT_TERM.match(term)
            if not found or found.group(1) not in table.c:
                raise InvalidQueryError(f"Invalid sort order '{sort_order}'")
            column = table.c[found.group(1)]
            direction = (found.group(2) or "ASC").upper()
            clauses.append(column.desc() if direction == "DESC" else column.asc())
        return clauses

    def query(
        self,
        table_name: str,
        projection: Optional[Sequence[str]] = None,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
        sort_order: Optional[str] = None,
    ) -> ResultSet:
        """
        Read rows from a table.

        Args:
            table_name: Table to read
            projection: Columns to return, all columns when None
            selection: Predicate with ``?`` placeholders, all rows when None
            selection_args: Values bound to the placeholders in order
            sort_order: Comma separated ``column [ASC|DESC]`` terms

        Returns:
            ResultSet over the matching rows
        """
        table = self._table(table_name)
        names = list(projection) if projection else [c.name for c in table.columns]
        stmt = select(*self._columns(table, names))

        clause = bind_selection(selection, selection_args)
        if clause is not None:
            stmt = stmt.where(clause)
        stmt = stmt.order_by(*self._order_by(table, sort_order))

        with self._lock:
            self._ensure_open()
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()

        return ResultSet(names, rows)

    def insert(self, table_name: str, values: Mapping[str, Any]) -> int:
        """
        Insert one row.

        Returns:
            ID of the new row, or -1 if the database rejected it
        """
        table = self._table(table_name)
        self._columns(table, list(values))
        stmt = insert(table).values(**values) if values else insert(table)

        with self._lock:
            self._ensure_open()
            try:
                with self.engine.begin() as conn:
                    result = conn.execute(stmt)
                    return result.inserted_primary_key[0]
            except IntegrityError as e:
                logger.error(f"Failed to insert row into {table_name}: {e.orig}")
                return -1

    def update(
        self,
        table_name: str,
        values: Mapping[str, Any],
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
    ) -> int:
        """
        Update the rows matching a selection.

        Returns:
            Number of rows changed, 0 if the database rejected the change
        """
        table = self._table(table_name)
        self._columns(table, list(values))
        if not values:
            return 0

        stmt = update(table).values(**values)
        clause = bind_selection(selection, selection_args)
        if clause is not None:
            stmt = stmt.where(clause)

        with self._lock:
            self._ensure_open()
            try:
                with self.engine.begin() as conn:
                    return conn.execute(stmt).rowcount
            except IntegrityError as e:
                logger.error(f"Failed to update rows in {table_name}: {e.orig}")
                return 0

    def delete(
        self,
        table_name: str,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
    ) -> int:
        """
        Delete the rows matching a selection, every row when None.

        Returns:
            Number of rows deleted
        """
        table = self._table(table_name)
        stmt = delete(table)
        clause = bind_selection(selection, selection_args)
        if clause is not None:
            stmt = stmt.where(clause)

        with self._lock:
            self._ensure_open()
            with self.engine.begin() as conn:
                return conn.execute(stmt).rowcount

    def ping(self) -> bool:
        """Check that the database answers a trivial query."""
        with self._lock:
            self._ensure_open()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        return True


def get_database() -> InventoryDatabase:
    """Build the database described by the settings."""
    settings = get_settings()
    return InventoryDatabase(settings.DATABASE_URL, settings.DATABASE_VERSION)
