"""SQLAlchemy-backed store for SQRL identities."""
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy import delete, inspect, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession
from sqlalchemy.schema import CreateColumn

from authstore.context import OperationContext
from authstore.errors import NilInputError, NotFoundError, StorageError
from authstore.identity import Identity
from authstore.models import (
    IdentityRecord,
    clear_record,
    create_sessionmaker,
    record_values,
    to_identity,
    to_record,
)
from authstore.secure_identity import SecureIdentityWrapper
from authstore.validation import validate_identifier, validate_identity

logger = logging.getLogger(__name__)

T = TypeVar("T")

_table = IdentityRecord.__table__


class AuthStore:
    """
    Persists SQRL identities through an async SQLAlchemy engine.

    Every public operation exists in two forms: ``op(...)`` and
    ``op_with_context(ctx, ...)``. The plain form runs the context form with
    a background context that never fires.

    The store keeps no state besides the engine and a session factory, so a
    single instance can be shared across tasks.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        if engine is None:
            raise NilInputError("database engine cannot be None")
        self._engine = engine
        self._sessionmaker = create_sessionmaker(engine)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    # Plain variants

    async def ensure_schema(self) -> None:
        """Create or extend the identity table. Safe to call on every start."""
        await self.ensure_schema_with_context(OperationContext.background())

    async def find(self, primary_id: str) -> Identity:
        """Return a copy of the identity stored under ``primary_id``."""
        return await self.find_with_context(OperationContext.background(), primary_id)

    async def find_secure(self, primary_id: str) -> SecureIdentityWrapper:
        """Like find(), but hand the identity over in a SecureIdentityWrapper."""
        return await self.find_secure_with_context(OperationContext.background(), primary_id)

    async def save(self, identity: Identity | None) -> None:
        """Insert or fully replace an identity."""
        await self.save_with_context(OperationContext.background(), identity)

    async def delete(self, primary_id: str) -> None:
        """Delete an identity. Deleting a missing identity is not an error."""
        await self.delete_with_context(OperationContext.background(), primary_id)

    # Context variants

    async def ensure_schema_with_context(self, ctx: OperationContext) -> None:
        """
        Create the sqrl_identities table if absent and add missing columns.

        Existing columns and data are never dropped or renamed. If another
        process creates the table or a column at the same time, the failed
        DDL statement is rolled back and the structure re-inspected; an
        already matching schema counts as success.

        Raises:
            OperationCancelledError: If ctx was cancelled
            DeadlineExceededError: If ctx's deadline passed
            StorageError: If the schema cannot be brought up to date
        """
        ctx.check()
        await ctx.run(self._guard("ensure_schema", self._migrate()))

    async def find_with_context(self, ctx: OperationContext, primary_id: str) -> Identity:
        """
        Retrieve an identity by its identity key.

        The returned Identity is a fresh copy; the store holds no reference
        to it, and the ORM row it was built from is detached and cleared.

        Args:
            ctx: Cancellation and deadline signal
            primary_id: The identity key

        Returns:
            The stored identity

        Raises:
            OperationCancelledError: If ctx was cancelled
            DeadlineExceededError: If ctx's deadline passed
            InvalidIdentifierError: If primary_id fails validation
            NotFoundError: If no identity is stored under primary_id
            StorageError: If the database call fails
        """
        ctx.check()
        validate_identifier(primary_id)

        async def work(session: AsyncSession) -> Identity:
            query = select(IdentityRecord).where(IdentityRecord.primary_id == primary_id)
            result = await session.execute(query)
            record = result.scalar_one_or_none()
            if record is None:
                raise NotFoundError()

            identity = to_identity(record)
            session.expunge(record)
            clear_record(record)
            return identity

        identity = await self._execute(ctx, "find", work)
        logger.debug("Identity found")
        return identity

    async def find_secure_with_context(
        self,
        ctx: OperationContext,
        primary_id: str
    ) -> SecureIdentityWrapper:
        """
        Retrieve an identity wrapped for guaranteed cleanup.

        Usage:
            with await store.find_secure_with_context(ctx, primary_id) as wrapper:
                identity = wrapper.get_identity()

        Raises:
            Same as find_with_context
        """
        identity = await self.find_with_context(ctx, primary_id)
        return SecureIdentityWrapper(identity)

    async def save_with_context(self, ctx: OperationContext, identity: Identity | None) -> None:
        """
        Insert or fully replace an identity in one atomic upsert.

        All columns are overwritten; fields are never merged with the
        previous row. Concurrent saves of the same key are last-write-wins.

        Args:
            ctx: Cancellation and deadline signal
            identity: The identity to persist

        Raises:
            OperationCancelledError: If ctx was cancelled
            DeadlineExceededError: If ctx's deadline passed
            NilInputError: If identity is None
            InvalidIdentifierError: If identity.primary_id fails validation
            InvalidFieldError: If unlock_key or verify_key is empty, or
                button_response is outside 0-3
            StorageError: If the database call fails
        """
        ctx.check()
        if identity is None:
            raise NilInputError()
        validate_identity(identity)

        record = to_record(identity)
        values = record_values(record)
        clear_record(record)

        async def work(session: AsyncSession) -> None:
            await session.execute(self._upsert(values))

        try:
            await self._execute(ctx, "save", work)
        finally:
            values.clear()
        logger.debug("Identity saved")

    async def delete_with_context(self, ctx: OperationContext, primary_id: str) -> None:
        """
        Delete an identity.

        Idempotent: deleting an identity that does not exist succeeds, so
        callers can retry cleanup safely.

        Raises:
            OperationCancelledError: If ctx was cancelled
            DeadlineExceededError: If ctx's deadline passed
            InvalidIdentifierError: If primary_id fails validation
            StorageError: If the database call fails
        """
        ctx.check()
        validate_identifier(primary_id)

        async def work(session: AsyncSession) -> None:
            await session.execute(
                delete(IdentityRecord).where(IdentityRecord.primary_id == primary_id)
            )

        await self._execute(ctx, "delete", work)
        logger.debug("Identity deleted")

    # Internals

    async def _execute(
        self,
        ctx: OperationContext,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        """Run ``work`` in its own session and transaction under ``ctx``."""
        async def round_trip() -> T:
            async with self._sessionmaker() as session, session.begin():
                return await work(session)

        return await ctx.run(self._guard(operation, round_trip()))

    async def _guard(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except (SQLAlchemyError, OSError) as err:
            logger.warning("Storage operation %s failed: %s", operation, type(err).__name__)
            raise StorageError(operation, err) from err

    def _upsert(self, values: dict[str, Any]) -> Any:
        dialect = self._engine.dialect.name
        updates = [key for key in values if key != "primary_id"]

        if dialect == "postgresql":
            pg_stmt = postgresql.insert(_table).values(**values)
            return pg_stmt.on_conflict_do_update(
                index_elements=[_table.c.primary_id],
                set_={key: pg_stmt.excluded[key] for key in updates}
            )
        if dialect == "sqlite":
            lite_stmt = sqlite.insert(_table).values(**values)
            return lite_stmt.on_conflict_do_update(
                index_elements=[_table.c.primary_id],
                set_={key: lite_stmt.excluded[key] for key in updates}
            )
        if dialect in ("mysql", "mariadb"):
            my_stmt = mysql.insert(_table).values(**values)
            return my_stmt.on_duplicate_key_update(
                **{key: my_stmt.inserted[key] for key in updates}
            )
        raise StorageError("save", NotImplementedError(f"no atomic upsert for dialect {dialect}"))

    async def _migrate(self) -> None:
        async with self._engine.connect() as conn:
            existing = await conn.run_sync(_existing_columns)

            if existing is None:
                err = await _apply_ddl(conn, _create_table)
                if err is None:
                    logger.info("Created table %s", _table.name)
                    return
                existing = await conn.run_sync(_existing_columns)
                if existing is None:
                    raise StorageError("ensure_schema", err) from err
                logger.info("Table %s was created concurrently", _table.name)

            for column in _table.columns:
                if column.name in existing:
                    continue
                err = await _apply_ddl(conn, _add_column, column.name)
                if err is None:
                    logger.info("Added column %s.%s", _table.name, column.name)
                    continue
                existing = await conn.run_sync(_existing_columns) or set()
                if column.name not in existing:
                    raise StorageError("ensure_schema", err) from err


async def _apply_ddl(
    conn: AsyncConnection,
    fn: Callable[..., None],
    *args: Any
) -> SQLAlchemyError | None:
    """Run one DDL step in its own transaction and return its error, if any."""
    try:
        await conn.run_sync(fn, *args)
        await conn.commit()
    except SQLAlchemyError as err:
        await conn.rollback()
        logger.info("Schema step %s did not apply: %s", fn.__name__, type(err).__name__)
        return err
    return None


def _existing_columns(sync_conn: Any) -> set[str] | None:
    inspector = inspect(sync_conn)
    if not inspector.has_table(_table.name):
        return None
    return {column["name"] for column in inspector.get_columns(_table.name)}


def _create_table(sync_conn: Any) -> None:
    _table.create(sync_conn, checkfirst=True)


def _add_column(sync_conn: Any, column_name: str) -> None:
    column = _table.c[column_name]
    preparer = sync_conn.dialect.identifier_preparer
    spec = CreateColumn(column).compile(dialect=sync_conn.dialect)
    sync_conn.exec_driver_sql(
        f"ALTER TABLE {preparer.format_table(_table)} ADD COLUMN {spec}"
    )
