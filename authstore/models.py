"""Database model, record conversion and engine factory."""
from sqlalchemy import Boolean, CheckConstraint, Integer, Text, false, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from authstore.config import Settings
from authstore.identity import Identity


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class IdentityRecord(Base):
    """
    Storage shape of a SQRL identity.

    One row per identity key. rotated_to_id points at the primary_id of the
    identity that replaced this one, but is deliberately not a foreign key.
    """
    __tablename__ = "sqrl_identities"

    primary_id: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
        nullable=False
    )
    unlock_key: Mapped[str] = mapped_column(Text, nullable=False)
    verify_key: Mapped[str] = mapped_column(Text, nullable=False)
    previous_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    sole_auth_flag: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False
    )
    hard_lock_flag: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False
    )
    disabled_flag: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False
    )
    rotated_to_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Column-level so the CHECK is also emitted when the column is added to
    # an existing table.
    button_response: Mapped[int] = mapped_column(
        Integer,
        CheckConstraint(
            "button_response >= 0 AND button_response <= 3",
            name="ck_sqrl_identities_button_response"
        ),
        default=0,
        server_default=text("0"),
        nullable=False
    )


def to_record(identity: Identity) -> IdentityRecord:
    """Convert an Identity into a transient IdentityRecord."""
    return IdentityRecord(
        primary_id=identity.primary_id,
        unlock_key=identity.unlock_key,
        verify_key=identity.verify_key,
        previous_id=identity.previous_id,
        sole_auth_flag=identity.sole_auth_flag,
        hard_lock_flag=identity.hard_lock_flag,
        disabled_flag=identity.disabled_flag,
        rotated_to_id=identity.rotated_to_id,
        button_response=identity.button_response,
    )


def to_identity(record: IdentityRecord) -> Identity:
    """Convert a loaded IdentityRecord into a new Identity."""
    return Identity(
        primary_id=record.primary_id,
        unlock_key=record.unlock_key,
        verify_key=record.verify_key,
        previous_id=record.previous_id,
        sole_auth_flag=bool(record.sole_auth_flag),
        hard_lock_flag=bool(record.hard_lock_flag),
        disabled_flag=bool(record.disabled_flag),
        rotated_to_id=record.rotated_to_id,
        button_response=record.button_response,
    )


def record_values(record: IdentityRecord) -> dict[str, object]:
    """Column values of a record, keyed by column name."""
    return {
        column.key: getattr(record, column.key)
        for column in IdentityRecord.__table__.columns
    }


def clear_record(record: IdentityRecord) -> None:
    """
    Drop the record's references to key material.

    Must only be called on a record that is transient or detached from its
    session, otherwise the blanked values would be flushed.
    """
    record.unlock_key = ""
    record.verify_key = ""


def create_engine_from_settings(settings: Settings | None = None) -> AsyncEngine:
    """
    Build the async engine for the store.

    Bound parameters are hidden from SQLAlchemy error messages so a failing
    statement never echoes key material.
    """
    settings = settings or Settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        hide_parameters=True,
        pool_pre_ping=settings.pool_pre_ping,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by the store, one session per operation."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
