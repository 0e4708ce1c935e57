"""Capability interface consumed by the SQRL protocol handler."""
from typing import Protocol, runtime_checkable

from authstore.context import OperationContext
from authstore.identity import Identity
from authstore.secure_identity import SecureIdentityWrapper


@runtime_checkable
class IdentityStore(Protocol):
    """Storage operations a protocol handler needs for SQRL identities."""

    async def ensure_schema(self) -> None: ...

    async def find(self, primary_id: str) -> Identity: ...

    async def find_secure(self, primary_id: str) -> SecureIdentityWrapper: ...

    async def save(self, identity: Identity | None) -> None: ...

    async def delete(self, primary_id: str) -> None: ...

    async def ensure_schema_with_context(self, ctx: OperationContext) -> None: ...

    async def find_with_context(self, ctx: OperationContext, primary_id: str) -> Identity: ...

    async def find_secure_with_context(
        self,
        ctx: OperationContext,
        primary_id: str
    ) -> SecureIdentityWrapper: ...

    async def save_with_context(self, ctx: OperationContext, identity: Identity | None) -> None: ...

    async def delete_with_context(self, ctx: OperationContext, primary_id: str) -> None: ...
