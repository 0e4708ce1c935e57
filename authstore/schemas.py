"""Pydantic schema for exchanging identities with the protocol handler."""
from pydantic import BaseModel, Field, field_validator

from authstore.identity import Identity
from authstore.validation import validate_identifier


class IdentityPayload(BaseModel):
    """
    A SQRL identity in the protocol handler's field naming.

    idk is the identity key, suk/vuk the server unlock and verify unlock
    keys, pidk the previous identity key and rekeyed the identity key that
    replaced this one.
    """
    idk: str = Field(..., description="Identity key (base64url public key)")
    suk: str = Field(..., min_length=1, description="Server unlock key")
    vuk: str = Field(..., min_length=1, description="Verify unlock key")
    pidk: str = Field("", description="Previous identity key, empty if none")
    sqrlonly: bool = False
    hardlock: bool = False
    disabled: bool = False
    rekeyed: str = Field("", description="Identity key this one was rekeyed to")
    btn: int = Field(0, ge=0, le=3, description="Last button response")

    @field_validator('idk')
    @classmethod
    def validate_idk(cls, v: str) -> str:
        validate_identifier(v)
        return v

    @field_validator('pidk', 'rekeyed')
    @classmethod
    def validate_optional_key(cls, v: str) -> str:
        if v:
            validate_identifier(v)
        return v

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityPayload":
        return cls(
            idk=identity.primary_id,
            suk=identity.unlock_key,
            vuk=identity.verify_key,
            pidk=identity.previous_id or "",
            sqrlonly=identity.sole_auth_flag,
            hardlock=identity.hard_lock_flag,
            disabled=identity.disabled_flag,
            rekeyed=identity.rotated_to_id or "",
            btn=identity.button_response,
        )

    def to_identity(self) -> Identity:
        return Identity(
            primary_id=self.idk,
            unlock_key=self.suk,
            verify_key=self.vuk,
            previous_id=self.pidk or None,
            sole_auth_flag=self.sqrlonly,
            hard_lock_flag=self.hardlock,
            disabled_flag=self.disabled,
            rotated_to_id=self.rekeyed or None,
            button_response=self.btn,
        )
