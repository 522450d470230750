import uuid
from datetime import datetime

from sqlmodel import Column, Field, SQLModel

from jwksmith.utils import TZDateTime, utc_now


class SigningKey(SQLModel, table=True):
    __tablename__ = "jwksmith_signing_keys"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    algorithm: str = Field(max_length=16)
    public_key: str
    private_key: str | None = Field(default=None, nullable=True)
    certificate: str | None = Field(default=None, nullable=True)
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(TZDateTime(), nullable=False, index=True),
    )
    private_key_expires_at: datetime = Field(
        sa_column=Column(TZDateTime(), nullable=False),
    )
    key_expires_at: datetime = Field(
        sa_column=Column(TZDateTime(), nullable=False),
    )
    deleted_at: datetime | None = Field(
        default=None,
        sa_column=Column(TZDateTime(), nullable=True),
    )

    @property
    def kid(self) -> str:
        """JWK key ID, the record's UUID in string form."""
        return str(self.id)
