"""
UserAccount SQLModel

Minimal view of the accounts table; the pipeline only needs the email to
stamp created_by/updated_by.
"""

from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class UserAccount(SQLModel, table=True):
    """Account table model."""

    __tablename__ = "users"

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True
    )
    email: str = Field(
        ...,
        max_length=255,
        unique=True,
        index=True,
    )
