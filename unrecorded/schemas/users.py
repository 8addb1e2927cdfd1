"""Schemas for user accounts."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Payload for registering a new user."""

    username: str = Field(..., description="Unique username, up to 30 characters")
    email: str = Field(..., description="Unique email address, up to 254 characters")
    password: str = Field(..., description="Plain text password that will be hashed before storing")
    public_key: str = Field(..., description="Client-generated public key")
    private_key_encrypted: str = Field(..., description="Private key encrypted on the client")


class UserRead(BaseModel):
    """Representation of a user returned from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    public_key: str


class UsernameUpdate(BaseModel):
    username: str


class EmailUpdate(BaseModel):
    email: str


class PasswordChange(BaseModel):
    password: str


class KeysUpdate(BaseModel):
    """Payload for rotating a user's key pair."""

    public_key: str
    private_key_encrypted: str


class UserDeletionRead(BaseModel):
    """Summary of the side effects of deleting a user."""

    messages_sent_marked: int = 0
    messages_received_marked: int = 0
    groups_reassigned: int = 0
    groups_deleted: int = 0
