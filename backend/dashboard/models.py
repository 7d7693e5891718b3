from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import TEXT, Boolean, Integer, String
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models with async support."""

    pass


class ServerRecord(Base):
    """Registered Minecraft server entry.

    Rows are written once on creation and never updated.
    """

    __tablename__ = "server"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    host: Mapped[Optional[str]] = mapped_column(String(255))
    port: Mapped[Optional[int]] = mapped_column(Integer)
    info: Mapped[Optional[str]] = mapped_column(TEXT)
    bedrock_compatible: Mapped[Optional[bool]] = mapped_column(Boolean)
    # Accepted and stored, not read by any logic
    geyser: Mapped[Optional[bool]] = mapped_column(Boolean)
    created_by: Mapped[str] = mapped_column(String(255))
    icon_url: Mapped[Optional[str]] = mapped_column(String(1024), default=None)


# Pydantic models for request/response serialization
class ServerCreate(BaseModel):
    """Body of POST /servers.

    Fields are not validated beyond type coercion, and anything not listed here
    (including createdBy) is dropped.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    info: Optional[str] = None
    bedrockCompatible: Optional[bool] = None
    geyser: Optional[bool] = None


class ServerPublic(BaseModel):
    """Stored server record as returned by the API."""

    id: int
    name: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    info: Optional[str] = None
    bedrockCompatible: Optional[bool] = None
    geyser: Optional[bool] = None
    createdBy: str
    iconUrl: Optional[str] = None

    @classmethod
    def from_record(cls, record: ServerRecord) -> "ServerPublic":
        return cls(
            id=record.id,
            name=record.name,
            host=record.host,
            port=record.port,
            info=record.info,
            bedrockCompatible=record.bedrock_compatible,
            geyser=record.geyser,
            createdBy=record.created_by,
            iconUrl=record.icon_url,
        )


class StatusViewModel(ServerPublic):
    """Stored fields combined with the result of one live probe."""

    online: bool
    players: int = 0
    maxPlayers: int = 0
    version: Optional[str] = None
    software: Optional[str] = None
    type: Literal["Bedrock", "Java"]


class AuthenticatedUser(BaseModel):
    """Identity kept in the session after a successful login."""

    model_config = ConfigDict(frozen=True)

    id: str
    displayName: str
