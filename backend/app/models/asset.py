"""Asset model (inventoried equipment)."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import Text

from app.core.base import Base, TimestampsMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:  # pragma: no cover
    from app.models.user import User


class Asset(UUIDPrimaryKeyMixin, TimestampsMixin, Base):
    __tablename__ = "assets"

    asset_code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    serial_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    asset_type: Mapped[str] = mapped_column(Text, nullable=False)
    condition: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    office_location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    department: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    remote_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ownership: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    extension: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    assigned_to: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        "ownerId",
        UUID(as_uuid=True),
        ForeignKey("users.id", name="fk_assets_owner_id", ondelete="SET NULL"),
        nullable=True,
    )
    scanned_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scan_datetime: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    deskphones: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mouse: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    keyboard: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    owner: Mapped[Optional["User"]] = relationship("User", foreign_keys=[owner_id], lazy="raise")

    __table_args__ = (Index("ix_assets_status", "status"),)
