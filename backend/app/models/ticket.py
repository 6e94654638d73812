"""Ticket model (support requests, commented on over the web UI and WhatsApp)."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Index, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import Text

from app.core.base import Base, TimestampsMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:  # pragma: no cover
    from app.models.asset import Asset
    from app.models.user import User


class Ticket(UUIDPrimaryKeyMixin, TimestampsMixin, Base):
    __tablename__ = "tickets"

    number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="open")
    priority: Mapped[str] = mapped_column(Text, nullable=False, default="medium")
    resolution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        "createdById",
        UUID(as_uuid=True),
        ForeignKey("users.id", name="fk_tickets_created_by_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    assigned_to_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        "assignedToId",
        UUID(as_uuid=True),
        ForeignKey("users.id", name="fk_tickets_assigned_to_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    asset_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        "assetId",
        UUID(as_uuid=True),
        ForeignKey("assets.id", name="fk_tickets_asset_id", ondelete="SET NULL"),
        nullable=True,
    )

    created_by: Mapped["User"] = relationship("User", foreign_keys=[created_by_id], lazy="raise")
    assigned_to: Mapped[Optional["User"]] = relationship("User", foreign_keys=[assigned_to_id], lazy="raise")
    asset: Mapped[Optional["Asset"]] = relationship("Asset", foreign_keys=[asset_id], lazy="raise")

    __table_args__ = (Index("ix_tickets_status_priority", "status", "priority"),)
