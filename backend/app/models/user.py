"""User model (actors and requesters)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, SmallInteger
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql.sqltypes import Enum as SAEnum, Text

from app.core.base import Base, TimestampsMixin, UUIDPrimaryKeyMixin
from fieldaccess.core.roles import Role


class User(UUIDPrimaryKeyMixin, TimestampsMixin, Base):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="user_role"),
        nullable=False,
        default=Role.USER,
    )
    is_available: Mapped[bool] = mapped_column("isAvailable", Boolean, nullable=False, default=True)
    profile_picture: Mapped[Optional[str]] = mapped_column("profilePicture", Text, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    department: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_whatsapp_user: Mapped[bool] = mapped_column("isWhatsAppUser", Boolean, nullable=False, default=False)
    whatsapp_notifications: Mapped[bool] = mapped_column(
        "whatsAppNotifications", Boolean, nullable=False, default=True
    )

    password: Mapped[str] = mapped_column(Text, nullable=False)
    two_factor_enabled: Mapped[bool] = mapped_column("twoFactorEnabled", Boolean, nullable=False, default=False)
    two_factor_secret: Mapped[Optional[str]] = mapped_column("twoFactorSecret", Text, nullable=True)
    backup_codes: Mapped[Optional[list[str]]] = mapped_column("backupCodes", ARRAY(Text), nullable=True)
    reset_password_token: Mapped[Optional[str]] = mapped_column("resetPasswordToken", Text, nullable=True)
    verification_otp: Mapped[Optional[str]] = mapped_column("verificationOTP", Text, nullable=True)
    login_attempts: Mapped[int] = mapped_column("loginAttempts", SmallInteger, nullable=False, default=0)
    lockout_until: Mapped[Optional[datetime]] = mapped_column("lockoutUntil", DateTime(timezone=True), nullable=True)
