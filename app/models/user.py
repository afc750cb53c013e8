"""User model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import bcrypt as _bcrypt
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base

if TYPE_CHECKING:
    from app.models.objective import Objective
    from app.models.partner import Partner
    from app.models.preference_weight import PreferenceWeight


class User(Base):
    """Partnership manager who owns partners, objectives and learned weights."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    partners: Mapped[list[Partner]] = relationship(
        "Partner", back_populates="user", cascade="all, delete-orphan"
    )
    objectives: Mapped[list[Objective]] = relationship(
        "Objective", back_populates="user", cascade="all, delete-orphan"
    )
    preference_weights: Mapped[list[PreferenceWeight]] = relationship(
        "PreferenceWeight", back_populates="user", cascade="all, delete-orphan"
    )

    def set_password(self, password: str) -> None:
        """Hash and store password using bcrypt."""
        self.password_hash = _bcrypt.hashpw(password.encode("utf-8"), _bcrypt.gensalt()).decode(
            "utf-8"
        )

    def verify_password(self, password: str) -> bool:
        """Verify password against stored hash."""
        return _bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))
