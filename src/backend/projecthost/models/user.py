"""SQLAlchemy ORM model for users mirrored from the identity provider."""

from datetime import datetime

from sqlalchemy import Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from projecthost.models.base import Base


class User(Base):
    __tablename__ = "users"

    # Identity-provider user id, e.g. "user_2abc123"
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, server_default=text("''"), nullable=False)
    image: Mapped[str] = mapped_column(Text, server_default=text("''"), nullable=False)
    role: Mapped[str] = mapped_column(Text, server_default=text("'user'"), nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("now()"), nullable=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("now()"), nullable=True
    )
