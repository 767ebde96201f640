"""SQLAlchemy ORM model for projects and their custom-domain state.

Uniqueness of subdomain and custom_domain is enforced by the database
(uq_projects_subdomain, uq_projects_custom_domain); the repository turns the
resulting IntegrityError into the matching domain error.

custom_domain IS NULL means the project has no custom domain, and
domain_status is then NULL as well.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from projecthost.models.base import Base


class DomainStatus(str, Enum):
    PENDING = "pending"
    ADDED = "added"
    VERIFIED = "verified"
    FAILED = "failed"


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        UniqueConstraint("subdomain", name="uq_projects_subdomain"),
        UniqueConstraint("custom_domain", name="uq_projects_custom_domain"),
        CheckConstraint(
            "domain_status IN ('pending', 'added', 'verified', 'failed')",
            name="ck_projects_domain_status",
        ),
        CheckConstraint(
            "(custom_domain IS NULL) = (domain_status IS NULL)",
            name="ck_projects_domain_status_presence",
        ),
    )

    id: Mapped[str] = mapped_column(
        PG_UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    project_name: Mapped[str] = mapped_column(Text, nullable=False)
    emoji: Mapped[str] = mapped_column(Text, server_default=text("'🚀'"), nullable=False)
    subdomain: Mapped[str] = mapped_column(Text, nullable=False)
    custom_domain: Mapped[str | None] = mapped_column(Text, nullable=True)
    domain_status: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("now()"), nullable=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("now()"), nullable=True
    )

    @property
    def has_custom_domain(self) -> bool:
        return self.custom_domain is not None
