"""Declarative base shared by all ORM models (also Alembic's target_metadata)."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
