"""Declarative base shared by every ORM model."""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    # Models use classic ``Column`` attributes with plain type hints
    __allow_unmapped__ = True
