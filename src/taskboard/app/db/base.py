"""Metadata registry importing every table model."""

from __future__ import annotations

from sqlmodel import SQLModel

from .. import models  # noqa: F401  registers the tables on SQLModel.metadata

__all__ = ["SQLModel"]
