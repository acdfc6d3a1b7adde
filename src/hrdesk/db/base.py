"""Metadata registry: importing this module registers every table model."""

from __future__ import annotations

from sqlmodel import SQLModel

from .. import models  # noqa: F401

__all__ = ["SQLModel"]
