"""Repository pattern support."""

from __future__ import annotations

from row_persist.repository.base import AsyncRepository, Repository

__all__ = ["Repository", "AsyncRepository"]
