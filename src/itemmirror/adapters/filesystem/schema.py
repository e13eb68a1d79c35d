"""Pydantic models describing directory entries read from local disk."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    import os


class FileSystemBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class FileStat(FileSystemBaseModel):
    """Stat record for one child of a listed directory."""

    name: str = Field(min_length=1)
    path: str
    is_dir: bool
    size: int = Field(default=0, ge=0)
    modified: datetime | None = None

    @field_validator("modified", mode="before")
    @classmethod
    def _parse_epoch(cls, value: object) -> object:
        if isinstance(value, int | float):
            return datetime.fromtimestamp(value, tz=UTC)
        return value

    @classmethod
    def from_dir_entry(cls, entry: os.DirEntry[str], *, path: str) -> FileStat:
        stat = entry.stat()
        is_dir = entry.is_dir()
        return cls.model_validate(
            {
                "name": entry.name,
                "path": path,
                "is_dir": is_dir,
                "size": 0 if is_dir else stat.st_size,
                "modified": stat.st_mtime,
            }
        )


__all__ = ["FileStat"]
