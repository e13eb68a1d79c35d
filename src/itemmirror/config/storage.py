"""Item store configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from itemmirror.domain.model.schema import DEFAULT_FRAGMENT_FILENAME, PATH_SEPARATOR

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError

ROOT_ENV: Final[str] = "ITEMMIRROR_ROOT"
FRAGMENT_FILENAME_ENV: Final[str] = "ITEMMIRROR_FRAGMENT_FILENAME"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    root: Path
    fragment_filename: str = DEFAULT_FRAGMENT_FILENAME

    def resolve_root(self) -> Path:
        return self.root.expanduser().resolve()


def get_storage_config(*, root: Path | str | None = None) -> StorageConfig:
    """Read the store root and fragment filename; ``root`` overrides the environment."""

    if root is None:
        root = require_env_vars((ROOT_ENV,))[ROOT_ENV]
    fragment_filename = optional_env_var(FRAGMENT_FILENAME_ENV, DEFAULT_FRAGMENT_FILENAME)
    if PATH_SEPARATOR in fragment_filename:
        raise ConfigurationError(
            f"{FRAGMENT_FILENAME_ENV} must be a plain file name, got {fragment_filename!r}"
        )
    return StorageConfig(root=Path(root), fragment_filename=fragment_filename)
