"""Values written into newly synthesized fragments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_var

DEFAULT_ITEM_DRIVER: Final[str] = "itemmirror.filesystem"
DEFAULT_SYNC_DRIVER: Final[str] = "itemmirror.sync"
DEFAULT_XOOML_DRIVER: Final[str] = "itemmirror.fragment"


@dataclass(frozen=True, slots=True)
class FragmentConfig:
    """Driver identifiers recorded in fragments plus the namespace this client owns."""

    item_driver: str = DEFAULT_ITEM_DRIVER
    sync_driver: str = DEFAULT_SYNC_DRIVER
    xooml_driver: str = DEFAULT_XOOML_DRIVER
    namespace: str | None = None


def get_fragment_config() -> FragmentConfig:
    namespace = optional_env_var("ITEMMIRROR_NAMESPACE", "")
    return FragmentConfig(
        item_driver=optional_env_var("ITEMMIRROR_ITEM_DRIVER", DEFAULT_ITEM_DRIVER),
        sync_driver=optional_env_var("ITEMMIRROR_SYNC_DRIVER", DEFAULT_SYNC_DRIVER),
        xooml_driver=optional_env_var("ITEMMIRROR_XOOML_DRIVER", DEFAULT_XOOML_DRIVER),
        namespace=namespace or None,
    )
