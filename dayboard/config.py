"""Board configuration."""

import os
from dataclasses import dataclass
from typing import Optional

DATA_DIR_ENV = "DAYBOARD_DATA_DIR"

DEFAULT_STORAGE_KEY = "journey_task_board_v1"


@dataclass(frozen=True)
class BoardConfig:
    """Settings for a TaskRepository.

    Attributes:
        storage_key: Key the whole task collection is stored under
        data_dir: Directory for FileStorage; None keeps FileStorage's default
    """

    storage_key: str = DEFAULT_STORAGE_KEY
    data_dir: Optional[str] = None

    @classmethod
    def from_env(cls) -> "BoardConfig":
        """Build a config, taking data_dir from DAYBOARD_DATA_DIR if set."""
        raw = os.environ.get(DATA_DIR_ENV, "").strip()
        return cls(data_dir=raw or None)
