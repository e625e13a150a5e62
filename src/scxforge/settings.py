"""
Codec settings persisted as JSON.

    {
      "compression_level": 6,
      "create_backup": true,
      "default_target": "wk",
      "log_level": "WARNING"
    }

Unknown keys are ignored and missing keys keep their defaults, so older
settings files keep loading.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from .formats.scx.compression import DEFAULT_LEVEL
from .formats.scx.edition import Edition
from .utils.logging_config import parse_level

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = ".scxforge.json"


@dataclass
class CodecSettings:
    compression_level: int = DEFAULT_LEVEL
    create_backup: bool = False
    # Edition token used by `convert` when --to is not given; None keeps the source edition.
    default_target: Optional[str] = None
    log_level: str = "WARNING"

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "CodecSettings":
        """Create from dictionary."""
        settings = cls()
        for key, value in data.items():
            if hasattr(settings, key):
                setattr(settings, key, value)
            else:
                logger.debug(f"Ignoring unknown setting {key!r}")
        settings.validate()
        return settings

    def validate(self):
        """Raise ValueError when a setting holds an unusable value."""
        if not isinstance(self.compression_level, int) or not -1 <= self.compression_level <= 9:
            raise ValueError(f"compression_level must be an integer in -1..9, got {self.compression_level!r}")
        if not isinstance(self.create_backup, bool):
            raise ValueError(f"create_backup must be true or false, got {self.create_backup!r}")
        if self.default_target:
            Edition.from_token(self.default_target)
        parse_level(self.log_level)

    @property
    def target_edition(self) -> Optional[Edition]:
        return Edition.from_token(self.default_target) if self.default_target else None


def load_settings(path: Optional[Union[str, os.PathLike]] = None) -> CodecSettings:
    """Load settings from `path` (default: ./.scxforge.json); a missing file gives defaults."""
    path = Path(path) if path is not None else Path.cwd() / DEFAULT_FILENAME
    if not path.exists():
        logger.debug(f"No settings file at {path}, using defaults")
        return CodecSettings()
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: settings must be a JSON object")
    return CodecSettings.from_dict(data)


def save_settings(settings: CodecSettings, path: Optional[Union[str, os.PathLike]] = None) -> Path:
    """Write settings as indented JSON and return the path written."""
    settings.validate()
    path = Path(path) if path is not None else Path.cwd() / DEFAULT_FILENAME
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)
    return path
