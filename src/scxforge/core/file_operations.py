"""
File Operations - scenario file output.

Writes go to a temporary file in the destination directory which then
replaces the target, so an interrupted or failed write never leaves a
half-written scenario behind. An existing target can be kept as `.bak`.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from ..errors import ScenarioError
from ..formats.scx.compression import DEFAULT_LEVEL
from ..formats.scx.edition import Edition
from ..formats.scx.model import Scenario

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class FileOpResult:
    """Result of a file operation."""
    success: bool
    message: str
    path: Optional[str] = None
    data: Optional[Any] = None
    backup_path: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════════════
# SCENARIO WRITER
# ═══════════════════════════════════════════════════════════════════════════════

class ScenarioWriter:
    """Write scenario files back to disk."""

    BACKUP_SUFFIX = ".bak"

    def __init__(self, create_backup: bool = False, level: int = DEFAULT_LEVEL):
        self.create_backup = create_backup
        self.level = level

    def write_bytes(self, output_path: Union[str, os.PathLike], data: bytes) -> FileOpResult:
        """
        Atomically replace `output_path` with `data`.

        OS errors (missing directory, permissions, full disk) propagate; the
        temporary file is removed when they do.
        """
        output_path = Path(output_path)
        backup_path = None
        if self.create_backup and output_path.exists():
            backup_path = output_path.with_name(output_path.name + self.BACKUP_SUFFIX)
            shutil.copy2(output_path, backup_path)
            logger.debug(f"Backed up {output_path} to {backup_path}")

        fd, tmp_name = tempfile.mkstemp(prefix=f".{output_path.name}.", suffix=".tmp",
                                        dir=output_path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, output_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(f"Wrote {len(data)} bytes to {output_path}")
        return FileOpResult(True, f"Wrote {len(data)} bytes", str(output_path),
                            backup_path=str(backup_path) if backup_path else None)

    def write(self, scenario: Scenario, output_path: Union[str, os.PathLike],
              target: Optional[Edition] = None) -> FileOpResult:
        """
        Encode and write a scenario, reporting failure in the result.

        Nothing on disk changes unless encoding succeeded.
        """
        from ..formats.scx.scenario_file import save

        try:
            data = save(scenario, target, self.level)
        except ScenarioError as e:
            return FileOpResult(False, f"Encode failed: {e}", str(output_path))
        try:
            return self.write_bytes(output_path, data)
        except OSError as e:
            return FileOpResult(False, f"Write failed: {e}", str(output_path))
