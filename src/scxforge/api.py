"""
Flat result-code interface.

For callers that cannot use exceptions (bindings, batch tools): every
function returns a ResultCode, plus a value where there is one, and never
raises. Scenarios are held in opaque handles which the caller releases
explicitly; a released handle behaves like a null handle.

Edition tokens are the short names aoe, ror, aoc, hd, wk and de. An empty
or None token keeps the scenario's current edition.
"""

import logging
import os
from enum import IntEnum
from typing import Optional, Tuple, Union

from .convert.engine import convert as convert_scenario
from .core.file_operations import ScenarioWriter
from .errors import ScenarioError, UnknownEditionTag
from .formats.scx.edition import Edition
from .formats.scx.model import Scenario
from .formats.scx.scenario_file import encode, load

logger = logging.getLogger(__name__)


class ResultCode(IntEnum):
    OK = 0
    NULL_HANDLE = 1
    CREATE_OUTPUT_FAILED = 2
    CONVERSION_FAILED = 3
    SERIALIZE_FAILED = 4
    UNKNOWN_EDITION = 5
    LOAD_FAILED = 6


class ScenarioHandle:
    """Opaque owner of one loaded scenario."""

    def __init__(self, scenario: Scenario):
        self._scenario: Optional[Scenario] = scenario

    @property
    def released(self) -> bool:
        return self._scenario is None

    @property
    def edition_token(self) -> Optional[str]:
        return None if self._scenario is None else self._scenario.edition.token

    def __repr__(self) -> str:
        state = "released" if self.released else self.edition_token
        return f"<ScenarioHandle {state}>"


def _scenario(handle: Optional[ScenarioHandle]) -> Optional[Scenario]:
    if handle is None:
        return None
    return handle._scenario


def _target(token: Optional[str], scenario: Scenario) -> Edition:
    if not token:
        return scenario.edition
    return Edition.from_token(token)


def _load(source) -> Tuple[ResultCode, Optional[ScenarioHandle]]:
    try:
        return ResultCode.OK, ScenarioHandle(load(source))
    except UnknownEditionTag as e:
        logger.error(f"Load failed: {e}")
        return ResultCode.UNKNOWN_EDITION, None
    except (ScenarioError, OSError) as e:
        logger.error(f"Load failed: {e}")
        return ResultCode.LOAD_FAILED, None
    except Exception:
        logger.exception("Load failed")
        return ResultCode.LOAD_FAILED, None


def load_path(path: Union[str, os.PathLike]) -> Tuple[ResultCode, Optional[ScenarioHandle]]:
    """Load a scenario file into a new handle."""
    if path is None:
        return ResultCode.NULL_HANDLE, None
    return _load(path)


def load_mem(data: bytes) -> Tuple[ResultCode, Optional[ScenarioHandle]]:
    """Load a scenario from an in-memory buffer into a new handle."""
    if data is None:
        return ResultCode.NULL_HANDLE, None
    return _load(bytes(data))


def convert(handle: Optional[ScenarioHandle], token: Optional[str]) -> ResultCode:
    """Convert the scenario held by `handle` in place."""
    scenario = _scenario(handle)
    if scenario is None:
        return ResultCode.NULL_HANDLE
    try:
        target = _target(token, scenario)
    except UnknownEditionTag:
        return ResultCode.UNKNOWN_EDITION
    try:
        result = convert_scenario(scenario, target)
    except Exception as e:
        logger.error(f"Conversion to {target} failed: {e}")
        return ResultCode.CONVERSION_FAILED
    for note in result.notes:
        logger.warning(f"Lossy conversion to {target}: {note}")
    handle._scenario = result.scenario
    return ResultCode.OK


def _serialize(handle: Optional[ScenarioHandle], token: Optional[str]) -> Tuple[ResultCode, Optional[bytes]]:
    scenario = _scenario(handle)
    if scenario is None:
        return ResultCode.NULL_HANDLE, None
    try:
        target = _target(token, scenario)
    except UnknownEditionTag:
        return ResultCode.UNKNOWN_EDITION, None
    try:
        result = convert_scenario(scenario, target)
    except Exception as e:
        logger.error(f"Conversion to {target} failed: {e}")
        return ResultCode.CONVERSION_FAILED, None
    for note in result.notes:
        logger.warning(f"Lossy conversion to {target}: {note}")
    try:
        return ResultCode.OK, encode(result.scenario)
    except Exception as e:
        logger.error(f"Serializing {target} scenario failed: {e}")
        return ResultCode.SERIALIZE_FAILED, None


def save_mem(handle: Optional[ScenarioHandle], token: Optional[str] = None) -> Tuple[ResultCode, Optional[bytes]]:
    """Encode the scenario as `token` and return the bytes. The handle is unchanged."""
    return _serialize(handle, token)


def save_path(handle: Optional[ScenarioHandle], token: Optional[str],
              path: Union[str, os.PathLike]) -> ResultCode:
    """Encode the scenario as `token` and write it to `path`. The handle is unchanged."""
    if path is None:
        return ResultCode.NULL_HANDLE
    code, data = _serialize(handle, token)
    if code != ResultCode.OK:
        return code
    try:
        ScenarioWriter().write_bytes(path, data)
    except OSError as e:
        logger.error(f"Cannot write {path}: {e}")
        return ResultCode.CREATE_OUTPUT_FAILED
    except Exception:
        logger.exception(f"Cannot write {path!r}")
        return ResultCode.CREATE_OUTPUT_FAILED
    return ResultCode.OK


def release(handle: Optional[ScenarioHandle]) -> ResultCode:
    """Free the scenario held by `handle`. Releasing twice is a null handle."""
    if _scenario(handle) is None:
        return ResultCode.NULL_HANDLE
    handle._scenario = None
    return ResultCode.OK


__all__ = [
    'ResultCode',
    'ScenarioHandle',
    'load_path',
    'load_mem',
    'convert',
    'save_mem',
    'save_path',
    'release',
]
