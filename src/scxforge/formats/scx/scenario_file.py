"""
Scenario File

Reads and writes complete scenario files:

    4 bytes   edition tag
    header    uncompressed, size prefixed
    body      raw deflate stream holding the map, players, diplomacy,
              triggers, AI and bitmap sections in that order

`load` accepts bytes, a binary stream or a path; `save` returns the encoded
bytes. Converting between editions happens in `save` when a target edition
is given, see scxforge.convert.
"""

import logging
import os
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ...utils.binary import IoBuffer
from .compression import DEFAULT_LEVEL, compress, decompress
from .edition import TAG_SIZE, Edition, capabilities, parse
from .model import Scenario
from .sections import body_codecs, get_section_codec

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, BinaryIO, str, os.PathLike]


def _open_source(source: Source) -> BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return BytesIO(bytes(source))
    if isinstance(source, (str, os.PathLike)):
        return BytesIO(Path(source).read_bytes())
    return source


def load(source: Source) -> Scenario:
    """
    Decode a scenario from bytes, a binary stream or a file path.

    The edition is taken from the leading tag; an unknown tag fails before
    anything past it is read.
    """
    stream = _open_source(source)
    edition = parse(stream.read(TAG_SIZE))
    caps = capabilities(edition)

    io = IoBuffer.from_stream(stream)
    scenario = Scenario(edition=edition)
    get_section_codec("header").decode(io, scenario)

    compressed = stream.read()
    body = IoBuffer.from_bytes(decompress(compressed, caps.compression_variant))
    for codec in body_codecs():
        codec.decode(body, scenario)

    if body.has_more:
        logger.warning(f"{body.remaining} trailing bytes after the last section")
    logger.info(f"Loaded {edition} scenario: {scenario.map.width}x{scenario.map.height}, "
                f"{scenario.player_count} players, {len(scenario.triggers)} triggers")
    return scenario


def read_file(path: Union[str, os.PathLike]) -> Scenario:
    """Load a scenario from disk. OS errors propagate unchanged."""
    with open(path, "rb") as f:
        return load(f)


def encode(scenario: Scenario, level: int = DEFAULT_LEVEL) -> bytes:
    """Encode a scenario in its own edition."""
    caps = capabilities(scenario.edition)

    head = IoBuffer.writer()
    head.write_bytes(scenario.edition.tag)
    get_section_codec("header").encode(head, scenario)

    body = IoBuffer.writer()
    for codec in body_codecs():
        codec.encode(body, scenario)
    raw = body.getvalue()

    return head.getvalue() + compress(raw, level, caps.compression_variant)


def save(scenario: Scenario, target: Optional[Edition] = None, level: int = DEFAULT_LEVEL) -> bytes:
    """
    Encode a scenario, converting it to `target` first when that differs.

    The caller's scenario is never modified; conversion notes are logged.
    """
    if target is not None and target != scenario.edition:
        # Imported here; the conversion engine builds on this module's package.
        from ...convert.engine import convert

        result = convert(scenario, target)
        for note in result.notes:
            logger.warning(f"Lossy conversion to {target}: {note}")
        scenario = result.scenario
    return encode(scenario, level)


def write_file(scenario: Scenario, path: Union[str, os.PathLike],
               target: Optional[Edition] = None, level: int = DEFAULT_LEVEL,
               create_backup: bool = False):
    """
    Encode a scenario and write it to `path`.

    The file is only touched after the whole scenario has been encoded.
    Returns the FileOpResult of the write.
    """
    from ...core.file_operations import ScenarioWriter

    data = save(scenario, target, level)
    return ScenarioWriter(create_backup=create_backup).write_bytes(path, data)


def peek_edition(source: Source) -> Edition:
    """Identify a scenario's edition from its tag without decoding it."""
    return parse(_open_source(source).read(TAG_SIZE))
