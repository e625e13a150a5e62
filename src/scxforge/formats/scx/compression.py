"""
Compression adapter for the scenario body.

Every edition stores the header uncompressed and the rest of the file as a
single raw deflate stream (no zlib header, no checksum).
"""

import logging
import zlib

from ...errors import CorruptCompressedBlock
from .edition import CompressionVariant

logger = logging.getLogger(__name__)

# Level the original editors write with.
DEFAULT_LEVEL = 6

# Negative window bits select a raw deflate stream.
_RAW_WBITS = -15


def decompress(data: bytes, variant: CompressionVariant = CompressionVariant.RAW_DEFLATE) -> bytes:
    """Inflate a raw deflate block; malformed or truncated input is fatal."""
    if variant is not CompressionVariant.RAW_DEFLATE:
        raise ValueError(f"Unsupported compression variant: {variant}")
    inflater = zlib.decompressobj(_RAW_WBITS)
    try:
        out = inflater.decompress(data)
        out += inflater.flush()
    except zlib.error as e:
        raise CorruptCompressedBlock(str(e), section="body") from e
    if not inflater.eof:
        raise CorruptCompressedBlock("deflate stream ended early", section="body")
    if inflater.unused_data:
        logger.warning(f"Ignoring {len(inflater.unused_data)} bytes after deflate stream")
    logger.debug(f"Inflated {len(data)} -> {len(out)} bytes")
    return out


def compress(data: bytes, level: int = DEFAULT_LEVEL,
             variant: CompressionVariant = CompressionVariant.RAW_DEFLATE) -> bytes:
    """Deflate `data` into a raw stream."""
    if variant is not CompressionVariant.RAW_DEFLATE:
        raise ValueError(f"Unsupported compression variant: {variant}")
    if not -1 <= level <= 9:
        raise ValueError(f"Compression level must be between -1 and 9, got {level}")
    deflater = zlib.compressobj(level, zlib.DEFLATED, _RAW_WBITS)
    out = deflater.compress(data) + deflater.flush()
    logger.debug(f"Deflated {len(data)} -> {len(out)} bytes")
    return out
