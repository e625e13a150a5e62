"""Shared utilities."""

from .binary import IoBuffer, ByteOrder, TEXT_ENCODING
from .logging_config import configure_logging

__all__ = ['IoBuffer', 'ByteOrder', 'TEXT_ENCODING', 'configure_logging']
