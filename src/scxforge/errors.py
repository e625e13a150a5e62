"""
Scenario codec exceptions.

Every decode/encode/convert failure is a ScenarioError subclass carrying
enough context (section, field, byte offset, element index) to diagnose the
input without re-running with tracing. LossyConversion is not an exception:
it is a note collected alongside a successful conversion.
"""

from dataclasses import dataclass
from typing import Optional


class ScenarioError(Exception):
    """Base exception for the scenario codec."""

    def __init__(self, message: str, *, section: Optional[str] = None,
                 field: Optional[str] = None, offset: Optional[int] = None,
                 index: Optional[int] = None):
        self.section = section
        self.field = field
        self.offset = offset
        self.index = index
        super().__init__(self._with_context(message))

    def _with_context(self, message: str) -> str:
        parts = []
        if self.section:
            parts.append(f"section={self.section}")
        if self.field:
            parts.append(f"field={self.field}")
        if self.index is not None:
            parts.append(f"index={self.index}")
        if self.offset is not None:
            parts.append(f"offset=0x{self.offset:X}")
        if not parts:
            return message
        return f"{message} [{', '.join(parts)}]"


class UnknownEditionTag(ScenarioError):
    """Raised when a leading tag or token names no supported edition."""

    def __init__(self, tag):
        self.tag = tag
        super().__init__(f"Unknown edition tag: {tag!r}", section="header", offset=0)


class TruncatedInput(ScenarioError):
    """Raised when fewer bytes remain than a field requires."""

    def __init__(self, needed: int, available: int, **context):
        self.needed = needed
        self.available = available
        super().__init__(
            f"Truncated input: need {needed} bytes, {available} available",
            **context,
        )


class CorruptCompressedBlock(ScenarioError):
    """Raised when the deflate block cannot be inflated."""

    def __init__(self, reason: str, **context):
        self.reason = reason
        super().__init__(f"Corrupt compressed block: {reason}", **context)


class StringTooLong(ScenarioError):
    """Raised when a string does not fit its length prefix or buffer."""

    def __init__(self, length: int, limit: int, **context):
        self.length = length
        self.limit = limit
        super().__init__(f"String of {length} bytes exceeds limit of {limit}", **context)


class ValueOutOfRange(ScenarioError):
    """Raised when a value cannot be represented in its target field."""

    def __init__(self, value, limit: str, **context):
        self.value = value
        self.limit = limit
        super().__init__(f"Value {value!r} out of range ({limit})", **context)


class MissingRequiredField(ScenarioError):
    """
    Raised when encoding meets an absent field the edition declares.

    This is a contract violation of the conversion step, not a user error:
    a converted scenario must always be fully encodable.
    """

    def __init__(self, section: str, field: str, edition):
        self.edition = edition
        super().__init__(
            f"Missing field required by edition {edition}",
            section=section, field=field,
        )


class PlayerCountExceeded(ScenarioError):
    """Raised when a conversion would cut an active player slot."""

    def __init__(self, slot: int, limit: int):
        self.slot = slot
        self.limit = limit
        super().__init__(
            f"Active player slot {slot} does not fit a {limit}-player edition",
            section="players", field="active", index=slot,
        )


class InvalidString(ScenarioError):
    """Raised when text cannot be decoded or encoded in the scenario code page."""

    def __init__(self, reason: str, **context):
        self.reason = reason
        super().__init__(f"Invalid string: {reason}", **context)


@dataclass(frozen=True)
class LossyConversion:
    """Advisory note: the target edition could not keep some content."""
    section: str
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.section}: {self.detail}"
        return self.section


__all__ = [
    'ScenarioError',
    'UnknownEditionTag',
    'TruncatedInput',
    'CorruptCompressedBlock',
    'StringTooLong',
    'ValueOutOfRange',
    'MissingRequiredField',
    'PlayerCountExceeded',
    'InvalidString',
    'LossyConversion',
]
