"""
Section codec base class and registry.

A scenario body is a fixed sequence of sections. Each section codec is a
class registered under its section name, the same way chunk readers are
looked up by type code; the facade walks BODY_SECTIONS in order.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterator, Optional

from ....errors import MissingRequiredField
from ..edition import CapabilityTable, capabilities

if TYPE_CHECKING:
    from ..model import Scenario
    from ....utils.binary import IoBuffer

logger = logging.getLogger(__name__)


class SectionCodec(ABC):
    """
    Reads and writes one section of a scenario.

    `decode` fills the matching part of the aggregate, `encode` writes it in
    the aggregate's edition. Subclasses implement `read` and `write`; the
    public wrappers tag the buffer with the section name so every error
    raised underneath carries it.
    """
    name: str = ""

    def decode(self, io: 'IoBuffer', scenario: 'Scenario'):
        io.section = self.name
        self.read(io, scenario, capabilities(scenario.edition))

    def encode(self, io: 'IoBuffer', scenario: 'Scenario'):
        io.section = self.name
        self.write(io, scenario, capabilities(scenario.edition))

    @abstractmethod
    def read(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        """Read this section from the stream into the scenario."""

    @abstractmethod
    def write(self, io: 'IoBuffer', scenario: 'Scenario', caps: CapabilityTable):
        """Write this section of the scenario to the stream."""

    def required(self, value, field: str, scenario: 'Scenario'):
        """Return `value`, or fail if a field the edition stores is unset."""
        if value is None:
            raise MissingRequiredField(self.name, field, scenario.edition)
        return value

    def skipped(self, what: str, scenario: 'Scenario'):
        """Note content the edition has no place for."""
        logger.warning(f"{self.name.upper()}: {scenario.edition} cannot store {what}, not written")

    def __str__(self) -> str:
        return f"{self.name} section"


# Section registry - maps section names to codec classes
SECTION_TYPES: dict[str, type] = {}

# Order of the sections inside the compressed body.
BODY_SECTIONS = ("map", "players", "diplomacy", "triggers", "ai", "bitmap")


def register_section(name: str):
    """Decorator to register a section codec."""
    def decorator(cls):
        cls.name = name
        SECTION_TYPES[name] = cls
        return cls
    return decorator


def get_section_codec(name: str) -> Optional[SectionCodec]:
    """Instantiate the codec registered for a section, or None."""
    cls = SECTION_TYPES.get(name)
    return cls() if cls is not None else None


def body_codecs() -> Iterator[SectionCodec]:
    """Codecs for the compressed body, in file order."""
    for name in BODY_SECTIONS:
        yield SECTION_TYPES[name]()
