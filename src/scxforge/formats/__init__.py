"""scxforge formats package - scenario file codecs."""
from .scx import Edition, Scenario, capabilities, load, save, read_file, write_file

__all__ = [
    'Edition', 'Scenario', 'capabilities',
    'load', 'save', 'read_file', 'write_file',
]
