"""File level operations."""

from .file_operations import FileOpResult, ScenarioWriter

__all__ = ['FileOpResult', 'ScenarioWriter']
