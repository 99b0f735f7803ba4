"""API namespace classes for devcli."""

from .custom_objects import CustomObjectsNamespace
from .file_mapper import FileMapperNamespace
from .secrets import SecretsNamespace

__all__ = [
    "SecretsNamespace",
    "CustomObjectsNamespace",
    "FileMapperNamespace",
]
