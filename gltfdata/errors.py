# gltfdata/errors.py

from dataclasses import dataclass
from typing import Any


class GltfError(Exception):
    """Base class for all glTF decoding errors"""


class FormatError(GltfError, IOError):
    """Malformed binary container (magic, header or length mismatch)"""


class UnsupportedSceneFormat(FormatError):
    """Binary container whose scene chunk is not JSON"""


class InvalidShape(GltfError, ValueError):
    """Unknown element shape tag"""


class InvalidComponentType(GltfError, ValueError):
    """Unknown component type constant"""


class TypeMismatch(GltfError, TypeError):
    """Component type does not belong to the requested numeric kind"""

    def __init__(self, expected: Any, actual: Any, message: str = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message or f"Expected {expected}, but found {actual}")


class CapacityError(GltfError, ValueError):
    """Accessor addresses bytes beyond its backing region"""


class IndexOutOfRange(GltfError, IndexError):
    """Element or component index outside the accessor"""


class MissingBuffer(GltfError, LookupError):
    """Buffer view refers to a buffer that was not loaded"""


class InvalidRange(GltfError, ValueError):
    """Negative or out-of-bounds offset/length for a byte range"""


@dataclass(frozen=True)
class JsonError:
    """Structural problem found in the JSON scene description"""
    message: str
    json_path: str

    def __str__(self):
        return f"{self.json_path}: {self.message}"
