# gltfdata/byte_view.py

from typing import Union

from .errors import InvalidRange

BytesLike = Union[bytes, bytearray, memoryview]


class ByteView:
    """Read-only, bounds-checked window over a byte region.

    Slicing never copies: every slice shares the memory of the region it
    was taken from. Callers must not mutate the backing object after views
    have been created over it.
    """

    def __init__(self, data: BytesLike):
        memory = data if isinstance(data, memoryview) else memoryview(data)
        if memory.ndim != 1 or memory.itemsize != 1:
            memory = memory.cast('B')
        self._memory = memory.toreadonly()

    def __len__(self) -> int:
        return self._memory.nbytes

    def __getitem__(self, index: int) -> int:
        if not 0 <= index < len(self):
            raise InvalidRange(
                f"Byte index {index} outside of view with {len(self)} bytes")
        return self._memory[index]

    def __repr__(self):
        return f"ByteView({len(self)} bytes)"

    @property
    def memory(self) -> memoryview:
        return self._memory

    def slice(self, offset: int, length: int) -> "ByteView":
        if offset < 0 or length < 0 or offset + length > len(self):
            raise InvalidRange(
                f"Slice with offset {offset} and length {length} does not "
                f"fit into a view of {len(self)} bytes")
        return ByteView(self._memory[offset:offset + length])

    def tobytes(self) -> bytes:
        return self._memory.tobytes()


class RawBuffer:
    """Immutable buffer data, identified by its logical buffer id"""

    def __init__(self, buffer_id: str, data: BytesLike):
        self.buffer_id = str(buffer_id)
        self._view = ByteView(data)

    @property
    def size(self) -> int:
        return len(self._view)

    def view(self) -> ByteView:
        return self._view

    def __repr__(self):
        return f"RawBuffer({self.buffer_id!r}, {self.size} bytes)"
