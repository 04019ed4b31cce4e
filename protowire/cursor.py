from typing import Union

from .errors import UnexpectedEndOfData

Buffer = Union[bytes, bytearray, memoryview]


class ByteCursor:
    """
    A read position over a borrowed byte buffer. The buffer is wrapped in a
    `memoryview` and never copied or mutated; only the offset moves.
    """

    __slots__ = ("_view", "_pos")

    def __init__(self, data: Buffer):
        self._view = memoryview(data).cast("B")
        self._pos = 0

    def __len__(self) -> int:
        return len(self._view)

    def __repr__(self) -> str:
        return f"ByteCursor(position={self._pos}, length={len(self._view)})"

    @property
    def position(self) -> int:
        return self._pos

    def remaining(self) -> int:
        return len(self._view) - self._pos

    def has_more(self) -> bool:
        return self.remaining() > 0

    def read_byte(self) -> int:
        if self._pos >= len(self._view):
            raise UnexpectedEndOfData(self._pos, 1, 0)
        b = self._view[self._pos]
        self._pos += 1
        return b

    def read_bytes(self, n: int) -> bytes:
        """
        Return the next `n` bytes and advance past them. The cursor does not
        move if fewer than `n` bytes remain.
        """
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {n}")
        available = self.remaining()
        if n > available:
            raise UnexpectedEndOfData(self._pos, n, available)
        start = self._pos
        self._pos += n
        return self._view[start : self._pos].tobytes()
