from dataclasses import dataclass
from enum import Enum

from dkim_prover.errors import CapacityError


class AddressStrategy(Enum):
    """How the address is taken out of a From/To value."""
    last_match = 'last_match'
    verbatim = 'verbatim'


@dataclass(frozen=True)
class DkimTags:
    selector: str
    domain: str
    signature: bytes


@dataclass(frozen=True)
class PaddedField:
    """ Zero padded, fixed capacity byte buffer.

    buffer[:length] is the source data, buffer[length:] is all zero.
    """
    buffer: bytes
    length: int

    @classmethod
    def from_bytes(cls, data: bytes, capacity: int, what: str = 'field'):
        """ Pad data with zero bytes up to capacity.

        @param data: bytes
            source bytes
        @param capacity: int
            size of the resulting buffer
        @param what: str
            name used in the error message
        @return: PaddedField
        @raise CapacityError: data is longer than capacity, it is never truncated
        """
        if len(data) > capacity:
            raise CapacityError(
                "%s is %d bytes, capacity is %d" % (what, len(data), capacity))
        return cls(bytes(data) + b'\x00' * (capacity - len(data)), len(data))

    @property
    def capacity(self) -> int:
        return len(self.buffer)

    @property
    def data(self) -> bytes:
        return self.buffer[:self.length]


@dataclass(frozen=True)
class FieldOffset:
    """Byte range header[index:index + length] inside the canonical header."""
    index: int
    length: int
