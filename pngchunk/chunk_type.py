# Licensed under the GPLv3 - see LICENSE
"""
Definitions for PNG chunk type codes.

Implements a ChunkType class holding the four bytes that identify a chunk,
with methods that interpret the case of each letter as a property bit.

For the PNG format, see
http://www.libpng.org/pub/png/spec/1.2/PNG-Structure.html
"""
import struct

from .header import HeaderParser
from .errors import InvalidFormatError
from .utils import byte_array


__all__ = ['ChunkType']


class ChunkType:
    """PNG chunk type code.

    The code consists of four bytes, which for a valid type are restricted
    to ASCII letters.  Bit 5 of each byte (the lower-case bit) encodes a
    property::

        bLOb  <-- 32 bit chunk type code represented in text form
        ||||
        |||+- Safe-to-copy bit is 1 (lowercase letter; bit 5 is 1)
        ||+-- Reserved bit is 0     (uppercase letter; bit 5 is 0)
        |+--- Private bit is 0      (uppercase letter; bit 5 is 0)
        +---- Ancillary bit is 1    (lowercase letter; bit 5 is 1)

    Any four bytes can be used to construct an instance; whether they form
    a proper chunk type can be checked with `is_valid`.  Instances are
    immutable and compare equal if their bytes are equal.

    The raw property bits can be accessed like a dictionary, with keys
    'ancillary', 'private', 'reserved', and 'safe_to_copy'.

    Parameters
    ----------
    value : bytes-like, iterable of int, str, or `ChunkType`
        The four bytes of the code.  A `str` is interpreted using
        :meth:`ChunkType.fromstring`, i.e., it must consist of letters.

    Raises
    ------
    InvalidFormatError
        If a `str` is passed in that does not consist of four ASCII letters.
    ValueError
        If the value does not consist of exactly four bytes.
    """

    _struct = struct.Struct('>I')
    """Structure to interpret the code as a big-endian 32-bit word."""

    _header_parser = HeaderParser(
        (('ancillary', (0, 29, 1)),
         ('private', (0, 21, 1)),
         ('reserved', (0, 13, 1)),
         ('safe_to_copy', (0, 5, 1))))

    def __init__(self, value):
        if isinstance(value, ChunkType):
            value = value.bytes()
        elif isinstance(value, str):
            value = self._encode(value)
        value = byte_array(value).tobytes()
        if len(value) != 4:
            raise ValueError("chunk type should consist of 4 bytes, not {0}."
                             .format(len(value)))
        self._bytes = value

    @staticmethod
    def _encode(string):
        if not isinstance(string, str):
            raise TypeError("chunk type text should be str, not {0}."
                            .format(type(string).__name__))
        if len(string) != 4:
            raise InvalidFormatError("chunk type {0!r} does not have 4 "
                                     "characters.".format(string))
        if not (string.isascii() and string.isalpha()):
            raise InvalidFormatError("chunk type {0!r} does not consist of "
                                     "ASCII letters.".format(string))
        return string.encode('ascii')

    @classmethod
    def fromstring(cls, string):
        """Create a chunk type from its text representation.

        Parameters
        ----------
        string : str
            Four ASCII letters, e.g., 'IHDR' or 'tEXt'.

        Raises
        ------
        InvalidFormatError
            If the string does not have length 4, or has characters that
            are not ASCII letters.
        """
        return cls(cls._encode(string))

    @classmethod
    def fromword(cls, word):
        """Create a chunk type from a big-endian 32-bit word."""
        return cls(cls._struct.pack(word))

    def bytes(self):
        """The four bytes of the chunk type."""
        return self._bytes

    def __bytes__(self):
        return self._bytes

    @property
    def word(self):
        """The chunk type as a big-endian 32-bit unsigned integer."""
        return self._struct.unpack(self._bytes)[0]

    def is_valid(self):
        """Whether all bytes are letters and the reserved bit is valid."""
        return self._bytes.isalpha() and self.is_reserved_bit_valid()

    def is_critical(self):
        """Whether the chunk is critical (first letter is uppercase)."""
        return self._bytes[0:1].isupper()

    def is_public(self):
        """Whether the chunk is public (second letter is uppercase)."""
        return self._bytes[1:2].isupper()

    def is_reserved_bit_valid(self):
        """Whether the reserved bit is zero (third letter is uppercase)."""
        return self._bytes[2:3].isupper()

    def is_safe_to_copy(self):
        """Whether the chunk is safe to copy (fourth letter is lowercase)."""
        return self._bytes[3:4].islower()

    def __getitem__(self, item):
        try:
            return self._header_parser.parsers[item]((self.word,))
        except KeyError:
            raise KeyError("{0} does not contain {1}"
                           .format(self.__class__.__name__, item))

    def keys(self):
        return self._header_parser.keys()

    def __contains__(self, key):
        return key in self.keys()

    def __eq__(self, other):
        return type(self) is type(other) and self._bytes == other._bytes

    def __hash__(self):
        return hash(self._bytes)

    def __str__(self):
        # Backslash and anything not printable ASCII are shown escaped.
        return ''.join('\\\\' if byte == 0x5c
                       else chr(byte) if 0x20 <= byte < 0x7f
                       else '\\x{:02x}'.format(byte)
                       for byte in self._bytes)

    def __repr__(self):
        return "{0}({1!r})".format(self.__class__.__name__, self._bytes)
