# Licensed under the GPLv3 - see LICENSE
"""
Definitions for PNG chunks.

Implements a ChunkHeader class holding the length and type words that start
each chunk, and a Chunk class that combines a chunk type with its data,
providing encoding to and decoding from the binary layout::

    offset  size  content
    0       4     length L of the data (big-endian unsigned)
    4       4     chunk type
    8       L     data
    8+L     4     CRC-32 over chunk type and data (big-endian unsigned)

For the PNG format, see
http://www.libpng.org/pub/png/spec/1.2/PNG-Structure.html
"""
import struct
import warnings
import zlib

import numpy as np

from .header import HeaderParser, WordHeaderBase
from .chunk_type import ChunkType
from .errors import (InvalidChunkTypeError, TruncatedInputError,
                     ChecksumMismatchError, EncodingError)
from .utils import fixedvalue, byte_array, CRC


__all__ = ['CRC32', 'PNGCRC', 'crc32', 'ChunkHeader', 'Chunk']

CRC32 = 0x104C11DB7
"""CRC polynomial used for PNG chunks.

x^32 + x^26 + x^23 + x^22 + x^16 + x^12 + x^11 + x^10 + x^8 + x^7 + x^5
+ x^4 + x^2 + x + 1, applied to reflected bytes, with the register
initialised to all ones and the result inverted.  This is CRC-32/ISO-HDLC,
the same as used by zlib and Ethernet.
"""


class PNGCRC(CRC):
    """CRC-32/ISO-HDLC, as used for PNG chunks.

    Has the table and parameters of the general `~pngchunk.utils.CRC`,
    but delegates the calculation to `zlib.crc32`, which gives identical
    results at C speed.
    """

    def __init__(self):
        super().__init__(CRC32, initial=0xffffffff, final_xor=0xffffffff,
                         reflect=True)

    def __call__(self, *streams):
        crc = 0
        for stream in streams:
            if not isinstance(stream, (bytes, bytearray, memoryview)):
                stream = np.ascontiguousarray(byte_array(stream))
            crc = zlib.crc32(stream, crc)
        return crc


crc32 = PNGCRC()

crc_struct = struct.Struct('>I')
"""Struct instance that packs/unpacks the CRC following the data."""


class ChunkHeader(WordHeaderBase):
    """Decoder/encoder of the length and type words starting a PNG chunk.

    Parameters
    ----------
    words : tuple or list of int
        Two 32-bit unsigned int header words.  If given as a tuple, the
        header is immutable.
    verify : bool, optional
        Whether to check that the chunk type is valid.  Default: `True`.

    Raises
    ------
    InvalidChunkTypeError
        If ``verify`` is set and the chunk type is not valid.
    """

    _struct = struct.Struct('>2I')

    _header_parser = HeaderParser(
        (('length', (0, 0, 32)),
         ('type_code', (1, 0, 32)),
         ('ancillary', (1, 29, 1)),
         ('private', (1, 21, 1)),
         ('reserved', (1, 13, 1)),
         ('safe_to_copy', (1, 5, 1))))

    def verify(self):
        """Verify that the header has two words and a valid chunk type."""
        assert len(self.words) == 2
        chunk_type = self.chunk_type
        if not chunk_type.is_valid():
            raise InvalidChunkTypeError(chunk_type)

    @fixedvalue
    def nbytes(cls):
        """Size of the header in bytes."""
        return cls._struct.size

    @classmethod
    def fromvalues(cls, payload_nbytes, chunk_type, verify=True):
        """Create an immutable header for a given data size and chunk type.

        Parameters
        ----------
        payload_nbytes : int
            Size of the chunk data in bytes.
        chunk_type : `~pngchunk.ChunkType`, str, or bytes-like
            Type of the chunk.
        verify : bool, optional
            Whether to check that the chunk type is valid.  Default: `True`.
        """
        return cls((payload_nbytes, ChunkType(chunk_type).word),
                   verify=verify)

    @classmethod
    def fromfile(cls, fh, verify=True):
        """Read chunk header from file.

        The header constructed will be immutable.

        Raises
        ------
        TruncatedInputError
            If the file does not contain a complete header.
        """
        s = fh.read(cls._struct.size)
        if len(s) != cls._struct.size:
            raise TruncatedInputError("could not read full chunk header.")
        return cls(cls._struct.unpack(s), verify=verify)

    @classmethod
    def frombytes(cls, buffer, verify=True):
        """Create chunk header from the start of a bytes-like buffer.

        Any bytes beyond the header are ignored.  The header constructed
        will be immutable.

        Raises
        ------
        TruncatedInputError
            If the buffer is shorter than the header.
        """
        if len(buffer) < cls._struct.size:
            raise TruncatedInputError("buffer too short for chunk header.")
        return cls(cls._struct.unpack_from(buffer), verify=verify)

    def tofile(self, fh):
        """Write chunk header to filehandle."""
        return fh.write(self.tobytes())

    def tobytes(self):
        """Encode the header words."""
        return self._struct.pack(*self.words)

    @property
    def payload_nbytes(self):
        """Size of the chunk data in bytes."""
        return self['length']

    @payload_nbytes.setter
    def payload_nbytes(self, payload_nbytes):
        self['length'] = payload_nbytes

    @property
    def chunk_nbytes(self):
        """Size of the full chunk, including header and CRC, in bytes."""
        return self.nbytes + self.payload_nbytes + crc_struct.size

    @chunk_nbytes.setter
    def chunk_nbytes(self, chunk_nbytes):
        self.payload_nbytes = chunk_nbytes - self.nbytes - crc_struct.size

    @property
    def chunk_type(self):
        """Chunk type (decoded from 'type_code')."""
        return ChunkType.fromword(self['type_code'])

    @chunk_type.setter
    def chunk_type(self, chunk_type):
        self['type_code'] = ChunkType(chunk_type).word

    def _repr_value(self, key, value):
        if key == 'type_code':
            return "0x{0:08x} ('{1}')".format(value, self.chunk_type)
        return super()._repr_value(key, value)


class Chunk:
    """Representation of a PNG chunk, consisting of a type and data.

    Parameters
    ----------
    chunk_type : `~pngchunk.ChunkType`, str, or bytes-like
        Type of the chunk.  Anything that is not a `~pngchunk.ChunkType`
        is used to initialise one.  The type is not checked for validity.
    data : bytes-like or iterable of int
        Data contained in the chunk.  Stored as an immutable `bytes` copy.

    Notes
    -----
    The Chunk can also be instantiated using class methods:

      frombytes : decode a chunk from a buffer, checking type and CRC

      fromfile : read and decode a chunk from a filehandle

      fromstring : encode a string as UTF-8 data

    Of course, one can also do the opposite:

      as_bytes : encode the chunk in its binary layout

      tofile : method to write the encoded chunk to filehandle

      data_as_string : decode the data as UTF-8

    The CRC is calculated anew each time the ``crc`` property is accessed.
    Chunks compare equal if their types and data are equal.
    """

    _header_class = ChunkHeader

    _max_length = 2**32 - 1
    """Maximum data size that can be encoded."""
    _png_max_length = 2**31 - 1
    """Maximum data size allowed in a PNG file."""

    def __init__(self, chunk_type, data):
        if not isinstance(chunk_type, ChunkType):
            chunk_type = ChunkType(chunk_type)
        self._chunk_type = chunk_type
        self._data = byte_array(data).tobytes()

    def verify(self):
        """Verify the chunk can be written as a valid PNG chunk.

        Raises
        ------
        InvalidChunkTypeError
            If the chunk type is not valid.
        ValueError
            If the data is too long to be encoded.
        """
        if not self._chunk_type.is_valid():
            raise InvalidChunkTypeError(self._chunk_type)
        self._check_length(warn=False)

    def _check_length(self, warn=True):
        if self.length > self._max_length:
            raise ValueError("chunk data of {0} bytes cannot be encoded; "
                             "the maximum is {1}."
                             .format(self.length, self._max_length))
        if warn and self.length > self._png_max_length:
            warnings.warn("chunk data of {0} bytes exceeds the maximum of "
                          "{1} allowed by PNG.".format(self.length,
                                                       self._png_max_length))

    @property
    def length(self):
        """Size of the chunk data in bytes."""
        return len(self._data)

    @property
    def chunk_type(self):
        """Type of the chunk."""
        return self._chunk_type

    @property
    def data(self):
        """Chunk data."""
        return self._data

    @property
    def crc(self):
        """CRC-32 of the chunk type and data."""
        return crc32(self._chunk_type.bytes(), self._data)

    @property
    def nbytes(self):
        """Size of the encoded chunk in bytes."""
        return self._header_class.nbytes + self.length + crc_struct.size

    @property
    def header(self):
        """Immutable header with the length and type of the chunk."""
        return self._header_class.fromvalues(self.length, self._chunk_type,
                                             verify=False)

    def data_as_string(self):
        """Decode the chunk data as UTF-8 text.

        Raises
        ------
        EncodingError
            If the data are not valid UTF-8.
        """
        try:
            return self._data.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise EncodingError("chunk data are not valid UTF-8: {0}"
                                .format(exc)) from exc

    def as_bytes(self):
        """Encode the chunk as length, type, data, and CRC."""
        self._check_length()
        return b''.join((self.header.tobytes(), self._data,
                         crc_struct.pack(self.crc)))

    tobytes = as_bytes

    def __bytes__(self):
        return self.as_bytes()

    def tofile(self, fh):
        """Write encoded chunk to filehandle."""
        return fh.write(self.as_bytes())

    @classmethod
    def fromstring(cls, chunk_type, string):
        """Create a chunk with the string encoded as UTF-8 as its data."""
        return cls(chunk_type, string.encode('utf-8'))

    @classmethod
    def frombytes(cls, buffer, verify=True):
        """Decode a chunk from the start of a bytes-like buffer.

        Any bytes beyond the end of the chunk are ignored.

        Parameters
        ----------
        buffer : bytes-like
            Holding at least one encoded chunk.
        verify : bool, optional
            Whether to check that the chunk type is valid and that the CRC
            is correct.  Default: `True`.

        Raises
        ------
        TruncatedInputError
            If the buffer is too short to hold the chunk.
        InvalidChunkTypeError
            If the chunk type is not valid.
        ChecksumMismatchError
            If the CRC does not match that calculated from type and data.
        """
        header = cls._header_class.frombytes(buffer, verify=verify)
        start = header.nbytes
        stop = start + header.payload_nbytes
        if len(buffer) < stop + crc_struct.size:
            raise TruncatedInputError(
                "buffer of {0} bytes too short for chunk of {1} bytes."
                .format(len(buffer), header.chunk_nbytes))

        data = buffer[start:stop]
        crc = crc_struct.unpack_from(buffer, stop)[0]
        return cls._fromparts(header, data, crc, verify)

    @classmethod
    def fromfile(cls, fh, verify=True):
        """Read a chunk from a filehandle.

        Parameters
        ----------
        fh : filehandle
            To read the chunk from, starting at the current position.
        verify : bool, optional
            Whether to check that the chunk type is valid and that the CRC
            is correct.  Default: `True`.

        Raises
        ------
        TruncatedInputError
            If the file ends before the end of the chunk.
        InvalidChunkTypeError
            If the chunk type is not valid.
        ChecksumMismatchError
            If the CRC does not match that calculated from type and data.
        """
        header = cls._header_class.fromfile(fh, verify=verify)
        nbytes = header.payload_nbytes + crc_struct.size
        s = fh.read(nbytes)
        if len(s) < nbytes:
            raise TruncatedInputError("could not read full chunk data and "
                                      "CRC.")
        crc = crc_struct.unpack(s[-crc_struct.size:])[0]
        return cls._fromparts(header, s[:-crc_struct.size], crc, verify)

    @classmethod
    def _fromparts(cls, header, data, crc, verify):
        self = cls(header.chunk_type, data)
        if verify:
            actual = self.crc
            if actual != crc:
                raise ChecksumMismatchError(crc, actual)
        return self

    def __eq__(self, other):
        return (type(self) is type(other)
                and self._chunk_type == other._chunk_type
                and self._data == other._data)

    def __hash__(self):
        return hash((self._chunk_type, self._data))

    def __repr__(self):
        name = self.__class__.__name__
        outs = ["chunk_type: {0}".format(self._chunk_type),
                "length: {0}".format(self.length),
                "crc: 0x{0:08x}".format(self.crc)]
        return "<{} {}>".format(name, (",\n  " + " "*len(name)).join(outs))
