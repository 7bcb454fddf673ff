# Licensed under the GPLv3 - see LICENSE
"""Errors raised while encoding or decoding PNG chunks.

All derive from `ChunkError`, itself a `ValueError`, so that callers can
catch any problem with the data in one go.
"""

__all__ = ['ChunkError', 'InvalidFormatError', 'InvalidChunkTypeError',
           'TruncatedInputError', 'ChecksumMismatchError', 'EncodingError']


class ChunkError(ValueError):
    """Base class for errors in PNG chunk data."""
    pass


class InvalidFormatError(ChunkError):
    """Text chunk type is not exactly four ASCII letters."""
    pass


class InvalidChunkTypeError(ChunkError):
    """Chunk type found in data is not valid.

    Parameters
    ----------
    chunk_type : `~pngchunk.ChunkType`
        The offending chunk type, stored on the ``chunk_type`` attribute.
    """

    def __init__(self, chunk_type):
        super().__init__("invalid chunk type '{0}'".format(chunk_type))
        self.chunk_type = chunk_type


class TruncatedInputError(ChunkError, EOFError):
    """Input ended before a complete chunk could be read."""
    pass


class ChecksumMismatchError(ChunkError):
    """CRC stored with a chunk differs from that calculated for its content.

    Parameters
    ----------
    expected : int
        CRC stored in the input.
    actual : int
        CRC calculated from the chunk type and data.
    """

    def __init__(self, expected, actual):
        super().__init__("invalid checksum: expected 0x{0:08x}, "
                         "actual 0x{1:08x}".format(expected, actual))
        self.expected = expected
        self.actual = actual


class EncodingError(ChunkError):
    """Chunk data cannot be decoded as UTF-8 text."""
    pass
