# Licensed under the GPLv3 - see LICENSE
"""PNG chunk encoding and decoding.

A PNG file consists of a signature followed by chunks, each of which
holds a length, a four-letter type, data, and a CRC.  This package
encodes and decodes single chunks, with `~pngchunk.ChunkType` holding
the type code and `~pngchunk.Chunk` the type together with its data.
"""

from .chunk_type import ChunkType  # noqa
from .chunk import ChunkHeader, Chunk  # noqa
from .errors import (ChunkError, InvalidFormatError,  # noqa
                     InvalidChunkTypeError, TruncatedInputError,
                     ChecksumMismatchError, EncodingError)
from .base import open  # noqa

try:
    from .version import version as __version__
except ImportError:
    __version__ = ''

# Define minima for the documentation, but do not bother to explicitly check.
__minimum_python_version__ = '3.10'
__minimum_astropy_version__ = '5.1'
__minimum_numpy_version__ = '1.24'
