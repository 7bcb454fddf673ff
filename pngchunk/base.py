# Licensed under the GPLv3 - see LICENSE
"""Classes for reading and writing PNG chunks from and to binary files.

The `~pngchunk.base.FileBase` class wraps a binary file handle, looking up
any attribute it does not define on the underlying file.  The
`~pngchunk.base.ChunkFileReader` adds methods to read chunk headers and
chunks, and the `~pngchunk.base.ChunkFileWriter` a method to write chunks.

Chunks are read and written consecutively starting from the current
position of the file handle.  Nothing is assumed about what precedes them,
so for a PNG file one should first skip its 8-byte signature.
"""
import io
from contextlib import contextmanager

from .chunk_type import ChunkType
from .chunk import ChunkHeader, Chunk, crc_struct


__all__ = ['FileBase', 'ChunkFileReader', 'ChunkFileWriter', 'open']


class FileBase:
    """Wrapper around a binary file handle.

    Attributes not defined on the wrapper, such as ``read``, ``seek`` and
    ``tell``, are taken from the wrapped handle, ``fh_raw``.

    Parameters
    ----------
    fh_raw : filehandle
        Binary file handle to wrap.
    """
    fh_raw = None

    def __init__(self, fh_raw):
        self.fh_raw = fh_raw

    def __getattr__(self, attr):
        # Private names are never delegated.
        if not attr.startswith('_'):
            try:
                return getattr(self.fh_raw, attr)
            except AttributeError:
                pass
        raise AttributeError("{0!r} object has no attribute {1!r}"
                             .format(self.__class__.__name__, attr))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the wrapped file handle."""
        self.fh_raw.close()

    @contextmanager
    def temporary_offset(self, offset=None, whence=0):
        """Context manager that restores the file position on exit.

        Usable as::

            with fh.temporary_offset(offset) as fh:
                chunk = fh.read_chunk()

        If ``offset`` is given, the file first seeks to it, with ``whence``
        as for :meth:`io.IOBase.seek`.  The original position is restored
        also if an exception is raised inside the block.
        """
        start = self.tell()
        try:
            if offset is not None:
                self.seek(offset, whence)
            yield self
        finally:
            self.seek(start)

    def __repr__(self):
        return "{0}(fh_raw={1})".format(self.__class__.__name__, self.fh_raw)


class ChunkFileReader(FileBase):
    """Chunk reader wrapped around a binary file.

    Iterating over the reader yields all chunks from the current position
    up to the end of the file.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle of the raw binary data file.
    """

    def read_header(self, verify=True):
        """Read a single chunk header.

        Parameters
        ----------
        verify : bool, optional
            Whether to check that the chunk type is valid.  Default: `True`.

        Returns
        -------
        header : `~pngchunk.ChunkHeader`
            With the length and type of the chunk.
        """
        return ChunkHeader.fromfile(self.fh_raw, verify=verify)

    def read_chunk(self, verify=True):
        """Read a single chunk.

        Parameters
        ----------
        verify : bool, optional
            Whether to check that the chunk type is valid and that the CRC
            is correct.  Default: `True`.

        Returns
        -------
        chunk : `~pngchunk.Chunk`
        """
        return Chunk.fromfile(self.fh_raw, verify=verify)

    def at_end(self):
        """Whether the file position is at the end of the file."""
        with self.temporary_offset():
            return not self.fh_raw.read(1)

    def __iter__(self):
        while not self.at_end():
            yield self.read_chunk()

    def find_chunk(self, chunk_type, verify=True):
        """Find the first chunk of a given type from the current position.

        Only the chunk headers are read; data and CRC are skipped.

        Parameters
        ----------
        chunk_type : `~pngchunk.ChunkType`, str, or bytes-like
            Type of chunk to look for.
        verify : bool, optional
            Whether to check the chunk types encountered are valid.
            Default: `True`.

        Returns
        -------
        header : `~pngchunk.ChunkHeader` or None
            Retrieved header, with the file position set to the start of the
            chunk.  If no chunk of the given type is found, `None`, with the
            file position left at its original location.  The position is
            also restored if an error is raised during the search.
        """
        chunk_type = ChunkType(chunk_type)
        with self.temporary_offset():
            while not self.at_end():
                header = self.read_header(verify=verify)
                if header.chunk_type == chunk_type:
                    location = self.tell() - header.nbytes
                    break
                self.seek(header.payload_nbytes + crc_struct.size, 1)
            else:
                return None

        self.seek(location)
        return header


class ChunkFileWriter(FileBase):
    """Chunk writer wrapped around a binary file.

    Parameters
    ----------
    fh_raw : filehandle
        Filehandle of the raw binary data file.
    """

    def write_chunk(self, chunk, verify=True):
        """Write a single chunk.

        Parameters
        ----------
        chunk : `~pngchunk.Chunk`
            Chunk to write.
        verify : bool, optional
            Whether to check the chunk type is valid.  Default: `True`.
        """
        if verify:
            chunk.verify()
        return chunk.tofile(self.fh_raw)


def open(name, mode='rb'):
    """Open a binary file for reading or writing PNG chunks.

    Parameters
    ----------
    name : str, `~pathlib.Path`, or filehandle
        File name or an already opened binary filehandle.
    mode : {'rb', 'wb'}, optional
        Whether to open for reading (default) or writing.  The 'b' is
        optional.

    Returns
    -------
    fh : `~pngchunk.base.ChunkFileReader` or `~pngchunk.base.ChunkFileWriter`
        Closing it also closes the underlying file.
    """
    if 'b' not in mode:
        mode += 'b'
    if mode == 'rb':
        cls, method = ChunkFileReader, 'read'
    elif mode == 'wb':
        cls, method = ChunkFileWriter, 'write'
    else:
        raise ValueError("invalid mode '{0}'".format(mode))

    if hasattr(name, method):
        return cls(name)

    return cls(io.open(name, mode))
