# Licensed under the GPLv3 - see LICENSE
from operator import index

import numpy as np
from astropy.utils.decorators import classproperty


__all__ = ['fixedvalue', 'byte_array', 'reflect_bits', 'CRC']


class fixedvalue(classproperty):
    """Property that is fixed for all instances of a class.

    Based on `astropy.utils.decorators.classproperty`, but with
    a setter that passes if the value is identical to the fixed
    value, and otherwise raises a `ValueError`.
    """
    def __set__(self, instance, value):
        fixed_value = self.__get__(instance, type(instance))
        if value != fixed_value:
            raise ValueError('fixed property can only be set to {}.'
                             .format(fixed_value))


def byte_array(pattern):
    """Convert the pattern to a byte array.

    Parameters
    ----------
    pattern : ~numpy.ndarray, bytes-like, or iterable of int
        Pattern to convert.  If a `~numpy.ndarray` or bytes-like instance,
        a byte array view is taken.  If an iterable of int, the integers
        need to fit in an unsigned byte.

    Returns
    -------
    byte_array : `~numpy.ndarray` of byte
    """
    if isinstance(pattern, str):
        raise TypeError('cannot convert text to bytes without an encoding.')

    if isinstance(pattern, np.ndarray):
        return np.atleast_1d(pattern).view('u1')

    if isinstance(pattern, (bytes, bytearray, memoryview)):
        # Quick turn-around for input that is OK already.
        return np.frombuffer(pattern, dtype='u1')

    pattern = np.array(list(pattern), ndmin=1)
    if pattern.size == 0:
        return pattern.astype('u1')

    if (pattern.dtype.kind not in 'ui'
            or pattern.min() < 0
            or pattern.max() > 0xff):
        raise ValueError('values have to fit in an unsigned byte.')
    return pattern.astype('u1')


def reflect_bits(value, nbits):
    """Reverse the order of the lowest ``nbits`` bits of an integer."""
    return int('{:0{}b}'.format(index(value), nbits)[::-1], base=2)


class CRC:
    """Cyclic Redundancy Check on byte streams.

    See https://en.wikipedia.org/wiki/Cyclic_redundancy_check

    Once initialised, the instance can be used as a function that calculates
    the CRC over one or more byte strings, or one can use the ``check``
    method to verify that a given CRC is correct.

    The calculation is table-driven, processing one byte at a time in
    Python, so it is meant for short streams; `~pngchunk.chunk.crc32`
    handles chunk data of any size.  The usual parametrization is used,
    in terms of an initial register value, a value XOR-ed with the final
    register, and whether the bits in each byte are processed
    least-significant first (in which case the result is reflected as well).

    Parameters
    ----------
    polynomial : int
        Binary encoded CRC divisor, including the leading bit.  For instance,
        that used by PNG is 0x104C11DB7, or x^32 + x^26 + x^23 + x^22 + x^16
        + x^12 + x^11 + x^10 + x^8 + x^7 + x^5 + x^4 + x^2 + x + 1.
    initial : int, optional
        Initial value of the register.  Default: 0.
    final_xor : int, optional
        Value to XOR the final register with.  Default: 0.
    reflect : bool, optional
        Whether input bytes and output are reflected.  Default: `False`.
    """

    def __init__(self, polynomial, *, initial=0, final_xor=0, reflect=False):
        self.polynomial = index(polynomial)
        if len(self) < 8:
            raise ValueError('table-driven CRC requires a polynomial of '
                             'degree 8 or more.')
        self.initial = index(initial)
        self.final_xor = index(final_xor)
        self.reflect = bool(reflect)
        self._mask = (1 << len(self)) - 1
        self.table = self._make_table()
        # Python ints are much faster to index and combine in the byte loop.
        self._lut = self.table.tolist()

    def __len__(self):
        return self.polynomial.bit_length() - 1

    def _make_table(self):
        """Calculate the CRC of all possible single bytes."""
        width = len(self)
        polynomial = self.polynomial & self._mask
        if self.reflect:
            polynomial = reflect_bits(polynomial, width)
            table = np.arange(256, dtype='u8')
            for _ in range(8):
                table = np.where((table & 1) != 0,
                                 (table >> 1) ^ polynomial, table >> 1)
        else:
            top_bit = 1 << (width - 1)
            table = np.arange(256, dtype='u8') << (width - 8)
            for _ in range(8):
                table = np.where((table & top_bit) != 0,
                                 ((table << 1) ^ polynomial) & self._mask,
                                 (table << 1) & self._mask)
        return table

    def __call__(self, *streams):
        """Calculate CRC for the given byte streams.

        Parameters
        ----------
        *streams : bytes-like or iterable of int
            The CRC is calculated over the concatenation of all streams.

        Returns
        -------
        crc : int
        """
        if self.reflect:
            register = reflect_bits(self.initial, len(self))
        else:
            register = self.initial

        for stream in streams:
            # Iterating over bytes yields Python ints without a list copy.
            register = self._update(register, byte_array(stream).tobytes())

        return register ^ self.final_xor

    def _update(self, register, stream):
        lut = self._lut
        if self.reflect:
            for byte in stream:
                register = lut[(register ^ byte) & 0xff] ^ (register >> 8)
        else:
            shift = len(self) - 8
            mask = self._mask
            for byte in stream:
                register = (lut[((register >> shift) ^ byte) & 0xff]
                            ^ ((register << 8) & mask))
        return register

    def check(self, crc, *streams):
        """Check that the CRC calculated for the streams equals ``crc``.

        Parameters
        ----------
        crc : int
            Expected CRC.
        *streams : bytes-like or iterable of int
            Streams to calculate the CRC for.

        Returns
        -------
        ok : bool
        """
        return self(*streams) == crc

    def __repr__(self):
        return ('{0}(0x{1:x}, initial=0x{2:x}, final_xor=0x{3:x}, '
                'reflect={4})'.format(self.__class__.__name__,
                                      self.polynomial, self.initial,
                                      self.final_xor, self.reflect))
