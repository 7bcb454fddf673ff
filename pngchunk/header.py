# Licensed under the GPLv3 - see LICENSE
"""
Bit-field access to headers held as big-endian 32-bit words.

A header class lists its fields in a `HeaderParser`, as pairs of a name
and a ``(word_index, bit_index, bit_length)`` location.  From those,
functions are made that read a field from a tuple or list of words, or
write it into a list of words.  `WordHeaderBase` uses them to give
dict-like access to its ``words``.
"""


__all__ = ['make_parser', 'make_setter', 'HeaderParser', 'WordHeaderBase']


def make_parser(word_index, bit_index, bit_length):
    """Construct a function that reads a field from header words.

    Single bits are returned as `bool`, anything longer as `int`.

    Parameters
    ----------
    word_index : int
        Index of the word holding the field.
    bit_index : int
        Position of the lowest bit of the field.
    bit_length : int
        Number of bits in the field.

    Returns
    -------
    parser : function
        To be used as ``parser(words)``.
    """
    if bit_length == 1:
        flag = 1 << bit_index

        def parser(words):
            return bool(words[word_index] & flag)

    elif bit_index == 0 and bit_length == 32:
        def parser(words):
            return words[word_index]

    else:
        mask = (1 << bit_length) - 1

        def parser(words):
            return (words[word_index] >> bit_index) & mask

    return parser


def make_setter(word_index, bit_index, bit_length):
    """Construct a function that writes a field into header words.

    Parameters are as for `make_parser`.  The function is used as
    ``setter(words, value)`` and changes ``words`` in-place; a `bool`
    sets or clears all bits of the field.

    Raises
    ------
    ValueError
        If the value does not fit in the field.
    """
    mask = (1 << bit_length) - 1
    field = mask << bit_index

    def setter(words, value):
        if isinstance(value, bool):
            value = mask if value else 0
        elif not 0 <= value <= mask:
            raise ValueError("{0} does not fit in {1} bits."
                             .format(value, bit_length))
        words[word_index] = (words[word_index] & ~field) | (value << bit_index)
        return words

    return setter


class HeaderParser:
    """Field locations of a header, with their parsers and setters.

    Parameters
    ----------
    fields : iterable of (str, tuple)
        Pairs of field name and ``(word_index, bit_index, bit_length)``.
        The order is kept for ``keys()`` and representations.
    """

    def __init__(self, fields):
        self.fields = dict(fields)
        self.parsers = {key: make_parser(*location)
                        for key, location in self.fields.items()}
        self.setters = {key: make_setter(*location)
                        for key, location in self.fields.items()}

    def keys(self):
        return self.fields.keys()

    def __contains__(self, key):
        return key in self.fields

    def __repr__(self):
        return "{0}({1})".format(self.__class__.__name__,
                                 tuple(self.fields.items()))


class WordHeaderBase:
    """Base class for headers consisting of 32-bit words.

    Subclasses define ``_header_parser``, a `HeaderParser` describing the
    fields.  Fields are read with ``header[key]`` and, if ``words`` is a
    list, written with ``header[key] = value``.

    Parameters
    ----------
    words : tuple or list of int
        Header words.  A tuple makes the header immutable.
    verify : bool, optional
        Whether to check the header with ``verify()``.  Default: `True`.
    """

    def __init__(self, words, verify=True):
        self.words = words
        if verify:
            self.verify()

    def verify(self):
        pass

    @property
    def mutable(self):
        """Whether fields can be set, i.e., whether ``words`` is a list."""
        return isinstance(self.words, list)

    def __getitem__(self, item):
        try:
            parser = self._header_parser.parsers[item]
        except KeyError:
            raise KeyError("{0} has no field {1!r}"
                           .format(self.__class__.__name__, item)) from None
        return parser(self.words)

    def __setitem__(self, item, value):
        try:
            setter = self._header_parser.setters[item]
        except KeyError:
            raise KeyError("{0} has no field {1!r}"
                           .format(self.__class__.__name__, item)) from None
        if not self.mutable:
            raise TypeError("{0} is immutable; create it from a list of "
                            "words to set fields."
                            .format(self.__class__.__name__))
        setter(self.words, value)

    def keys(self):
        return self._header_parser.keys()

    def __contains__(self, key):
        return key in self._header_parser

    def __eq__(self, other):
        return (type(self) is type(other)
                and tuple(self.words) == tuple(other.words))

    def _repr_value(self, key, value):
        return str(value)

    def __repr__(self):
        name = self.__class__.__name__
        outs = ["{0}: {1}".format(key, self._repr_value(key, self[key]))
                for key in self.keys()]
        return "<{0} {1}>".format(name, (",\n  " + " " * len(name)).join(outs))
