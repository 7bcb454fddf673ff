# Licensed under the GPLv3 - see LICENSE
import io

import pytest

from ..header import make_parser, make_setter, HeaderParser, WordHeaderBase
from ..chunk_type import ChunkType
from ..chunk import ChunkHeader
from ..errors import InvalidChunkTypeError, TruncatedInputError


class TestParsers:
    @pytest.mark.parametrize(('location', 'expected'),
                             (((0, 0, 32), 0x52755374),
                              ((1, 0, 32), 0xdeadbeef),
                              ((0, 29, 1), False),
                              ((0, 21, 1), True),
                              ((0, 24, 8), 0x52),
                              ((1, 0, 8), 0xef),
                              ((1, 4, 8), 0xee)))
    def test_make_parser(self, location, expected):
        words = (0x52755374, 0xdeadbeef)
        assert make_parser(*location)(words) == expected

    def test_single_bit_is_bool(self):
        assert make_parser(0, 5, 1)((0x20,)) is True
        assert make_parser(0, 5, 1)((0xdf,)) is False

    def test_make_setter(self):
        words = [0, 0xffffffff]
        make_setter(0, 24, 8)(words, 0x52)
        assert words == [0x52000000, 0xffffffff]
        make_setter(1, 4, 8)(words, 0)
        assert words == [0x52000000, 0xfffff00f]
        make_setter(1, 5, 1)(words, True)
        assert words == [0x52000000, 0xfffff02f]
        make_setter(1, 5, 1)(words, False)
        assert words == [0x52000000, 0xfffff00f]
        make_setter(0, 0, 32)(words, 42)
        assert words == [42, 0xfffff00f]

    @pytest.mark.parametrize('value', (0x10, -1))
    def test_make_setter_out_of_range(self, value):
        words = [0, 0]
        with pytest.raises(ValueError):
            make_setter(0, 0, 4)(words, value)
        assert words == [0, 0]


class TestHeaderParser:
    def setup_class(cls):
        cls.hp = HeaderParser((('length', (0, 0, 32)),
                               ('flag', (1, 5, 1))))

    def test_parsers_and_setters(self):
        assert list(self.hp.keys()) == ['length', 'flag']
        assert set(self.hp.parsers) == set(self.hp.setters) == {'length',
                                                                'flag'}
        assert self.hp.parsers['length']((10, 0)) == 10
        assert self.hp.parsers['flag']((0, 0x20)) is True
        assert self.hp.setters['flag']([0, 0], True) == [0, 0x20]

    def test_contains(self):
        assert 'flag' in self.hp
        assert 'extra' not in self.hp

    def test_repr(self):
        assert repr(self.hp).startswith("HeaderParser((('length', (0, 0, 32))")


class TestWordHeaderBase:
    def setup_class(cls):
        class Header(WordHeaderBase):
            _header_parser = HeaderParser((('a', (0, 0, 16)),
                                           ('b', (0, 16, 16))))

        cls.Header = Header

    def test_get_set(self):
        header = self.Header([0x00020001])
        assert header.mutable
        assert header['a'] == 1
        assert header['b'] == 2
        header['b'] = 3
        assert header.words == [0x00030001]

    def test_immutable(self):
        header = self.Header((0x00020001,))
        assert not header.mutable
        with pytest.raises(TypeError, match='immutable'):
            header['a'] = 5
        assert header.words == (0x00020001,)

    def test_equality(self):
        assert self.Header([1]) == self.Header((1,))
        assert self.Header([1]) != self.Header([2])
        assert self.Header([1]) != (1,)


class TestChunkHeader:
    def setup_class(cls):
        cls.header_bytes = b'\x00\x00\x00\x2aRuSt'

    def test_frombytes(self):
        header = ChunkHeader.frombytes(self.header_bytes + b'extra')
        assert header.words == (42, 0x52755374)
        assert header.nbytes == 8
        assert ChunkHeader.nbytes == 8
        assert header['length'] == 42
        assert header['type_code'] == 0x52755374
        assert header['ancillary'] is False
        assert header['private'] is True
        assert header['reserved'] is False
        assert header['safe_to_copy'] is True
        assert header.payload_nbytes == 42
        assert header.chunk_nbytes == 54
        assert header.chunk_type == ChunkType('RuSt')
        assert header.tobytes() == self.header_bytes
        assert not header.mutable

    def test_file_round_trip(self):
        header = ChunkHeader.frombytes(self.header_bytes)
        fh = io.BytesIO()
        assert header.tofile(fh) == 8
        fh.seek(0)
        assert ChunkHeader.fromfile(fh) == header
        fh.seek(0)
        fh.truncate(5)
        with pytest.raises(TruncatedInputError):
            ChunkHeader.fromfile(fh)

    def test_truncated(self):
        with pytest.raises(TruncatedInputError):
            ChunkHeader.frombytes(self.header_bytes[:7])

    def test_invalid_type(self):
        with pytest.raises(InvalidChunkTypeError):
            ChunkHeader.frombytes(b'\x00\x00\x00\x2aRust')
        header = ChunkHeader.frombytes(b'\x00\x00\x00\x2aRust', verify=False)
        assert header.chunk_type == ChunkType(b'Rust')
        with pytest.raises(InvalidChunkTypeError):
            header.verify()

    def test_fromvalues(self):
        header = ChunkHeader.fromvalues(42, 'RuSt')
        assert header == ChunkHeader.frombytes(self.header_bytes)
        assert not header.mutable
        assert ChunkHeader.fromvalues(42, ChunkType(b'RuSt')) == header
        with pytest.raises(InvalidChunkTypeError):
            ChunkHeader.fromvalues(42, b'Rust')
        assert ChunkHeader.fromvalues(42, b'Rust', verify=False).words == (
            42, 0x52757374)

    def test_set_fields(self):
        header = ChunkHeader([0, ChunkType('IHDR').word])
        header.payload_nbytes = 13
        assert header['length'] == 13
        header['safe_to_copy'] = True
        header['ancillary'] = True
        assert header.chunk_type == ChunkType('iHDr')
        header.chunk_nbytes = 20
        assert header.payload_nbytes == 8
        header.chunk_type = 'IEND'
        assert header.words == [8, 0x49454e44]
        header['reserved'] = True
        with pytest.raises(InvalidChunkTypeError):
            header.verify()

    def test_errors(self):
        header = ChunkHeader.frombytes(self.header_bytes)
        with pytest.raises(KeyError):
            header['bla']
        with pytest.raises(KeyError):
            header['bla'] = 1
        with pytest.raises(TypeError):
            header.payload_nbytes = 10
        mutable = ChunkHeader(list(header.words))
        with pytest.raises(ValueError):
            mutable['length'] = 2**32
        with pytest.raises(ValueError):
            header.nbytes = 12
        header.nbytes = 8

    def test_keys(self):
        header = ChunkHeader.frombytes(self.header_bytes)
        assert list(header.keys()) == ['length', 'type_code', 'ancillary',
                                       'private', 'reserved', 'safe_to_copy']
        assert 'length' in header
        assert 'bla' not in header

    def test_repr(self):
        header = ChunkHeader.frombytes(self.header_bytes)
        r = repr(header)
        assert r.startswith('<ChunkHeader length: 42,')
        assert "type_code: 0x52755374 ('RuSt')" in r
