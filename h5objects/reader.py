""" Bounded reading of little-endian HDF5 fields from file-like objects. """

import io
import struct
import sys

from .core import _structure_size, _unpack_struct_from, _unpack_integer
from .core import HDF5ReadError


class BoundedReader(object):
    """
    Reader of little-endian HDF5 fields from a file-like object.

    A reader created by ``bound_to`` reads through its parent and will not
    read past its bound: a read larger than the bytes it has left raises
    ``HDF5ReadError`` rather than returning bytes of the following record.
    Reads made through a bounded reader count against the bounds of every
    enclosing reader.

    Parameters
    ----------
    fh : file-like
        Object with a read method which behaves like a Python file object
        opened in binary mode.  A seek method is needed by ``seek_to``.
    limit : int or None
        Number of bytes the reader may consume, None for no bound.

    Attributes
    ----------
    position : int
        Number of bytes consumed through this reader.

    """

    def __init__(self, fh, limit=None, parent=None):
        """ initalize. """
        self._fh = fh
        self._limit = limit
        self._parent = parent
        self.position = 0

    def __repr__(self):
        return '<BoundedReader position=%d remaining=%r>' % (
            self.position, self._limit)

    @property
    def remaining(self):
        """ Bytes left before the bound, None for an unbounded reader. """
        return self._limit

    @property
    def is_bounded(self):
        """ True when reads are limited by a bound. """
        return self._limit is not None

    def bound_to(self, size):
        """ Return a reader over the next size bytes of this reader. """
        if size < 0:
            raise ValueError('bound must be non-negative, got %d' % (size))
        return BoundedReader(self._fh, limit=size, parent=self)

    def _read(self, size, operation):
        """ Read exactly size bytes, checking the bound and the stream. """
        if size < 0 or size > sys.maxsize:
            raise HDF5ReadError(
                '%s of %d bytes after %d bytes is not a valid read size' % (
                    operation, size, self.position))
        if self._limit is not None and size > self._limit:
            raise HDF5ReadError(
                '%s of %d bytes after %d bytes exceeds the bound, only %d '
                'bytes remain' % (operation, size, self.position, self._limit))
        if self._parent is not None:
            buf = self._parent._read(size, operation)
        else:
            buf = self._fh.read(size)
            if len(buf) != size:
                raise HDF5ReadError(
                    '%s of %d bytes after %d bytes returned %d bytes' % (
                        operation, size, self.position, len(buf)))
        if self._limit is not None:
            self._limit -= size
        self.position += size
        return buf

    def read_vec(self, size):
        """ Read exactly size bytes. """
        return bytes(self._read(size, 'read_vec'))

    def read_all(self):
        """
        Read all remaining bytes.

        For a bounded reader this is every byte up to the bound, for an
        unbounded reader everything up to the end of the stream.
        """
        if self._limit is not None:
            return bytes(self._read(self._limit, 'read_all'))
        buf = self._fh.read()
        self.position += len(buf)
        return bytes(buf)

    def skip(self, size):
        """ Consume and discard size bytes. """
        self._read(size, 'skip')

    def read_struct(self, structure):
        """ Unpack a structure into an OrderedDict. """
        size = _structure_size(structure)
        return _unpack_struct_from(structure, self._read(size, 'read_struct'))

    def read_u8(self):
        return struct.unpack('<B', self._read(1, 'read_u8'))[0]

    def read_u16(self):
        return struct.unpack('<H', self._read(2, 'read_u16'))[0]

    def read_u24(self):
        return _unpack_integer(3, self._read(3, 'read_u24'))

    def read_u32(self):
        return struct.unpack('<I', self._read(4, 'read_u32'))[0]

    def read_u64(self):
        return struct.unpack('<Q', self._read(8, 'read_u64'))[0]

    def read_f32(self):
        """ Read a little-endian IEEE 754 single, returned as a float. """
        return struct.unpack('<f', self._read(4, 'read_f32'))[0]

    def seek_to(self, offset):
        """ Move an unbounded reader to an absolute offset in the stream. """
        if self._parent is not None or self._limit is not None:
            raise HDF5ReadError(
                'cannot seek a bounded reader to offset %d' % (offset))
        if offset < 0 or offset > sys.maxsize:
            raise HDF5ReadError(
                'cannot seek to offset %d, it is not a valid position' % (
                    offset))
        if not hasattr(self._fh, 'seek'):
            raise HDF5ReadError(
                'cannot seek to offset %d, the stream has no seek method'
                % (offset))
        self._fh.seek(offset)

    def stream_length(self):
        """
        Total length of the underlying stream in bytes.

        None when the stream cannot seek and tell.  The stream position is
        left unchanged.
        """
        if not (hasattr(self._fh, 'seek') and hasattr(self._fh, 'tell')):
            return None
        position = self._fh.tell()
        self._fh.seek(0, io.SEEK_END)
        length = self._fh.tell()
        self._fh.seek(position)
        return length


def as_reader(obj):
    """
    Return a BoundedReader for obj.

    obj may be a BoundedReader (returned as is), a file-like object or a
    buffer of bytes.
    """
    if isinstance(obj, BoundedReader):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BoundedReader(io.BytesIO(bytes(obj)))
    if not hasattr(obj, 'read'):
        raise TypeError(
            'expected a file-like object or bytes, got %s' % (
                type(obj).__name__))
    return BoundedReader(obj)
