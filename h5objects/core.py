""" Core low-level functions and classes used by multiple h5objects modules. """

from collections import OrderedDict
import struct


UNDEFINED_ADDRESS = 0xffffffffffffffff

# these constants happen to have the same value...
UNLIMITED_SIZE = UNDEFINED_ADDRESS


class HDF5Error(Exception):
    """ Base class of the exceptions raised while decoding a HDF5 file. """
    pass


class InvalidHDF5File(HDF5Error):
    """ Exception raised when an invalid HDF5 file is detected. """
    pass


class TrailingBytesError(InvalidHDF5File):
    """
    Exception raised when a message body is not consumed completely.

    Attributes
    ----------
    msg_type : int
        Type code of the message whose body was under-consumed.
    remaining : int
        Number of bytes of the body left unread.

    """

    def __init__(self, msg_type, remaining):
        self.msg_type = msg_type
        self.remaining = remaining
        super(TrailingBytesError, self).__init__(
            'trailing bytes in message type 0x%04x: %d of the declared '
            'bytes were not consumed' % (msg_type, remaining))


class HeaderSizeMismatch(InvalidHDF5File):
    """
    Exception raised when the messages of an object header do not add up
    to the size declared in its prefix.
    """

    def __init__(self, object_header_size, remaining, messages):
        self.object_header_size = object_header_size
        self.remaining = remaining
        self.messages = messages
        super(HeaderSizeMismatch, self).__init__(
            'object header declares %d bytes but %d remain after parsing '
            '%d messages: %r' % (
                object_header_size, remaining, len(messages), messages))


class UnsupportedHDF5Feature(HDF5Error, NotImplementedError):
    """ Exception raised when a valid but unimplemented feature is used. """
    pass


class UnsupportedMessageType(UnsupportedHDF5Feature):
    """ Exception raised for an object header message type with no parser. """

    def __init__(self, msg_type, name=None):
        self.msg_type = msg_type
        if name is None:
            text = 'unsupported message type: 0x%04x' % (msg_type)
        else:
            text = 'unsupported message type: 0x%04x (%s)' % (msg_type, name)
        super(UnsupportedMessageType, self).__init__(text)


class InconsistentHDF5Object(HDF5Error):
    """ Exception raised when an object lacks the messages an operation needs. """
    pass


class HDF5ReadError(HDF5Error, IOError):
    """ Exception raised when the underlying stream cannot satisfy a read. """
    pass


class Record(object):
    """
    Base of the decoded HDF5 structures.

    Records compare equal when they are of the same class and hold the same
    field values, and print those values in their repr.
    """

    def __repr__(self):
        fields = ', '.join('%s=%r' % kv for kv in vars(self).items())
        return '%s(%s)' % (type(self).__name__, fields)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return vars(self) == vars(other)

    def __ne__(self, other):
        equal = self.__eq__(other)
        if equal is NotImplemented:
            return equal
        return not equal

    __hash__ = None


def _structure_size(structure):
    """ Return the size of a structure in bytes. """
    fmt = '<' + ''.join(structure.values())
    return struct.calcsize(fmt)


def _unpack_struct_from(structure, buf, offset=0):
    """ Unpack a structure into an OrderedDict from a buffer of bytes. """
    fmt = '<' + ''.join(structure.values())
    values = struct.unpack_from(fmt, buf, offset=offset)
    return OrderedDict(zip(structure.keys(), values))


def _unpack_integer(nbytes, buf, offset=0):
    """ Read an integer with an uncommon number of bytes. """
    fmt = "{}s".format(nbytes)
    values = struct.unpack_from(fmt, buf, offset=offset)
    return int.from_bytes(values[0], byteorder="little", signed=False)
