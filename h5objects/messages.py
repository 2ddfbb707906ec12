""" HDF5 object header messages. """

from collections import OrderedDict
from datetime import datetime, timezone
import logging
import struct

from .bitfields import header_message_flags
from .core import InvalidHDF5File, TrailingBytesError
from .core import UnsupportedHDF5Feature, UnsupportedMessageType
from .core import Record
from .core import UNLIMITED_SIZE
from .datatype_msg import DatatypeMessage
from .reader import as_reader


class HeaderMessage(Record):
    """
    A message of a version 1 object header.

    Attributes
    ----------
    msg_type : int
        Message type code.
    size : int
        Declared size of the message body in bytes.
    flags : HeaderMessageFlags
        Message flags, carried but not interpreted.
    message : Record
        The decoded message body.

    """

    def __init__(self, msg_type, size, flags, message):
        """ initalize. """
        self.msg_type = msg_type
        self.size = size
        self.flags = flags
        self.message = message

    @classmethod
    def from_reader(cls, reader):
        """
        Read a message record.

        The body is read through a reader bound to the declared size and must
        be consumed exactly.
        """
        reader = as_reader(reader)
        info = reader.read_struct(HEADER_MSG_INFO_V1)
        msg_type = info['type']
        flags = header_message_flags(info['flags'])

        parser = MESSAGE_PARSERS.get(msg_type)
        if parser is None:
            raise UnsupportedMessageType(msg_type, MSG_TYPE_NAMES.get(msg_type))

        body = reader.bound_to(info['size'])
        message = parser(body)
        if body.remaining != 0:
            raise TrailingBytesError(msg_type, body.remaining)

        logging.debug(
            'Parsed %s message: %d bytes, flags %r',
            MSG_TYPE_NAMES[msg_type], info['size'], flags)
        return cls(msg_type, info['size'], flags, message)


class NilMessage(Record):
    """ Nil message, the body is padding and is ignored. """

    @classmethod
    def from_reader(cls, reader):
        as_reader(reader).read_all()
        return cls()


class DataspaceMessage(Record):
    """
    Dataspace message, the dimensions of a dataset.

    Attributes
    ----------
    dimension_sizes : tuple of int
        Current size of each dimension.
    dimension_max_sizes : tuple of int or None
        Maximum size of each dimension, None when not stored.

    """

    def __init__(self, dimension_sizes, dimension_max_sizes=None):
        """ initalize. """
        self.dimension_sizes = tuple(dimension_sizes)
        if dimension_max_sizes is not None:
            dimension_max_sizes = tuple(dimension_max_sizes)
        self.dimension_max_sizes = dimension_max_sizes

    @classmethod
    def from_reader(cls, reader):
        reader = as_reader(reader)
        header = reader.read_struct(DATASPACE_MSG_HEADER_V1)
        if header['version'] != 1:
            raise UnsupportedHDF5Feature(
                'unsupported dataspace message version: %i' % (
                    header['version']))

        ndims = header['dimensionality']
        dimension_sizes = _read_dimensions(reader, ndims)
        # Dimension maximum size follows if header['flags'] bit 0 set
        if header['flags'] & DATASPACE_MAX_SIZES_PRESENT:
            dimension_max_sizes = _read_dimensions(reader, ndims)
        else:
            dimension_max_sizes = None
        if header['flags'] & DATASPACE_PERMUTATION_PRESENT:
            raise UnsupportedHDF5Feature(
                'dataspace permutation indices not supported')
        return cls(dimension_sizes, dimension_max_sizes)

    @property
    def shape(self):
        """ Shape of the dataspace. """
        return self.dimension_sizes

    @property
    def maxshape(self):
        """ Maximum shape of the dataspace. (None for unlimited dimension) """
        if self.dimension_max_sizes is None:
            return self.dimension_sizes
        return tuple(
            (None if d == UNLIMITED_SIZE else d)
            for d in self.dimension_max_sizes)


def _read_dimensions(reader, ndims):
    """ Read ndims 8 byte dimension sizes. """
    return struct.unpack('<' + 'Q' * ndims, reader.read_vec(8 * ndims))


class FillValueMessage(Record):
    """
    Fill value message (version 2).

    Attributes
    ----------
    space_allocation_time : int
        When storage space is allocated (1 early, 2 late, 3 incremental).
    fill_value_write_time : int
        When the fill value is written (0 on allocation, 1 never, 2 if set).
    fill_value : bytes or None
        Raw fill value, None when not defined.

    """

    def __init__(self, space_allocation_time, fill_value_write_time,
                 fill_value=None):
        """ initalize. """
        self.space_allocation_time = space_allocation_time
        self.fill_value_write_time = fill_value_write_time
        self.fill_value = fill_value

    @classmethod
    def from_reader(cls, reader):
        reader = as_reader(reader)
        info = reader.read_struct(FILLVAL_MSG_V2)
        if info['version'] != 2:
            raise UnsupportedHDF5Feature(
                'unsupported fill value message version: %i' % (
                    info['version']))

        if info['fillvalue_defined'] == 1:
            size = reader.read_u32()
            fill_value = reader.read_vec(size)
        else:
            fill_value = None
        return cls(
            info['space_allocation_time'], info['fillvalue_write_time'],
            fill_value)


class ContiguousLayout(Record):
    """ Raw data stored in one contiguous region of the file. """

    def __init__(self, address, size):
        """ initalize. """
        self.address = address
        self.size = size


def read_layout(layout_class, reader):
    """ Read the class specific properties of a data layout message. """
    if layout_class == LAYOUT_CLASS_COMPACT:
        raise UnsupportedHDF5Feature("Compact storage")
    elif layout_class == LAYOUT_CLASS_CONTIGUOUS:
        properties = reader.read_struct(CONTIGUOUS_LAYOUT_V3)
        return ContiguousLayout(properties['address'], properties['size'])
    elif layout_class == LAYOUT_CLASS_CHUNKED:
        raise UnsupportedHDF5Feature("Chunked storage")
    raise InvalidHDF5File('Unknown layout class: %i' % (layout_class))


class DataLayoutMessage(Record):
    """ Data layout message (version 3). """

    def __init__(self, layout):
        """ initalize. """
        self.layout = layout

    @classmethod
    def from_reader(cls, reader):
        reader = as_reader(reader)
        version, layout_class = struct.unpack('<BB', reader.read_vec(2))
        if version != 3:
            raise UnsupportedHDF5Feature(
                'unsupported data layout message version: %i' % (version))

        layout = read_layout(layout_class, reader)
        # remainder of the message is padding
        reader.read_all()
        return cls(layout)


class SymbolTableMessage(Record):
    """ Symbol table message, the group B-tree and local heap addresses. """

    def __init__(self, b_tree_address, local_heap_address):
        """ initalize. """
        self.b_tree_address = b_tree_address
        self.local_heap_address = local_heap_address

    @classmethod
    def from_reader(cls, reader):
        reader = as_reader(reader)
        data = reader.read_struct(SYMBOL_TABLE_MSG)
        return cls(data['btree_address'], data['heap_address'])


class ObjectModificationTimeMessage(Record):
    """ Object modification time message (version 1). """

    def __init__(self, unixtime_seconds):
        """ initalize. """
        self.unixtime_seconds = unixtime_seconds

    @classmethod
    def from_reader(cls, reader):
        reader = as_reader(reader)
        version = reader.read_u8()
        if version != 1:
            raise UnsupportedHDF5Feature(
                'unsupported modification time message version: %i' % (
                    version))
        reader.skip(3)
        return cls(reader.read_u32())

    @property
    def modification_time(self):
        """ Modification time as a UTC datetime. """
        return datetime.fromtimestamp(self.unixtime_seconds, tz=timezone.utc)


# HDF5 Structures
# Values for all fields in this document should be treated as unsigned
# integers, unless otherwise noted in the description of a field. Additionally,
# all metadata fields are stored in little-endian byte order.

HEADER_MSG_INFO_V1 = OrderedDict((
    ('type', 'H'),
    ('size', 'H'),
    ('flags', 'B'),
    ('reserved', '3s'),
))

# IV.A.2.b The Dataspace Message
DATASPACE_MSG_HEADER_V1 = OrderedDict((
    ('version', 'B'),
    ('dimensionality', 'B'),
    ('flags', 'B'),
    ('reserved_0', 'B'),
    ('reserved_1', 'I'),
))

DATASPACE_MAX_SIZES_PRESENT = 0b0000_0001
DATASPACE_PERMUTATION_PRESENT = 0b0000_0010

# IV.A.2.f. The Data Storage - Fill Value Message
FILLVAL_MSG_V2 = OrderedDict((
    ('version', 'B'),
    ('space_allocation_time', 'B'),
    ('fillvalue_write_time', 'B'),
    ('fillvalue_defined', 'B'),
))

# IV.A.2.i The Data Layout Message
LAYOUT_CLASS_COMPACT = 0
LAYOUT_CLASS_CONTIGUOUS = 1
LAYOUT_CLASS_CHUNKED = 2

CONTIGUOUS_LAYOUT_V3 = OrderedDict((
    ('address', 'Q'),     # 8 byte addressing
    ('size', 'Q'),        # 8 byte lengths
))

SYMBOL_TABLE_MSG = OrderedDict((
    ('btree_address', 'Q'),     # 8 bytes addressing
    ('heap_address', 'Q'),      # 8 byte addressing
))

# Data Object Message types
# Section IV.A.2.a - IV.A.2.x
NIL_MSG_TYPE = 0x0000
DATASPACE_MSG_TYPE = 0x0001
LINK_INFO_MSG_TYPE = 0x0002
DATATYPE_MSG_TYPE = 0x0003
FILLVALUE_OLD_MSG_TYPE = 0x0004
FILLVALUE_MSG_TYPE = 0x0005
LINK_MSG_TYPE = 0x0006
EXTERNAL_DATA_FILES_MSG_TYPE = 0x0007
DATA_STORAGE_MSG_TYPE = 0x0008
BOGUS_MSG_TYPE = 0x0009
GROUP_INFO_MSG_TYPE = 0x000A
DATA_STORAGE_FILTER_PIPELINE_MSG_TYPE = 0x000B
ATTRIBUTE_MSG_TYPE = 0x000C
OBJECT_COMMENT_MSG_TYPE = 0x000D
OBJECT_MODIFICATION_TIME_OLD_MSG_TYPE = 0x000E
SHARED_MSG_TABLE_MSG_TYPE = 0x000F
OBJECT_CONTINUATION_MSG_TYPE = 0x0010
SYMBOL_TABLE_MSG_TYPE = 0x0011
OBJECT_MODIFICATION_TIME_MSG_TYPE = 0x0012
BTREE_K_VALUE_MSG_TYPE = 0x0013
DRIVER_INFO_MSG_TYPE = 0x0014
ATTRIBUTE_INFO_MSG_TYPE = 0x0015
OBJECT_REFERENCE_COUNT_MSG_TYPE = 0x0016
FILE_SPACE_INFO_MSG_TYPE = 0x0018

MSG_TYPE_NAMES = {
    NIL_MSG_TYPE: 'nil',
    DATASPACE_MSG_TYPE: 'dataspace',
    LINK_INFO_MSG_TYPE: 'link info',
    DATATYPE_MSG_TYPE: 'datatype',
    FILLVALUE_OLD_MSG_TYPE: 'fill value (old)',
    FILLVALUE_MSG_TYPE: 'fill value',
    LINK_MSG_TYPE: 'link',
    EXTERNAL_DATA_FILES_MSG_TYPE: 'external data files',
    DATA_STORAGE_MSG_TYPE: 'data layout',
    BOGUS_MSG_TYPE: 'bogus',
    GROUP_INFO_MSG_TYPE: 'group info',
    DATA_STORAGE_FILTER_PIPELINE_MSG_TYPE: 'filter pipeline',
    ATTRIBUTE_MSG_TYPE: 'attribute',
    OBJECT_COMMENT_MSG_TYPE: 'object comment',
    OBJECT_MODIFICATION_TIME_OLD_MSG_TYPE: 'object modification time (old)',
    SHARED_MSG_TABLE_MSG_TYPE: 'shared message table',
    OBJECT_CONTINUATION_MSG_TYPE: 'object header continuation',
    SYMBOL_TABLE_MSG_TYPE: 'symbol table',
    OBJECT_MODIFICATION_TIME_MSG_TYPE: 'object modification time',
    BTREE_K_VALUE_MSG_TYPE: 'B-tree K values',
    DRIVER_INFO_MSG_TYPE: 'driver info',
    ATTRIBUTE_INFO_MSG_TYPE: 'attribute info',
    OBJECT_REFERENCE_COUNT_MSG_TYPE: 'object reference count',
    FILE_SPACE_INFO_MSG_TYPE: 'file space info',
}

# Messages which can be decoded, everything else is rejected
MESSAGE_PARSERS = {
    NIL_MSG_TYPE: NilMessage.from_reader,
    DATASPACE_MSG_TYPE: DataspaceMessage.from_reader,
    DATATYPE_MSG_TYPE: DatatypeMessage.from_reader,
    FILLVALUE_MSG_TYPE: FillValueMessage.from_reader,
    DATA_STORAGE_MSG_TYPE: DataLayoutMessage.from_reader,
    SYMBOL_TABLE_MSG_TYPE: SymbolTableMessage.from_reader,
    OBJECT_MODIFICATION_TIME_MSG_TYPE: ObjectModificationTimeMessage.from_reader,
}
