""" HDF5 object headers and the data objects they describe.  """

from collections import OrderedDict
import logging
import math

import numpy as np

from .core import HeaderSizeMismatch, InconsistentHDF5Object
from .core import HDF5ReadError, InvalidHDF5File, UnsupportedHDF5Feature
from .core import Record
from .core import UNDEFINED_ADDRESS
from .datatype_msg import FloatingPointDatatype
from .messages import HeaderMessage
from .messages import DATASPACE_MSG_TYPE, DATATYPE_MSG_TYPE
from .messages import DATA_STORAGE_MSG_TYPE, FILLVALUE_MSG_TYPE
from .messages import OBJECT_MODIFICATION_TIME_MSG_TYPE
from .messages import SYMBOL_TABLE_MSG_TYPE
from .reader import as_reader


class ObjectHeaderPrefix(Record):
    """
    Version 1 object header prefix and the messages it lists.

    Attributes
    ----------
    messages : list of HeaderMessage
        Messages in the order they appear in the file.
    object_reference_count : int
        Number of hard links to the object.
    object_header_size : int
        Declared size of the message area in bytes.

    """

    def __init__(self, messages, object_reference_count, object_header_size):
        """ initalize. """
        self.messages = messages
        self.object_reference_count = object_reference_count
        self.object_header_size = object_header_size

    @classmethod
    def from_reader(cls, reader):
        """ Parse a version 1 object header prefix and its messages. """
        reader = as_reader(reader)
        header = reader.read_struct(OBJECT_HEADER_V1)
        if header['version'] != 1:
            raise InvalidHDF5File(
                'unknown object header version: %i' % (header['version']))
        if header['reserved'] != 0:
            raise InvalidHDF5File(
                'reserved byte of object header prefix is %i, not 0' % (
                    header['reserved']))

        # Header messages are aligned on 8-byte boundaries, the padding is
        # included in each message's size.
        size = header['object_header_size']
        body = reader.bound_to(size)
        messages = [
            HeaderMessage.from_reader(body)
            for _ in range(header['total_header_messages'])]
        if body.remaining != 0:
            raise HeaderSizeMismatch(size, body.remaining, messages)

        logging.debug(
            'Parsed object header: %d messages in %d bytes',
            len(messages), size)
        return cls(messages, header['object_reference_count'], size)


class ObjectHeader(object):
    """
    A HDF5 object header.

    The header is parsed once when created and is read-only afterwards.
    Messages of the same type may appear more than once, queries use the
    first one.

    Parameters
    ----------
    prefix : ObjectHeaderPrefix
        The parsed object header prefix.

    Attributes
    ----------
    prefix : ObjectHeaderPrefix
        The parsed object header prefix.

    """

    def __init__(self, prefix):
        """ initalize. """
        self.prefix = prefix

    def __repr__(self):
        return '<HDF5 object header (%d messages)>' % (len(self.messages))

    @classmethod
    def from_reader(cls, reader):
        """ Parse an object header from a stream positioned at its start. """
        return cls(ObjectHeaderPrefix.from_reader(reader))

    @classmethod
    def from_file(cls, fh, offset):
        """ Parse the object header at an absolute offset in a file. """
        reader = as_reader(fh)
        reader.seek_to(offset)
        return cls.from_reader(reader)

    @property
    def messages(self):
        """ List of the HeaderMessages of the object. """
        return self.prefix.messages

    @property
    def object_reference_count(self):
        return self.prefix.object_reference_count

    @property
    def object_header_size(self):
        return self.prefix.object_header_size

    def find_msg_type(self, msg_type):
        """ Return a list of all messages of a given type. """
        return [m for m in self.messages if m.msg_type == msg_type]

    def _first_message(self, msg_type):
        """ Return the body of the first message of a type, None if absent. """
        msgs = self.find_msg_type(msg_type)
        if not msgs:
            return None
        return msgs[0].message

    def _required_message(self, msg_type, description):
        """ Return the body of the first message of a type. """
        message = self._first_message(msg_type)
        if message is None:
            raise InconsistentHDF5Object(description)
        return message

    @property
    def is_dataset(self):
        """ True when the object header describes a dataset. """
        return len(self.find_msg_type(DATASPACE_MSG_TYPE)) > 0

    @property
    def is_group(self):
        """ True when the object header describes an old-style group. """
        return len(self.find_msg_type(SYMBOL_TABLE_MSG_TYPE)) > 0

    def dimensions(self):
        """ Tuple of the dimension sizes from the Dataspace message. """
        dataspace = self._required_message(
            DATASPACE_MSG_TYPE, 'No Dataspace message in object header')
        return dataspace.dimension_sizes

    @property
    def shape(self):
        """ Shape of the dataset. """
        return self.dimensions()

    @property
    def maxshape(self):
        """ Maximum Shape of the dataset. (None for unlimited dimension) """
        dataspace = self._required_message(
            DATASPACE_MSG_TYPE, 'No Dataspace message in object header')
        return dataspace.maxshape

    def datatype(self):
        """ The DatatypeMessage describing the elements of the dataset. """
        return self._required_message(
            DATATYPE_MSG_TYPE, 'No Datatype message in object header')

    @property
    def dtype(self):
        """ NumPy dtype string of the stored elements. """
        return self.datatype().dtype

    def layout(self):
        """ The layout of the raw data from the Data Layout message. """
        layout_msg = self._required_message(
            DATA_STORAGE_MSG_TYPE, 'Not a data object')
        return layout_msg.layout

    @property
    def fillvalue(self):
        """
        Decoded fill value of the dataset, None when not defined.

        The fill value is decoded with the dataset's datatype, so a defined
        fill value of a datatype which cannot be decoded (anything but a
        little-endian IEEE single) raises UnsupportedHDF5Feature.  A fill
        value whose length differs from the datatype size raises
        InvalidHDF5File.
        """
        fillvalue_msg = self._first_message(FILLVALUE_MSG_TYPE)
        if fillvalue_msg is None or fillvalue_msg.fill_value is None:
            return None
        fill_value = fillvalue_msg.fill_value
        datatype = self.datatype()
        if len(fill_value) != datatype.size:
            raise InvalidHDF5File(
                'fill value of %d bytes for a datatype of %d bytes' % (
                    len(fill_value), datatype.size))
        return datatype.decode(fill_value)

    @property
    def modification_time(self):
        """ Modification time as a UTC datetime, None when not recorded. """
        msg = self._first_message(OBJECT_MODIFICATION_TIME_MSG_TYPE)
        if msg is None:
            return None
        return msg.modification_time

    @property
    def symbol_table(self):
        """ The SymbolTableMessage of a group, None for other objects. """
        return self._first_message(SYMBOL_TABLE_MSG_TYPE)

    def get_data_bytes(self, fh):
        """ Return the raw bytes of the data object's contiguous storage. """
        layout = self.layout()
        reader = as_reader(fh)
        length = reader.stream_length()
        if length is not None and layout.address + layout.size > length:
            raise HDF5ReadError(
                'data of %d bytes at %d extends past the end of the %d byte '
                'file' % (layout.size, layout.address, length))
        reader.seek_to(layout.address)
        return reader.read_vec(layout.size)

    def get_data_object(self, fh):
        """
        Read and decode the data the object header points to.

        Parameters
        ----------
        fh : file-like or bytes
            The file the object header was read from.

        Returns
        -------
        data_object : FloatDataObject
            The decoded values, shaped like the dataspace.

        """
        dimensions = self.dimensions()
        datatype = self.datatype()
        if not isinstance(datatype, FloatingPointDatatype):
            raise UnsupportedHDF5Feature(
                '%s data objects not supported' % (
                    datatype.datatype_class.name))
        layout = self.layout()
        count = math.prod(dimensions)

        if layout.address == UNDEFINED_ADDRESS:
            # no storage is backing array, return the fill value
            fillvalue = self.fillvalue
            if fillvalue is None:
                fillvalue = 0.0
            logging.info(
                'No storage allocated for data object of shape %r', dimensions)
            try:
                data = np.full(dimensions, fillvalue, dtype=np.float64)
            except ValueError as err:
                raise InvalidHDF5File(
                    'cannot create data object of shape %r: %s' % (
                        dimensions, err))
            return FloatDataObject(data)

        if count * datatype.size != layout.size:
            raise InvalidHDF5File(
                '%d values of %d bytes need %d bytes but %d are stored' % (
                    count, datatype.size, count * datatype.size,
                    layout.size))

        buf = self.get_data_bytes(fh)
        reader = as_reader(buf).bound_to(len(buf))
        values = datatype.decode_array(reader, count)
        if reader.remaining != 0:
            raise InvalidHDF5File(
                '%d bytes of data remain after decoding %d values of %d '
                'bytes' % (reader.remaining, count, datatype.size))

        try:
            data = values.reshape(dimensions)
        except ValueError as err:
            raise InvalidHDF5File(
                'cannot reshape %d values to %r: %s' % (
                    count, dimensions, err))
        logging.info(
            'Decoded data object of shape %r from %d bytes at %d',
            dimensions, layout.size, layout.address)
        return FloatDataObject(data)


class DataObject(object):
    """
    The decoded contents of a data object.

    Attributes
    ----------
    data : ndarray
        The decoded values.

    """

    def __init__(self, data):
        """ initalize. """
        self.data = data

    def __repr__(self):
        return '<%s: shape %s, type "%s">' % (
            type(self).__name__, self.shape, self.dtype)

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self.data, dtype=dtype)

    @property
    def shape(self):
        return self.data.shape

    @property
    def ndim(self):
        return self.data.ndim

    @property
    def dtype(self):
        return self.data.dtype


class FloatDataObject(DataObject):
    """ Floating-point values as a float64 array in row-major order. """
    pass


# IV.A.1.a Version 1 Data Object Header Prefix
OBJECT_HEADER_V1 = OrderedDict((
    ('version', 'B'),
    ('reserved', 'B'),
    ('total_header_messages', 'H'),
    ('object_reference_count', 'I'),
    ('object_header_size', 'I'),
    ('padding', 'I'),
))
