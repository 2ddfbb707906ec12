""" Representation and reading of HDF5 datatype messages. """

from collections import OrderedDict

import numpy as np

from .bitfields import BYTE_ORDER_CHARS, ByteOrder, DatatypeClass
from .bitfields import MantissaNorm
from .bitfields import byte_order, datatype_class, datatype_version
from .bitfields import fixed_point_byte_order, is_signed
from .bitfields import high_padding_bit, internal_padding_bit
from .bitfields import low_padding_bit, mantissa_norm, sign_location
from .core import InvalidHDF5File, UnsupportedHDF5Feature
from .core import Record
from .reader import as_reader


class DatatypeMessage(Record):
    """ Representation of a HDF5 Datatype Message. """
    # Contents and layout defined in IV.A.2.d.

    datatype_class = None

    @staticmethod
    def from_reader(reader):
        """ Read a datatype message, returning the class specific datatype. """
        reader = as_reader(reader)
        class_and_version = reader.read_u8()
        dtype_class = datatype_class(class_and_version)
        version = datatype_version(class_and_version)
        if version != 1:
            raise UnsupportedHDF5Feature(
                'unsupported datatype message version: %i' % (version))

        bit_field = reader.read_u24()
        size = reader.read_u32()

        if dtype_class == DatatypeClass.FIXED_POINT:
            return FixedPointDatatype.from_properties(bit_field, size, reader)
        elif dtype_class == DatatypeClass.FLOATING_POINT:
            return FloatingPointDatatype.from_properties(bit_field, size, reader)
        raise UnsupportedHDF5Feature(
            '%s datatype class not supported.' % (dtype_class.name))

    @property
    def dtype(self):
        """ The NumPy dtype string which matches the datatype. """
        raise NotImplementedError

    def decode(self, reader):
        """ Decode one value from reader into a float. """
        raise NotImplementedError

    def decode_array(self, reader, count):
        """ Decode count consecutive values from reader into an array. """
        raise NotImplementedError


class FixedPointDatatype(DatatypeMessage):
    """
    Fixed-point (integer) datatype.

    The description is parsed completely but values of this class cannot
    be decoded yet.
    """

    datatype_class = DatatypeClass.FIXED_POINT

    def __init__(self, bit_field, size, bit_offset, bit_precision):
        """ initalize. """
        self.bit_field = bit_field
        self.size = size
        self.bit_offset = bit_offset
        self.bit_precision = bit_precision

    @classmethod
    def from_properties(cls, bit_field, size, reader):
        """ Read the fixed-point properties which follow the preamble. """
        properties = reader.read_struct(FIXED_POINT_PROPERTIES)
        reader.skip(4)
        return cls(bit_field, size, **properties)

    @property
    def byte_order(self):
        return fixed_point_byte_order(self.bit_field)

    @property
    def signed(self):
        return is_signed(self.bit_field)

    @property
    def low_padding_bit(self):
        return low_padding_bit(self.bit_field)

    @property
    def high_padding_bit(self):
        return high_padding_bit(self.bit_field)

    @property
    def dtype(self):
        """ The NumPy dtype string which matches the datatype. """
        if self.size not in [1, 2, 4, 8]:
            raise UnsupportedHDF5Feature(
                "Unsupported datatype size: %i" % (self.size))
        dtype_char = 'i' if self.signed else 'u'
        return BYTE_ORDER_CHARS[self.byte_order] + dtype_char + str(self.size)

    def decode(self, reader):
        raise UnsupportedHDF5Feature("Fixed-point values cannot be decoded.")

    def decode_array(self, reader, count):
        raise UnsupportedHDF5Feature("Fixed-point values cannot be decoded.")


class FloatingPointDatatype(DatatypeMessage):
    """
    Floating-point datatype.

    The message describes where the sign, exponent and mantissa sit in each
    value.  Only values laid out as little-endian IEEE 754 single precision
    numbers can be decoded; every other description is rejected before any
    data is read.

    Attributes
    ----------
    size : int
        Size of a value in bytes.
    byte_order : ByteOrder
        Byte order of a value.
    low_padding_bit, high_padding_bit, internal_padding_bit : int
        Value of the padding bits below, above and between the fields.
    mantissa_norm : MantissaNorm
        How the most significant bit of the mantissa is stored.
    sign_location : int
        Bit position of the sign bit.
    bit_offset, bit_precision : int
        First bit and number of bits of the value.
    exponent_location, exponent_size : int
        First bit and number of bits of the exponent.
    mantissa_location, mantissa_size : int
        First bit and number of bits of the mantissa.
    exponent_bias : int
        Bias added to the exponent.

    """

    datatype_class = DatatypeClass.FLOATING_POINT

    def __init__(self, size, byte_order, low_padding_bit, high_padding_bit,
                 internal_padding_bit, mantissa_norm, sign_location,
                 bit_offset, bit_precision, exponent_location, exponent_size,
                 mantissa_location, mantissa_size, exponent_bias):
        """ initalize. """
        self.size = size
        self.byte_order = byte_order
        self.low_padding_bit = low_padding_bit
        self.high_padding_bit = high_padding_bit
        self.internal_padding_bit = internal_padding_bit
        self.mantissa_norm = mantissa_norm
        self.sign_location = sign_location
        self.bit_offset = bit_offset
        self.bit_precision = bit_precision
        self.exponent_location = exponent_location
        self.exponent_size = exponent_size
        self.mantissa_location = mantissa_location
        self.mantissa_size = mantissa_size
        self.exponent_bias = exponent_bias

    @classmethod
    def from_properties(cls, bit_field, size, reader):
        """ Read the floating-point properties which follow the preamble. """
        properties = reader.read_struct(FLOATING_POINT_PROPERTIES)
        reader.skip(4)
        return cls(
            size=size,
            byte_order=byte_order(bit_field),
            low_padding_bit=low_padding_bit(bit_field),
            high_padding_bit=high_padding_bit(bit_field),
            internal_padding_bit=internal_padding_bit(bit_field),
            mantissa_norm=mantissa_norm(bit_field),
            sign_location=sign_location(bit_field),
            **properties)

    @classmethod
    def ieee_single(cls):
        """ Return the description of a little-endian IEEE 754 single. """
        return cls(**IEEE_F32LE)

    @property
    def dtype(self):
        """ The NumPy dtype string which matches the datatype. """
        # Floating point types are assumed to follow IEEE standard formats
        if self.byte_order not in BYTE_ORDER_CHARS:
            raise UnsupportedHDF5Feature("VAX floating point not supported")
        if self.size not in [2, 4, 8]:
            raise UnsupportedHDF5Feature(
                "Unsupported datatype size: %i" % (self.size))
        return BYTE_ORDER_CHARS[self.byte_order] + 'f' + str(self.size)

    def _check_decodable(self):
        """ Raise UnsupportedHDF5Feature unless values are IEEE singles. """
        for name, expected in IEEE_F32LE.items():
            value = getattr(self, name)
            if value != expected:
                raise UnsupportedHDF5Feature(
                    'floating point %s of %s not supported, only %s '
                    '(little-endian IEEE 754 single precision)' % (
                        name, _field_str(value), _field_str(expected)))

    def decode(self, reader):
        """ Decode one value from reader into a float. """
        self._check_decodable()
        reader = as_reader(reader)
        return reader.read_f32()

    def decode_array(self, reader, count):
        """ Decode count consecutive values from reader into a float64 array. """
        self._check_decodable()
        reader = as_reader(reader)
        nbytes = count * self.size
        if reader.remaining is not None and reader.remaining < nbytes:
            raise InvalidHDF5File(
                '%d values of %d bytes need %d bytes but only %d remain' % (
                    count, self.size, nbytes, reader.remaining))
        buf = reader.read_vec(nbytes)
        values = np.frombuffer(buf, dtype='<f4', count=count)
        return values.astype(np.float64)


def _field_str(value):
    """ Return the name of enumerated field values, the value otherwise. """
    return getattr(value, 'name', str(value))


# IV.A.2.d The Datatype Message

FIXED_POINT_PROPERTIES = OrderedDict((
    ('bit_offset', 'H'),
    ('bit_precision', 'H'),
))

FLOATING_POINT_PROPERTIES = OrderedDict((
    ('bit_offset', 'H'),
    ('bit_precision', 'H'),
    ('exponent_location', 'B'),
    ('exponent_size', 'B'),
    ('mantissa_location', 'B'),
    ('mantissa_size', 'B'),
    ('exponent_bias', 'I'),
))

# The only floating-point layout values can be decoded from, in the order
# the fields are checked.
IEEE_F32LE = OrderedDict((
    ('byte_order', ByteOrder.LITTLE_ENDIAN),
    ('low_padding_bit', 0),
    ('high_padding_bit', 0),
    ('internal_padding_bit', 0),
    ('mantissa_norm', MantissaNorm.IMPLIED),
    ('sign_location', 31),
    ('bit_offset', 0),
    ('bit_precision', 32),
    ('exponent_location', 23),
    ('exponent_size', 8),
    ('mantissa_location', 0),
    ('mantissa_size', 23),
    ('exponent_bias', 127),
    ('size', 4),
))
