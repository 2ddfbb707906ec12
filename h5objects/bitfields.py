"""
Decoding of the packed bit fields found in HDF5 object header messages.

All functions here are pure: they take the integer read from the file and
return the semantic value, raising InvalidHDF5File for bit patterns the
format reserves.
"""

from enum import IntEnum, IntFlag

from .core import InvalidHDF5File


# IV.A.2.d The Datatype Message, class and version byte
DATATYPE_VERSION_SHIFT = 4
DATATYPE_CLASS_MASK = 0x0F

# Floating-point class bit field
BYTE_ORDER_MASK = 0b0100_0001      # bits 0 and 6
LOW_PADDING_BIT = 1
HIGH_PADDING_BIT = 2
INTERNAL_PADDING_BIT = 3
MANTISSA_NORM_SHIFT = 4            # bits 4-5
MANTISSA_NORM_MASK = 0b11
SIGN_LOCATION_SHIFT = 8            # bits 8-15
SIGN_LOCATION_MASK = 0xFF

# Fixed-point class bit field
FIXED_POINT_BYTE_ORDER_MASK = 0b0000_0001
FIXED_POINT_SIGNED_BIT = 3

RESERVED_BYTE_ORDER = 0b0100_0000
RESERVED_MANTISSA_NORM = 3


class DatatypeClass(IntEnum):
    """ Datatype classes, in the order of their codes. """
    FIXED_POINT = 0
    FLOATING_POINT = 1
    TIME = 2
    STRING = 3
    BITFIELD = 4
    OPAQUE = 5
    COMPOUND = 6
    REFERENCE = 7
    ENUMERATED = 8
    VARIABLE_LENGTH = 9
    ARRAY = 10


class ByteOrder(IntEnum):
    """ Byte order of a floating-point value, bits 0 and 6 of the field. """
    LITTLE_ENDIAN = 0b0000_0000
    BIG_ENDIAN = 0b0000_0001
    VAX = 0b0100_0001


class MantissaNorm(IntEnum):
    """ Mantissa normalization of a floating-point value. """
    NONE = 0
    ALWAYS_SET = 1
    IMPLIED = 2


class HeaderMessageFlags(IntFlag):
    """ Flags of a version 1 object header message. """
    CONSTANT = 0b0000_0001
    SHARED = 0b0000_0010
    UNSHARABLE = 0b0000_0100
    FAIL_IF_UNKNOWN_AND_WRITING = 0b0000_1000
    MARK_IF_UNKNOWN = 0b0001_0000
    UNKNOWN_BUT_MODIFIED = 0b0010_0000
    SHAREABLE = 0b0100_0000
    FAIL_IF_UNKNOWN = 0b1000_0000


# numpy byte order characters
BYTE_ORDER_CHARS = {
    ByteOrder.LITTLE_ENDIAN: '<',
    ByteOrder.BIG_ENDIAN: '>',
}


def _bit(bit_field, position):
    return (bit_field >> position) & 1


def datatype_version(class_and_version):
    """ Return the version from the first byte of a datatype message. """
    return class_and_version >> DATATYPE_VERSION_SHIFT


def datatype_class(class_and_version):
    """ Return the DatatypeClass from the first byte of a datatype message. """
    code = class_and_version & DATATYPE_CLASS_MASK
    try:
        return DatatypeClass(code)
    except ValueError:
        raise InvalidHDF5File('Unknown datatype class: %i' % (code))


def byte_order(bit_field):
    """ Return the ByteOrder of a floating-point bit field. """
    bits = bit_field & BYTE_ORDER_MASK
    if bits == RESERVED_BYTE_ORDER:
        raise InvalidHDF5File(
            'Reserved byte order bits: 0b{:07b}'.format(bits))
    return ByteOrder(bits)


def fixed_point_byte_order(bit_field):
    """ Return the ByteOrder of a fixed-point bit field. """
    return ByteOrder(bit_field & FIXED_POINT_BYTE_ORDER_MASK)


def low_padding_bit(bit_field):
    return _bit(bit_field, LOW_PADDING_BIT)


def high_padding_bit(bit_field):
    return _bit(bit_field, HIGH_PADDING_BIT)


def internal_padding_bit(bit_field):
    return _bit(bit_field, INTERNAL_PADDING_BIT)


def mantissa_norm(bit_field):
    """ Return the MantissaNorm of a floating-point bit field. """
    norm = (bit_field >> MANTISSA_NORM_SHIFT) & MANTISSA_NORM_MASK
    if norm == RESERVED_MANTISSA_NORM:
        raise InvalidHDF5File('Reserved mantissa normalization: %i' % (norm))
    return MantissaNorm(norm)


def sign_location(bit_field):
    """ Return the bit position of the sign bit of a floating-point value. """
    return (bit_field >> SIGN_LOCATION_SHIFT) & SIGN_LOCATION_MASK


def is_signed(bit_field):
    """ True when a fixed-point bit field describes a signed integer. """
    return bool(_bit(bit_field, FIXED_POINT_SIGNED_BIT))


def header_message_flags(flags):
    """ Return the HeaderMessageFlags of a message flags byte. """
    return HeaderMessageFlags(flags & 0xFF)
