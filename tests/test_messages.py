""" Unit tests for object header messages. """
from datetime import datetime, timezone

import pytest

from h5objects import HeaderMessage, NilMessage, DataspaceMessage
from h5objects import FillValueMessage, DataLayoutMessage, ContiguousLayout
from h5objects import SymbolTableMessage, ObjectModificationTimeMessage
from h5objects import FloatingPointDatatype, HeaderMessageFlags
from h5objects import HDF5ReadError, InvalidHDF5File, TrailingBytesError
from h5objects import UnsupportedHDF5Feature, UnsupportedMessageType
from h5objects import UNLIMITED_SIZE, as_reader

from h5build import NIL, DATASPACE, DATATYPE, FILLVALUE, DATA_LAYOUT
from h5build import ATTRIBUTE, SYMBOL_TABLE, MODIFICATION_TIME
from h5build import dataspace_body, fill_value_body, float_datatype_body
from h5build import header_message, layout_body, modification_time_body
from h5build import symbol_table_body


# message bodies which must be consumed exactly
FIXED_SIZE_BODIES = [
    (DATASPACE, dataspace_body((2, 3))),
    (DATASPACE, dataspace_body((4, ), max_dims=(UNLIMITED_SIZE, ))),
    (DATATYPE, float_datatype_body()),
    (FILLVALUE, fill_value_body()),
    (FILLVALUE, fill_value_body(b'\x00\x00\x80\x3f')),
    (SYMBOL_TABLE, symbol_table_body(136, 680)),
    (MODIFICATION_TIME, modification_time_body(1500000000)),
]

# data layout messages ignore trailing padding but cannot be short
BOUNDED_BODIES = FIXED_SIZE_BODIES + [
    (DATA_LAYOUT, layout_body(2048, 24, padding=0)),
]


def test_read_header_message():
    record = header_message(SYMBOL_TABLE, symbol_table_body(136, 680), 0x01)
    msg = HeaderMessage.from_reader(record)
    assert msg.msg_type == SYMBOL_TABLE
    assert msg.size == 16
    assert msg.flags == HeaderMessageFlags.CONSTANT
    assert msg.message == SymbolTableMessage(136, 680)


@pytest.mark.parametrize('msg_type, body', BOUNDED_BODIES)
def test_message_consumes_declared_length(msg_type, body):
    reader = as_reader(header_message(msg_type, body) + b'\xff' * 8)
    HeaderMessage.from_reader(reader)
    assert reader.position == 8 + len(body)


@pytest.mark.parametrize('msg_type, body', FIXED_SIZE_BODIES)
def test_message_with_trailing_byte(msg_type, body):
    record = header_message(msg_type, body + b'\x00')
    with pytest.raises(TrailingBytesError) as excinfo:
        HeaderMessage.from_reader(record)
    assert excinfo.value.msg_type == msg_type
    assert excinfo.value.remaining == 1


@pytest.mark.parametrize('msg_type, body', BOUNDED_BODIES)
def test_message_one_byte_short(msg_type, body):
    # the following bytes must not be read in place of the missing one
    record = header_message(msg_type, body[:-1]) + b'\x00' * 8
    with pytest.raises(HDF5ReadError):
        HeaderMessage.from_reader(record)


def test_unknown_message_type():
    record = header_message(0x7F, b'\x00' * 8)
    with pytest.raises(UnsupportedMessageType) as excinfo:
        HeaderMessage.from_reader(record)
    assert excinfo.value.msg_type == 0x7F
    assert '0x007f' in str(excinfo.value)


def test_unimplemented_message_type():
    record = header_message(ATTRIBUTE, b'\x00' * 8)
    with pytest.raises(UnsupportedMessageType, match='attribute') as excinfo:
        HeaderMessage.from_reader(record)
    assert excinfo.value.msg_type == ATTRIBUTE
    assert isinstance(excinfo.value, NotImplementedError)


def test_nil_message():
    record = header_message(NIL, b'\xaa' * 16)
    msg = HeaderMessage.from_reader(record)
    assert msg.message == NilMessage()
    assert HeaderMessage.from_reader(header_message(NIL, b'')).size == 0


def test_dataspace_message():
    msg = DataspaceMessage.from_reader(dataspace_body((2, 3, 4)))
    assert msg.dimension_sizes == (2, 3, 4)
    assert msg.dimension_max_sizes is None
    assert msg.shape == (2, 3, 4)
    assert msg.maxshape == (2, 3, 4)


def test_dataspace_message_max_sizes():
    body = dataspace_body((5, 6), max_dims=(UNLIMITED_SIZE, 10))
    msg = DataspaceMessage.from_reader(body)
    assert msg.dimension_sizes == (5, 6)
    assert msg.dimension_max_sizes == (UNLIMITED_SIZE, 10)
    assert msg.maxshape == (None, 10)


def test_dataspace_message_scalar():
    msg = DataspaceMessage.from_reader(dataspace_body(()))
    assert msg.dimension_sizes == ()


def test_dataspace_permutation_unsupported():
    body = dataspace_body((2, ), flags=0b10) + b'\x00' * 8
    with pytest.raises(UnsupportedHDF5Feature, match='permutation'):
        DataspaceMessage.from_reader(body)


def test_dataspace_version_unsupported():
    with pytest.raises(UnsupportedHDF5Feature):
        DataspaceMessage.from_reader(dataspace_body((2, ), version=2))


def test_datatype_header_message():
    msg = HeaderMessage.from_reader(
        header_message(DATATYPE, float_datatype_body()))
    assert msg.message == FloatingPointDatatype.ieee_single()


def test_fill_value_message():
    msg = FillValueMessage.from_reader(fill_value_body(b'\x01\x02'))
    assert msg.space_allocation_time == 2
    assert msg.fill_value_write_time == 2
    assert msg.fill_value == b'\x01\x02'

    msg = FillValueMessage.from_reader(fill_value_body(alloc_time=1))
    assert msg.space_allocation_time == 1
    assert msg.fill_value is None


def test_fill_value_version_unsupported():
    with pytest.raises(UnsupportedHDF5Feature):
        FillValueMessage.from_reader(fill_value_body(version=1))


def test_data_layout_message():
    msg = HeaderMessage.from_reader(
        header_message(DATA_LAYOUT, layout_body(2048, 96)))
    assert msg.size == 24
    assert msg.message.layout == ContiguousLayout(2048, 96)


@pytest.mark.parametrize('layout_class', [0, 2])
def test_data_layout_unsupported_classes(layout_class):
    body = layout_body(0, 0, layout_class=layout_class)
    with pytest.raises(UnsupportedHDF5Feature):
        DataLayoutMessage.from_reader(as_reader(body).bound_to(len(body)))


def test_data_layout_unknown_class():
    body = layout_body(0, 0, layout_class=7)
    with pytest.raises(InvalidHDF5File, match='layout class: 7'):
        DataLayoutMessage.from_reader(as_reader(body).bound_to(len(body)))


def test_data_layout_version_unsupported():
    body = layout_body(0, 0, version=4)
    with pytest.raises(UnsupportedHDF5Feature):
        DataLayoutMessage.from_reader(as_reader(body).bound_to(len(body)))


def test_symbol_table_message():
    msg = SymbolTableMessage.from_reader(symbol_table_body(136, 680))
    assert msg.b_tree_address == 136
    assert msg.local_heap_address == 680


def test_modification_time_message():
    msg = ObjectModificationTimeMessage.from_reader(
        modification_time_body(1500000000))
    assert msg.unixtime_seconds == 1500000000
    assert msg.modification_time == datetime(
        2017, 7, 14, 2, 40, tzinfo=timezone.utc)


def test_modification_time_version_unsupported():
    with pytest.raises(UnsupportedHDF5Feature):
        ObjectModificationTimeMessage.from_reader(
            modification_time_body(0, version=2))
