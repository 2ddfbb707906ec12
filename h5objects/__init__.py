"""
h5objects : a pure python decoder of HDF5 object headers.

Object headers are parsed into their messages, which can then be queried or
used to materialize the data object they describe as a NumPy array.
"""

from h5objects.dataobjects import ObjectHeader, ObjectHeaderPrefix
from h5objects.dataobjects import DataObject, FloatDataObject
from h5objects.messages import HeaderMessage, NilMessage, DataspaceMessage
from h5objects.messages import FillValueMessage, DataLayoutMessage
from h5objects.messages import ContiguousLayout, SymbolTableMessage
from h5objects.messages import ObjectModificationTimeMessage
from h5objects.datatype_msg import DatatypeMessage
from h5objects.datatype_msg import FixedPointDatatype, FloatingPointDatatype
from h5objects.bitfields import ByteOrder, DatatypeClass, MantissaNorm
from h5objects.bitfields import HeaderMessageFlags
from h5objects.reader import BoundedReader, as_reader
from h5objects.core import HDF5Error, InvalidHDF5File, TrailingBytesError
from h5objects.core import HeaderSizeMismatch, UnsupportedHDF5Feature
from h5objects.core import UnsupportedMessageType, InconsistentHDF5Object
from h5objects.core import HDF5ReadError
from h5objects.core import UNDEFINED_ADDRESS, UNLIMITED_SIZE

__version__ = '0.1.0.dev'
