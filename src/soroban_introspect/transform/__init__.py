"""Native value to wire value conversion."""

from .converter import ValueConverter, is_result_shape
from .formatter import format_transaction
from .ordering import compare_xdr
from .primitives import primitive_wire_tag

__all__ = [
    "ValueConverter",
    "compare_xdr",
    "format_transaction",
    "is_result_shape",
    "primitive_wire_tag",
]
