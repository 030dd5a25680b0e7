"""Format submitted form values into a wire transaction."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from stellar_sdk import xdr as stellar_xdr

from ..exceptions import ConversionError, ValidationError
from ..types import ContractSchema, WireTransaction
from .converter import ValueConverter

logger = logging.getLogger(__name__)


def format_transaction(
    schema: ContractSchema,
    function_id: str,
    values: Mapping[str, Any] | Sequence[Any],
    converter: ValueConverter | None = None,
    *,
    contract_id: str | None = None,
) -> WireTransaction:
    """Convert the inputs of ``function_id`` into a :class:`WireTransaction`.

    ``values`` is either keyed by parameter name or positional.

    Raises:
        ValidationError: Unknown function, missing contract address or wrong argument count.
        ConversionError: An argument does not match its declared type.
    """
    function = schema.get_function(function_id)
    if function is None:
        raise ValidationError(
            f"Function {function_id} not found in contract schema",
            field="function_id",
            value=function_id,
        )

    target = contract_id or schema.address
    if not target:
        raise ValidationError("Contract address is required", field="contract_id")

    if isinstance(values, Mapping):
        missing = [param.name for param in function.inputs if param.name not in values]
        if missing:
            raise ValidationError(
                f"Missing arguments for {function.name}: {', '.join(missing)}",
                field="values",
                value=dict(values),
            )
        ordered = [values[param.name] for param in function.inputs]
    else:
        ordered = list(values)

    if len(ordered) != len(function.inputs):
        raise ValidationError(
            f"{function.name} expects {len(function.inputs)} arguments, got {len(ordered)}",
            field="values",
            value=ordered,
        )

    converter = converter or ValueConverter()
    args = []
    for param, value in zip(function.inputs, ordered):
        wire = converter.to_wire_value(value, param.type, param)
        if not isinstance(wire, stellar_xdr.SCVal):
            raise ConversionError(
                f"Argument {param.name} could not be converted to {param.type_name}",
                field=param.name,
                value=value,
            )
        args.append(wire)

    logger.debug("Formatted %s with %d arguments", function.name, len(args))
    return WireTransaction(contract_id=target, function_name=function.name, args=tuple(args))
