from __future__ import annotations

import pytest
from builders import SpecType, packed_function_entry

from soroban_introspect.contract.wasm import (
    SPEC_SECTION_NAME,
    WASM_MAGIC,
    decode_spec_entries,
    extract_spec_entries,
    read_custom_section,
)
from soroban_introspect.exceptions import ValidationError
from soroban_introspect.utils import xdr_text

HEADER = WASM_MAGIC + b"\x01\x00\x00\x00"


def _leb128(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _custom_section(name: str, payload: bytes) -> bytes:
    body = _leb128(len(name)) + name.encode() + payload
    return b"\x00" + _leb128(len(body)) + body


def _module(*sections: bytes) -> bytes:
    return HEADER + b"".join(sections)


def test_reads_named_custom_section() -> None:
    wasm = _module(
        b"\x01\x04\x01\x60\x00\x00",
        _custom_section("other", b"xx"),
        _custom_section(SPEC_SECTION_NAME, b"payload"),
    )

    assert read_custom_section(wasm, SPEC_SECTION_NAME) == b"payload"
    assert read_custom_section(wasm, "missing") is None


def test_large_section_sizes() -> None:
    payload = bytes(300)
    wasm = _module(_custom_section(SPEC_SECTION_NAME, payload))

    assert read_custom_section(wasm, SPEC_SECTION_NAME) == payload


def test_decodes_back_to_back_entries() -> None:
    payload = packed_function_entry(
        "balance", [("id", SpecType.SC_SPEC_TYPE_ADDRESS)], [SpecType.SC_SPEC_TYPE_I128]
    ) + packed_function_entry("decimals", outputs=[SpecType.SC_SPEC_TYPE_U32])

    entries = decode_spec_entries(payload)

    assert [xdr_text(entry.function_v0.name) for entry in entries] == ["balance", "decimals"]


def test_extract_from_module() -> None:
    wasm = _module(_custom_section(SPEC_SECTION_NAME, packed_function_entry("ping")))

    (entry,) = extract_spec_entries(wasm)

    assert xdr_text(entry.function_v0.name) == "ping"


def test_module_without_interface() -> None:
    assert extract_spec_entries(_module()) == []


@pytest.mark.parametrize("wasm", [b"", b"\x7fELF\x01\x00\x00\x00", HEADER + b"\x00\x10abc"])
def test_rejects_invalid_modules(wasm: bytes) -> None:
    with pytest.raises(ValidationError):
        read_custom_section(wasm, SPEC_SECTION_NAME)
