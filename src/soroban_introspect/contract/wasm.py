"""Read the embedded interface description out of contract bytecode."""

from __future__ import annotations

import logging

from stellar_sdk import xdr as stellar_xdr
from xdrlib3 import Unpacker

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

WASM_MAGIC = b"\x00asm"
SPEC_SECTION_NAME = "contractspecv0"
_CUSTOM_SECTION_ID = 0


def read_custom_section(wasm: bytes, name: str) -> bytes | None:
    """Return the payload of the first custom section called ``name``."""

    if len(wasm) < 8 or wasm[:4] != WASM_MAGIC:
        raise ValidationError("Contract code is not a WebAssembly module", field="wasm")

    offset = 8
    while offset < len(wasm):
        section_id = wasm[offset]
        size, offset = _read_leb128(wasm, offset + 1)
        end = offset + size
        if end > len(wasm):
            raise ValidationError("Truncated WebAssembly section", field="wasm")

        if section_id == _CUSTOM_SECTION_ID:
            name_length, name_start = _read_leb128(wasm, offset)
            section_name = wasm[name_start : name_start + name_length].decode("utf-8", "replace")
            if section_name == name:
                return wasm[name_start + name_length : end]
        offset = end

    return None


def decode_spec_entries(payload: bytes) -> list[stellar_xdr.SCSpecEntry]:
    """Decode the back-to-back ``SCSpecEntry`` values of a spec section."""

    unpacker = Unpacker(payload)
    entries: list[stellar_xdr.SCSpecEntry] = []
    while unpacker.get_position() < len(payload):
        entries.append(stellar_xdr.SCSpecEntry.unpack(unpacker))
    return entries


def extract_spec_entries(wasm: bytes) -> list[stellar_xdr.SCSpecEntry]:
    payload = read_custom_section(wasm, SPEC_SECTION_NAME)
    if payload is None:
        logger.warning("Contract code carries no %s section", SPEC_SECTION_NAME)
        return []
    return decode_spec_entries(payload)


def _read_leb128(data: bytes, offset: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise ValidationError("Truncated LEB128 integer in WebAssembly module", field="wasm")
        byte = data[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, offset
        shift += 7
