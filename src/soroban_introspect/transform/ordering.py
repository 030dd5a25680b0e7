"""Canonical byte ordering for encoded record fields."""

from __future__ import annotations

from functools import cmp_to_key

from stellar_sdk import xdr as stellar_xdr


def compare_xdr(a: bytes, b: bytes) -> int:
    """Compare two encoded buffers element by element; a strict prefix sorts first."""

    for left, right in zip(a, b):
        if left != right:
            return -1 if left < right else 1
    if len(a) == len(b):
        return 0
    return -1 if len(a) < len(b) else 1


def _compare_entries(left: stellar_xdr.SCMapEntry, right: stellar_xdr.SCMapEntry) -> int:
    order = compare_xdr(left.key.to_xdr_bytes(), right.key.to_xdr_bytes())
    if order:
        return order
    return compare_xdr(left.val.to_xdr_bytes(), right.val.to_xdr_bytes())


def sort_map_entries(entries: list[stellar_xdr.SCMapEntry]) -> list[stellar_xdr.SCMapEntry]:
    return sorted(entries, key=cmp_to_key(_compare_entries))
