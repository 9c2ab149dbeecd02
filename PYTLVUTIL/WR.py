"""PYTLVUTIL.WR

Binary encoder for the undump direction.

`serialize_stack` turns one leveled group of `TlvLine` records (as built by
`PYTLVUTIL.TREE`) into bytes. A record's children are the records right after
it with a higher level; its payload is either its literal data or the
concatenated encoding of those children.
"""

from __future__ import annotations

from typing import Sequence

from PYTLVUTIL.COM import (
    EncodingConstraintError,
    IndentError,
    TlvDefine,
    TlvLine,
    needs_tlv16,
    pack_header,
)


def serialize_stack(stack: Sequence[TlvLine], file_name: str = "<stdin>") -> bytes:
    """Encode a leveled record sequence.

    Args:
        stack: Records of one top-level group; `stack[0]` has the lowest level.
        file_name: Name used in error messages.

    Returns:
        The encoded bytes of `stack[0]`, its descendants and its following
        siblings.

    Raises:
        IndentError: A record has both literal data and children.
        EncodingConstraintError: A forced TLV8 cannot hold its payload, a
            payload exceeds 65535 bytes, or the group exceeds the scratch size.
    """

    if not stack:
        return b""
    out = _serialize_run(stack, 0, len(stack), file_name)
    if len(out) > TlvDefine.TLV_SCRATCH_SIZE:
        raise EncodingConstraintError("TLV buffer overflow.", file_name, stack[0].line_nr)
    return out


def _serialize_run(stack: Sequence[TlvLine], start: int, end: int, file_name: str) -> bytes:
    level = stack[start].level
    out = bytearray()
    i = start
    while i < end:
        j = i + 1
        while j < end and stack[j].level > level:
            j += 1
        out += _serialize_record(stack, i, j, file_name)
        i = j
    return bytes(out)


def _serialize_record(stack: Sequence[TlvLine], i: int, end: int, file_name: str) -> bytes:
    rec = stack[i]

    if end > i + 1:
        if rec.data:
            raise IndentError("Length should be 0 when not a composite.", file_name, rec.line_nr)
        payload = _serialize_run(stack, i + 1, end, file_name)
    else:
        payload = bytes(rec.data)

    if rec.headless:
        return payload

    if len(payload) > TlvDefine.TLV16_MAX_LENGTH:
        raise EncodingConstraintError("Unable to fit data into TLV16", file_name, rec.line_nr)
    if rec.force == 8 and needs_tlv16(rec.tag, len(payload)):
        raise EncodingConstraintError("Unable to fit data into TLV8", file_name, rec.line_nr)

    return pack_header(
        rec.tag,
        len(payload),
        is_forward=rec.is_forward,
        is_non_critical=rec.is_non_critical,
        force=rec.force,
    ) + payload


# Backward-compatible names
serializeStack = serialize_stack
