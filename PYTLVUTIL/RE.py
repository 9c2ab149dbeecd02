"""PYTLVUTIL.RE

This module implements the binary TLV reader.

- `mem_read` / `mem_read_all` decode TLVs from an in-memory buffer.
- `stream_read` pulls one top-level TLV at a time from a `Source`
  (or any object with a `read(size)` method).
- `check_nested` decides whether a payload is itself a TLV sequence.

Nothing is copied while decoding in memory: nodes carry `memoryview` slices of
the caller's buffer and are only valid as long as that buffer is.
"""

from __future__ import annotations

from typing import List, Optional

from PYTLVUTIL.COM import (
    HeaderBits,
    StructuralError,
    TlvDefine,
    TlvNode,
    UnknownTagError,
    unpack_header,
)


def mem_read(buf, offset: int = 0) -> TlvNode:
    """Decode the TLV at the start of `buf`.

    Args:
        buf: Bytes-like region starting at a TLV header.
        offset: Absolute offset of `buf[0]`, stored on the node.

    Returns:
        The node. `node.consumed` is the number of bytes it occupies.

    Raises:
        StructuralError: If the header is truncated or its length overflows `buf`.
    """

    mv = memoryview(buf)
    tag, fwd, nc, hdr_len, dat_len = unpack_header(mv)
    return TlvNode(
        tag=tag,
        is_forward=fwd,
        is_non_critical=nc,
        hdr_len=hdr_len,
        dat_len=dat_len,
        offset=offset,
        raw=mv[:hdr_len + dat_len],
    )


def mem_read_all(buf, offset: int = 0) -> List[TlvNode]:
    """Decode `buf` as consecutive TLVs that fill it exactly.

    Raises:
        StructuralError: If any element is malformed or the last one overruns.
    """

    nodes: List[TlvNode] = []
    mv = memoryview(buf)
    n = len(mv)
    i = 0
    while i < n:
        try:
            node = mem_read(mv[i:], offset + i)
        except StructuralError as exc:
            raise StructuralError(str(exc), consumed=i) from exc
        nodes.append(node)
        i += node.consumed
    return nodes


def read_exact(source, size: int) -> bytes:
    """Read up to `size` bytes, retrying short reads until EOF."""

    chunks = bytearray()
    while len(chunks) < size:
        b = source.read(size - len(chunks))
        if not b:
            break
        chunks += b
    return bytes(chunks)


def stream_read(source, offset: int = 0) -> Optional[TlvNode]:
    """Read one TLV from a stream.

    Args:
        source: Object with a `read(size)` method returning bytes.
        offset: Absolute stream offset of the element, stored on the node.

    Returns:
        The node (owning a copy of its bytes), or None if the stream ended
        exactly at a TLV boundary.

    Raises:
        StructuralError: On truncation; `consumed` holds the bytes read.
    """

    buf = bytearray(read_exact(source, 1))
    if not buf:
        return None

    hdr_len = TlvDefine.TLV16_HEADER_LENGTH if buf[0] & HeaderBits.TLV16 else TlvDefine.TLV8_HEADER_LENGTH
    buf += read_exact(source, hdr_len - 1)
    if len(buf) < hdr_len:
        raise StructuralError("truncated TLV header", consumed=len(buf))

    if hdr_len == TlvDefine.TLV16_HEADER_LENGTH:
        dat_len = (buf[2] << 8) | buf[3]
    else:
        dat_len = buf[1]

    buf += read_exact(source, dat_len)
    if len(buf) < hdr_len + dat_len:
        raise StructuralError("truncated TLV payload", consumed=len(buf))

    return mem_read(bytes(buf), offset)


def _find(lookup, tag: int):
    if lookup is None:
        return None
    return lookup.find(tag)


def check_nested(payload, desc=None, table=None, strict: bool = False, offset: int = 0) -> bool:
    """Check whether `payload` is a sequence of TLVs.

    Args:
        payload: Candidate bytes.
        desc: Descriptor of the enclosing node; its `children` are searched
            first in strict mode.
        table: Top-level descriptor lookup, searched when `desc` has no entry.
        strict: Require every child tag to be known.
        offset: Absolute offset of `payload[0]`, used in error messages.

    Returns:
        True if `payload` is consumed exactly by well-formed TLVs.

    Raises:
        UnknownTagError: Strict mode only, when a well-formed child has a tag
            found in neither lookup.
    """

    try:
        nodes = mem_read_all(payload, offset)
    except StructuralError:
        return False

    if strict:
        children = desc.children if desc is not None else None
        for node in nodes:
            d = _find(children, node.tag)
            if d is None:
                d = _find(table, node.tag)
            if d is None:
                raise UnknownTagError(node.tag, node.offset)
    return True
