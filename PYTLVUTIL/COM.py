# -*- coding: utf-8 -*-
# -------------------------------
#  @Project : TLVUTIL
#  @Time    : 2025 - 11-24 14:12
#  @FileName: COM.py
#  @Software: PyCharm 2024.1.6 (Professional Edition)
#  @System  : Windows 11 23H2
#  @Author  : UF4
#  @Contact :
#  @Python  :
# -------------------------------
# TLV8:  [b0: 16=0 | NC | FW | tag(5)] [len 1B]            [data]
# TLV16: [b0: 16=1 | NC | FW | tag hi(5)] [tag lo 1B] [len 2B, big endian] [data]
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Tuple

from PYTLVUTIL import shared_config as cfg


class TlvDefine(IntEnum):
    TLV8_MAX_TAG = cfg.TLV8_MAX_TAG
    TLV8_MAX_LENGTH = cfg.TLV8_MAX_LENGTH
    TLV16_MAX_TAG = cfg.TLV16_MAX_TAG
    TLV16_MAX_LENGTH = cfg.TLV16_MAX_LENGTH
    TLV8_HEADER_LENGTH = cfg.TLV8_HEADER_LENGTH
    TLV16_HEADER_LENGTH = cfg.TLV16_HEADER_LENGTH
    TLV_SCRATCH_SIZE = cfg.TLV_SCRATCH_SIZE


class HeaderBits(IntEnum):
    TLV16 = 0x80
    NON_CRITICAL = 0x40
    FORWARD = 0x20
    TAG_MASK = 0x1F


class StateMachine(IntEnum):
    BEGIN = 1
    COMMENT = 2
    INDENT = 3
    RAW_CONTENT = 4
    TLV_T = 5
    TLV_L = 6
    TLV_V = 7
    FORCE = 8
    FORCE_16 = 9
    BRACKET_BEGIN = 10
    TAG_BEGIN = 11
    TAG = 12
    TAG_HEX_PREFIX = 13
    FLAG_START = 14
    FLAG = 15
    FLAG_END = 16
    BRACKET_END = 17
    COLON = 18
    DATA = 19
    DATA_STRING = 20
    DATA_STRING_ESC = 21
    DATA_STRING_DEC_1 = 22
    DATA_STRING_DEC_2 = 23
    DATA_STRING_DEC_3 = 24
    DATA_HEX_1 = 25
    DATA_HEX_2 = 26
    END = 27


# ----- errors -----
class TlvError(Exception):
    """Base class for all codec errors."""


class StructuralError(TlvError):
    """Malformed or truncated binary TLV.

    Attributes:
        consumed: Bytes read from the input before the problem was detected.
    """

    def __init__(self, msg: str, consumed: int = 0):
        super().__init__(msg)
        self.consumed = consumed


class UnknownTagError(StructuralError):
    """Strict type mode found a nested tag with no descriptor."""

    def __init__(self, tag: int, offset: int = 0):
        super().__init__(f"unknown nested tag 0x{tag:02x} at offset {offset}")
        self.tag = tag
        self.offset = offset


class LineError(TlvError):
    """Text side error, reported as `file:line - message`."""

    def __init__(self, msg: str, file_name: str = "<stdin>", line_nr: int = 0):
        super().__init__(msg)
        self.msg = msg
        self.file_name = file_name
        self.line_nr = line_nr

    def __str__(self) -> str:
        return f"{self.file_name}:{self.line_nr} - {self.msg}"


class FormatError(LineError):
    pass


class IndentError(LineError):
    pass


class EncodingConstraintError(LineError):
    pass


class ResourceError(TlvError):
    pass


# ----- records -----
@dataclass
class TlvNode:
    """One decoded binary TLV.

    `raw` is a view of the whole element (header + payload); nothing is copied.
    """

    tag: int
    is_forward: bool
    is_non_critical: bool
    hdr_len: int
    dat_len: int
    offset: int = 0
    raw: memoryview = field(default_factory=lambda: memoryview(b""), repr=False)

    @property
    def payload(self) -> memoryview:
        return self.raw[self.hdr_len:self.hdr_len + self.dat_len]

    @property
    def consumed(self) -> int:
        return self.hdr_len + self.dat_len


@dataclass
class TlvLine:
    """One record of the text form, as produced by the tokenizer."""

    indent: bytes = b""
    level: int = 0
    tag: int = 0
    is_forward: bool = False
    is_non_critical: bool = False
    force: int = 0
    data: bytearray = field(default_factory=bytearray)
    headless: bool = False
    line_nr: int = 0


# ----- debug -----
def debug_print(*args) -> None:
    if cfg.TLV_DEBUG_ENABLE:
        print("[tlv]", *args, file=sys.stderr)


# ----- header helpers -----
def unpack_header(buf) -> Tuple[int, bool, bool, int, int]:
    """Decode the header at the start of `buf`.

    Args:
        buf: Bytes-like region starting at a TLV header.

    Returns:
        `(tag, is_forward, is_non_critical, hdr_len, dat_len)`.

    Raises:
        StructuralError: If the header or the declared payload does not fit
            into `buf`.
    """

    n = len(buf)
    if n < 1:
        raise StructuralError("truncated TLV header", consumed=0)
    b0 = buf[0]
    if b0 & HeaderBits.TLV16:
        hdr_len = int(TlvDefine.TLV16_HEADER_LENGTH)
        if n < hdr_len:
            raise StructuralError("truncated TLV16 header", consumed=n)
        tag = ((b0 & HeaderBits.TAG_MASK) << 8) | buf[1]
        dat_len = (buf[2] << 8) | buf[3]
    else:
        hdr_len = int(TlvDefine.TLV8_HEADER_LENGTH)
        if n < hdr_len:
            raise StructuralError("truncated TLV8 header", consumed=n)
        tag = b0 & HeaderBits.TAG_MASK
        dat_len = buf[1]
    if hdr_len + dat_len > n:
        raise StructuralError("TLV length overflow", consumed=n)
    return tag, bool(b0 & HeaderBits.FORWARD), bool(b0 & HeaderBits.NON_CRITICAL), hdr_len, dat_len


def needs_tlv16(tag: int, length: int, force: int = 0) -> bool:
    return tag > TlvDefine.TLV8_MAX_TAG or length > TlvDefine.TLV8_MAX_LENGTH or force == 16


def pack_header(
    tag: int,
    length: int,
    *,
    is_forward: bool = False,
    is_non_critical: bool = False,
    force: int = 0,
) -> bytes:
    """Build the smallest header that can carry `length` bytes for `tag`.

    Raises:
        ValueError: If the tag or length is out of range, or `force=8` cannot
            hold the element.
    """

    if not 0 <= tag <= TlvDefine.TLV16_MAX_TAG:
        raise ValueError(f"TLV tag 0x{tag:x} may not exceed 0x1fff")
    if not 0 <= length <= TlvDefine.TLV16_MAX_LENGTH:
        raise ValueError("TLV payload too large")

    if needs_tlv16(tag, length, force):
        if force == 8:
            raise ValueError("Unable to fit data into TLV8")
        hdr = bytearray([HeaderBits.TLV16 | ((tag >> 8) & HeaderBits.TAG_MASK), tag & 0xFF, (length >> 8) & 0xFF, length & 0xFF])
    else:
        hdr = bytearray([tag & HeaderBits.TAG_MASK, length])

    if is_non_critical:
        hdr[0] |= HeaderBits.NON_CRITICAL
    if is_forward:
        hdr[0] |= HeaderBits.FORWARD
    return bytes(hdr)


def create_entry(tag: int, payload: bytes, *, is_forward: bool = False, is_non_critical: bool = False, force: int = 0) -> bytes:
    return pack_header(tag, len(payload), is_forward=is_forward, is_non_critical=is_non_critical, force=force) + bytes(payload)


def create_nested_entry(tag: int, *children: bytes, is_forward: bool = False, is_non_critical: bool = False) -> bytes:
    return create_entry(tag, b"".join(children), is_forward=is_forward, is_non_critical=is_non_critical)


# Backward-compatible names
createEntry = create_entry
createNestedEntry = create_nested_entry
