# -*- coding: utf-8 -*-
# -------------------------------
#  @Project : TLVUTIL
#  @Time    : 2025 - 11-24 14:05
#  @FileName: __init__.py
#  @Software: PyCharm 2024.1.6 (Professional Edition)
#  @System  : Windows 11 23H2
#  @Author  : UF4
#  @Contact :
#  @Python  :
# -------------------------------
"""TLVUTIL public package API.

Most users should import from this module instead of individual submodules.

Examples:

    from PYTLVUTIL import dump, undump, create_entry

    text = dump(create_entry(0x01, b"AB"))       # 'TLV[0x01]: 4142\\n'
    data = undump(b'TLV[01,F]: "AB"\\n')          # b'!\\x02AB'
"""

from __future__ import annotations

__version__ = "1.0.0"

from .COM import (
    EncodingConstraintError,
    FormatError,
    HeaderBits,
    IndentError,
    LineError,
    ResourceError,
    StateMachine,
    StructuralError,
    TlvDefine,
    TlvError,
    TlvLine,
    TlvNode,
    UnknownTagError,
    createEntry,
    createNestedEntry,
    create_entry,
    create_nested_entry,
    pack_header,
    unpack_header,
)
from .DESC import Descriptor, DescriptorLookup, DescriptorTable, load_descriptors, parse_descriptors
from .DUMP import DumpConfig, TextRenderer, dump, dump_stream
from .LEX import TextTokenizer, tokenize
from .RE import check_nested, mem_read, mem_read_all, stream_read
from .TR import Source, available_sources, create_source, register_source
from .TREE import RecordStack, TreeBuilder, convert_stream, undump
from .WR import serializeStack, serialize_stack

__all__ = [
    "__version__",
    "EncodingConstraintError",
    "FormatError",
    "HeaderBits",
    "IndentError",
    "LineError",
    "ResourceError",
    "StateMachine",
    "StructuralError",
    "TlvDefine",
    "TlvError",
    "TlvLine",
    "TlvNode",
    "UnknownTagError",
    "Descriptor",
    "DescriptorLookup",
    "DescriptorTable",
    "DumpConfig",
    "RecordStack",
    "Source",
    "TextRenderer",
    "TextTokenizer",
    "TreeBuilder",
    "available_sources",
    "check_nested",
    "convert_stream",
    "create_entry",
    "create_nested_entry",
    "create_source",
    "dump",
    "dump_stream",
    "load_descriptors",
    "mem_read",
    "mem_read_all",
    "pack_header",
    "parse_descriptors",
    "register_source",
    "serialize_stack",
    "stream_read",
    "tokenize",
    "undump",
    "unpack_header",
    # Backward-compatible names
    "createEntry",
    "createNestedEntry",
    "serializeStack",
]
