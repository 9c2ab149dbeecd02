"""PYTLVUTIL.DESC

Tag descriptors: a display label per tag plus the set of tags allowed inside
it. The dump side uses them for `# label` annotations and for strict type
checking; the codec itself never requires them.

Descriptor files are line based:

    # comment
    0800 KSI signature
        0801 Aggregation hash chain
            02 Aggregation time

Each line holds a hex tag and an optional label. A line indented deeper than
the previous one describes a permitted child of it.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from PYTLVUTIL.COM import FormatError, TlvDefine

_LINE_RE = re.compile(r'^([ \t]*)(?:0[xX])?([0-9A-Fa-f]+)(?:[ \t]+(.*?))?[ \t]*$')


class DescriptorLookup(ABC):
    """Lookup interface consulted by the renderer and strict mode."""

    @abstractmethod
    def find(self, tag: int) -> Optional["Descriptor"]:
        """Return the descriptor for `tag`, or None if unknown."""


class DescriptorTable(DescriptorLookup):
    def __init__(self, entries: Iterable["Descriptor"] = ()):
        self._entries: Dict[int, Descriptor] = {}
        for d in entries:
            self.add(d)

    def add(self, desc: "Descriptor") -> "Descriptor":
        """Insert `desc`; a tag seen twice keeps one entry and merges children."""

        old = self._entries.get(desc.tag)
        if old is None:
            self._entries[desc.tag] = desc
            return desc
        if desc.text:
            old.text = desc.text
        for child in desc.children:
            old.children.add(child)
        return old

    def find(self, tag: int) -> Optional["Descriptor"]:
        return self._entries.get(tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._entries

    def __iter__(self) -> Iterator["Descriptor"]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class Descriptor:
    tag: int
    text: Optional[str] = None
    children: DescriptorTable = field(default_factory=DescriptorTable)


def parse_descriptors(lines: Iterable[str], file_name: str = "<desc>") -> DescriptorTable:
    """Build a descriptor table from `.desc` lines.

    Raises:
        FormatError: On a malformed line or a tag above 0x1fff.
    """

    table = DescriptorTable()
    open_: List[Tuple[str, Descriptor]] = []

    for line_nr, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        m = _LINE_RE.match(line)
        if m is None:
            raise FormatError("Expected hex tag value.", file_name, line_nr)
        indent, tag_hex, text = m.group(1), m.group(2), m.group(3)
        tag = int(tag_hex, 16)
        if tag > TlvDefine.TLV16_MAX_TAG:
            raise FormatError("TLV tag value may not exceed 0x1fff", file_name, line_nr)
        if text and len(text) >= 2 and text[0] == text[-1] == '"':
            text = text[1:-1]

        while open_ and len(open_[-1][0]) >= len(indent):
            open_.pop()
        if open_ and not indent.startswith(open_[-1][0]):
            raise FormatError("Indentation not a subset.", file_name, line_nr)

        parent = open_[-1][1].children if open_ else table
        desc = parent.add(Descriptor(tag=tag, text=text or None))
        open_.append((indent, desc))

    return table


def load_descriptors(path: str) -> DescriptorTable:
    with open(path, "r", encoding="utf-8") as f:
        return parse_descriptors(f, file_name=str(path))
