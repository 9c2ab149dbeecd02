"""PYTLVUTIL.TREE

Hierarchy reconstruction for the undump direction.

- `RecordStack` holds the records of the current top-level group.
- `TreeBuilder` derives every record's level from its indentation and hands
  each finished group to a callback.
- `convert_stream` wires tokenizer, builder and encoder together.

Levels are never written in the text; they follow from comparing indentation
strings byte for byte:

    TLV[01]:          level 0
        TLV[02]: 01   level 1  (deeper, extends previous indent)
        TLV[03]: 02   level 1  (identical indent)
    TLV[04]:          level 0  -> the group above is encoded and flushed
"""

from __future__ import annotations

import io
from typing import BinaryIO, Callable, List, Optional

from PYTLVUTIL import shared_config as cfg
from PYTLVUTIL.COM import IndentError, ResourceError, TlvLine, debug_print
from PYTLVUTIL.LEX import TextTokenizer
from PYTLVUTIL.WR import serialize_stack


class RecordStack:
    """Growable record buffer.

    Starts with `initial` slots and grows by `increment` slots when full, up
    to `limit` records.
    """

    def __init__(
        self,
        initial: int = cfg.STACK_INITIAL_SIZE,
        increment: int = cfg.STACK_INCREMENT,
        limit: int = cfg.STACK_MAX_SIZE,
    ):
        self.increment = increment
        self.limit = limit
        self._slots: List[Optional[TlvLine]] = [None] * initial
        self._len = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def push(self, rec: TlvLine) -> None:
        if self._len >= len(self._slots):
            self._grow()
        self._slots[self._len] = rec
        self._len += 1

    def _grow(self) -> None:
        size = len(self._slots) + self.increment
        if size > self.limit:
            raise ResourceError("Unable to reallocate internal buffer.")
        try:
            self._slots.extend([None] * self.increment)
        except MemoryError as exc:
            raise ResourceError("Unable to reallocate internal buffer.") from exc

    def clear(self) -> None:
        for i in range(self._len):
            self._slots[i] = None
        self._len = 0

    def records(self) -> List[TlvLine]:
        return self._slots[:self._len]  # type: ignore[return-value]

    def __getitem__(self, i: int) -> TlvLine:
        if not 0 <= i < self._len:
            raise IndexError(i)
        return self._slots[i]  # type: ignore[return-value]

    def __len__(self) -> int:
        return self._len


class TreeBuilder:
    """Assign levels to records and detect top-level group boundaries.

    Args:
        on_group: Callback invoked with the records of every finished group.
        file_name: Name used in error messages.
        stack: Record buffer to use; a fresh `RecordStack` by default.
    """

    def __init__(
        self,
        on_group: Callable[[List[TlvLine]], None],
        file_name: str = "<stdin>",
        stack: Optional[RecordStack] = None,
    ):
        self.on_group = on_group
        self.file_name = file_name
        self.stack = stack if stack is not None else RecordStack()

    def add(self, rec: TlvLine) -> None:
        """Level `rec` and buffer it, flushing the previous group first when
        `rec` starts a new one.

        Raises:
            IndentError: On inconsistent indentation.
            ResourceError: If the record buffer cannot grow.
        """

        self._assign_level(rec)
        if len(self.stack) != 0 and rec.level == 0:
            self._flush()
        self.stack.push(rec)

    def finish(self) -> None:
        if len(self.stack) != 0:
            self._flush()

    def _flush(self) -> None:
        group = self.stack.records()
        self.stack.clear()
        self.on_group(group)

    def _error(self, msg: str, rec: TlvLine) -> None:
        raise IndentError(msg, self.file_name, rec.line_nr)

    def _assign_level(self, rec: TlvLine) -> None:
        n = len(self.stack)
        if n == 0 or not rec.indent:
            rec.level = 0
            return

        prev = self.stack[n - 1]
        if len(rec.indent) < len(prev.indent):
            for i in range(n - 1, -1, -1):
                other = self.stack[i]
                if len(rec.indent) > len(other.indent):
                    self._error("Bad backwards indentation - no matching level.", rec)
                if len(rec.indent) == len(other.indent):
                    if rec.indent != other.indent:
                        self._error("Bad backwards indentation - whitespace mismatch.", rec)
                    rec.level = other.level
                    return
            self._error("Bad backwards indentation - previous level not found.", rec)

        if rec.indent[:len(prev.indent)] != prev.indent:
            self._error("Indentation not a subset.", rec)

        rec.level = prev.level
        if len(rec.indent) > len(prev.indent):
            if prev.data:
                self._error("A TLV with explicit data may not have nested elements.", rec)
            rec.level += 1


def convert_stream(source, out: BinaryIO, file_name: Optional[str] = None, chunk_size: int = 4096) -> int:
    """Convert the text form read from `source` into binary TLVs on `out`.

    Every top-level group is written (and `out` flushed) as soon as the next
    one starts, so output of earlier groups survives a later error.

    Args:
        source: Object with `read(size)` returning bytes.
        out: Binary stream.
        file_name: Name used in error messages; defaults to `source.name`.
        chunk_size: Read size.

    Returns:
        Number of bytes written.

    Raises:
        FormatError, IndentError, EncodingConstraintError, ResourceError.
    """

    name = file_name or getattr(source, "name", "<stdin>")
    written = 0

    def on_group(group: List[TlvLine]) -> None:
        nonlocal written
        data = serialize_stack(group, name)
        out.write(data)
        out.flush()
        written += len(data)
        debug_print(f"{name}:{group[0].line_nr} group of {len(group)} records, {len(data)} bytes")

    builder = TreeBuilder(on_group, name)
    lexer = TextTokenizer(builder.add, name)
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        lexer.feed(chunk)
    lexer.finish()
    builder.finish()
    return written


def undump(text: bytes, file_name: str = "<stdin>") -> bytes:
    """Convert a complete text buffer; see `convert_stream`."""

    out = io.BytesIO()
    convert_stream(io.BytesIO(text), out, file_name)
    return out.getvalue()
