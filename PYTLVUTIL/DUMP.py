"""PYTLVUTIL.DUMP

Binary -> text direction.

- `TextRenderer` prints one decoded TLV and, recursively, the TLVs nested in
  its payload.
- `dump_stream` reads top-level TLVs from a source and renders each of them.

Output format (one element per line, children indented by 4 spaces):

    [OFFSET:]<indent>TLV[0x<tag>[,F][,N]]: [(len = N) ]<hex>[ (dec = N)]
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from PYTLVUTIL import shared_config as cfg
from PYTLVUTIL.COM import StructuralError, TlvNode, UnknownTagError, debug_print
from PYTLVUTIL.DESC import Descriptor, DescriptorLookup
from PYTLVUTIL.RE import check_nested, mem_read, read_exact, stream_read


@dataclass
class DumpConfig:
    """Run-time dump options.

    Attributes:
        hdr_len: Constant header bytes to print as hex before the first TLV.
        max_depth: Levels to expand (0 means unlimited).
        print_offset: Prefix every element with its byte offset.
        wrap: Wrap long hex payloads.
        print_len: Print `(len = N)` for every element.
        convert: Append `(dec = N)` for payloads of at most 8 bytes.
        annotate: Print `# label` lines for known tags.
        strict: Only expand payloads whose nested tags are all known.
    """

    hdr_len: int = 0
    max_depth: int = 0
    print_offset: bool = False
    wrap: bool = False
    print_len: bool = False
    convert: bool = False
    annotate: bool = False
    strict: bool = False


class TextRenderer:
    """Render decoded TLVs as indented text.

    Args:
        out: Text stream to write to.
        config: Dump options; defaults to `DumpConfig()`.
        descriptors: Optional top-level descriptor lookup.
    """

    def __init__(
        self,
        out: TextIO,
        config: Optional[DumpConfig] = None,
        descriptors: Optional[DescriptorLookup] = None,
    ):
        self.out = out
        self.config = config if config is not None else DumpConfig()
        self.descriptors = descriptors

    def _find(self, tag: int) -> Optional[Descriptor]:
        if self.descriptors is None:
            return None
        return self.descriptors.find(tag)

    def render(self, node: TlvNode, level: int = 0, desc: Optional[Descriptor] = None) -> None:
        """Print `node` at nesting `level`.

        Raises:
            UnknownTagError: In strict mode, when an otherwise nested payload
                holds a tag with no descriptor and the depth limit is not
                reached yet.
        """

        conf = self.config
        indent = " " * (level * cfg.DUMP_INDENT_LEN)

        if (conf.annotate or conf.strict) and desc is None:
            desc = self._find(node.tag)

        if conf.annotate and desc is not None and desc.text is not None:
            self.out.write(f"{indent}# {desc.text}\n")

        prefix = ""
        if conf.print_offset:
            prefix += f"{node.offset:4d}:"
        prefix += indent
        prefix += "TLV[0x%02x%s%s]: " % (
            node.tag,
            ",F" if node.is_forward else "",
            ",N" if node.is_non_critical else "",
        )
        if conf.print_len:
            prefix += f"(len = {node.dat_len}) "
        self.out.write(prefix)

        payload = node.payload
        off = node.offset + node.hdr_len
        at_limit = conf.max_depth and level + 1 >= conf.max_depth

        if at_limit or not check_nested(payload, desc, self.descriptors, conf.strict, off):
            self._print_raw(payload, len(prefix))
            return

        self.out.write("\n")
        i = 0
        while i < len(payload):
            child = mem_read(payload[i:], off + i)
            sub = desc.children.find(child.tag) if desc is not None else None
            self.render(child, level + 1, sub)
            i += child.consumed

    def _print_raw(self, data, prefix_len: int) -> None:
        conf = self.config
        hex_str = bytes(data).hex()
        if conf.wrap:
            step = cfg.DUMP_WRAP_HEX_CHARS
            pad = "\n" + " " * prefix_len
            hex_str = pad.join(hex_str[i:i + step] for i in range(0, len(hex_str), step))
        self.out.write(hex_str)

        if conf.convert and len(data) <= cfg.DUMP_DEC_MAX_BYTES:
            self.out.write(f" (dec = {int.from_bytes(data, 'big')})")
        self.out.write("\n")


def dump_stream(
    source,
    out: TextIO,
    config: Optional[DumpConfig] = None,
    descriptors: Optional[DescriptorLookup] = None,
    on_error: Optional[Callable[[str], None]] = None,
) -> int:
    """Dump every top-level TLV of `source` to `out`.

    A malformed element stops this input only: the problem is reported
    through `on_error` and the function returns.

    Args:
        source: Object with `read(size)`; its `name` is used in messages.
        out: Text stream.
        config: Dump options.
        descriptors: Optional descriptor lookup.
        on_error: Optional callback invoked with a human-readable message.

    Returns:
        Number of top-level TLVs rendered.
    """

    name = getattr(source, "name", "<stdin>")
    renderer = TextRenderer(out, config, descriptors)
    conf = renderer.config

    if conf.hdr_len > 0:
        header = read_exact(source, conf.hdr_len)
        if len(header) < conf.hdr_len:
            _error(on_error, f"{name}: Unable to read {conf.hdr_len} byte header")
            return 0
        out.write(header.hex() + "\n")

    count = 0
    off = 0
    while True:
        try:
            node = stream_read(source, off)
        except StructuralError as exc:
            _error(on_error, f"{name}: Failed to parse {exc.consumed} bytes")
            break
        if node is None:
            break

        try:
            renderer.render(node)
        except UnknownTagError as exc:
            out.write("\n")
            _error(on_error, f"{name}: {exc}")
            break

        off += node.consumed
        count += 1

    debug_print(f"{name}: {count} TLVs, {off} bytes")
    return count


def _error(on_error: Optional[Callable[[str], None]], msg: str) -> None:
    if on_error is not None:
        on_error(msg)


def dump(
    data: bytes,
    config: Optional[DumpConfig] = None,
    descriptors: Optional[DescriptorLookup] = None,
    on_error: Optional[Callable[[str], None]] = None,
) -> str:
    """Render a complete binary buffer; see `dump_stream`."""

    out = io.StringIO()
    dump_stream(io.BytesIO(data), out, config, descriptors, on_error)
    return out.getvalue()
