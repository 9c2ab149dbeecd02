"""PYTLVUTIL.CLI

Command line front ends:

    tlvdump   [-H N] [-d N] [-x] [-w] [-y] [-z] [-a] [-s] [--desc FILE] [files...]
    tlvundump [-v] [files...]

Both read standard input when no file is given. Files that cannot be opened
are reported and skipped.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import BinaryIO, Optional, Sequence, TextIO

from PYTLVUTIL import __version__
from PYTLVUTIL.COM import LineError, ResourceError
from PYTLVUTIL.DESC import load_descriptors
from PYTLVUTIL.DUMP import DumpConfig, dump_stream
from PYTLVUTIL.TR import create_source
from PYTLVUTIL.TREE import convert_stream

DESC_ENV = "TLVUTIL_DESC"


def _report(msg: str) -> None:
    print(msg, file=sys.stderr)


def parse_dump_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tlvdump", description="Dump binary TLV files as indented text.")
    parser.add_argument("files", nargs="*", help="Binary TLV files (default: standard input)")
    parser.add_argument("-H", dest="hdr_len", type=int, default=0, metavar="num", help="Constant header length.")
    parser.add_argument("-d", dest="max_depth", type=int, default=0, metavar="num", help="Max depth of nested elements")
    parser.add_argument("-x", dest="print_offset", action="store_true", help="Display file offset for every TLV")
    parser.add_argument("-w", dest="wrap", action="store_true", help="Wrap the output.")
    parser.add_argument("-y", dest="print_len", action="store_true", help="Show content length.")
    parser.add_argument(
        "-z",
        dest="convert",
        action="store_true",
        help="Convert payload with length less than 8 bytes to decimal.",
    )
    parser.add_argument("-a", dest="annotate", action="store_true", help="Annotate known elements.")
    parser.add_argument(
        "-s",
        dest="strict",
        action="store_true",
        help="Strict types - do not parse TLV's with unknown types.",
    )
    parser.add_argument(
        "--desc",
        default=os.environ.get(DESC_ENV),
        help=f"Descriptor file used by -a and -s (default: ${DESC_ENV})",
    )
    parser.add_argument("--serial", metavar="PORT", help="Read from a serial port instead of files")
    parser.add_argument("--baud", type=int, default=115200, help="Serial baud rate (default 115200)")
    parser.add_argument("--timeout", type=float, default=1.0, help="Serial read timeout in seconds (default 1.0)")
    return parser.parse_args(argv)


def dump_main(argv: Sequence[str] | None = None, out: Optional[TextIO] = None) -> int:
    args = parse_dump_args(argv)
    out = out if out is not None else sys.stdout
    config = DumpConfig(
        hdr_len=args.hdr_len,
        max_depth=args.max_depth,
        print_offset=args.print_offset,
        wrap=args.wrap,
        print_len=args.print_len,
        convert=args.convert,
        annotate=args.annotate,
        strict=args.strict,
    )

    descriptors = None
    if config.annotate or config.strict:
        if not args.desc:
            _report(f"A descriptor file is required for -a and -s, use --desc or ${DESC_ENV}.")
            return 1
        try:
            descriptors = load_descriptors(args.desc)
        except (OSError, LineError) as exc:
            _report(f"{args.desc}: Unable to read description file. {exc}")
            return 1

    if args.serial:
        try:
            src = create_source("serial", args.serial, args.baud, args.timeout)
        except OSError as exc:
            _report(f"{args.serial}: Unable to open port. {exc}")
            return 1
        with src:
            dump_stream(src, out, config, descriptors, on_error=_report)
        return 0

    if not args.files:
        dump_stream(create_source("stdin"), out, config, descriptors, on_error=_report)
        return 0

    for path in args.files:
        try:
            src = create_source("file", path)
        except OSError:
            _report(f"{path}: Unable to open file.")
            continue
        with src:
            dump_stream(src, out, config, descriptors, on_error=_report)
    return 0


def parse_undump_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tlvundump", description="Convert the TLV text form back to binary.")
    parser.add_argument("files", nargs="*", help="Text files (default: standard input)")
    parser.add_argument("-v", action="version", version=__version__, help="TLV utility package version.")
    return parser.parse_args(argv)


def undump_main(argv: Sequence[str] | None = None, out: Optional[BinaryIO] = None) -> int:
    args = parse_undump_args(argv)
    out = out if out is not None else sys.stdout.buffer

    try:
        if not args.files:
            convert_stream(create_source("stdin"), out)
            return 0

        for path in args.files:
            try:
                src = create_source("file", path)
            except OSError:
                _report(f"{path}: Unable to open file.")
                continue
            with src:
                convert_stream(src, out)
    except ResourceError as exc:
        _report(f"Out of memory! {exc}")
        return 1
    except LineError as exc:
        _report(str(exc))
        return 2
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """`main.py dump ...` / `main.py undump ...`."""

    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in ("dump", "undump"):
        _report("usage: main.py {dump,undump} [options] [files...]")
        return 1
    if argv[0] == "dump":
        return dump_main(argv[1:])
    return undump_main(argv[1:])


def _dump_entry() -> None:
    raise SystemExit(dump_main())


def _undump_entry() -> None:
    raise SystemExit(undump_main())
