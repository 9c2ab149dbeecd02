"""Tests for the tlvdump / tlvundump command lines."""

import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

from PYTLVUTIL import __version__
from PYTLVUTIL.CLI import DESC_ENV, dump_main, main, undump_main
from PYTLVUTIL.COM import create_entry, create_nested_entry


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write(self, name: str, data: bytes) -> str:
        path = os.path.join(self.tmp, name)
        with open(path, "wb") as f:
            f.write(data)
        return path


class TestDumpMain(CliTestCase):
    def test_dump_file(self) -> None:
        path = self.write("a.tlv", create_nested_entry(0x01, create_entry(0x02, b"\xff")))
        out = io.StringIO()

        self.assertEqual(dump_main([path], out=out), 0)
        self.assertEqual(out.getvalue(), "TLV[0x01]: \n    TLV[0x02]: ff\n")

    def test_options(self) -> None:
        path = self.write("a.tlv", create_entry(0x05, b"\xff\xff"))
        out = io.StringIO()

        dump_main(["-x", "-y", "-z", path], out=out)

        self.assertEqual(out.getvalue(), "   0:TLV[0x05]: (len = 2) ffff (dec = 65535)\n")

    def test_missing_file_is_skipped(self) -> None:
        path = self.write("a.tlv", create_entry(0x01, b"\xff"))
        missing = os.path.join(self.tmp, "missing.tlv")
        out = io.StringIO()
        err = io.StringIO()

        with contextlib.redirect_stderr(err):
            rc = dump_main([missing, path], out=out)

        self.assertEqual(rc, 0)
        self.assertIn("missing.tlv: Unable to open file.", err.getvalue())
        self.assertEqual(out.getvalue(), "TLV[0x01]: ff\n")

    def test_truncated_file_continues_with_next(self) -> None:
        bad = self.write("bad.tlv", b"\x01\x05\x00")
        good = self.write("good.tlv", create_entry(0x02, b"\xff"))
        out = io.StringIO()
        err = io.StringIO()

        with contextlib.redirect_stderr(err):
            dump_main([bad, good], out=out)

        self.assertIn("bad.tlv: Failed to parse 3 bytes", err.getvalue())
        self.assertEqual(out.getvalue(), "TLV[0x02]: ff\n")

    def test_annotate_requires_descriptors(self) -> None:
        path = self.write("a.tlv", create_entry(0x01, b"\xff"))
        with mock.patch.dict(os.environ):
            os.environ.pop(DESC_ENV, None)
            with contextlib.redirect_stderr(io.StringIO()):
                self.assertEqual(dump_main(["-a", path], out=io.StringIO()), 1)

    def test_annotate_with_descriptor_file(self) -> None:
        path = self.write("a.tlv", create_entry(0x01, b"\xff"))
        desc = self.write("k.desc", b"01 Publication\n")
        out = io.StringIO()

        self.assertEqual(dump_main(["-a", "--desc", desc, path], out=out), 0)
        self.assertEqual(out.getvalue(), "# Publication\nTLV[0x01]: ff\n")


class TestUndumpMain(CliTestCase):
    def test_undump_file(self) -> None:
        path = self.write("a.txt", b'TLV[01,F]: "AB"\n')
        out = io.BytesIO()

        self.assertEqual(undump_main([path], out=out), 0)
        self.assertEqual(out.getvalue(), b"\x21\x02AB")

    def test_format_error_exit_status(self) -> None:
        path = self.write("bad.txt", b"TLV[01]: 01\nTLV[02,Q]:\n")
        out = io.BytesIO()
        err = io.StringIO()

        with contextlib.redirect_stderr(err):
            rc = undump_main([path], out=out)

        self.assertEqual(rc, 2)
        self.assertIn(f"{path}:2 - Unexpected flag.", err.getvalue())

    def test_indent_error_exit_status(self) -> None:
        path = self.write("bad.txt", b"TLV[01]: 01\n  TLV[02]:\n")
        with contextlib.redirect_stderr(io.StringIO()):
            self.assertEqual(undump_main([path], out=io.BytesIO()), 2)

    def test_version(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out), self.assertRaises(SystemExit):
            undump_main(["-v"])
        self.assertIn(__version__, out.getvalue())


class TestMain(unittest.TestCase):
    def test_unknown_command(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            self.assertEqual(main(["bogus"]), 1)


if __name__ == "__main__":
    unittest.main()
