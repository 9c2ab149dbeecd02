"""Tests for indentation-driven level assignment and group flushing."""

import io
import unittest

from PYTLVUTIL.COM import FormatError, IndentError, ResourceError, TlvLine
from PYTLVUTIL.LEX import tokenize
from PYTLVUTIL.TREE import RecordStack, TreeBuilder, convert_stream


def build(text: bytes, stack=None):
    groups = []
    builder = TreeBuilder(groups.append, "in.txt", stack)
    for rec in tokenize(text, "in.txt"):
        builder.add(rec)
    builder.finish()
    return groups


class TestLevels(unittest.TestCase):
    def test_levels_and_groups(self) -> None:
        groups = build(
            b"TLV[01]:\n"
            b"  TLV[02]:\n"
            b"    TLV[03]: 01\n"
            b"  TLV[04]: 02\n"
            b"TLV[05]: 03\n"
        )

        self.assertEqual([[r.tag for r in g] for g in groups], [[1, 2, 3, 4], [5]])
        self.assertEqual([r.level for r in groups[0]], [0, 1, 2, 1])
        self.assertEqual(groups[1][0].level, 0)

    def test_identical_indent_is_sibling(self) -> None:
        (group,) = build(b"TLV[01]:\n\tTLV[02]: 01\n\tTLV[03]: 02\n\tTLV[04]: 03\n")
        self.assertEqual([r.level for r in group], [0, 1, 1, 1])

    def test_dedent_to_ancestor(self) -> None:
        (group,) = build(b"TLV[01]:\n TLV[02]:\n   TLV[03]:\n     TLV[04]: 01\n TLV[05]: 02\n")
        self.assertEqual([r.level for r in group], [0, 1, 2, 3, 1])

    def test_indented_first_record(self) -> None:
        groups = build(b"  TLV[01]: 01\n  TLV[02]: 02\n")
        self.assertEqual([[r.level for r in g] for g in groups], [[0], [0]])


class TestLevelErrors(unittest.TestCase):
    def assertIndentError(self, text: bytes, line_nr: int, fragment: str) -> None:
        with self.assertRaises(IndentError) as ctx:
            build(text)
        self.assertEqual(ctx.exception.line_nr, line_nr)
        self.assertIn(fragment, str(ctx.exception))

    def test_whitespace_mismatch(self) -> None:
        self.assertIndentError(
            b"TLV[01]:\n\tTLV[02]:\n\t\tTLV[03]: 01\n TLV[04]: 02\n",
            4,
            "whitespace mismatch",
        )

    def test_no_matching_level(self) -> None:
        self.assertIndentError(
            b"TLV[01]:\n    TLV[02]:\n        TLV[03]: 01\n  TLV[04]: 02\n",
            4,
            "no matching level",
        )

    def test_previous_level_not_found(self) -> None:
        self.assertIndentError(
            b"  TLV[01]:\n    TLV[02]:\n TLV[03]:\n",
            3,
            "previous level not found",
        )

    def test_not_a_subset(self) -> None:
        self.assertIndentError(b"TLV[01]:\n  TLV[02]:\n\t TLV[03]: 01\n", 3, "not a subset")

    def test_explicit_data_with_children(self) -> None:
        self.assertIndentError(b"TLV[01]: 01\n  TLV[02]: 02\n", 2, "explicit data")

    def test_headless_with_children(self) -> None:
        self.assertIndentError(b"TLV[01]:\n  0102\n    TLV[02]:\n", 3, "explicit data")


class TestRecordStack(unittest.TestCase):
    def test_grows_in_increments(self) -> None:
        s = RecordStack(initial=2, increment=2, limit=4)
        for i in range(4):
            s.push(TlvLine(tag=i))

        self.assertEqual(s.capacity, 4)
        self.assertEqual([r.tag for r in s.records()], [0, 1, 2, 3])
        with self.assertRaises(ResourceError):
            s.push(TlvLine(tag=4))

    def test_clear(self) -> None:
        s = RecordStack(initial=1)
        s.push(TlvLine(tag=7))
        s.clear()
        self.assertEqual(len(s), 0)
        with self.assertRaises(IndexError):
            s[0]

    def test_builder_reports_exhaustion(self) -> None:
        with self.assertRaises(ResourceError):
            build(b"TLV[01]:\n  TLV[02]:\n  TLV[03]:\n  TLV[04]:\n", RecordStack(1, 1, 2))


class TestConvertStream(unittest.TestCase):
    def test_completed_groups_survive_later_error(self) -> None:
        out = io.BytesIO()
        src = io.BytesIO(b"TLV[01]: 01\nTLV[02]: 02\nTLV[03]: zz\n")

        with self.assertRaises(FormatError):
            convert_stream(src, out, "in.txt")

        self.assertEqual(out.getvalue(), b"\x01\x01\x01")

    def test_returns_bytes_written(self) -> None:
        out = io.BytesIO()
        n = convert_stream(io.BytesIO(b"TLV[01]:\n  TLV[02]: ff\nTLV[03]:\n"), out, chunk_size=3)

        self.assertEqual(out.getvalue(), b"\x01\x03\x02\x01\xff\x03\x00")
        self.assertEqual(n, 7)


if __name__ == "__main__":
    unittest.main()
