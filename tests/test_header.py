"""Tests for TLV8/TLV16 header packing and unpacking."""

import unittest

from PYTLVUTIL.COM import StructuralError, create_entry, createEntry, pack_header, unpack_header


class TestPackHeader(unittest.TestCase):
    def test_tlv8_when_tag_and_length_fit(self) -> None:
        self.assertEqual(pack_header(0x1F, 0x0A), b"\x1f\x0a")
        self.assertEqual(pack_header(0x00, 0xFF), b"\x00\xff")

    def test_tlv16_for_large_tag(self) -> None:
        self.assertEqual(pack_header(0x20, 1), bytes([0x80, 0x20, 0x00, 0x01]))

    def test_tlv16_for_large_length(self) -> None:
        self.assertEqual(pack_header(0x01, 0x100), bytes([0x80, 0x01, 0x01, 0x00]))

    def test_limits(self) -> None:
        self.assertEqual(pack_header(0x1FFF, 0xFFFF), b"\x9f\xff\xff\xff")
        with self.assertRaises(ValueError):
            pack_header(0x2000, 0)
        with self.assertRaises(ValueError):
            pack_header(0x01, 0x10000)

    def test_forced_widths(self) -> None:
        self.assertEqual(pack_header(0x01, 0, force=16), bytes([0x80, 0x01, 0x00, 0x00]))
        self.assertEqual(pack_header(0x01, 0, force=8), b"\x01\x00")
        with self.assertRaises(ValueError):
            pack_header(0x20, 0, force=8)

    def test_flag_bits(self) -> None:
        self.assertEqual(pack_header(0x01, 0, is_forward=True)[0], 0x21)
        self.assertEqual(pack_header(0x01, 0, is_non_critical=True)[0], 0x41)
        hdr = pack_header(0x123, 2, is_forward=True, is_non_critical=True)
        self.assertEqual(hdr, bytes([0xE1, 0x23, 0x00, 0x02]))

    def test_create_entry(self) -> None:
        self.assertEqual(create_entry(0x01, b"AB", is_forward=True), b"\x21\x02AB")
        self.assertEqual(createEntry(0x01, b"AB"), b"\x01\x02AB")


class TestUnpackHeader(unittest.TestCase):
    def test_tlv16_with_flags(self) -> None:
        buf = bytes([0xE1, 0x23, 0x00, 0x02, 0xAA, 0xBB])
        self.assertEqual(unpack_header(buf), (0x123, True, True, 4, 2))

    def test_tlv8(self) -> None:
        self.assertEqual(unpack_header(b"\x1f\x01\x00"), (0x1F, False, False, 2, 1))

    def test_truncated_header_raises(self) -> None:
        with self.assertRaises(StructuralError):
            unpack_header(b"\x81\x00")
        with self.assertRaises(StructuralError):
            unpack_header(b"\x01")
        with self.assertRaises(StructuralError):
            unpack_header(b"")

    def test_length_overflow_raises(self) -> None:
        with self.assertRaises(StructuralError):
            unpack_header(b"\x01\x05\x00")


if __name__ == "__main__":
    unittest.main()
