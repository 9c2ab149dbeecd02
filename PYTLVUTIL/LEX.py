"""PYTLVUTIL.LEX

This module implements the text tokenizer for the undump direction.

`TextTokenizer` is a byte-by-byte state machine. It captures the indentation
of every line verbatim and emits one `TlvLine` per record through the
`on_record` callback. Accepted lines:

    <indent>TLV[8|16][<tag>[,F][,N]]: "<string>" | <hex bytes> | <nothing>
    <indent><hex bytes>                     # headless, no header is written
    <indent># comment

Any unexpected character raises `FormatError`; there is no resynchronization.
"""

from __future__ import annotations

from typing import Callable, List

from PYTLVUTIL.COM import FormatError, StateMachine, TlvDefine, TlvLine

EOF = -1

_LF = 0x0A
_CR = 0x0D
_HEX = b"0123456789abcdefABCDEF"

_STRING_STATES = (
    StateMachine.DATA_STRING,
    StateMachine.DATA_STRING_ESC,
    StateMachine.DATA_STRING_DEC_1,
    StateMachine.DATA_STRING_DEC_2,
    StateMachine.DATA_STRING_DEC_3,
)


def _is_space(c: int) -> bool:
    return c == 0x20 or c == 0x09


def _is_digit(c: int) -> bool:
    return 0x30 <= c <= 0x39


def _is_hex(c: int) -> bool:
    return c >= 0 and c in _HEX


def _hex_value(c: int) -> int:
    return int(chr(c), 16)


class TextTokenizer:
    """Stream tokenizer for the TLV text form.

    Args:
        on_record: Callback invoked with every completed `TlvLine`.
        file_name: Name used in error messages.

    Notes:
        - Line numbers are 1-based and count every newline, including those
          of blank and comment lines.
        - `\\r` is ignored outside quoted strings.
    """

    def __init__(self, on_record: Callable[[TlvLine], None], file_name: str = "<stdin>"):
        self.on_record = on_record
        self.file_name = file_name
        self.line_nr = 1
        self._reset()

    def feed(self, data: bytes) -> None:
        for b in data:
            self.process_byte(b)

    def finish(self) -> None:
        """Signal end of input; commits a record left without a trailing newline."""

        self.process_byte(EOF)

    def process_byte(self, ch: int) -> None:
        """Feed one byte (0..255) or `EOF` into the state machine.

        Raises:
            FormatError: On any character the grammar does not allow here.
        """

        if ch == _CR and self.state not in _STRING_STATES:
            return

        # A state returns False to have the same character handled again by
        # the state it switched to.
        while not self._step(ch):
            pass

        if ch == _LF:
            self.line_nr += 1

    def _step(self, c: int) -> bool:
        st = self.state
        tlv = self.tlv

        if st == StateMachine.BEGIN:
            if c == _LF or c == EOF:
                return True
            self.state = StateMachine.INDENT
            return False

        if st == StateMachine.COMMENT:
            if c == _LF or c == EOF:
                self.state = StateMachine.BEGIN
            return True

        if st == StateMachine.INDENT:
            if _is_space(c):
                self.indent.append(c)
                return True
            if c == ord('#'):
                self.state = StateMachine.COMMENT
                self.indent = bytearray()
                return True
            if c == _LF or c == EOF:
                # Whitespace only.
                self._reset()
                return True
            self.state = StateMachine.RAW_CONTENT if _is_hex(c) else StateMachine.TLV_T
            return False

        if st == StateMachine.RAW_CONTENT:
            tlv.headless = True
            self.state = StateMachine.DATA_HEX_1
            return False

        if st == StateMachine.TLV_T:
            self._expect(c, 'T')
            self.state = StateMachine.TLV_L
            return True

        if st == StateMachine.TLV_L:
            self._expect(c, 'L')
            self.state = StateMachine.TLV_V
            return True

        if st == StateMachine.TLV_V:
            self._expect(c, 'V')
            self.state = StateMachine.FORCE
            return True

        if st == StateMachine.FORCE:
            self.state = StateMachine.BRACKET_BEGIN
            if c == ord('1'):
                self.state = StateMachine.FORCE_16
                return True
            if c == ord('8'):
                tlv.force = 8
                return True
            return False

        if st == StateMachine.FORCE_16:
            self._expect(c, '6')
            tlv.force = 16
            self.state = StateMachine.BRACKET_BEGIN
            return True

        if st == StateMachine.BRACKET_BEGIN:
            if _is_space(c):
                return True
            self._expect(c, '[')
            self.state = StateMachine.TAG_BEGIN
            return True

        if st == StateMachine.TAG_BEGIN:
            if _is_space(c):
                return True
            if not _is_hex(c):
                self._error("Expected hex tag value.")
            self.state = StateMachine.TAG
            return False

        if st == StateMachine.TAG:
            if _is_hex(c):
                tlv.tag = (tlv.tag << 4) | _hex_value(c)
                self.tag_digits += 1
                if tlv.tag > TlvDefine.TLV16_MAX_TAG:
                    self._error("TLV tag value may not exceed 0x1fff")
                return True
            if c in (ord('x'), ord('X')) and self.tag_digits == 1 and tlv.tag == 0 and not self.tag_prefixed:
                self.tag_prefixed = True
                self.tag_digits = 0
                self.state = StateMachine.TAG_HEX_PREFIX
                return True
            self.state = StateMachine.FLAG_START
            return False

        if st == StateMachine.TAG_HEX_PREFIX:
            if not _is_hex(c):
                self._error("Expected hex tag value.")
            self.state = StateMachine.TAG
            return False

        if st == StateMachine.FLAG_START:
            if _is_space(c):
                return True
            if c == ord(','):
                self.state = StateMachine.FLAG
                return True
            self.state = StateMachine.FLAG_END
            return False

        if st == StateMachine.FLAG:
            if _is_space(c):
                return True
            if c in (ord('F'), ord('f')):
                tlv.is_forward = True
            elif c in (ord('N'), ord('n')):
                tlv.is_non_critical = True
            else:
                self._error("Unexpected flag.")
            self.state = StateMachine.FLAG_END
            return True

        if st == StateMachine.FLAG_END:
            if _is_space(c):
                return True
            self.state = StateMachine.FLAG_START if c == ord(',') else StateMachine.BRACKET_END
            return False

        if st == StateMachine.BRACKET_END:
            if _is_space(c):
                return True
            self._expect(c, ']')
            self.state = StateMachine.COLON
            return True

        if st == StateMachine.COLON:
            if _is_space(c):
                return True
            self._expect(c, ':')
            self.state = StateMachine.DATA
            return True

        if st == StateMachine.DATA:
            if _is_space(c):
                return True
            if c == ord('"'):
                self.state = StateMachine.DATA_STRING
                return True
            self.state = StateMachine.END if c == _LF or c == EOF else StateMachine.DATA_HEX_1
            return False

        if st == StateMachine.DATA_STRING:
            if c == ord('\\'):
                self.state = StateMachine.DATA_STRING_ESC
            elif c == ord('"'):
                self.state = StateMachine.END
            elif c == EOF:
                self._error("Unexpected end of file.")
            else:
                self._append(c)
            return True

        if st == StateMachine.DATA_STRING_ESC:
            if _is_digit(c):
                self.state = StateMachine.DATA_STRING_DEC_1
                return False
            if c == EOF:
                self._error("Unexpected end of file.")
            self._append(c)
            self.state = StateMachine.DATA_STRING
            return True

        if st == StateMachine.DATA_STRING_DEC_1:
            self.dec = c - 0x30
            self.state = StateMachine.DATA_STRING_DEC_2
            return True

        if st == StateMachine.DATA_STRING_DEC_2:
            if _is_digit(c):
                self.dec = self.dec * 10 + (c - 0x30)
                self.state = StateMachine.DATA_STRING_DEC_3
                return True
            self._append_dec()
            self.state = StateMachine.DATA_STRING
            return False

        if st == StateMachine.DATA_STRING_DEC_3:
            self.state = StateMachine.DATA_STRING
            if _is_digit(c):
                self.dec = self.dec * 10 + (c - 0x30)
                self._append_dec()
                return True
            self._append_dec()
            return False

        if st == StateMachine.DATA_HEX_1:
            if _is_space(c):
                return True
            if _is_hex(c):
                self.nibble = _hex_value(c)
                self.state = StateMachine.DATA_HEX_2
                return True
            self.state = StateMachine.END
            return False

        if st == StateMachine.DATA_HEX_2:
            if _is_space(c):
                return True
            if not _is_hex(c):
                self._error("Odd number of hex digits.")
            self._append((self.nibble << 4) | _hex_value(c))
            self.state = StateMachine.DATA_HEX_1
            return True

        if st == StateMachine.END:
            if _is_space(c):
                return True
            if c != _LF and c != EOF:
                self._error("Unexpected character.")
            self._commit()
            return True

        self._error("Unknown error.")
        return True

    def _expect(self, c: int, want: str) -> None:
        if c != ord(want):
            self._error(f"Expected '{want}'")

    def _append(self, b: int) -> None:
        if len(self.tlv.data) >= TlvDefine.TLV16_MAX_LENGTH:
            self._error("Value too large.")
        self.tlv.data.append(b)

    def _append_dec(self) -> None:
        if self.dec > 0xFF:
            self._error("Decimal escape value may not exceed 255.")
        self._append(self.dec)

    def _commit(self) -> None:
        self.tlv.indent = bytes(self.indent)
        self.tlv.line_nr = self.line_nr
        rec = self.tlv
        self._reset()
        self.on_record(rec)

    def _reset(self) -> None:
        self.state = StateMachine.BEGIN
        self.tlv = TlvLine()
        self.indent = bytearray()
        self.tag_digits = 0
        self.tag_prefixed = False
        self.nibble = 0
        self.dec = 0

    def _error(self, msg: str) -> None:
        raise FormatError(msg, self.file_name, self.line_nr)


def tokenize(text: bytes, file_name: str = "<stdin>") -> List[TlvLine]:
    """Tokenize a complete text buffer.

    Args:
        text: The whole input, as bytes.
        file_name: Name used in error messages.

    Returns:
        The records in input order; levels are not assigned yet.

    Raises:
        FormatError: On the first grammar violation.
    """

    out: List[TlvLine] = []
    lexer = TextTokenizer(out.append, file_name)
    lexer.feed(text)
    lexer.finish()
    return out
