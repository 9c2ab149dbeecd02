"""
Shared configuration (C & Python compatible).
Same layout as the tlvutil config header. Python will parse #define lines.
"""
# Debug control
# define lines kept verbatim for easier sync
#define TLV_DEBUG_ENABLE 0  /* 1: report group flushes on the error channel; 0: disable */

# Header limits
#define TLV8_MAX_TAG        0x1F
#define TLV8_MAX_LENGTH     0xFF
#define TLV16_MAX_TAG       0x1FFF
#define TLV16_MAX_LENGTH    0xFFFF
#define TLV8_HEADER_LENGTH  2
#define TLV16_HEADER_LENGTH 4

# Scratch buffer for one top-level TLV (payload + largest header)
#define TLV_SCRATCH_SIZE    0x10003

# Dump output
#define DUMP_INDENT_LEN     4
#define DUMP_WRAP_HEX_CHARS 64
#define DUMP_DEC_MAX_BYTES  8

# Undump record stack
#define STACK_INITIAL_SIZE  100
#define STACK_INCREMENT     100
#define STACK_MAX_SIZE      65536

# Auto loader: convert #define lines to Python variables
import re as _re

with open(__file__, 'r', encoding='utf-8') as _f:
    for _line in _f:
        _m = _re.match(r'^#define\s+(\w+)\s+(0x[0-9A-Fa-f]+|\d+)', _line)
        if _m:
            globals()[_m.group(1)] = int(_m.group(2), 0)
for _sym in ['_re', '_f', '_line', '_m']:
    globals().pop(_sym, None)
globals().pop('_sym', None)
