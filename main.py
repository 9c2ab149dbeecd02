"""Run the TLV utilities from a source checkout.

    python main.py dump [-x] [-w] [-y] [-z] [-d N] [-H N] [-a] [-s] [--desc FILE] [files...]
    python main.py undump [files...] > out.tlv
"""

from PYTLVUTIL.CLI import main


if __name__ == '__main__':
    raise SystemExit(main())
