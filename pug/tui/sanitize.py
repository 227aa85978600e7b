"""Keeping ANSI colours intact across line breaks."""

from __future__ import annotations

_ESC = 0x1B
_NEWLINE = 0x0A
_RESET = b"\x1b[0m"


def _is_terminator(c: int) -> bool:
    return 0x40 <= c <= 0x5A or 0x61 <= c <= 0x7A


def sanitize_colors(data: bytes) -> bytes:
    """Reset the active colour before each newline and restore it after.

    Only the most recent colour sequence is carried over; a reset sequence
    or a sequence that is not a colour code stops the carrying.
    """
    out = bytearray()
    last = bytearray()
    in_sequence = False
    for c in bytes(data):
        if c == _ESC:
            in_sequence = True
            last = bytearray([c])
        elif in_sequence:
            last.append(c)
            if _is_terminator(c):
                in_sequence = False
                if last.endswith(b"[0m") or c != ord("m"):
                    last.clear()
        elif c == _NEWLINE and last:
            out += _RESET
            out.append(c)
            out += last
            continue
        out.append(c)
    return bytes(out)