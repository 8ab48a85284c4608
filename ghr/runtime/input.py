"""Low-level terminal input decoding.

Reads whatever bytes are available on stdin as one chunk, then splits the
chunk into SGR mouse reports and normalized key tokens. Mouse reports and
keys are decoded from the same chunk independently.
"""

from __future__ import annotations

import os
import re
import select
from dataclasses import dataclass

ESC_SEQUENCE_TIMEOUT_MS = 25
READ_CHUNK_BYTES = 4096

MOUSE_SEQUENCE_RE = re.compile(r"\x1b\[<(\d+);(\d+);(\d+)([mM])")
_CSI_RE = re.compile(r"\x1b\[([0-9;]*)([A-Za-z~])")
_SS3_RE = re.compile(r"\x1bO([A-Za-z])")

_CSI_FINAL_KEYS = {
    "A": "UP",
    "B": "DOWN",
    "C": "RIGHT",
    "D": "LEFT",
    "H": "HOME",
    "F": "END",
}
_CSI_TILDE_KEYS = {
    "1": "HOME",
    "7": "HOME",
    "4": "END",
    "8": "END",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
}
_CONTROL_KEYS = {
    "\t": "TAB",
    "\x7f": "BACKSPACE",
    "\x08": "BACKSPACE",
    "\x03": "CTRL_C",
    "\r": "ENTER",
    "\n": "ENTER",
}

WHEEL_UP = 64
WHEEL_DOWN = 65
LEFT_BUTTON = 0


@dataclass(frozen=True)
class MouseEvent:
    """One SGR mouse report; ``x``/``y`` are 1-based terminal cells."""

    code: int
    x: int
    y: int
    kind: str

    @property
    def is_press(self) -> bool:
        return self.kind == "M"


def _wait_readable(fd: int, timeout_ms: int | None) -> bool:
    timeout = None if timeout_ms is None else max(0.0, timeout_ms / 1000.0)
    ready, _, _ = select.select([fd], [], [], timeout)
    return bool(ready)


def _needs_more(data: bytes) -> bool:
    """Return whether ``data`` ends inside an escape sequence."""
    esc_at = data.rfind(b"\x1b")
    if esc_at < 0:
        return False
    tail = data[esc_at:]
    if tail == b"\x1b":
        return True
    if tail.startswith(b"\x1bO"):
        return len(tail) < 3
    if tail.startswith(b"\x1b["):
        # CSI ends at the first byte in the 0x40-0x7E range.
        return not any(0x40 <= byte <= 0x7E for byte in tail[2:])
    return False


def read_input_chunk(fd: int, timeout_ms: int | None = None) -> str:
    """Read all immediately available input from ``fd`` as text.

    Returns ``""`` when nothing arrives before ``timeout_ms``. A chunk that
    ends in the middle of an escape sequence waits briefly for the rest so
    a lone ESC keypress is still distinguishable from an arrow key.
    """
    if not _wait_readable(fd, timeout_ms):
        return ""
    data = os.read(fd, READ_CHUNK_BYTES)
    while data and _needs_more(data) and _wait_readable(fd, ESC_SEQUENCE_TIMEOUT_MS):
        more = os.read(fd, READ_CHUNK_BYTES)
        if not more:
            break
        data += more
    return data.decode("utf-8", errors="replace")


def parse_mouse_sequences(chunk: str) -> list[MouseEvent]:
    return [
        MouseEvent(code=int(code), x=int(x), y=int(y), kind=kind)
        for code, x, y, kind in MOUSE_SEQUENCE_RE.findall(chunk)
    ]


def strip_mouse_sequences(chunk: str) -> str:
    return MOUSE_SEQUENCE_RE.sub("", chunk)


def _decode_csi(params: str, final: str) -> str | None:
    if final == "~":
        return _CSI_TILDE_KEYS.get(params.split(";", 1)[0])
    return _CSI_FINAL_KEYS.get(final)


def decode_keys(chunk: str) -> list[str]:
    """Translate a raw input chunk into key tokens, ignoring mouse reports.

    Unknown escape sequences are consumed silently. A ``\\r\\n`` pair counts
    as a single ``ENTER``.
    """
    text = strip_mouse_sequences(chunk)
    keys: list[str] = []
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch == "\x1b":
            match = _CSI_RE.match(text, pos) or _SS3_RE.match(text, pos)
            if match is None:
                keys.append("ESC")
                pos += 1
                continue
            if match.re is _SS3_RE:
                token = _CSI_FINAL_KEYS.get(match.group(1))
            else:
                token = _decode_csi(match.group(1), match.group(2))
            if token is not None:
                keys.append(token)
            pos = match.end()
            continue

        if ch == "\r" and text.startswith("\r\n", pos):
            keys.append("ENTER")
            pos += 2
            continue

        token = _CONTROL_KEYS.get(ch)
        if token is not None:
            keys.append(token)
        elif ch.isprintable():
            keys.append(ch)
        pos += 1
    return keys


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "WHEEL_UP",
    "WHEEL_DOWN",
    "LEFT_BUTTON",
    "MouseEvent",
    "read_input_chunk",
    "parse_mouse_sequences",
    "strip_mouse_sequences",
    "decode_keys",
]
