"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle, alternate-screen switching, and mouse toggles.
Mouse reporting is off until the event loop asks for it.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty

ENTER_ALT_SCREEN = b"\x1b[?1049h\x1b[?25l"
EXIT_ALT_SCREEN = b"\x1b[?25h\x1b[?1049l"
MOUSE_ON = b"\x1b[?1000h\x1b[?1006h"
MOUSE_OFF = b"\x1b[?1000l\x1b[?1006l"


class TerminalController:
    """Manage terminal mode transitions and SGR mouse reporting."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._mouse_reporting_enabled = False

    @property
    def mouse_reporting_enabled(self) -> bool:
        return self._mouse_reporting_enabled

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_ALT_SCREEN)

    def disable_tui_mode(self) -> None:
        """Restore normal terminal state, turning mouse reporting off first."""
        self.set_mouse_reporting(False)
        os.write(self.stdout_fd, EXIT_ALT_SCREEN)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def set_mouse_reporting(self, enabled: bool) -> None:
        """Toggle terminal mouse tracking without changing other TUI state."""
        desired = bool(enabled)
        if desired == self._mouse_reporting_enabled:
            return
        os.write(self.stdout_fd, MOUSE_ON if desired else MOUSE_OFF)
        self._mouse_reporting_enabled = desired

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield self
        finally:
            self.disable_tui_mode()


__all__ = [
    "MOUSE_ON",
    "MOUSE_OFF",
    "TerminalController",
]
