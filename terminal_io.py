# terminal_io.py
# Owns the controlling terminal for the length of a game: unbuffered key input,
# full-screen redraws, and guaranteed restoration of the original mode.

import codecs
import os
import select
import signal
import sys
import termios
import tty

CLEAR_SCREEN = "\x1b[2J\x1b[H"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"

class TerminalError(RuntimeError):
    """Raised when the terminal cannot be switched into or out of raw input mode."""
    pass


class TerminalSession:
    """
    A scoped raw-input session on a POSIX terminal.

    Use it as a context manager: entering saves the current termios attributes
    and switches to cbreak mode (keys arrive immediately, without echo); leaving
    restores the saved attributes exactly once, whichever way the block exits.
    While the session is open, SIGTERM is turned into SystemExit so that a
    killed game still unwinds through the restore.
    """
    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self._fd = None
        self._saved_attrs = None
        self._previous_sigterm = None
        self._sigterm_installed = False
        self._decoder = codecs.getincrementaldecoder('utf-8')(errors='ignore')
        self.restore_count = 0

    def __enter__(self):
        self.enable_raw_input()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disable_raw_input()
        return False

    @property
    def active(self):
        return self._saved_attrs is not None

    def enable_raw_input(self):
        if self.active:
            return
        try:
            fd = self.stdin.fileno()
        except (AttributeError, ValueError, OSError) as e:
            raise TerminalError(f"Standard input is not a usable terminal: {e}") from e
        if not os.isatty(fd):
            raise TerminalError("Standard input is not a terminal; run the game from an interactive shell.")

        try:
            saved = termios.tcgetattr(fd)
        except termios.error as e:
            raise TerminalError(f"Could not read terminal attributes: {e}") from e
        try:
            tty.setcbreak(fd)
        except termios.error as e:
            termios.tcsetattr(fd, termios.TCSANOW, saved)
            raise TerminalError(f"Could not enable raw input: {e}") from e

        self._fd = fd
        self._saved_attrs = saved
        self._install_sigterm_handler()
        self.stdout.write(HIDE_CURSOR)
        self.stdout.flush()

    def disable_raw_input(self):
        if not self.active:
            return
        saved, self._saved_attrs = self._saved_attrs, None
        self._restore_sigterm_handler()
        self.stdout.write(SHOW_CURSOR)
        self.stdout.flush()
        try:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, saved)
        except termios.error as e:
            raise TerminalError(f"Could not restore terminal attributes: {e}") from e
        finally:
            self.restore_count += 1

    def poll_pending_keys(self):
        """Returns every key character typed since the last poll without blocking."""
        if not self.active:
            raise TerminalError("Terminal session is not active.")
        keys = []
        while True:
            ready, _, _ = select.select([self._fd], [], [], 0)
            if not ready:
                break
            data = os.read(self._fd, 1024)
            if not data:
                break
            keys.extend(self._decoder.decode(data))
        return keys

    def clear_screen(self):
        self.stdout.write(CLEAR_SCREEN)

    def write_line(self, text):
        self.stdout.write(text + "\n")

    def flush(self):
        self.stdout.flush()

    def _install_sigterm_handler(self):
        try:
            self._previous_sigterm = signal.signal(signal.SIGTERM, _raise_system_exit)
        except ValueError:
            # Not the main thread; signals cannot be handled here.
            return
        self._sigterm_installed = True

    def _restore_sigterm_handler(self):
        if not self._sigterm_installed:
            return
        signal.signal(signal.SIGTERM, self._previous_sigterm if self._previous_sigterm is not None else signal.SIG_DFL)
        self._previous_sigterm = None
        self._sigterm_installed = False


def _raise_system_exit(signum, frame):
    raise SystemExit(128 + signum)
