# window_viewer.py
# A pygame window that stands in for the terminal: same key characters in,
# same lines of text out.

import os
import pygame

class PygameWindow:
    """
    Draws each text frame into a window with a monospace font.

    Key presses are delivered as the characters they type, so the game cannot
    tell this apart from a terminal. Closing the window sends the quit key.
    Key repeat is switched on so a held key keeps producing events.
    """
    def __init__(self, columns=80, rows=26, font_size=16, quit_key='q'):
        self.columns = columns
        self.rows = rows
        self.FONT_SIZE = font_size
        self.FONT_NAME = 'JetBrainsMonoNL-Regular.ttf'
        self.COLORS = {"BLACK": (0, 0, 0), "WHITE": (255, 255, 255), "YELLOW": (255, 255, 0)}
        self.quit_key = quit_key
        self.screen = None
        self.font = None
        self.cell_width = 0
        self.cell_height = 0
        self._lines = []

    def __enter__(self):
        self.enable_raw_input()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disable_raw_input()
        return False

    @property
    def active(self):
        return self.screen is not None

    def load_font(self):
        font_path = os.path.join(os.path.dirname(__file__), self.FONT_NAME)
        try:
            return pygame.font.Font(font_path, self.FONT_SIZE)
        except (pygame.error, FileNotFoundError):
            return pygame.font.SysFont('monospace', self.FONT_SIZE)

    def enable_raw_input(self):
        if self.active:
            return
        pygame.init()
        self.font = self.load_font()
        self.cell_width, self.cell_height = self.font.size('M')
        self.screen = pygame.display.set_mode((self.columns * self.cell_width, self.rows * self.cell_height))
        pygame.display.set_caption("ASCII Patrol")
        pygame.key.set_repeat(120, 40)

    def disable_raw_input(self):
        if not self.active:
            return
        self.screen = None
        pygame.quit()

    def poll_pending_keys(self):
        keys = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                keys.append(self.quit_key)
            elif event.type == pygame.KEYDOWN and event.unicode:
                keys.append(event.unicode)
        return keys

    def clear_screen(self):
        self._lines = []

    def write_line(self, text):
        self._lines.append(text)

    def flush(self):
        self.screen.fill(self.COLORS["BLACK"])
        for row, text in enumerate(self._lines):
            # The last line is the status line.
            color = self.COLORS["YELLOW"] if row == len(self._lines) - 1 else self.COLORS["WHITE"]
            self.screen.blit(self.font.render(text, True, color), (0, row * self.cell_height))
        pygame.display.flip()
