# utils/palette.py
from dataclasses import dataclass

import numpy as np

@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self):
        for name in ('r', 'g', 'b', 'a'):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
                raise ValueError(f"color channel {name}={v!r} must be an integer")
            object.__setattr__(self, name, int(v))
            if not (0 <= v <= 255):
                raise ValueError(f"color channel {name}={v} outside [0, 255]")

    def as_array(self) -> np.ndarray:
        return np.array([self.r, self.g, self.b, self.a], np.float64)

    def rgb(self):
        return [self.r, self.g, self.b]

    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

CYAN    = Color(0, 255, 255)
MAGENTA = Color(255, 0, 255)
YELLOW  = Color(255, 255, 0)
WHITE   = Color(255, 255, 255)
BLACK   = Color(0, 0, 0)

FULL_COLOR = (CYAN, MAGENTA, YELLOW, WHITE, BLACK)
MONOCHROME = (BLACK, WHITE)

def palette_for(monochrome: bool = False):
    return list(MONOCHROME if monochrome else FULL_COLOR)

def parse_color(text: str) -> Color:
    """'r,g,b' or 'r,g,b,a' -> Color."""
    parts = [p.strip() for p in str(text).split(',') if p.strip()]
    if len(parts) not in (3, 4):
        raise ValueError(f"expected 'r,g,b[,a]', got {text!r}")
    return Color(*(int(p) for p in parts))
