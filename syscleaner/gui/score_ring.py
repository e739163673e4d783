"""Animated performance score ring: an animation model and a Tk widget for it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional

RGB = tuple[int, int, int]

ANIMATION_STEP = 0.8
FRAME_DELAY_MS = 15
BASE_STROKE_WIDTH = 10.0

GREEN: RGB = (50, 205, 50)
YELLOW: RGB = (255, 215, 0)
ORANGE: RGB = (255, 140, 0)
RED: RGB = (220, 30, 30)


def clamp_score(score: int) -> int:
    """Clamp a score to the range 0..100."""
    return max(0, min(100, int(score)))


def color_for_score(score: int) -> RGB:
    """Return the ring colour for a score as an (r, g, b) tuple."""
    if score >= 80:
        return GREEN
    if score >= 61:
        return YELLOW
    if score >= 31:
        return ORANGE
    return RED


def _to_hex(color: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


@dataclass
class ScoreRing:
    """Target score and the value currently shown while animating towards it."""

    score: int = 0
    display_score: float = 0.0

    def set_score(self, score: int) -> None:
        """Set the target score, clamped to 0..100."""
        self.score = clamp_score(score)

    def step(self) -> bool:
        """Move the shown value one step towards the target.

        Returns False once the shown value has settled on the target.
        """
        target = float(self.score)
        if abs(self.display_score - target) <= 0.5:
            self.display_score = target
            return False
        if self.display_score < target:
            self.display_score = min(self.display_score + ANIMATION_STEP, target)
        else:
            self.display_score = max(self.display_score - ANIMATION_STEP, target)
        return True

    def frames(self) -> Iterator[float]:
        """Yield each shown value until the animation settles, ending on the target."""
        while self.step():
            yield self.display_score
        yield self.display_score

    @property
    def text(self) -> str:
        """Label shown in the middle of the ring."""
        if self.display_score > 0:
            return str(int(self.display_score))
        return "--"

    @property
    def color(self) -> RGB:
        """Colour for the value currently shown."""
        return color_for_score(int(self.display_score))

    @property
    def stroke_width(self) -> float:
        """Ring thickness; it grows as the shown value rises."""
        fraction = self.display_score / 100.0
        if fraction > 0:
            return BASE_STROKE_WIDTH + fraction * 5
        return BASE_STROKE_WIDTH


class ScoreRingWidget:
    """A Tk canvas that draws a ScoreRing and animates score changes."""

    def __init__(self, master: Any, size: int = 200) -> None:
        import tkinter as tk

        self.ring = ScoreRing()
        self.size = size
        self.canvas = tk.Canvas(
            master, width=size, height=size, bg="#121212", highlightthickness=0
        )
        pad = 15
        color = _to_hex(self.ring.color)
        self._oval = self.canvas.create_oval(
            pad, pad, size - pad, size - pad, outline=color, width=self.ring.stroke_width
        )
        self._text = self.canvas.create_text(
            size / 2,
            size / 2,
            text=self.ring.text,
            fill="#ffffff",
            font=("TkDefaultFont", 36, "bold"),
        )
        self._frames: Optional[Iterator[float]] = None

    def set_score(self, score: int) -> None:
        """Set a new target score and animate towards it."""
        self.ring.set_score(score)
        if self._frames is None:
            self._frames = self.ring.frames()
            self._advance()

    def _advance(self) -> None:
        if self._frames is None:
            return
        try:
            next(self._frames)
        except StopIteration:
            self._frames = None
            self._redraw()
            return
        self._redraw()
        self.canvas.after(FRAME_DELAY_MS, self._advance)

    def _redraw(self) -> None:
        color = _to_hex(self.ring.color)
        self.canvas.itemconfigure(self._oval, outline=color, width=self.ring.stroke_width)
        self.canvas.itemconfigure(self._text, text=self.ring.text, fill=color)