"""Pan / zoom state for the diagram canvas.

The canvas is drawn through one transform, ``translate(offset)`` then
``scale(scale)``, so a world point ``w`` lands on screen at
``w * scale + offset``. ``ViewportState`` is an immutable snapshot; the
controller replaces it on every input event and hands the new snapshot to
its ``on_change`` callback.

Zoom is anchored at the world origin by default. Pass
``anchor_zoom_to_pointer=True`` to keep the point under the cursor fixed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Optional

from config import settings
from gui.diagram.geometry import Point

__all__ = ["ViewportState", "ViewportController", "clamp_scale", "MouseButton"]

_MAX_ZOOM_EXPONENT = 50.0


def clamp_scale(value: float) -> float:
    if math.isnan(value):
        return settings.MIN_SCALE
    if value < settings.MIN_SCALE:
        return settings.MIN_SCALE
    if value > settings.MAX_SCALE:
        return settings.MAX_SCALE
    return value


class MouseButton:
    LEFT = 0
    MIDDLE = 1
    RIGHT = 2


@dataclass(frozen=True, slots=True)
class ViewportState:
    scale: float = 1.0
    offset: Point = Point(0.0, 0.0)

    def world_to_screen(self, p: Point) -> Point:
        return Point(p.x * self.scale + self.offset.x, p.y * self.scale + self.offset.y)

    def screen_to_world(self, p: Point) -> Point:
        return Point((p.x - self.offset.x) / self.scale, (p.y - self.offset.y) / self.scale)

    @property
    def zoom_percent(self) -> int:
        return round(self.scale * 100)


class ViewportController:
    def __init__(
        self,
        state: ViewportState | None = None,
        *,
        sensitivity: float = settings.ZOOM_SENSITIVITY,
        anchor_zoom_to_pointer: bool = False,
        on_change: Optional[Callable[[ViewportState], None]] = None,
    ) -> None:
        self._state = state or ViewportState()
        self.sensitivity = sensitivity
        self.anchor_zoom_to_pointer = anchor_zoom_to_pointer
        self.on_change = on_change
        self._panning = False
        self._last: Optional[Point] = None

    @property
    def state(self) -> ViewportState:
        return self._state

    @property
    def is_panning(self) -> bool:
        return self._panning

    def _set(self, state: ViewportState) -> ViewportState:
        if state != self._state:
            self._state = state
            if self.on_change is not None:
                self.on_change(state)
        return self._state

    # Zoom -------------------------------------------------------------
    def set_scale(self, scale: float, anchor: Optional[Point] = None) -> ViewportState:
        new_scale = clamp_scale(scale)
        offset = self._state.offset
        if anchor is not None and self.anchor_zoom_to_pointer:
            world = self._state.screen_to_world(anchor)
            offset = Point(anchor.x - world.x * new_scale, anchor.y - world.y * new_scale)
        return self._set(ViewportState(scale=new_scale, offset=offset))

    def zoom_in(self) -> ViewportState:
        return self.set_scale(self._state.scale + settings.ZOOM_STEP)

    def zoom_out(self) -> ViewportState:
        return self.set_scale(self._state.scale - settings.ZOOM_STEP)

    def reset(self) -> ViewportState:
        return self._set(ViewportState())

    # Wheel ------------------------------------------------------------
    def wheel(
        self,
        delta_x: float,
        delta_y: float,
        *,
        zoom_modifier: bool,
        anchor: Optional[Point] = None,
    ) -> ViewportState:
        if zoom_modifier:
            # math.exp overflows past ~709
            exponent = -delta_y * self.sensitivity
            exponent = max(-_MAX_ZOOM_EXPONENT, min(_MAX_ZOOM_EXPONENT, exponent))
            return self.set_scale(self._state.scale * math.exp(exponent), anchor)
        offset = self._state.offset
        return self._set(
            replace(self._state, offset=Point(offset.x - delta_x, offset.y - delta_y))
        )

    # Pointer panning ----------------------------------------------------
    def press(self, button: int, x: float, y: float, *, shift: bool = False) -> bool:
        """Start panning on middle press or shift + left press."""
        if button == MouseButton.MIDDLE or (button == MouseButton.LEFT and shift):
            self._panning = True
            self._last = Point(x, y)
            return True
        return False

    def move(self, x: float, y: float) -> ViewportState:
        if not self._panning or self._last is None:
            return self._state
        dx = x - self._last.x
        dy = y - self._last.y
        self._last = Point(x, y)
        offset = self._state.offset
        return self._set(replace(self._state, offset=Point(offset.x + dx, offset.y + dy)))

    def release(self) -> None:
        self._panning = False
        self._last = None

    leave = release
