"""Pointer, touch and wheel gesture handling."""

from .controller import GestureController
from .events import PointerEvent, TouchEvent, WheelEvent
from .states import IDLE, Dragging, GestureState, Idle, Pinching, Resizing, Rotating

__all__ = [
    'GestureController',
    'PointerEvent',
    'TouchEvent',
    'WheelEvent',
    'GestureState',
    'IDLE',
    'Idle',
    'Dragging',
    'Resizing',
    'Rotating',
    'Pinching',
]
