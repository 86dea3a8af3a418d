"""Input identifiers and the mapping from GLFW codes onto them."""

from __future__ import annotations

from enum import IntEnum
from string import ascii_uppercase
from types import MappingProxyType
from typing import Mapping

_KEY_NAMES = [
    "ESCAPE",
    *(f"F{n}" for n in range(1, 26)),
    "PRINT_SCREEN", "SCROLL_LOCK", "PAUSE", "GRAVE",
    *(f"ALPHA{n}" for n in range(1, 10)), "ALPHA0",
    "MINUS", "EQUAL", "BACKSPACE", "INSERT", "HOME", "PAGE_UP",
    "TAB", *"QWERTYUIOP", "BRACKET_LEFT", "BRACKET_RIGHT", "BACKSLASH",
    "DELETE", "END", "PAGE_DOWN",
    "CAPS_LOCK", *"ASDFGHJKL", "SEMICOLON", "APOSTROPHE", "ENTER",
    "SHIFT_LEFT", *"ZXCVBNM", "COMMA", "PERIOD", "SLASH", "SHIFT_RIGHT",
    "CONTROL_LEFT", "SUPER_LEFT", "ALT_LEFT", "SPACE", "ALT_RIGHT",
    "SUPER_RIGHT", "MENU", "CONTROL_RIGHT",
    "UP", "DOWN", "LEFT", "RIGHT",
    "NUM_LOCK", "KEYPAD_SLASH", "KEYPAD_ASTERISK", "KEYPAD_MINUS",
    "KEYPAD7", "KEYPAD8", "KEYPAD9", "KEYPAD_PLUS",
    "KEYPAD4", "KEYPAD5", "KEYPAD6",
    "KEYPAD1", "KEYPAD2", "KEYPAD3", "KEYPAD_ENTER",
    "KEYPAD0", "KEYPAD_PERIOD",
]

Key = IntEnum("Key", _KEY_NAMES, start=0)
Key.__doc__ = "Keyboard keys; the value is the key's index in the binding table."

Mouse = IntEnum(
    "Mouse",
    [
        "BUTTON_LEFT", "BUTTON_RIGHT", "BUTTON_MIDDLE",
        "BUTTON4", "BUTTON5", "BUTTON6", "BUTTON7", "BUTTON8",
        "POSITION", "DELTA",
    ],
    start=len(Key),
)
Mouse.__doc__ = "Mouse inputs; indices continue after the keyboard keys."

LAST_BINDING = int(Mouse.DELTA)


class Output(IntEnum):
    """Shape of an input's data: the number of components."""

    SCALAR = 1
    VECTOR2 = 2
    VECTOR3 = 3


class Precision(IntEnum):
    """Floating-point width of an input's data, in bytes."""

    SINGLE = 4
    DOUBLE = 8


class Component(IntEnum):
    """A signed axis of a composite output."""

    NEG_X = 0
    POS_X = 1
    NEG_Y = 2
    POS_Y = 3
    NEG_Z = 4
    POS_Z = 5

    @property
    def axis(self) -> int:
        return self.value // 2

    @property
    def sign(self) -> int:
        return 1 if self.value % 2 else -1


class KeyAction(IntEnum):
    """GLFW key and button actions."""

    RELEASE = 0
    PRESS = 1
    REPEAT = 2


def _build_key_table() -> Mapping[int, "Key"]:
    table = {
        256: Key.ESCAPE,
        283: Key.PRINT_SCREEN,
        281: Key.SCROLL_LOCK,
        284: Key.PAUSE,
        96: Key.GRAVE,
        45: Key.MINUS,
        61: Key.EQUAL,
        259: Key.BACKSPACE,
        260: Key.INSERT,
        268: Key.HOME,
        266: Key.PAGE_UP,
        258: Key.TAB,
        91: Key.BRACKET_LEFT,
        93: Key.BRACKET_RIGHT,
        92: Key.BACKSLASH,
        261: Key.DELETE,
        269: Key.END,
        267: Key.PAGE_DOWN,
        280: Key.CAPS_LOCK,
        59: Key.SEMICOLON,
        39: Key.APOSTROPHE,
        257: Key.ENTER,
        340: Key.SHIFT_LEFT,
        44: Key.COMMA,
        46: Key.PERIOD,
        47: Key.SLASH,
        344: Key.SHIFT_RIGHT,
        341: Key.CONTROL_LEFT,
        343: Key.SUPER_LEFT,
        342: Key.ALT_LEFT,
        32: Key.SPACE,
        346: Key.ALT_RIGHT,
        347: Key.SUPER_RIGHT,
        348: Key.MENU,
        345: Key.CONTROL_RIGHT,
        265: Key.UP,
        264: Key.DOWN,
        263: Key.LEFT,
        262: Key.RIGHT,
        282: Key.NUM_LOCK,
        331: Key.KEYPAD_SLASH,
        332: Key.KEYPAD_ASTERISK,
        333: Key.KEYPAD_MINUS,
        334: Key.KEYPAD_PLUS,
        335: Key.KEYPAD_ENTER,
        330: Key.KEYPAD_PERIOD,
    }
    table.update({290 + n: Key[f"F{n + 1}"] for n in range(25)})
    table.update({ord(str(d)): Key[f"ALPHA{d}"] for d in range(10)})
    table.update({ord(c): Key[c] for c in ascii_uppercase})
    table.update({320 + d: Key[f"KEYPAD{d}"] for d in range(10)})
    return MappingProxyType(table)


GLFW_TO_KEY: Mapping[int, "Key"] = _build_key_table()
GLFW_TO_MOUSE: Mapping[int, "Mouse"] = MappingProxyType(
    {button: Mouse(Mouse.BUTTON_LEFT + button) for button in range(8)}
)


def key_from_glfw(code: int) -> "Key":
    """Return the key for a GLFW key code; KeyError if it is not mapped."""
    try:
        return GLFW_TO_KEY[code]
    except KeyError:
        raise KeyError(f"GLFW key code {code} has no mapped key") from None


def mouse_from_glfw(code: int) -> "Mouse":
    """Return the mouse input for a GLFW button code; KeyError if unmapped."""
    try:
        return GLFW_TO_MOUSE[code]
    except KeyError:
        raise KeyError(f"GLFW mouse button {code} has no mapped input") from None