"""The input system: actions, bindings and the GLFW-style input callbacks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .bindings import (
    Action,
    BindingInstance,
    CompositeBinding,
    Constituent,
    MasterBinding,
    default_bindings,
)
from .console import check, log_error
from .events import Event
from .inputdefs import (
    LAST_BINDING,
    Component,
    Key,
    Mouse,
    Output,
    Precision,
    key_from_glfw,
    mouse_from_glfw,
)

Source = Union[Key, Mouse]


@dataclass
class DeviceState:
    """The current state of keyboard and mouse that bindings poll."""

    pressed_keys: Set[int] = field(default_factory=set)
    pressed_buttons: Set[int] = field(default_factory=set)
    mouse_position: Tuple[float, float] = (0.0, 0.0)
    mouse_delta: Tuple[float, float] = (0.0, 0.0)

    def get_key(self, code: int) -> int:
        return int(code in self.pressed_keys)

    def get_mouse_button(self, code: int) -> int:
        return int(code in self.pressed_buttons)


def _first_frame() -> int:
    return 1


class InputSystem:
    """Owns the binding table, the named actions and the bind context."""

    def __init__(
        self,
        device: Optional[DeviceState] = None,
        frame_counter: Optional[Callable[[], int]] = None,
    ) -> None:
        self.device = device if device is not None else DeviceState()
        self.frame_counter = frame_counter or _first_frame
        self.raw_key_input_received = Event()
        self.raw_mouse_input_received = Event()
        self.bindings: List[MasterBinding] = default_bindings(self.device, self.frame_counter)
        self.actions: Dict[str, Action] = {}
        self.composites: List[CompositeBinding] = []
        self._context: Optional[Action] = None
        check(
            len(self.bindings) == LAST_BINDING + 1,
            f"Misaligned bindings count. Count: {len(self.bindings)} "
            f"Expected: {LAST_BINDING + 1}",
        )

    @property
    def context(self) -> Optional[Action]:
        """The action that bindings are attached to when none is given."""
        return self._context

    def key_callback(self, window: object, glfw_key: int, scan_code: int, action: int, mods: int) -> None:
        """Handle a key event as delivered by GLFW."""
        key = key_from_glfw(glfw_key)
        self.raw_key_input_received.invoke(window, glfw_key, scan_code, action, mods)
        self.bindings[key].handle_event(action, mods)

    def mouse_button_callback(self, window: object, glfw_mouse: int, action: int, mods: int) -> None:
        """Handle a mouse button event as delivered by GLFW."""
        mouse = mouse_from_glfw(glfw_mouse)
        self.raw_mouse_input_received.invoke(window, glfw_mouse, action, mods)
        self.bindings[mouse].handle_event(action, mods)

    def update_mouse(self, position: Iterable[float]) -> None:
        """Record a new cursor position and the movement since the last one."""
        x, y = (float(v) for v in position)
        old_x, old_y = self.device.mouse_position
        self.device.mouse_delta = (x - old_x, y - old_y)
        self.device.mouse_position = (x, y)

    def reset(self) -> None:
        """Forget every action, composite, binding instance and the context."""
        self.actions.clear()
        self.composites.clear()
        self._context = None
        for master in self.bindings:
            master.clear_instances()

    def create_action(
        self, name: str, data_type: Output, precision: Precision = Precision.SINGLE
    ) -> Action:
        """Create a named action; RuntimeError if the name is taken."""
        if name in self.actions:
            log_error(f"Action '{name}' already exists.", True)
        action = Action(data_type, precision)
        self.actions[name] = action
        return action

    def get_action(self, name: str) -> Action:
        """Return a named action; RuntimeError if there is none."""
        action = self.actions.get(name)
        if action is None:
            log_error(f"Action '{name}' does not exist.", True)
        return action

    def _master(self, source: Source) -> MasterBinding:
        if not isinstance(source, (Key, Mouse)):
            raise TypeError(f"expected a Key or Mouse input, got {source!r}")
        return self.bindings[int(source)]

    def _target(self, bind_to: Optional[Action]) -> Action:
        target = bind_to if bind_to is not None else self._context
        check(
            target is not None,
            "Context cannot be null when no action is given. Use set_bind_context first.",
        )
        return target

    def create_binding(self, source: Source, bind_to: Optional[Action] = None) -> BindingInstance:
        """Bind an input to an action, or to the current context."""
        target = self._target(bind_to)
        return self._master(source).create_instance(target)

    def create_constituent(self, source: Source, components: Iterable[Component]) -> Constituent:
        """Make an unbound instance of an input for use in a composite."""
        instance = self._master(source).create_unbound_instance()
        return Constituent(instance, tuple(components))

    def create_composite_binding(
        self,
        data_type: Output,
        precision: Precision,
        constituents: Sequence[Constituent],
        bind_to: Optional[Action] = None,
    ) -> CompositeBinding:
        """Combine constituents into one binding on an action or the context."""
        target = self._target(bind_to)
        composite = CompositeBinding(target, data_type, precision, constituents, self.frame_counter)
        self.composites.append(composite)
        target.add_binding(composite)
        return composite

    def set_bind_context(self, action: Optional[Action]) -> None:
        """Set the action that context-less bindings attach to."""
        self._context = action