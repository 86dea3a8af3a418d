"""Input bindings: raw device bindings, their instances, composites and actions."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence, Tuple, Union

from .console import check, log_error
from .events import Event
from .inputdefs import (
    GLFW_TO_KEY,
    GLFW_TO_MOUSE,
    Component,
    Key,
    KeyAction,
    Output,
    Precision,
)

Value = Union[float, Tuple[float, ...]]
FrameCounter = Callable[[], int]


def _first_frame() -> int:
    return 1


def _round(value: float, precision: Precision) -> float:
    if precision == Precision.SINGLE:
        return struct.unpack("f", struct.pack("f", value))[0]
    return float(value)


def _components(value: Value) -> Tuple[float, ...]:
    if isinstance(value, (int, float)):
        return (float(value),)
    return tuple(float(v) for v in value)


def _shape(components: Sequence[float], data_type: Output, precision: Precision) -> Value:
    values = tuple(_round(c, precision) for c in components)
    return values[0] if data_type == Output.SCALAR else values


def _zero(data_type: Output, precision: Precision) -> Value:
    return _shape([0.0] * int(data_type), data_type, precision)


def _magnitude(value: Value) -> float:
    return sum(c * c for c in _components(value))


class _Device(Protocol):
    mouse_position: Tuple[float, float]
    mouse_delta: Tuple[float, float]

    def get_key(self, code: int) -> int: ...

    def get_mouse_button(self, code: int) -> int: ...


@dataclass
class InputEventData:
    """What an action's callbacks receive when a bound input changes."""

    binding: "BindingInstance"
    action: int
    mods: int = 0


class MasterBinding:
    """The single source of data for one physical input, shared by its instances."""

    def __init__(
        self,
        data_type: Output,
        precision: Precision,
        poller: Callable[[], Value],
        frame_counter: FrameCounter = _first_frame,
    ) -> None:
        self.data_type = Output(data_type)
        self.precision = Precision(precision)
        self.poller = poller
        self.frame_counter = frame_counter
        self.data: Value = _zero(self.data_type, self.precision)
        self.last_update = 0
        self.instances: List[BindingInstance] = []

    def _store(self, value: Value) -> None:
        self.data = _shape(_components(value), self.data_type, self.precision)

    def handle_event(self, action: int, mods: int = 0) -> None:
        """Record a press or release and forward it to every instance."""
        check(
            self.data_type == Output.SCALAR,
            "Non-scalar bindings should not receive dataless events.",
        )
        self._store(0.0 if action == KeyAction.RELEASE else 1.0)
        self.last_update = self.frame_counter()
        for instance in list(self.instances):
            instance.handle_event(action, mods)

    def try_poll(self) -> None:
        """Poll the device unless the data is already current for this frame."""
        frame = self.frame_counter()
        if self.last_update < frame:
            self._store(self.poller())
            self.last_update = frame

    def force_poll(self) -> None:
        """Poll the device now."""
        self._store(self.poller())
        self.last_update = self.frame_counter()

    def create_instance(self, bind_to: Optional["Action"]) -> "BindingInstance":
        """Create an instance bound to ``bind_to`` and register it with the action."""
        if bind_to is not None:
            check(
                bind_to.data_type == self.data_type,
                f"Action type '{bind_to.data_type.name}' does not match binding type "
                f"'{self.data_type.name}'.",
            )
        instance = BindingInstance(self, bind_to)
        self.instances.append(instance)
        if bind_to is not None:
            bind_to.add_binding(instance)
        return instance

    def create_unbound_instance(self) -> "BindingInstance":
        """Create an instance that belongs to no action, for use in composites."""
        instance = BindingInstance(self)
        self.instances.append(instance)
        return instance

    def remove_instance(self, instance: "BindingInstance") -> None:
        """Remove one instance; ValueError if it is not one of ours."""
        for position, candidate in enumerate(self.instances):
            if candidate is instance:
                del self.instances[position]
                return
        raise ValueError("binding instance does not belong to this binding")

    def clear_instances(self) -> None:
        """Remove every instance."""
        self.instances.clear()


class BindingInstance:
    """One use of a master binding, optionally routed to an action."""

    def __init__(self, master: MasterBinding, bound_action: Optional["Action"] = None) -> None:
        self.master = master
        self.bound_action = bound_action

    def handle_event(self, action: int, mods: int = 0) -> None:
        """Pass an input event on to the bound action, if any."""
        if self.bound_action is None:
            return
        self.bound_action.handle_event(InputEventData(self, action, mods))

    def get_data(self) -> Value:
        """Return the master binding's data, polling once per frame."""
        self.master.try_poll()
        return self.master.data


@dataclass
class Constituent:
    """A binding instance feeding signed axes of a composite."""

    binding: BindingInstance
    components: Tuple[Component, ...]

    def __post_init__(self) -> None:
        self.components = tuple(Component(c) for c in self.components)


class CompositeBinding:
    """Combines several bindings into one value, e.g. four keys into a 2D vector."""

    def __init__(
        self,
        bind_to: Optional["Action"],
        data_type: Output,
        precision: Precision,
        constituents: Sequence[Constituent],
        frame_counter: Optional[FrameCounter] = None,
    ) -> None:
        self.bind_to = bind_to
        self.data_type = Output(data_type)
        self.precision = Precision(precision)
        self.constituents = list(constituents)
        if frame_counter is None:
            frame_counter = (
                self.constituents[0].binding.master.frame_counter
                if self.constituents
                else _first_frame
            )
        self.frame_counter = frame_counter
        self.data: Value = _zero(self.data_type, self.precision)
        self.last_update = 0
        self.validate_constituents()

    def poll_constituents(self) -> None:
        """Recompute the combined value from every constituent."""
        totals = [0.0] * int(self.data_type)
        for constituent in self.constituents:
            values = _components(constituent.binding.get_data())
            for value, component in zip(values, constituent.components):
                axis = component.axis
                totals[axis] = _round(totals[axis] + value * component.sign, self.precision)
        self.data = _shape(totals, self.data_type, self.precision)

    def try_poll(self) -> None:
        """Recompute unless already done this frame."""
        frame = self.frame_counter()
        if self.last_update < frame:
            self.poll_constituents()
            self.last_update = frame

    def force_poll(self) -> None:
        """Recompute now."""
        self.poll_constituents()
        self.last_update = self.frame_counter()

    def validate_constituents(self) -> None:
        """Raise RuntimeError if components overlap or do not fit the output."""
        filled = set()
        for constituent in self.constituents:
            check(
                len(constituent.components) <= int(constituent.binding.master.data_type),
                "Constituent has more components than its binding provides.",
            )
            for component in constituent.components:
                check(
                    component not in filled,
                    f"Constituent component index '{int(component)}' is already used",
                )
                filled.add(component)
                check(
                    component.axis < int(self.data_type),
                    f"Constituent component '{component.name}' does not fit output "
                    f"'{self.data_type.name}'.",
                )

    def get_data(self) -> Value:
        """Return the combined value, recomputed once per frame."""
        self.try_poll()
        return self.data


class Action:
    """A named input with start, repeat and end events fed by its bindings."""

    def __init__(self, data_type: Output, precision: Precision = Precision.SINGLE) -> None:
        self.data_type = Output(data_type)
        self.precision = Precision(precision)
        self.on_start = Event()
        self.on_repeat = Event()
        self.on_end = Event()
        self.bindings: List[BindingInstance] = []
        self.composites: List[CompositeBinding] = []

    def handle_event(self, event_data: InputEventData) -> None:
        """Invoke the event that matches the input action."""
        events = {
            KeyAction.PRESS: self.on_start,
            KeyAction.REPEAT: self.on_repeat,
            KeyAction.RELEASE: self.on_end,
        }
        event = events.get(event_data.action)
        if event is None:
            log_error("Unknown GLFW action type", True)
            return
        event.invoke(event_data)

    def add_binding(self, binding: Union[BindingInstance, CompositeBinding]) -> None:
        """Attach a binding instance or composite of the same data type."""
        got = binding.data_type if isinstance(binding, CompositeBinding) else binding.master.data_type
        check(
            self.data_type == got,
            f"Data type mismatch. Expected: {int(self.data_type)} Got: {int(got)}",
        )
        if isinstance(binding, CompositeBinding):
            self.composites.append(binding)
        else:
            self.bindings.append(binding)

    def get_data(self) -> Value:
        """Return the reading of greatest magnitude among all bindings."""
        readings = [b.get_data() for b in self.bindings]
        readings += [c.get_data() for c in self.composites]
        if not readings:
            return _zero(self.data_type, self.precision)
        best = max(readings, key=_magnitude)
        return _shape(_components(best), self.data_type, self.precision)


def default_bindings(device: _Device, frame_counter: FrameCounter = _first_frame) -> List[MasterBinding]:
    """Build the master binding table, indexed by Key and Mouse values."""
    key_codes = {key: code for code, key in GLFW_TO_KEY.items()}

    def key_poller(code: int) -> Callable[[], Value]:
        return lambda: float(device.get_key(code))

    def button_poller(code: int) -> Callable[[], Value]:
        return lambda: float(device.get_mouse_button(code))

    table = [
        MasterBinding(Output.SCALAR, Precision.SINGLE, key_poller(key_codes[key]), frame_counter)
        for key in Key
    ]
    table += [
        MasterBinding(Output.SCALAR, Precision.SINGLE, button_poller(code), frame_counter)
        for code, _ in sorted(GLFW_TO_MOUSE.items(), key=lambda item: item[1])
    ]
    table.append(
        MasterBinding(Output.VECTOR2, Precision.DOUBLE, lambda: device.mouse_position, frame_counter)
    )
    table.append(
        MasterBinding(Output.VECTOR2, Precision.DOUBLE, lambda: device.mouse_delta, frame_counter)
    )
    return table