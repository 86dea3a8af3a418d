import pytest

from thera.bindings import (
    Action,
    CompositeBinding,
    Constituent,
    InputEventData,
    MasterBinding,
    default_bindings,
)
from thera.inputdefs import (
    GLFW_TO_KEY,
    LAST_BINDING,
    Component,
    Key,
    KeyAction,
    Mouse,
    Output,
    Precision,
)


class FakeDevice:
    def __init__(self):
        self.keys = set()
        self.buttons = set()
        self.mouse_position = (0.0, 0.0)
        self.mouse_delta = (0.0, 0.0)

    def get_key(self, code):
        return int(code in self.keys)

    def get_mouse_button(self, code):
        return int(code in self.buttons)


class Frames:
    def __init__(self):
        self.frame = 1

    def __call__(self):
        return self.frame


def scalar(value=0.0, frames=None):
    return MasterBinding(Output.SCALAR, Precision.SINGLE, lambda: value, frames or Frames())


def test_press_and_release_set_data():
    master = scalar()
    master.handle_event(KeyAction.PRESS)
    assert master.data == 1.0
    master.handle_event(KeyAction.RELEASE)
    assert master.data == 0.0


def test_handle_event_on_vector_binding_raises():
    master = MasterBinding(Output.VECTOR2, Precision.DOUBLE, lambda: (0.0, 0.0))
    with pytest.raises(RuntimeError):
        master.handle_event(KeyAction.PRESS)


def test_try_poll_once_per_frame():
    calls = []
    frames = Frames()

    def poller():
        calls.append(frames.frame)
        return 0.5

    master = MasterBinding(Output.SCALAR, Precision.SINGLE, poller, frames)
    master.try_poll()
    master.try_poll()
    assert calls == [1]
    frames.frame = 2
    master.try_poll()
    assert calls == [1, 2]
    assert master.data == 0.5


def test_force_poll_always_polls():
    calls = []
    master = MasterBinding(Output.SCALAR, Precision.SINGLE, lambda: calls.append(1) or 0.25)
    master.force_poll()
    master.force_poll()
    assert len(calls) == 2
    assert master.last_update == 1


def test_event_not_overwritten_by_poll_in_same_frame():
    master = scalar(0.0)
    instance = master.create_unbound_instance()
    master.handle_event(KeyAction.PRESS)
    assert instance.get_data() == 1.0


def test_instance_forwards_press_to_action():
    action = Action(Output.SCALAR)
    master = scalar()
    instance = master.create_instance(action)
    received = []
    action.on_start.register(received.append)
    master.handle_event(KeyAction.PRESS, 3)
    assert len(received) == 1
    assert received[0].binding is instance
    assert received[0].mods == 3
    assert action.bindings == [instance]


@pytest.mark.parametrize(
    "key_action, attribute",
    [(KeyAction.PRESS, "on_start"), (KeyAction.REPEAT, "on_repeat"), (KeyAction.RELEASE, "on_end")],
)
def test_action_dispatch(key_action, attribute):
    action = Action(Output.SCALAR)
    fired = []
    getattr(action, attribute).register(lambda data: fired.append(data.action))
    action.handle_event(InputEventData(scalar().create_unbound_instance(), key_action))
    assert fired == [key_action]


def test_action_unknown_type_raises():
    action = Action(Output.SCALAR)
    with pytest.raises(RuntimeError):
        action.handle_event(InputEventData(scalar().create_unbound_instance(), 99))


def test_create_instance_type_mismatch_raises():
    action = Action(Output.VECTOR2)
    with pytest.raises(RuntimeError):
        scalar().create_instance(action)


def test_remove_and_clear_instances():
    master = scalar()
    first = master.create_unbound_instance()
    second = master.create_unbound_instance()
    master.remove_instance(first)
    assert master.instances == [second]
    with pytest.raises(ValueError):
        master.remove_instance(first)
    master.clear_instances()
    assert master.instances == []


def test_unbound_instance_ignores_events():
    master = scalar()
    instance = master.create_unbound_instance()
    instance.handle_event(KeyAction.PRESS, 0)
    assert instance.bound_action is None


def test_composite_sums_signed_axes():
    left, up = scalar(), scalar()
    composite = CompositeBinding(
        None,
        Output.VECTOR2,
        Precision.SINGLE,
        [
            Constituent(left.create_unbound_instance(), (Component.NEG_X,)),
            Constituent(up.create_unbound_instance(), (Component.POS_Y,)),
        ],
    )
    left.handle_event(KeyAction.PRESS)
    up.handle_event(KeyAction.PRESS)
    assert composite.get_data() == (-1.0, 1.0)


def test_composite_overlap_raises():
    a, b = scalar(), scalar()
    with pytest.raises(RuntimeError):
        CompositeBinding(
            None,
            Output.SCALAR,
            Precision.SINGLE,
            [
                Constituent(a.create_unbound_instance(), (Component.POS_X,)),
                Constituent(b.create_unbound_instance(), (Component.POS_X,)),
            ],
        )


def test_composite_component_outside_output_raises():
    a = scalar()
    with pytest.raises(RuntimeError):
        CompositeBinding(
            None, Output.SCALAR, Precision.SINGLE,
            [Constituent(a.create_unbound_instance(), (Component.POS_Y,))],
        )


def test_composite_reads_vector_binding_with_double_precision():
    vector = MasterBinding(Output.VECTOR2, Precision.DOUBLE, lambda: (0.25, 0.5))
    composite = CompositeBinding(
        None,
        Output.VECTOR2,
        Precision.DOUBLE,
        [Constituent(vector.create_unbound_instance(), (Component.POS_X, Component.NEG_Y))],
    )
    composite.force_poll()
    assert composite.data == (0.25, -0.5)


def test_action_add_composite_type_mismatch_raises():
    a = scalar()
    composite = CompositeBinding(
        None, Output.SCALAR, Precision.SINGLE,
        [Constituent(a.create_unbound_instance(), (Component.POS_X,))],
    )
    with pytest.raises(RuntimeError):
        Action(Output.VECTOR2).add_binding(composite)


def test_action_get_data_largest_magnitude():
    action = Action(Output.SCALAR)
    quiet, loud = scalar(0.0), scalar(0.0)
    quiet.create_instance(action)
    loud.create_instance(action)
    loud.handle_event(KeyAction.PRESS)
    assert action.get_data() == 1.0


def test_action_without_bindings_is_zero():
    assert Action(Output.VECTOR2).get_data() == (0.0, 0.0)


def test_default_bindings_table():
    device = FakeDevice()
    table = default_bindings(device, Frames())
    assert len(table) == LAST_BINDING + 1
    code_a = next(code for code, key in GLFW_TO_KEY.items() if key is Key.A)
    device.keys.add(code_a)
    table[Key.A].force_poll()
    assert table[Key.A].data == 1.0
    table[Key.S].force_poll()
    assert table[Key.S].data == 0.0
    device.mouse_position = (12.5, -3.0)
    table[Mouse.POSITION].force_poll()
    assert table[Mouse.POSITION].data == (12.5, -3.0)
    assert table[Mouse.DELTA].precision == Precision.DOUBLE