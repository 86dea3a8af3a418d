# thera

The core of a small game engine in plain Python. It uses only the standard library.

## Modules

- `thera.events`: `Event`.
  - `register(callback)` returns a handle.
  - `deregister(handle)` says whether the callback was present.
  - `invoke(*args)` calls every callback in the order they were registered.
- `thera.console`: `log_info`, `log_warning` and `log_error` write lines such as `[INFO] ...` to standard output.
  - Each line starts with an optional time prefix and an optional source-location prefix. Both are chosen through `LogFlags` in `thera.console.settings.flags`.
  - `log_error(message, True)` and `check(False, message)` raise `RuntimeError`.
- `thera.inputdefs`: input identifiers and code mappings.
  - The enums `Key`, `Mouse`, `Output`, `Precision`, `Component` and `KeyAction`.
  - `key_from_glfw` and `mouse_from_glfw` map GLFW key and button codes. An unmapped code raises `KeyError`.
- `thera.bindings`: the binding model.
  - `MasterBinding` holds the data of one physical input.
  - `BindingInstance` is one use of a master binding.
  - `Constituent` and `CompositeBinding` combine several inputs into one value. A composite raises `RuntimeError` when two constituents fill the same component, or when a component does not fit the output.
  - `Action` has the events `on_start`, `on_repeat` and `on_end`. `Action.get_data()` returns the reading of largest magnitude among its bindings.
  - `default_bindings` builds the table of master bindings.
- `thera.input`: `InputSystem`, which owns the binding table and the named actions.
  - `create_action` and `get_action` manage the actions.
  - `create_binding`, `create_constituent` and `create_composite_binding` create bindings. They attach to the action you give, or else to the one set with `set_bind_context`.
  - `key_callback` and `mouse_button_callback` take events in GLFW's argument order.
  - `update_mouse` records the cursor position and the movement since the last call.
  - `reset` clears everything.
  - Device state is held in a `DeviceState`.
- `thera.workers`: `Worker`, plus `WorkerPool` with `run_task` and `shutdown`.
  - The module-level `run_task` and `shutdown_workers` use a shared pool.
  - When a worker does not stop within the timeout, its cancel callback is called.
- `thera.packet`: the packet wire format.
  - `Packet` is a 16-bit id, a 16-bit length and a payload, all little-endian.
  - `AggregatePacket` is a count and total size followed by its packets.
  - `PacketReader` reads the wire format.
  - `PacketRegistry` maps packet ids to handlers. `register_packet` and `get_packet_handler` use a shared registry.
- `thera.connection`: `Connection`, a UDP socket with a background receiver.
  - Received aggregates are dispatched to the registry's handlers.
  - `send` queues packets into aggregates and `flush` sends them.
- `thera.tcp`: `TcpConnection`, the same over TCP.
  - `TcpConnection.connect` opens a new connection and `TcpConnection.from_socket` takes over an existing socket.
  - The receiver runs on a worker thread.
  - TCP uses its own `register_packet` and `get_packet_handler`.
- `thera.core`: `Quaternion`, `Transform` and `WorldTransform`.
  - `WorldTransform` has `forward`, `right` and `up`.
  - `update_world_transform(local, parent)` combines a local transform with its parent's world transform.
- `thera.engine`: `Engine`.
  - `defer` and `run_deferred_operations` handle deferred work.
  - `step` advances one frame and updates the delta time and frame count.
  - `run` loops until `request_close`, a close signal (SIGBREAK or SIGHUP), or a `should_stop` callback.
  - The engine fires the events `on_init`, `on_progress`, `on_final_validate` and `window_resized`.
- `thera.shaders`: compiled shader files.
  - `RendererType` lists the renderers, and `shader_directory` and `shader_path` locate their compiled shaders under `Resources/Shaders/bin`.
  - `load_memory` reads a file and appends a zero byte.
  - `load_shader_program` reads a vertex and a fragment binary into a `ShaderProgram`.

## Example

```python
from thera.input import InputSystem
from thera.inputdefs import Component, Key, KeyAction, Output, Precision

inputs = InputSystem()
move = inputs.create_action("move", Output.VECTOR2, Precision.SINGLE)
inputs.create_composite_binding(
    Output.VECTOR2,
    Precision.SINGLE,
    [
        inputs.create_constituent(Key.A, [Component.NEG_X]),
        inputs.create_constituent(Key.D, [Component.POS_X]),
        inputs.create_constituent(Key.S, [Component.NEG_Y]),
        inputs.create_constituent(Key.W, [Component.POS_Y]),
    ],
    move,
)

inputs.key_callback(None, ord("A"), 0, KeyAction.PRESS, 0)
inputs.key_callback(None, ord("W"), 0, KeyAction.PRESS, 0)
print(move.get_data())  # (-1.0, 1.0)
```

## Command line

```
thera
thera --frames 100
```

Without options, the windowless loop runs until it receives a close signal. With `--frames N` it stops after N frames.

## What it does not do

- It opens no window, reads no real keyboard or mouse, and renders nothing. Input arrives only through the `InputSystem` callbacks and `update_mouse`.
- `thera.shaders` finds and reads shader binaries but does not compile them or hand them to a GPU.
- There is no mesh loading, no entity system and no user interface.

## Installation and tests

```
pip install .[test]
pytest
```