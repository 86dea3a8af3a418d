"""Locating and loading compiled shader binaries for each renderer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from .console import log_error, log_info

PathLike = Union[str, Path]

SHADER_PATH = Path("Resources/Shaders")


class RendererType(Enum):
    """Rendering back ends; the value is their shader binary directory."""

    NOOP = "noop"
    DIRECT3D9 = "direct3d9"
    DIRECT3D11 = "direct3d11"
    DIRECT3D12 = "direct3d12"
    AGC = "agc"
    GNM = "gnm"
    METAL = "metal"
    NVN = "nvn"
    OPENGL = "opengl"
    OPENGLES = "opengles"
    VULKAN = "vulkan"
    WEBGPU = "webgpu"


_DIRECTORIES = {
    RendererType.NOOP: "dx9",
    RendererType.DIRECT3D9: "dx9",
    RendererType.DIRECT3D11: "s_5_0",
    RendererType.DIRECT3D12: "s_5_0",
    RendererType.AGC: "pssl",
    RendererType.GNM: "pssl",
    RendererType.METAL: "metal",
    RendererType.NVN: "nvn",
    RendererType.OPENGL: "glsl",
    RendererType.OPENGLES: "essl",
    RendererType.VULKAN: "spirv",
    RendererType.WEBGPU: "spirv",
}


@dataclass(frozen=True)
class ShaderProgram:
    """The vertex and fragment shader binaries of one program."""

    vertex: bytes
    fragment: bytes


def shader_directory(renderer: RendererType) -> Path:
    """The directory holding compiled shaders for a renderer."""
    return SHADER_PATH / "bin" / _DIRECTORIES[RendererType(renderer)]


def shader_path(renderer: RendererType, name: PathLike) -> Path:
    """The path of a compiled shader, with its extension replaced by .bin."""
    return shader_directory(renderer) / Path(name).with_suffix(".bin")


def load_memory(path: PathLike) -> bytes:
    """Read a whole file and append a terminating zero byte; OSError on failure."""
    try:
        data = Path(path).read_bytes()
    except OSError:
        log_error(f"Failed to load {path}", False)
        raise
    return data + b"\0"


def load_shader_component(renderer: RendererType, path: PathLike, root: PathLike = ".") -> bytes:
    """Load one compiled shader; RuntimeError if it cannot be read."""
    full_path = Path(root) / shader_path(renderer, path)
    log_info(str(full_path))
    try:
        return load_memory(full_path)
    except OSError:
        log_error(f"Failed to load shader at {Path(path).with_suffix('.bin')}", True)
        raise  # log_error raises; kept for type checkers


def load_shader_program(
    renderer: RendererType,
    vertex_path: PathLike,
    fragment_path: PathLike,
) -> ShaderProgram:
    """Load a vertex and a fragment shader, relative to the working directory, into one program."""
    vertex = load_shader_component(renderer, vertex_path)
    fragment = load_shader_component(renderer, fragment_path)
    return ShaderProgram(vertex, fragment)