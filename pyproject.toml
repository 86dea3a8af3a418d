[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "thera"
version = "0.1.0"
description = "Game engine core: input actions and bindings, events, worker threads, packet networking, transforms and a windowless frame loop"
requires-python = ">=3.10"
dependencies = []
keywords = ["game engine", "input", "networking", "packets", "events", "transforms"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
thera = "thera.engine:main"

[tool.hatch.build.targets.wheel]
packages = ["thera"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
