[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "madrona"
version = "0.1.0"
description = "Vector-based DSP generators, glides, voice allocation and application utilities for sound synthesis"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["dsp", "audio", "synthesis", "oscillator", "midi", "voice allocation", "fdtd"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["madrona"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
