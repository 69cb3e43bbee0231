"""Block-based DSP generators, glides, voice allocation, paths, actors and a membrane model."""

__version__ = "0.1.0"
__all__ = ["gens", "clock", "path", "value_change", "actor", "events", "fdtd"]