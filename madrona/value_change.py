"""A record of a change to a named value."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from madrona.path import Path


@dataclass
class ValueChange:
    """A change of the value at ``name`` from ``old_value`` to ``new_value``."""

    name: Path = field(default_factory=Path)
    new_value: Any = None
    old_value: Any = None
    start_gesture: bool = False
    end_gesture: bool = False
    trigger_widget: Path = field(default_factory=Path)

    def __str__(self) -> str:
        return f"[{self.name}: {self.old_value} -> {self.new_value}]"