"""fluentql Expression - Literal SQL fragments.

An Expression marks a value as raw SQL text. Wherever the builder expects a
value or an identifier, an Expression is inlined verbatim by the grammar and
never added to the bindings.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Expression:
    """Immutable holder of a literal SQL fragment."""

    value: Any

    def get_value(self) -> Any:
        """Return the raw SQL fragment."""
        return self.value

    def __str__(self) -> str:
        return str(self.value)


__all__ = ["Expression"]
