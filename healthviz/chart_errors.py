"""Error taxonomy shared by the chart engine.

None of these errors is fatal to the hosting process. Each one is raised at
the point of failure and recovered by the component that owns the failure
mode:

- :class:`LoadError` is logged by the loader and degrades to an empty state.
- :class:`RecordParseError` drops one record from the active dataset.
- :class:`GeometryDegenerate` suppresses a render pass.
- :class:`InteractionBoundsError` turns a pointer event into a no-op.
"""

from __future__ import annotations


class ChartError(Exception):
    """Base class for chart engine errors."""


class LoadError(ChartError):
    """Source dataset is unreachable or cannot be parsed."""

    def __init__(self, source: object, message: str) -> None:
        super().__init__(f"Could not load {source!r}: {message}")
        self.source = source


class RecordParseError(ChartError, ValueError):
    """One field of one row failed numeric or string coercion."""

    def __init__(self, field: str, raw: object, message: str = "") -> None:
        detail = f": {message}" if message else ""
        super().__init__(f"Field {field!r} could not parse {raw!r}{detail}")
        self.field = field
        self.raw = raw


class GeometryDegenerate(ChartError):
    """Inputs are not ready for drawing (empty dataset or unmeasured viewport)."""


class InteractionBoundsError(ChartError):
    """Pointer coordinates fall outside the tracked region."""


__all__ = [
    "ChartError",
    "GeometryDegenerate",
    "InteractionBoundsError",
    "LoadError",
    "RecordParseError",
]
