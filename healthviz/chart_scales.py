"""Scale builders: data domain -> pixel range (and back).

All scales are small immutable objects that are cheap to rebuild on every
render pass. They never raise on degenerate input: a zero-width domain maps to
the middle of the range and the domain helpers substitute documented fallback
upper bounds, so an empty or single-valued dataset still yields finite axes.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

TABLEAU10: tuple[str, ...] = (
    "#4e79a7",
    "#f28e2c",
    "#e15759",
    "#76b7b2",
    "#59a14f",
    "#edc949",
    "#af7aa1",
    "#ff9da7",
    "#9c755f",
    "#bab0ab",
)

CATEGORY10: tuple[str, ...] = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)

Interval = tuple[float, float]


# SECTION: domain helpers [id: domains]
# =============================================================================


def zero_based_domain(values: Iterable[float], fallback_upper: float) -> Interval:
    """Return ``(0, max(values))`` for non-negative magnitudes.

    ``fallback_upper`` replaces the maximum when ``values`` is empty or its
    maximum is not positive (which would collapse the domain to a point).
    """
    arr = np.asarray(list(values), dtype=np.float64)
    arr = arr[np.isfinite(arr)]
    upper = float(arr.max()) if arr.size else 0.0
    if upper <= 0:
        upper = float(fallback_upper)
    return (0.0, upper)


def extent_domain(values: Iterable[float], fallback_span: float) -> Interval:
    """Return ``(min, max)`` of ``values``.

    An empty input yields ``(0, fallback_span)``; a zero-variance input ``v``
    yields ``(v, v + fallback_span)``.
    """
    arr = np.asarray(list(values), dtype=np.float64)
    arr = arr[np.isfinite(arr)]
    if not arr.size:
        return (0.0, float(fallback_span))
    lo, hi = float(arr.min()), float(arr.max())
    if lo == hi:
        hi = lo + float(fallback_span)
    return (lo, hi)


# SECTION: tick generation [id: ticks]
# =============================================================================

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def tick_step(start: float, stop: float, count: int) -> float:
    """Return a 1/2/5 x 10^k step giving roughly ``count`` ticks over the span."""
    span = abs(stop - start)
    if count <= 0 or span == 0 or not math.isfinite(span):
        return 0.0
    step0 = span / count
    power = math.floor(math.log10(step0))
    error = step0 / 10**power
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1
    return float(factor * 10**power)


def ticks(start: float, stop: float, count: int = 10) -> np.ndarray:
    """Return evenly spaced round values inside ``[start, stop]``."""
    if start == stop:
        return np.asarray([start], dtype=np.float64)
    lo, hi = min(start, stop), max(start, stop)
    step = tick_step(lo, hi, count)
    if step == 0:
        return np.asarray([], dtype=np.float64)
    i0 = math.ceil(lo / step)
    i1 = math.floor(hi / step)
    out = np.arange(i0, i1 + 1, dtype=np.float64) * step
    # Normalize floating-point drift so values like 0.30000000000000004 print cleanly.
    out = np.round(out, max(0, -math.floor(math.log10(step))) + 1)
    return out if start <= stop else out[::-1]


def format_number(value: float, step: float) -> str:
    """Format ``value`` with comma grouping and the precision implied by ``step``."""
    decimals = 0 if step <= 0 else max(0, -math.floor(math.log10(step)))
    out = f"{value:,.{decimals}f}"
    return "0" if out.strip("-0.,") == "" else out


# SECTION: scales [id: scales]
# =============================================================================


@dataclass(frozen=True)
class LinearScale:
    """Affine map from ``domain`` to ``range``.

    ``scale(domain[0]) == range[0]`` and ``scale(domain[1]) == range[1]``.
    The range may be inverted (``r0 > r1``) for a y-axis growing upward.
    """

    domain: Interval
    range: Interval

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2.0
        t = (float(value) - d0) / (d1 - d0)
        return r0 + t * (r1 - r0)

    def map(self, values: Sequence[float]) -> np.ndarray:
        """Vectorised :meth:`__call__`."""
        d0, d1 = self.domain
        r0, r1 = self.range
        arr = np.asarray(values, dtype=np.float64)
        if d1 == d0:
            return np.full(arr.shape, (r0 + r1) / 2.0)
        return r0 + (arr - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        """Map a pixel coordinate back into the domain."""
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return d0
        t = (float(pixel) - r0) / (r1 - r0)
        return d0 + t * (d1 - d0)

    def nice(self, count: int = 10) -> "LinearScale":
        """Return a copy whose domain is extended outward to round step multiples."""
        d0, d1 = self.domain
        if d0 == d1:
            return self
        lo, hi = min(d0, d1), max(d0, d1)
        prev = 0.0
        for _ in range(10):
            step = tick_step(lo, hi, count)
            if step == 0 or step == prev:
                break
            lo = math.floor(lo / step) * step
            hi = math.ceil(hi / step) * step
            prev = step
        return LinearScale(domain=(lo, hi) if d0 <= d1 else (hi, lo), range=self.range)

    def ticks(self, count: int = 10) -> np.ndarray:
        return ticks(self.domain[0], self.domain[1], count)

    def tick_format(self, count: int = 10) -> "TickFormatter":
        return TickFormatter(step=tick_step(self.domain[0], self.domain[1], count))


@dataclass(frozen=True)
class TickFormatter:
    """Formats tick values for one axis (``integer=True`` drops grouping, as for years)."""

    step: float
    integer: bool = False

    def __call__(self, value: float) -> str:
        if self.integer:
            return str(int(round(value)))
        return format_number(value, self.step)


@dataclass(frozen=True)
class SqrtScale:
    """Square-root map for magnitudes drawn as 2D shapes.

    Encoded area is linear in value: with a zero-based domain and range,
    ``scale(4 * v) == 2 * scale(v)``.
    """

    domain: Interval
    range: Interval

    def __call__(self, value: float) -> float:
        d0, d1 = (_signed_sqrt(v) for v in self.domain)
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2.0
        t = (_signed_sqrt(value) - d0) / (d1 - d0)
        return r0 + t * (r1 - r0)


def _signed_sqrt(value: float) -> float:
    value = float(value)
    return -math.sqrt(-value) if value < 0 else math.sqrt(value)


@dataclass
class OrdinalScale:
    """Category -> palette slot, assigned in first-seen order.

    Keys listed in ``domain`` are assigned first; unknown keys are appended on
    first lookup. Slots wrap modulo the palette length. The mapping is stable
    across draws of the same dataset ordering.
    """

    palette: Sequence[str]
    domain: Sequence[str] = ()
    _index: dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.palette:
            raise ValueError("OrdinalScale requires a non-empty palette.")
        self.palette = tuple(self.palette)
        for key in self.domain:
            self._index.setdefault(str(key), len(self._index))
        self.domain = tuple(self._index)

    def __call__(self, key: str) -> str:
        key = str(key)
        slot = self._index.get(key)
        if slot is None:
            slot = len(self._index)
            self._index[key] = slot
            self.domain = tuple(self._index)
        return self.palette[slot % len(self.palette)]


@dataclass(frozen=True)
class ColorRampScale:
    """Linear RGB interpolation between two hex colours over ``domain``."""

    domain: Interval
    colors: tuple[str, str]

    def __call__(self, value: float) -> str:
        d0, d1 = self.domain
        t = 0.0 if d1 == d0 else (float(value) - d0) / (d1 - d0)
        a = np.asarray(_hex_to_rgb(self.colors[0]), dtype=np.float64)
        b = np.asarray(_hex_to_rgb(self.colors[1]), dtype=np.float64)
        rgb = np.clip(np.rint(a + t * (b - a)), 0, 255).astype(int)
        return "#{:02x}{:02x}{:02x}".format(*rgb.tolist())


def _hex_to_rgb(color: str) -> tuple[int, int, int]:
    text = color.lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Expected #rrggbb colour, got {color!r}")
    return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))


def linear(domain: Interval, range: Interval, *, nice: Optional[int] = None) -> LinearScale:
    """Build a :class:`LinearScale`, optionally extended with :meth:`LinearScale.nice`."""
    scale = LinearScale(domain=(float(domain[0]), float(domain[1])), range=(float(range[0]), float(range[1])))
    return scale.nice(nice) if nice else scale


def sqrt(domain: Interval, range: Interval) -> SqrtScale:
    """Build a :class:`SqrtScale`."""
    return SqrtScale(domain=(float(domain[0]), float(domain[1])), range=(float(range[0]), float(range[1])))


__all__ = [
    "CATEGORY10",
    "ColorRampScale",
    "LinearScale",
    "OrdinalScale",
    "SqrtScale",
    "TABLEAU10",
    "TickFormatter",
    "extent_domain",
    "format_number",
    "linear",
    "sqrt",
    "tick_step",
    "ticks",
    "zero_based_domain",
]
