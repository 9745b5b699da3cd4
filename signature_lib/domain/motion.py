"""Motion-planning value objects and handwriting styles.

A HandwritingStyle is the knob set the motion planner reads. The planner
never sees a partial style: resolve_style() merges whatever the caller
supplied (a style, a mapping of overrides, a preset name, or nothing) over
DEFAULT_STYLE first.

Example usage:
    Resolving styles::

        from signature_lib.domain.motion import resolve_style

        resolve_style(None).base_ms_per_px             # 1.2
        resolve_style('rigid_formal').inertia_factor   # 0.7
        resolve_style({'inertia_factor': 2}).inertia_factor  # 2.0
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

logger = logging.getLogger(__name__)

INK_SPREADS = ('light', 'medium', 'heavy')


@dataclass(frozen=True)
class HandwritingStyle:
    """Timing and width knobs for one animation run.

    Attributes:
        label: Human-readable name.
        base_ms_per_px: Pen speed, milliseconds per canvas pixel.
        pressure_scale: Multiplier on traced line width.
        inertia_factor: Slow-down per radian of turn; 0 disables.
        micro_tremor_amp_px: Tremor amplitude in pixels; 0 disables.
        micro_tremor_freq_hz: Tremor frequency; 0 disables.
        fallback_width: Line width used when a point has no thickness.
        ink_spread: Cosmetic class read only by renderers.
        speed_multiplier: Cosmetic playback hint read only by renderers.
    """
    label: str = 'Default'
    base_ms_per_px: float = 1.2
    pressure_scale: float = 1.0
    inertia_factor: float = 0.0
    micro_tremor_amp_px: float = 0.0
    micro_tremor_freq_hz: float = 0.0
    fallback_width: float = 1.5
    ink_spread: str = 'light'
    speed_multiplier: float = 1.0

    @property
    def has_tremor(self) -> bool:
        return self.micro_tremor_amp_px > 0 and self.micro_tremor_freq_hz > 0

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_STYLE = HandwritingStyle()

STYLE_PRESETS: dict[str, HandwritingStyle] = {
    'smooth_cursive': HandwritingStyle(
        label='Smooth Cursive', base_ms_per_px=0.9, pressure_scale=1.0,
        inertia_factor=1.3, micro_tremor_amp_px=0.2, micro_tremor_freq_hz=5,
        ink_spread='light', speed_multiplier=1.25,
    ),
    'rigid_formal': HandwritingStyle(
        label='Rigid Formal', base_ms_per_px=1.6, pressure_scale=1.0,
        inertia_factor=0.7, micro_tremor_amp_px=0.2, micro_tremor_freq_hz=5,
        ink_spread='medium', speed_multiplier=0.65,
    ),
    'flowing_dynamic': HandwritingStyle(
        label='Flowing Dynamic', base_ms_per_px=0.75, pressure_scale=1.2,
        inertia_factor=1.6, micro_tremor_amp_px=0.2, micro_tremor_freq_hz=5,
        ink_spread='heavy', speed_multiplier=1.5,
    ),
}

_NUMERIC_FIELDS = (
    'base_ms_per_px', 'pressure_scale', 'inertia_factor',
    'micro_tremor_amp_px', 'micro_tremor_freq_hz', 'fallback_width',
    'speed_multiplier',
)


def _coerce_number(value: Any, default: float) -> float:
    """Finite non-negative float, or the default."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number < 0:
        return default
    return number


def resolve_style(style: HandwritingStyle | Mapping[str, Any] | str | None = None,
                  base: HandwritingStyle = DEFAULT_STYLE) -> HandwritingStyle:
    """Merge caller style input over a base style.

    Never raises: unknown preset names resolve to the base, unknown keys are
    ignored and unusable values keep the base value.

    Args:
        style: A HandwritingStyle (validated field by field), a mapping of
            overrides, a preset name from STYLE_PRESETS, or None.
        base: Style supplying every value the input leaves out.

    Returns:
        A fully populated HandwritingStyle.
    """
    if style is None:
        return base
    if isinstance(style, str):
        preset = STYLE_PRESETS.get(style)
        if preset is None:
            logger.warning("Unknown style preset %r, using defaults", style)
            return base
        return preset
    if isinstance(style, HandwritingStyle):
        overrides = style.to_dict()
    elif isinstance(style, Mapping):
        overrides = dict(style)
        preset_name = overrides.pop('preset', None)
        if isinstance(preset_name, str) and preset_name in STYLE_PRESETS:
            base = STYLE_PRESETS[preset_name]
    else:
        logger.warning("Ignoring style of type %s", type(style).__name__)
        return base

    values: dict[str, Any] = {}
    for name in _NUMERIC_FIELDS:
        if name in overrides:
            values[name] = _coerce_number(overrides[name], getattr(base, name))
    # A zero width scale would make every line invisible
    if values.get('pressure_scale') == 0:
        values['pressure_scale'] = 1.0
    if overrides.get('ink_spread') in INK_SPREADS:
        values['ink_spread'] = overrides['ink_spread']
    if isinstance(overrides.get('label'), str):
        values['label'] = overrides['label']
    return replace(base, **values)


@dataclass(frozen=True)
class PhysicsPoint:
    """A timed pen sample in canvas pixels.

    Attributes:
        x: Canvas x in pixels (tremor applied).
        y: Canvas y in pixels (tremor applied).
        time: Milliseconds since the animation started.
        line_width: Line width in pixels.
        opacity: Ink opacity in [0, 1].
    """
    x: float
    y: float
    time: float
    line_width: float
    opacity: float

    def scaled(self, ratio: float) -> PhysicsPoint:
        return replace(self, time=self.time * ratio)

    def to_dict(self) -> dict[str, float]:
        return {
            'x': self.x, 'y': self.y, 'time': self.time,
            'lineWidth': self.line_width, 'opacity': self.opacity,
        }


@dataclass
class StrokePath:
    """Timed trajectory of one stroke, ready for a renderer."""
    id: str
    points: list[PhysicsPoint] = field(default_factory=list)
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def scaled(self, ratio: float) -> StrokePath:
        """Copy with every timestamp multiplied by ratio."""
        return StrokePath(
            id=self.id,
            points=[p.scaled(ratio) for p in self.points],
            start_time=self.start_time * ratio,
            end_time=self.end_time * ratio,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'points': [p.to_dict() for p in self.points],
            'startTime': self.start_time,
            'endTime': self.end_time,
        }
