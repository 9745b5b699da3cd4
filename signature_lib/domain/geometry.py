"""Geometric value objects for traced signatures."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterator

from ..config import OUTPUT_SCALE


@dataclass(frozen=True)
class RawPoint:
    """A traced pen position on the normalized 0-10000 grid.

    Attributes:
        x: Horizontal position, normalized against the processing width.
        y: Vertical position, normalized against the processing height.
        z: Stroke thickness on the same scale as x (relative to width),
            or None when thickness was not measured.
        a: Ink opacity in [0, 1], or None when not sampled.
    """
    x: int
    y: int
    z: float | None = None
    a: float | None = None

    def distance_sq_to(self, other: RawPoint) -> float:
        """Squared Euclidean distance to another point."""
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def distance_to(self, other: RawPoint) -> float:
        """Euclidean distance to another point."""
        return math.sqrt(self.distance_sq_to(other))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON serialization, omitting absent fields."""
        d: dict[str, Any] = {'x': self.x, 'y': self.y}
        if self.z is not None:
            d['z'] = self.z
        if self.a is not None:
            d['a'] = self.a
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RawPoint:
        """Create from dict, clamping x/y into the normalized range.

        Raises:
            ValueError: If d is not a mapping or a value is not a finite number.
        """
        if not isinstance(d, dict):
            raise ValueError(f"Point must be an object, got {type(d).__name__}")
        return cls(
            x=_clamp_unit(d['x']),
            y=_clamp_unit(d['y']),
            z=_finite(d['z']) if d.get('z') is not None else None,
            a=_finite(d['a']) if d.get('a') is not None else None,
        )


def _finite(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Expected a finite number, got {value!r}")
    return number


def _clamp_unit(value: Any) -> int:
    return int(min(max(round(_finite(value)), 0), OUTPUT_SCALE))


@dataclass(frozen=True)
class BBox:
    """Immutable bounding box."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def union(self, other: BBox) -> BBox:
        """Smallest box containing both boxes."""
        return BBox(
            min(self.x_min, other.x_min), min(self.y_min, other.y_min),
            max(self.x_max, other.x_max), max(self.y_max, other.y_max),
        )

    @classmethod
    def from_points(cls, points: list[RawPoint]) -> BBox:
        """Create bounding box containing all points."""
        if not points:
            return cls(0, 0, 0, 0)
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class StrokeMeta:
    """Derived layout facts about one stroke.

    Only valid for the point order it was computed from; recompute after
    reversing a stroke.
    """
    bbox: BBox
    cx: float
    cy: float
    start: RawPoint
    end: RawPoint

    @property
    def width(self) -> float:
        return self.bbox.width

    @property
    def height(self) -> float:
        return self.bbox.height

    @classmethod
    def from_stroke(cls, stroke: Stroke) -> StrokeMeta:
        pts = stroke.points
        n = len(pts)
        return cls(
            bbox=BBox.from_points(pts),
            cx=sum(p.x for p in pts) / n,
            cy=sum(p.y for p in pts) / n,
            start=pts[0],
            end=pts[-1],
        )


@dataclass
class Stroke:
    """An ordered pen-down path; points[0] is where the pen lands."""
    points: list[RawPoint] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[RawPoint]:
        return iter(self.points)

    def __getitem__(self, idx):
        return self.points[idx]

    @property
    def start(self) -> RawPoint:
        return self.points[0]

    @property
    def end(self) -> RawPoint:
        return self.points[-1]

    def meta(self) -> StrokeMeta:
        """Bounding box, centroid and endpoints of the current point order."""
        return StrokeMeta.from_stroke(self)

    def reversed(self) -> Stroke:
        """Return stroke with reversed point order."""
        return Stroke(list(reversed(self.points)))

    def copy(self) -> Stroke:
        return Stroke(list(self.points))

    def to_dict(self) -> dict[str, Any]:
        return {'points': [p.to_dict() for p in self.points]}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Stroke:
        if not isinstance(d, dict) or not isinstance(d.get('points', []), list):
            raise ValueError("Stroke must be an object with a 'points' list")
        return cls([RawPoint.from_dict(p) for p in d.get('points', [])])


@dataclass
class AnalysisMetadata:
    """Provenance attached to a SignatureAnalysis.

    Attributes:
        original_size: (width, height) of the decoded source image.
        notes: Free-text description of how the strokes were produced.
        truncated: True when an iteration cap stopped tracing early.
    """
    original_size: tuple[int, int]
    notes: str = ''
    truncated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            'original_size': [int(self.original_size[0]), int(self.original_size[1])],
            'notes': self.notes,
            'truncated': self.truncated,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AnalysisMetadata:
        if not isinstance(d, dict):
            raise ValueError("Metadata must be an object")
        size = d.get('original_size') or (0, 0)
        if not isinstance(size, (list, tuple)) or len(size) != 2:
            raise ValueError("original_size must be a [width, height] pair")
        return cls(
            original_size=(int(size[0]), int(size[1])),
            notes=str(d.get('notes', '')),
            truncated=bool(d.get('truncated', False)),
        )


@dataclass
class SignatureAnalysis:
    """Ordered, cleaned strokes of one signature plus provenance.

    An empty stroke list is a valid result (blank image, or every stroke
    rejected during cleanup).
    """
    strokes: list[Stroke]
    metadata: AnalysisMetadata

    @property
    def is_blank(self) -> bool:
        return not self.strokes

    def point_count(self) -> int:
        return sum(len(s) for s in self.strokes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to nested dicts for JSON serialization."""
        return {
            'strokes': [s.to_dict() for s in self.strokes],
            'metadata': self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SignatureAnalysis:
        """Create from the dict produced by to_dict().

        Raises:
            ValueError: If the payload is not shaped like an analysis.
        """
        if not isinstance(d, dict) or not isinstance(d.get('strokes'), list):
            raise ValueError("Analysis must be an object with a 'strokes' list")
        metadata = d.get('metadata')
        try:
            strokes = [Stroke.from_dict(s) for s in d['strokes']]
            meta = AnalysisMetadata.from_dict({} if metadata is None else metadata)
        except (KeyError, TypeError, AttributeError, IndexError, OverflowError) as e:
            raise ValueError(f"Malformed analysis data: {e}") from e
        return cls(strokes=strokes, metadata=meta)
