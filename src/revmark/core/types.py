from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence, Tuple

Origin = Literal["bottom-left", "top-left"]
Granularity = Literal["token", "line-character"]
SegmentKind = Literal["unchanged", "added", "removed"]

# (a, b, c, d, e, f) as in a PDF text matrix; only a, d, e and f are consulted
Placement = Tuple[float, float, float, float, float, float]


@dataclass(frozen=True)
class GlyphRun:
    text: str
    transform: Placement
    width: Optional[float]
    height: Optional[float]
    page_index: int

    @property
    def x(self) -> float:
        return self.transform[4]

    @property
    def y(self) -> float:
        return self.transform[5]


@dataclass(frozen=True)
class PageLayout:
    """Glyph runs of a single page plus the viewport they were measured in."""

    index: int
    width: float
    height: float
    runs: Sequence[GlyphRun]
    origin: Origin = "bottom-left"


@dataclass(frozen=True)
class BBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        return self.x + self.width

    @property
    def y1(self) -> float:
        return self.y + self.height

    def union(self, other: "BBox") -> "BBox":
        x0 = min(self.x, other.x)
        y0 = min(self.y, other.y)
        x1 = max(self.x1, other.x1)
        y1 = max(self.y1, other.y1)
        return BBox(x0, y0, x1 - x0, y1 - y0)

    def padded(self, pad: float) -> "BBox":
        return BBox(self.x - pad, self.y - pad, self.width + pad * 2, self.height + pad * 2)


@dataclass(frozen=True)
class TextUnit:
    text: str
    page_index: int
    bbox: BBox
    runs: Tuple[GlyphRun, ...] = ()


@dataclass(frozen=True)
class AlignmentSegment:
    kind: SegmentKind
    values: Sequence

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class CharRange:
    """Added ``[start, end)`` span inside the normalized text of a target line."""

    line_index: int
    start: int
    end: int


@dataclass(frozen=True)
class LinePairing:
    target_index: int
    source_index: Optional[int]


@dataclass(frozen=True)
class HighlightBox:
    page_index: int
    bbox: BBox
    viewport: Tuple[float, float]
    origin: Origin = "bottom-left"
    text: str = field(default="", compare=False)


@dataclass(frozen=True)
class PageRect:
    """Rectangle in the rendering surface's native space (origin bottom-left)."""

    page_index: int
    x: float
    y: float
    width: float
    height: float
    text: str = field(default="", compare=False)

    def to_dict(self):
        return {
            "page_index": self.page_index,
            "rect": [self.x, self.y, self.width, self.height],
            "text": self.text,
        }
