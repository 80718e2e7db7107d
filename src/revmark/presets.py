"""Highlight option presets and color helpers."""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Dict, Iterable, Mapping, Optional, Tuple

Color = Tuple[float, float, float]

GRANULARITIES = ("token", "line-character")


@dataclass(frozen=True)
class HighlightOptions:
    """Parameters driving reconstruction, alignment and the overlay."""

    granularity: str = "token"
    y_cluster_tolerance: float = 2.5
    join_gap_threshold: float = 2.0
    highlight_color: Color = (1.0, 1.0, 0.0)
    highlight_opacity: float = 0.35
    padding: float = 1.0
    merge_gap: float = 3.0
    min_char_box_width: float = 2.0
    min_line_height: float = 8.0
    border_width: float = 0.0
    border_color: Optional[Color] = None
    fold_case: bool = False
    fold_diacritics: bool = False
    fold_width: bool = False
    coalesce: bool = True

    def __post_init__(self) -> None:
        if self.granularity not in GRANULARITIES:
            raise ValueError(
                f"granularity must be one of {', '.join(GRANULARITIES)}, got '{self.granularity}'"
            )
        if not 0.0 <= self.highlight_opacity <= 1.0:
            raise ValueError("highlight_opacity must be between 0 and 1")
        for name in (
            "y_cluster_tolerance",
            "join_gap_threshold",
            "padding",
            "merge_gap",
            "min_char_box_width",
            "min_line_height",
            "border_width",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    def copy(self, **overrides: object) -> "HighlightOptions":
        return replace(self, **overrides)


@dataclass(frozen=True)
class Preset:
    """Named bundle of options."""

    name: str
    description: str
    options: HighlightOptions

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "options": self.options.to_dict(),
        }


PRESETS: Mapping[str, Preset] = {
    "precise": Preset(
        name="precise",
        description="Word level highlights; exact text comparison.",
        options=HighlightOptions(),
    ),
    "characters": Preset(
        name="characters",
        description="Line pairing with character level highlights.",
        options=HighlightOptions(granularity="line-character", padding=0.0),
    ),
    "lenient": Preset(
        name="lenient",
        description="Word level; ignores case, accents and full-width forms.",
        options=HighlightOptions(fold_case=True, fold_diacritics=True, fold_width=True),
    ),
}


def get_preset(name: str) -> Preset:
    key = name.lower()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}")
    return PRESETS[key]


def iter_presets() -> Iterable[Preset]:
    return PRESETS.values()


def parse_color(value: Optional[str]) -> Optional[Color]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if value.startswith("#"):
        hex_value = value[1:]
        if len(hex_value) != 6:
            raise ValueError("Hex colors must be #RRGGBB; set transparency with the opacity option")
        rgb = tuple(int(hex_value[i : i + 2], 16) for i in range(0, 6, 2))
        return tuple(channel / 255.0 for channel in rgb)  # type: ignore[return-value]
    parts = value.replace(";", ",").split(",")
    if len(parts) != 3:
        raise ValueError("RGB colors must provide three comma separated numbers")
    rgb = tuple(float(p.strip()) for p in parts)
    if any(channel > 1.0 for channel in rgb):
        rgb = tuple(channel / 255.0 for channel in rgb)  # type: ignore[assignment]
    return rgb  # type: ignore[return-value]
