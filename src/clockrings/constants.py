"""Clock-face constants and label sizing configuration."""

import os
from dataclasses import dataclass

DEGREES_PER_HOUR = 15.0  # 360° / 24h
REFERENCE_HOUR = 18.0  # 18:00 local sits at angle 0

# Ring radii relative to the clock's base radius
OUTER_LABEL_RING_RADIUS = 0.95  # orbit 1
MIDDLE_LABEL_RING_RADIUS = 0.83  # orbit 2

LABEL_RING_FONT_SIZE_RATIO = 0.06  # IATA codes on the label rings
LETTER_SPACING_FACTOR = 0.8
PADDING_FACTOR = 0.5

# Max gap (radians) across the 0/2π seam for first and last clusters to be joined
SEAM_MERGE_TOLERANCE = 0.01

ORBITS = (1, 2)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class LabelMetrics:
    """Relative sizes used to estimate a label's angular width on the dial."""

    font_size_ratio: float = LABEL_RING_FONT_SIZE_RATIO
    letter_spacing_factor: float = LETTER_SPACING_FACTOR
    padding_factor: float = PADDING_FACTOR
    seam_merge_tolerance: float = SEAM_MERGE_TOLERANCE

    @property
    def letter_spacing(self) -> float:
        return self.font_size_ratio * self.letter_spacing_factor

    @property
    def padding(self) -> float:
        return self.letter_spacing * self.padding_factor

    def span(self, code: str) -> float:
        """Angular width (radians) of a label, padding on both sides included.

        An empty code still takes one letter of width.
        """
        text_width = max(1, len(code)) * self.letter_spacing
        return text_width + 2 * self.padding

    @classmethod
    def from_env(cls) -> "LabelMetrics":
        """Build metrics from CLOCKRINGS_* environment variables.

        Raises:
            ValueError: When an override is not a positive number.
        """
        return cls(
            font_size_ratio=_env_float(
                "CLOCKRINGS_FONT_SIZE_RATIO", LABEL_RING_FONT_SIZE_RATIO
            ),
            letter_spacing_factor=_env_float(
                "CLOCKRINGS_LETTER_SPACING_FACTOR", LETTER_SPACING_FACTOR
            ),
            padding_factor=_env_float("CLOCKRINGS_PADDING_FACTOR", PADDING_FACTOR),
            seam_merge_tolerance=_env_float(
                "CLOCKRINGS_SEAM_TOLERANCE", SEAM_MERGE_TOLERANCE
            ),
        )


def log_level() -> str:
    return os.environ.get("CLOCKRINGS_LOG_LEVEL", "WARNING").upper()
