"""Muted colours assigned to imported tables."""

from random import Random

MUTED_COLORS = (
    "#d4c5f9",
    "#c5e8f9",
    "#c5f9d4",
    "#f9e8c5",
    "#f9c5d4",
    "#e8c5f9",
    "#c5f9e8",
    "#f9d4c5",
    "#d4f9c5",
    "#c5d4f9",
    "#f9c5e8",
    "#e8f9c5",
    "#c5f9f9",
    "#f9f9c5",
    "#f9c5c5",
    "#c5e8e8",
    "#e8c5e8",
    "#e8e8c5",
    "#c5c5f9",
    "#f9c5f9",
)

_default_rng = Random()  # noqa: S311


def generate_muted_color(rng: Random | None = None) -> str:
    """Pick a palette colour, from ``rng`` when given for reproducible output."""
    return (rng or _default_rng).choice(MUTED_COLORS)
