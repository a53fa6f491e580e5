"""Light and dark color palettes for the chart.

Series colors follow the original widget: a blue function curve, a red
dashed derivative and a green integral curve. The dark palette keeps the
same hues at higher lightness so they read on a dark background.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

LIGHT_THEME: Mapping[str, str] = MappingProxyType({
    "background":        "#ffffff",
    "axis":              "#333333",
    "text":              "#1a1a2e",
    "grid":              "#e5e7eb",
    "function":          "blue",
    "derivative":        "rgba(255, 0, 0, 0.7)",
    "second_derivative": "rgba(128, 0, 128, 0.7)",
    "integral":          "rgba(0, 128, 0, 0.7)",
    "area":              "rgba(59, 130, 246, 0.25)",
    "points":            "#1d4ed8",
    "pointer":           "#f97316",
    "guide":             "#9ca3af",
    "tangent":           "#f97316",
})

DARK_THEME: Mapping[str, str] = MappingProxyType({
    "background":        "#1e1e2e",
    "axis":              "#9399b2",
    "text":              "#cdd6f4",
    "grid":              "#313244",
    "function":          "#89b4fa",
    "derivative":        "rgba(243, 139, 168, 0.85)",
    "second_derivative": "rgba(203, 166, 247, 0.85)",
    "integral":          "rgba(166, 227, 161, 0.85)",
    "area":              "rgba(137, 180, 250, 0.25)",
    "points":            "#74c7ec",
    "pointer":           "#fab387",
    "guide":             "#6c7086",
    "tangent":           "#fab387",
})


def get_theme(dark_mode: bool) -> Mapping[str, str]:
    return DARK_THEME if dark_mode else LIGHT_THEME


__all__ = ["DARK_THEME", "LIGHT_THEME", "get_theme"]
