"""Shared plotting configuration (style, subgroup palette, font sizes)."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import matplotlib as mpl
import plotly.io as pio
import seaborn as sns


@dataclass
class PlottingConfig:
    """Reusable plotting style shared by the linked views.

    The three subgroup colours are used consistently by every view: the full
    cohort in grey, the pinned group in orange and the live selection in blue.
    """

    style: str = "whitegrid"
    palette: str | list[str] = "tab10"
    font_family: str = "DejaVu Sans"
    font_scale: float = 1.0
    title_size: int = 14
    label_size: int = 12
    tick_size: int = 10
    figure_dpi: int = 100
    context: str = "notebook"
    plotly_template: str = "plotly_white"
    full_cohort_color: str = "#95a5a6"
    pinned_color: str = "#e67e22"
    selected_color: str = "#3498db"
    unselected_opacity: float = 0.25
    marker_size: int = 5
    category_colors: tuple[str, ...] = ("#e74c3c", "#3498db", "#2ecc71", "#f39c12")
    """Colours of the domain values when the projection is coloured by a categorical feature."""
    seaborn_kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def group_colors(self) -> dict[str, str]:
        """Colour per subgroup label, in display order."""
        return {
            "Full Cohort": self.full_cohort_color,
            "Pinned": self.pinned_color,
            "Selected": self.selected_color,
        }

    @property
    def scatter_colors(self) -> dict[str, str]:
        """Colour per ``group`` tag of the comparison scatter."""
        return {"other": self.full_cohort_color, "pinned": self.pinned_color, "selected": self.selected_color}

    def _rc_params(self) -> dict[str, Any]:
        return {
            "axes.titlesize": self.title_size,
            "axes.labelsize": self.label_size,
            "xtick.labelsize": self.tick_size,
            "ytick.labelsize": self.tick_size,
            "figure.dpi": self.figure_dpi,
            "font.family": [self.font_family],
        }

    def apply_global(self) -> None:
        """Apply plotting style globally (no automatic restore).

        For temporary styling (with automatic restoration), use :meth:`apply` instead.
        """
        sns.set_theme(
            style=self.style,
            palette=sns.color_palette(self.palette),
            context=self.context,
            font_scale=self.font_scale,
            **self.seaborn_kwargs,
        )
        mpl.rcParams.update(self._rc_params())
        pio.templates.default = self.plotly_template

    @contextmanager
    def apply(self) -> Generator[None]:
        """Apply style within a context, restoring previous rcParams afterwards."""
        prev_rc = mpl.rcParams.copy()
        prev_plotly_template = pio.templates.default
        self.apply_global()
        try:
            yield
        finally:
            pio.templates.default = prev_plotly_template
            mpl.rcParams.update(prev_rc)


# Default configuration used across plotting functions
DEFAULT_PLOT_CFG = PlottingConfig()


__all__ = ["DEFAULT_PLOT_CFG", "PlottingConfig"]
