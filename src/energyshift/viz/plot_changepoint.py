"""Plot an analysed series with its segment means and changepoint."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt

from ..pipeline import AnalysisResult
from .styles import ADJUSTED_COLOR, RAW_COLOR, SEGMENT_COLOR, apply_style


def plot_analysis(
    result: AnalysisResult,
    ax: plt.Axes | None = None,
    *,
    title: str | None = None,
    ylabel: str = "Energy",
) -> plt.Axes:
    """Draw raw and de-seasonalised values, segment means and the changepoint.

    A new figure is created when ``ax`` is not given.  The axes are returned
    so callers can add annotations before saving.
    """

    if ax is None:
        apply_style()
        _, ax = plt.subplots()

    stamps = result.series.timestamps
    if result.decomposition is not None:
        ax.plot(stamps, result.series.values, color=RAW_COLOR, label="raw")
        ax.plot(stamps, result.adjusted, color=ADJUSTED_COLOR, label="de-seasonalised")
    else:
        ax.plot(stamps, result.adjusted, color=ADJUSTED_COLOR, label="raw")

    for seg in result.segments:
        ax.hlines(
            seg.mean,
            stamps[seg.start],
            stamps[seg.end - 1],
            colors=SEGMENT_COLOR,
            linewidth=2.0,
        )

    if result.changepoint_date is not None:
        ax.axvline(result.changepoint_date, color=SEGMENT_COLOR, linestyle=":", label="changepoint")

    ax.set_title(title or "Changepoint analysis")
    ax.set_xlabel("Date")
    ax.set_ylabel(ylabel)
    ax.legend()
    return ax


def save_or_show(fig: plt.Figure, save: str | Path | None = None, show: bool = False) -> None:
    """Save ``fig`` to ``save`` or display it interactively.

    If ``save`` is ``None`` the figure is shown; when both ``save`` and
    ``show`` are given it is saved first and then shown.
    """
    if save:
        fig.savefig(save, bbox_inches="tight")
    if show or not save:
        plt.show()
