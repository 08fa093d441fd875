from __future__ import annotations

"""Command line interface for energyshift using Typer."""

from pathlib import Path
from typing import Dict, List, NoReturn, Optional

import csv
import json
import logging
import re

import numpy as np
import typer
from pydantic import ValidationError

from .config import Settings, load_settings
from .core.changepoint import amoc
from .core.decompose import decompose
from .export.report import write_report
from .pipeline import analyze, load_series
from .utils.logging import get_logger

app = typer.Typer(help="Seasonally adjusted changepoint analysis of energy consumption")
logger = logging.getLogger(__name__)


def _parse_override_value(raw: str) -> object:
    lower = raw.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"null", "none"}:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(f"invalid JSON override value: {raw}") from None
    return raw


def _ensure_path(settings: Settings, keys: List[str]) -> None:
    current: object = settings
    for key in keys[:-1]:
        if not hasattr(current, key):
            raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")
        current = getattr(current, key)
    if not hasattr(current, keys[-1]):
        raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")


def _apply_override(data: Dict[str, object], keys: List[str], value: object) -> None:
    target = data
    for key in keys[:-1]:
        existing = target.get(key)
        if not isinstance(existing, dict):
            existing = {}
            target[key] = existing
        target = existing
    target[keys[-1]] = value


def _load_values(path: Path) -> np.ndarray:
    text = path.read_text()
    tokens = [t for t in re.split(r"[,\s]+", text) if t and not t.startswith("#")]
    try:
        return np.array([float(t) for t in tokens], dtype=float)
    except ValueError as exc:
        raise typer.BadParameter(f"{path}: {exc}") from exc


def _penalty_option(penalty: Optional[str], pen_value: Optional[float]) -> Optional[str]:
    # A bare --pen-value means a manual threshold.
    if penalty is None and pen_value is not None:
        return "Manual"
    return penalty


def _fail(exc: Exception, debug: bool) -> NoReturn:
    if debug:
        logger.exception("analysis failed")
        raise exc
    typer.secho(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        file_okay=True,
        exists=False,
        help="Path to a YAML or JSON configuration file.",
    ),
    set_overrides: List[str] = typer.Option(
        [],
        "--set",
        help="Override configuration values using dotted paths, e.g. decomposition.period=13",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialise the Typer context with validated settings."""

    get_logger("energyshift", level=logging.DEBUG if verbose else logging.WARNING)

    if config is not None and not config.exists():
        raise typer.BadParameter(f"configuration file not found: {config}")

    try:
        if config:
            settings = load_settings(config)
        elif isinstance(ctx.obj, Settings):
            settings = ctx.obj
        else:
            settings = Settings()
    except (FileNotFoundError, RuntimeError, TypeError, ValidationError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"failed to load configuration: {exc}") from exc

    if set_overrides:
        data = settings.model_dump()
        for override in set_overrides:
            if "=" not in override:
                raise typer.BadParameter(
                    "overrides must be of the form --set section.key=value"
                )
            key, raw_value = override.split("=", 1)
            if not key:
                raise typer.BadParameter("override key cannot be empty")
            keys = key.split(".")
            _ensure_path(settings, keys)
            value = _parse_override_value(raw_value)
            _apply_override(data, keys, value)
        try:
            settings = Settings.model_validate(data)
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid configuration override: {exc}") from exc

    ctx.obj = settings


@app.command("analyze")
def analyze_cmd(
    ctx: typer.Context,
    csv_path: Optional[Path] = typer.Argument(None, dir_okay=False, help="Readings CSV; defaults to dataset.path"),
    period: Optional[int] = typer.Option(None, "--period", "-p", help="Samples per seasonal cycle"),
    penalty: Optional[str] = typer.Option(None, "--penalty", help="MBIC, BIC, SIC, AIC, Hannan-Quinn, Manual or None"),
    pen_value: Optional[float] = typer.Option(None, "--pen-value", help="Manual threshold; implies --penalty Manual when no penalty is given"),
    no_seasonal: bool = typer.Option(False, "--no-seasonal", help="Skip the seasonal decomposition"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write a JSON or CSV report"),
    plot: bool = typer.Option(False, "--plot/--no-plot", help="Render the analysis with matplotlib"),
    debug: bool = typer.Option(False, "--debug", help="Show tracebacks on failure"),
) -> None:
    """Resample a readings CSV, remove seasonality and report the changepoint."""

    cfg: Settings = ctx.obj
    path = csv_path or (Path(cfg.dataset.path) if cfg.dataset.path else None)
    if path is None:
        raise typer.BadParameter("no input file given and dataset.path is unset")
    if not path.exists():
        raise typer.BadParameter(f"input file not found: {path}")
    penalty = _penalty_option(penalty, pen_value)

    try:
        series = load_series(path, cfg)
        result = analyze(
            series,
            period=period,
            penalty=penalty,
            pen_value=pen_value,
            deseasonalize=False if no_seasonal else None,
            settings=cfg,
        )
    except ValueError as exc:
        _fail(exc, debug)

    cp = result.changepoint
    if result.changepoint_date is None:
        typer.echo(
            f"No changepoint detected in {cp.n} samples "
            f"(best statistic {cp.statistic:.4g} <= penalty {cp.penalty:.4g})"
        )
    else:
        date = np.datetime_as_string(result.changepoint_date, unit="D")
        change = result.relative_change
        change_txt = f", change {change:+.1%}" if change is not None else ""
        typer.echo(
            f"Changepoint at index {cp.index} ({date}): "
            f"mean {cp.mean_before:.4g} -> {cp.mean_after:.4g}{change_txt}"
        )

    report_path = output or (Path(cfg.report.output) if cfg.report.output else None)
    if report_path is not None:
        fmt = None if output is not None else cfg.report.format
        write_report(result, report_path, fmt)
        typer.echo(f"Wrote report to {report_path}")

    if plot:
        try:  # pragma: no cover - optional display
            import matplotlib.pyplot as plt

            from .viz.plot_changepoint import plot_analysis, save_or_show

            ax = plot_analysis(result, title=cfg.viz.title, ylabel=cfg.viz.ylabel)
            save_or_show(ax.figure, cfg.viz.save)
            plt.close(ax.figure)
        except Exception as exc:  # pragma: no cover - graceful fallback
            typer.echo(f"Plotting unavailable: {exc}")


@app.command("decompose")
def decompose_cmd(
    ctx: typer.Context,
    csv_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    period: Optional[int] = typer.Option(None, "--period", "-p"),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
) -> None:
    """Write seasonal, trend and residual components of a readings CSV."""

    cfg: Settings = ctx.obj
    period = period if period is not None else cfg.decomposition.period
    try:
        series = load_series(csv_path, cfg)
        dec = decompose(series.values, period)
    except ValueError as exc:
        _fail(exc, False)

    out = output or csv_path.with_name(f"{csv_path.stem}_components.csv")
    with open(out, "w", encoding="utf8", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(["timestamp", "value", "seasonal", "trend", "residual"])
        for i in range(len(series)):
            writer.writerow(
                [
                    np.datetime_as_string(series.timestamps[i], unit="s"),
                    series.values[i],
                    dec.seasonal[i],
                    "" if np.isnan(dec.trend[i]) else dec.trend[i],
                    "" if np.isnan(dec.residual[i]) else dec.residual[i],
                ]
            )
    typer.echo(f"Decomposed {len(series)} samples with period {period} into {out}")


@app.command("detect")
def detect_cmd(
    ctx: typer.Context,
    values_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    penalty: Optional[str] = typer.Option(None, "--penalty"),
    pen_value: Optional[float] = typer.Option(None, "--pen-value"),
) -> None:
    """Search a plain list of numbers for a single shift in mean.

    Prints the 0-based index of the first sample after the shift, or
    ``none``.
    """

    cfg: Settings = ctx.obj
    values = _load_values(values_file)
    penalty = _penalty_option(penalty, pen_value)
    try:
        result = amoc(
            values,
            penalty=penalty or cfg.detection.penalty,
            pen_value=pen_value if pen_value is not None else cfg.detection.pen_value,
            min_seg_len=cfg.detection.min_seg_len,
        )
    except ValueError as exc:
        _fail(exc, False)
    typer.echo("none" if result.index is None else str(result.index))


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
