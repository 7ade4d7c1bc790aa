"""Visualization utilities for DCC toy-model runs and scans."""
from __future__ import annotations

from typing import Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .events import SPECIES
from .recorder import Histogram2D, HistogramRecorder
from .results import ScanResult


__all__ = (
    "plot_multiplicity_distributions",
    "plot_correlation_map",
    "plot_scan",
)

_SPECIES_LABELS = {
    "k": "K",
    "kc": "K$^{c}$",
    "k0": "K$^{0}$",
    "k0s": "K$^{0}_{s}$",
}
_SPECIES_MARKERS = {"k": "o", "kc": "s", "k0": "^", "k0s": "v"}
_PANELS = (
    ("total", "All kaons"),
    ("dcc", "DCC population"),
    ("binomial", "Binomial population"),
)
_RATIO_LABELS = {
    "nu_dyn_ch0": r"$\nu_{c0,dyn}$",
    "nu_dyn_ch0s": r"$\nu_{c0s,dyn}$",
    "r_cc": "$R_{cc}$",
    "r_00": "$R_{00}$",
    "r_0s0s": "$R_{0s0s}$",
    "r_c0": "$R_{c0}$",
    "r_c0s": "$R_{c0s}$",
}


def plot_multiplicity_distributions(
    recorder: HistogramRecorder,
    *,
    normalize: bool = True,
) -> Tuple[plt.Figure, np.ndarray]:
    """Three stacked log-scale panels: all kaons, DCC and binomial populations."""
    source = recorder.normalized() if normalize else recorder
    fig, axes = plt.subplots(3, 1, figsize=(10, 8), sharex=True)
    for ax, (category, title) in zip(axes, _PANELS):
        histograms = source.multiplicity[category]
        for name in SPECIES:
            hist = histograms[name]
            mask = hist.counts > 0
            ax.plot(
                hist.centers[mask],
                hist.counts[mask],
                linestyle="none",
                marker=_SPECIES_MARKERS[name],
                markersize=3,
                label=_SPECIES_LABELS[name],
            )
        ax.set_yscale("log")
        ax.set_title(title)
        ax.set_ylabel("Frequency" if normalize else "Counts")
        ax.grid(True, alpha=0.2)
        ax.legend(ncol=4, fontsize="small")
    axes[-1].set_xlabel("Multiplicity")
    fig.tight_layout()
    return fig, axes


def plot_correlation_map(
    histogram: Histogram2D,
    *,
    ylabel: str = "k0",
    ax: plt.Axes | None = None,
) -> Tuple[plt.Figure, plt.Axes]:
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))
    else:
        fig = ax.figure

    edges = histogram.edges
    filled = bool(np.any(histogram.counts > 0))
    counts = np.ma.masked_less_equal(histogram.counts.T, 0.0) if filled else histogram.counts.T
    mesh = ax.pcolormesh(edges, edges, counts, shading="flat", norm="log" if filled else None)
    fig.colorbar(mesh, ax=ax)
    ax.set_xlabel("kc")
    ax.set_ylabel(ylabel)
    ax.set_title(f"kc vs {ylabel}")
    return fig, ax


def plot_scan(
    scan: ScanResult,
    *,
    ratios: Sequence[str] = ("nu_dyn_ch0", "nu_dyn_ch0s"),
    ylim: tuple[float, float] | None = (-2.0, 2.0),
    ax: plt.Axes | None = None,
) -> Tuple[plt.Figure, plt.Axes]:
    """Plot ratios against the scan variable; undefined points are left out."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 8))
    else:
        fig = ax.figure

    values = np.asarray(scan.values, dtype=float)
    for name in ratios:
        series = scan.series(name)
        defined = [index for index, value in enumerate(series) if value is not None]
        ax.plot(
            values[defined],
            [series[index] for index in defined],
            marker="o",
            linewidth=1.1,
            label=_RATIO_LABELS.get(name, name),
        )

    xlabel = "DCC fraction" if scan.variable == "dcc_fraction" else "Multiplicity"
    ax.set_xlabel(xlabel)
    ax.set_ylabel(r"$\nu_{dyn}$" if all(name.startswith("nu_dyn") for name in ratios) else "R")
    ax.set_title(f"{', '.join(_RATIO_LABELS.get(name, name) for name in ratios)} vs. {xlabel}")
    if ylim is not None:
        ax.set_ylim(*ylim)
    ax.grid(True, alpha=0.2)
    ax.legend()
    return fig, ax
