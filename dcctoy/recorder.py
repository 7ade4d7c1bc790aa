"""Distribution recorders notified with every generated event."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np

from .events import CATEGORIES, SPECIES, Event


@runtime_checkable
class DistributionRecorder(Protocol):
    """Receives each event exactly once, in generation order."""

    def notify(self, event: Event) -> None:
        ...


def _bin_edges(n_bins: int, low: float, high: float) -> np.ndarray:
    if n_bins <= 0:
        raise ValueError("Histogram needs at least one bin.")
    if low >= high:
        raise ValueError("Histogram lower edge must be below upper edge.")
    return np.linspace(low, high, n_bins + 1)


def _locate(edges: np.ndarray, value: float) -> int:
    # Bins are half-open [edge_i, edge_i+1); callers reject values outside [low, high).
    return int(np.searchsorted(edges, value, side="right")) - 1


@dataclass
class Histogram1D:
    """Fixed-width histogram with explicit underflow and overflow counters."""

    n_bins: int
    low: float
    high: float
    counts: np.ndarray = field(init=False)
    edges: np.ndarray = field(init=False, repr=False)
    underflow: float = 0.0
    overflow: float = 0.0

    def __post_init__(self) -> None:
        self.edges = _bin_edges(self.n_bins, self.low, self.high)
        self.counts = np.zeros(self.n_bins, dtype=float)

    @property
    def centers(self) -> np.ndarray:
        return 0.5 * (self.edges[:-1] + self.edges[1:])

    def fill(self, value: float) -> None:
        if value < self.low:
            self.underflow += 1
        elif value >= self.high:
            self.overflow += 1
        else:
            self.counts[_locate(self.edges, value)] += 1.0

    def merge(self, other: "Histogram1D") -> None:
        if (self.n_bins, self.low, self.high) != (other.n_bins, other.low, other.high):
            raise ValueError("Cannot merge histograms with different binning.")
        self.counts += other.counts
        self.underflow += other.underflow
        self.overflow += other.overflow

    def scaled(self, factor: float) -> "Histogram1D":
        copy = Histogram1D(
            self.n_bins,
            self.low,
            self.high,
            underflow=self.underflow * factor,
            overflow=self.overflow * factor,
        )
        copy.counts = self.counts * factor
        return copy


@dataclass
class Histogram2D:
    n_bins: int
    low: float
    high: float
    counts: np.ndarray = field(init=False)
    edges: np.ndarray = field(init=False, repr=False)
    outside: float = 0.0

    def __post_init__(self) -> None:
        self.edges = _bin_edges(self.n_bins, self.low, self.high)
        self.counts = np.zeros((self.n_bins, self.n_bins), dtype=float)

    def fill(self, x: float, y: float) -> None:
        if not (self.low <= x < self.high and self.low <= y < self.high):
            self.outside += 1
            return
        self.counts[_locate(self.edges, x), _locate(self.edges, y)] += 1.0

    def merge(self, other: "Histogram2D") -> None:
        if (self.n_bins, self.low, self.high) != (other.n_bins, other.low, other.high):
            raise ValueError("Cannot merge histograms with different binning.")
        self.counts += other.counts
        self.outside += other.outside

    def scaled(self, factor: float) -> "Histogram2D":
        copy = Histogram2D(self.n_bins, self.low, self.high, outside=self.outside * factor)
        copy.counts = self.counts * factor
        return copy


class HistogramRecorder:
    """Books centrality, per-category multiplicity and kc-vs-neutral histograms."""

    def __init__(
        self,
        *,
        n_bins: int = 400,
        min_mult: float = 0.0,
        max_mult: float = 400.0,
        centrality_bins: int = 1000,
        centrality_range: tuple[float, float] = (0.0, 1000.0),
    ) -> None:
        self.n_events = 0
        self.centrality = Histogram1D(centrality_bins, *centrality_range)
        self.multiplicity: dict[str, dict[str, Histogram1D]] = {
            category: {name: Histogram1D(n_bins, min_mult, max_mult) for name in SPECIES}
            for category in CATEGORIES
        }
        self.kc_vs_k0 = Histogram2D(n_bins, min_mult, max_mult)
        self.kc_vs_k0s = Histogram2D(n_bins, min_mult, max_mult)

    def notify(self, event: Event) -> None:
        self.n_events += 1
        self.centrality.fill(event.centrality)
        for category in CATEGORIES:
            counts = event.category(category)
            histograms = self.multiplicity[category]
            for name in SPECIES:
                histograms[name].fill(getattr(counts, name))
        self.kc_vs_k0.fill(event.kc, event.k0)
        self.kc_vs_k0s.fill(event.kc, event.k0s)

    def empty_like(self) -> "HistogramRecorder":
        """Fresh recorder with the same binning and no events."""
        reference = self.kc_vs_k0
        return HistogramRecorder(
            n_bins=reference.n_bins,
            min_mult=reference.low,
            max_mult=reference.high,
            centrality_bins=self.centrality.n_bins,
            centrality_range=(self.centrality.low, self.centrality.high),
        )

    def merge(self, other: "HistogramRecorder") -> "HistogramRecorder":
        """Add another recorder's bookings into this one, in place."""
        self.centrality.merge(other.centrality)
        for category, histograms in self.multiplicity.items():
            for name, hist in histograms.items():
                hist.merge(other.multiplicity[category][name])
        self.kc_vs_k0.merge(other.kc_vs_k0)
        self.kc_vs_k0s.merge(other.kc_vs_k0s)
        self.n_events += other.n_events
        return self

    def normalized(self) -> "HistogramRecorder":
        """Copy with every histogram scaled to per-event frequencies."""
        if self.n_events == 0:
            raise ValueError("No events recorded; cannot normalize.")
        scale = 1.0 / self.n_events
        copy = HistogramRecorder.__new__(HistogramRecorder)
        copy.n_events = self.n_events
        copy.centrality = self.centrality.scaled(scale)
        copy.multiplicity = {
            category: {name: hist.scaled(scale) for name, hist in histograms.items()}
            for category, histograms in self.multiplicity.items()
        }
        copy.kc_vs_k0 = self.kc_vs_k0.scaled(scale)
        copy.kc_vs_k0s = self.kc_vs_k0s.scaled(scale)
        return copy
