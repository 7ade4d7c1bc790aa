"""Runtime helpers shared by the CLI and the interactive wizard."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import torch

from .config import SplitRounding, ToyModelConfig
from .random_stream import RandomStream
from .recorder import HistogramRecorder
from .scan import DCC_SCAN_WINDOW
from .simulator import DccSimulator

DEFAULT_WINDOW: tuple[float, float] = (1.0, 200.0)


@dataclass(frozen=True)
class SimulationContext:
    """Holds the configured simulator and metadata for a run."""

    config: ToyModelConfig
    simulator: DccSimulator
    recorder: Optional[HistogramRecorder]
    save_dir: Path


def precision_to_dtype(precision: str) -> torch.dtype:
    return torch.float64 if precision == "float64" else torch.float32


def manual_seed_or_random(generator: torch.Generator, seed: Optional[int]) -> None:
    if seed is not None:
        generator.manual_seed(seed)
    else:
        generator.seed()


def resolve_window(
    scan: str, min_mult: Optional[float], max_mult: Optional[float]
) -> tuple[float, float]:
    """Fill unset window edges with the defaults of the selected run mode."""
    low, high = DCC_SCAN_WINDOW if scan == "dcc" else DEFAULT_WINDOW
    return (low if min_mult is None else min_mult, high if max_mult is None else max_mult)


def build_config(
    *,
    kaon_fraction: float,
    dcc_fraction: float,
    min_mult: float,
    max_mult: float,
    rounding: str,
) -> ToyModelConfig:
    return ToyModelConfig(
        kaon_fraction=kaon_fraction,
        dcc_fraction=dcc_fraction,
        min_mult=min_mult,
        max_mult=max_mult,
        rounding=SplitRounding(rounding),
    )


def build_recorder(hist_bins: int) -> HistogramRecorder:
    """Unit-width multiplicity bins starting at zero."""
    return HistogramRecorder(n_bins=hist_bins, min_mult=0.0, max_mult=float(hist_bins))


def create_simulation_context(
    *,
    kaon_fraction: float,
    dcc_fraction: float,
    min_mult: float,
    max_mult: float,
    rounding: str,
    precision: str,
    seed: Optional[int],
    record_histograms: bool,
    hist_bins: int,
    debug: bool,
    save_dir: Path,
) -> SimulationContext:
    config = build_config(
        kaon_fraction=kaon_fraction,
        dcc_fraction=dcc_fraction,
        min_mult=min_mult,
        max_mult=max_mult,
        rounding=rounding,
    )

    generator = torch.Generator(device="cpu")
    manual_seed_or_random(generator, seed)
    stream = RandomStream(generator=generator, dtype=precision_to_dtype(precision))

    recorder = build_recorder(hist_bins) if record_histograms else None

    simulator = DccSimulator(
        config,
        stream,
        recorders=() if recorder is None else (recorder,),
        debug=debug,
    )
    return SimulationContext(
        config=config,
        simulator=simulator,
        recorder=recorder,
        save_dir=save_dir.expanduser(),
    )


def fmt(value: Optional[float]) -> str:
    if value is None:
        return "undefined"
    return f"{value:.6f}"
