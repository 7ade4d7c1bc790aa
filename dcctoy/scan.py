"""Parameter scans over multiplicity windows and DCC fraction."""
from __future__ import annotations

from typing import Callable, Optional, Sequence

import numpy as np
import torch
from loguru import logger

from .config import SplitRounding, ToyModelConfig
from .random_stream import RandomStream
from .results import ScanPoint, ScanResult, SimulationResult
from .simulator import DccSimulator

DEFAULT_DCC_FRACTIONS: tuple[float, ...] = tuple(round(0.1 * step, 1) for step in range(11))
DCC_SCAN_WINDOW: tuple[float, float] = (800.0, 1000.0)


def multiplicity_windows(n_windows: int = 5, *, start: float = 1.0, width: float = 200.0) -> list[tuple[float, float]]:
    if n_windows <= 0:
        raise ValueError("Number of windows must be positive.")
    if width <= 0:
        raise ValueError("Window width must be positive.")
    return [(start + width * index, start + width * (index + 1)) for index in range(n_windows)]


def _run_point(
    config: ToyModelConfig,
    n_events: int,
    seed: int,
    vectorized: bool,
    dtype: torch.dtype,
) -> SimulationResult:
    simulator = DccSimulator(config, RandomStream(seed, dtype=dtype))
    if vectorized:
        return simulator.run_batched(n_events)
    return simulator.run(n_events)


def _scan(
    variable: str,
    values: Sequence[float],
    configs: Sequence[ToyModelConfig],
    *,
    n_events: int,
    seed: Optional[int],
    vectorized: bool,
    dtype: torch.dtype,
    progress: Callable[[ScanPoint], None] | None,
) -> ScanResult:
    seeds = [
        int(child.generate_state(1, dtype=np.uint64)[0])
        for child in np.random.SeedSequence(seed).spawn(len(configs))
    ]
    result = ScanResult(variable=variable)
    for value, config, point_seed in zip(values, configs, seeds):
        run = _run_point(config, n_events, point_seed, vectorized, dtype)
        point = ScanPoint(value=value, config=config, summary=run.summary)
        result.points.append(point)
        nu_ch0 = point.summary.ratios["nu_dyn_ch0"]
        nu_ch0s = point.summary.ratios["nu_dyn_ch0s"]
        logger.info("{}={}: nu_dyn_ch0={} nu_dyn_ch0s={}", variable, value, nu_ch0, nu_ch0s)
        if progress is not None:
            progress(point)
    return result


def scan_multiplicity(
    *,
    kaon_fraction: float = 0.3,
    dcc_fraction: float = 0.0,
    windows: Sequence[tuple[float, float]] | None = None,
    n_events: int = 1000,
    seed: Optional[int] = None,
    rounding: SplitRounding = SplitRounding.TRUNCATE,
    vectorized: bool = False,
    dtype: torch.dtype = torch.float64,
    progress: Callable[[ScanPoint], None] | None = None,
) -> ScanResult:
    """Run one configuration per multiplicity window; points sit at window centres."""
    windows = list(windows) if windows is not None else multiplicity_windows()
    configs = [
        ToyModelConfig(
            kaon_fraction=kaon_fraction,
            dcc_fraction=dcc_fraction,
            min_mult=low,
            max_mult=high,
            rounding=rounding,
        )
        for low, high in windows
    ]
    centres = [0.5 * (low + high) for low, high in windows]
    return _scan(
        "multiplicity",
        centres,
        configs,
        n_events=n_events,
        seed=seed,
        vectorized=vectorized,
        dtype=dtype,
        progress=progress,
    )


def scan_dcc_fraction(
    *,
    kaon_fraction: float = 0.3,
    fractions: Sequence[float] = DEFAULT_DCC_FRACTIONS,
    min_mult: float = DCC_SCAN_WINDOW[0],
    max_mult: float = DCC_SCAN_WINDOW[1],
    n_events: int = 1000,
    seed: Optional[int] = None,
    rounding: SplitRounding = SplitRounding.TRUNCATE,
    vectorized: bool = False,
    dtype: torch.dtype = torch.float64,
    progress: Callable[[ScanPoint], None] | None = None,
) -> ScanResult:
    configs = [
        ToyModelConfig(
            kaon_fraction=kaon_fraction,
            dcc_fraction=fraction,
            min_mult=min_mult,
            max_mult=max_mult,
            rounding=rounding,
        )
        for fraction in fractions
    ]
    return _scan(
        "dcc_fraction",
        list(fractions),
        configs,
        n_events=n_events,
        seed=seed,
        vectorized=vectorized,
        dtype=dtype,
        progress=progress,
    )
