"""Embarrassingly parallel accumulation with a single merge before finalize."""
from __future__ import annotations

from concurrent.futures import Executor, ProcessPoolExecutor
from typing import Optional

import numpy as np
import torch
from loguru import logger

from .config import ToyModelConfig
from .errors import ConfigurationError
from .events import Event
from .generator import EventGenerator
from .moments import MomentsAccumulator, RunningSums
from .random_stream import RandomStream
from .recorder import HistogramRecorder
from .results import SimulationResult


def partition_events(n_events: int, n_workers: int) -> list[int]:
    """Split ``n_events`` into at most ``n_workers`` near-equal positive shares."""
    if n_events <= 0:
        raise ConfigurationError("Number of events must be positive.")
    if n_workers <= 0:
        raise ConfigurationError("Number of workers must be positive.")
    base, remainder = divmod(n_events, n_workers)
    shares = [base + (1 if index < remainder else 0) for index in range(n_workers)]
    return [share for share in shares if share > 0]


def worker_seeds(seed: Optional[int], n_workers: int) -> list[int]:
    """Independent per-worker seeds spawned from one root seed."""
    children = np.random.SeedSequence(seed).spawn(n_workers)
    return [int(child.generate_state(1, dtype=np.uint64)[0]) for child in children]


def accumulate_events(
    config: ToyModelConfig,
    n_events: int,
    seed: int,
    vectorized: bool = False,
    *,
    dtype: torch.dtype = torch.float64,
    recorder: HistogramRecorder | None = None,
    debug: bool = False,
) -> RunningSums:
    """Worker body: generate ``n_events`` on a private stream and return the raw sums.

    ``recorder`` is notified in place with every event of this share.
    """
    generator = EventGenerator(config, RandomStream(seed, dtype=dtype))
    accumulator = MomentsAccumulator()

    def observe(event: Event) -> None:
        if recorder is not None:
            recorder.notify(event)
        if debug:
            logger.debug("Generated event\n{}", event.describe())

    if vectorized:
        batch = generator.generate_batch(n_events)
        accumulator.add_batch(batch)
        if recorder is not None or debug:
            for event in batch:
                observe(event)
    else:
        for _ in range(n_events):
            event = generator.generate()
            accumulator.add(event)
            observe(event)
    return accumulator.sums


def _worker(
    config: ToyModelConfig,
    n_events: int,
    seed: int,
    vectorized: bool,
    dtype: torch.dtype,
    template: HistogramRecorder | None,
    debug: bool,
) -> tuple[RunningSums, HistogramRecorder | None]:
    recorder = template.empty_like() if template is not None else None
    sums = accumulate_events(
        config, n_events, seed, vectorized, dtype=dtype, recorder=recorder, debug=debug
    )
    return sums, recorder


def run_parallel(
    config: ToyModelConfig,
    n_events: int,
    *,
    n_workers: int = 4,
    seed: Optional[int] = None,
    vectorized: bool = False,
    dtype: torch.dtype = torch.float64,
    recorder: HistogramRecorder | None = None,
    debug: bool = False,
    executor: Executor | None = None,
) -> SimulationResult:
    """Run ``n_events`` across workers and finalize the merged sums once.

    Each worker books into its own empty copy of ``recorder``; the copies are
    merged into ``recorder`` after all workers finish.
    """
    shares = partition_events(n_events, n_workers)
    seeds = worker_seeds(seed, len(shares))
    logger.info("Running {} events across {} workers.", n_events, len(shares))

    owns_executor = executor is None
    if executor is None:
        executor = ProcessPoolExecutor(max_workers=len(shares))
    try:
        futures = [
            executor.submit(_worker, config, share, worker_seed, vectorized, dtype, recorder, debug)
            for share, worker_seed in zip(shares, seeds)
        ]
        accumulator = MomentsAccumulator()
        for future in futures:
            sums, booked = future.result()
            accumulator.merge(sums)
            if recorder is not None:
                recorder.merge(booked)
    finally:
        if owns_executor:
            executor.shutdown()

    summary = accumulator.finalize()
    return SimulationResult(
        config=config,
        summary=summary,
        accumulator=accumulator,
        recorders=() if recorder is None else (recorder,),
    )
