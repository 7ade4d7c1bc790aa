"""Event loop tying the generator, the moments accumulator and the recorders together."""
from __future__ import annotations

from typing import Iterable, Iterator

from loguru import logger

from .config import ToyModelConfig
from .errors import ConfigurationError
from .events import Event
from .generator import EventGenerator
from .moments import MomentsAccumulator
from .random_stream import RandomStream
from .recorder import DistributionRecorder
from .results import SimulationResult

DEFAULT_BATCH_SIZE = 100_000


def _check_event_count(n_events: int) -> None:
    if isinstance(n_events, bool) or not isinstance(n_events, int):
        raise ConfigurationError(f"Number of events must be an integer, got {n_events!r}.")
    if n_events <= 0:
        raise ConfigurationError("Number of events must be positive.")


class DccSimulator:
    """Generates kaon events and folds them into moments for one configuration.

    Repeated calls to :meth:`run` keep accumulating into the same
    accumulator; call ``simulator.accumulator.reset()`` to start over.
    """

    def __init__(
        self,
        config: ToyModelConfig,
        stream: RandomStream | None = None,
        *,
        recorders: Iterable[DistributionRecorder] = (),
        debug: bool = False,
    ) -> None:
        self.config = config
        self.generator = EventGenerator(config, stream)
        self.accumulator = MomentsAccumulator()
        self.recorders = list(recorders)
        self.debug = debug
        logger.info(
            "Simulator set up: kaon_fraction={} dcc_fraction={} min_mult={} max_mult={}",
            config.kaon_fraction,
            config.dcc_fraction,
            config.min_mult,
            config.max_mult,
        )

    @property
    def stream(self) -> RandomStream:
        return self.generator.stream

    def _dispatch(self, event: Event) -> None:
        self.accumulator.add(event)
        for recorder in self.recorders:
            recorder.notify(event)
        if self.debug:
            logger.debug("Generated event\n{}", event.describe())

    def iter_events(self, n_events: int) -> Iterator[Event]:
        """Yield ``n_events`` events, each already folded and recorded.

        The count is validated on call, before the first event is drawn.
        """
        _check_event_count(n_events)
        return self._generate_events(n_events)

    def _generate_events(self, n_events: int) -> Iterator[Event]:
        for _ in range(n_events):
            event = self.generator.generate()
            self._dispatch(event)
            yield event

    def run(self, n_events: int) -> SimulationResult:
        _check_event_count(n_events)
        logger.info("Generating {} events.", n_events)
        for _ in self._generate_events(n_events):
            pass
        return self._finish()

    def run_batched(self, n_events: int, *, batch_size: int = DEFAULT_BATCH_SIZE) -> SimulationResult:
        """Vectorized run; same distributions as :meth:`run`, different draw order."""
        _check_event_count(n_events)
        if batch_size <= 0:
            raise ConfigurationError("Batch size must be positive.")
        logger.info("Generating {} events in batches of {}.", n_events, batch_size)
        remaining = n_events
        while remaining > 0:
            size = min(batch_size, remaining)
            batch = self.generator.generate_batch(size)
            self.accumulator.add_batch(batch)
            if self.recorders or self.debug:
                for event in batch:
                    for recorder in self.recorders:
                        recorder.notify(event)
                    if self.debug:
                        logger.debug("Generated event\n{}", event.describe())
            remaining -= size
        return self._finish()

    def _finish(self) -> SimulationResult:
        summary = self.accumulator.finalize()
        logger.info("Run complete after {} events.", summary.n_events)
        return SimulationResult(
            config=self.config,
            summary=summary,
            accumulator=self.accumulator,
            recorders=tuple(self.recorders),
        )
