"""Kaon event generation with a binomial and a DCC population."""
from __future__ import annotations

import math

import torch
from loguru import logger

from .config import SplitRounding, ToyModelConfig
from .errors import ConfigurationError
from .events import Event, EventBatch, SpeciesColumns, SpeciesCounts
from .random_stream import RandomStream

NEUTRAL_PROBABILITY = 0.5
SHORT_LIVED_PROBABILITY = 0.5


class EventGenerator:
    """Produces one synthetic event per call from a private random stream.

    Draw order per event is fixed: centrality, total kaons, the optional
    stochastic-rounding uniform, then the DCC branch (one uniform neutral
    fraction and one binomial for the short-lived share) and finally the
    binomial branch (neutral and short-lived binomials). Empty branches draw
    nothing.
    """

    def __init__(self, config: ToyModelConfig, stream: RandomStream | None = None) -> None:
        if not isinstance(config, ToyModelConfig):
            raise ConfigurationError(f"Expected a ToyModelConfig, got {type(config).__name__}.")
        self.config = config
        self.stream = stream if stream is not None else RandomStream()
        logger.debug(
            "EventGenerator ready: kaon_fraction={} dcc_fraction={} mult=[{}, {}) rounding={} seed={}",
            config.kaon_fraction,
            config.dcc_fraction,
            config.min_mult,
            config.max_mult,
            config.rounding.value,
            self.stream.seed,
        )

    def _dcc_share(self, k: int) -> int:
        if self.config.is_pure_binomial:
            return 0
        if self.config.is_pure_dcc:
            return k
        share = self.config.dcc_fraction * k
        rounding = self.config.rounding
        if rounding is SplitRounding.NEAREST:
            return min(k, int(math.floor(share + 0.5)))
        if rounding is SplitRounding.STOCHASTIC:
            base = math.floor(share)
            return int(base) + int(self.stream.uniform() < share - base)
        return int(share)

    def generate(self) -> Event:
        cfg = self.config
        stream = self.stream

        centrality = stream.uniform(cfg.min_mult, cfg.max_mult)
        k = stream.binomial(int(centrality), cfg.kaon_fraction)

        k_dcc = self._dcc_share(k)
        k_binomial = k - k_dcc

        if k_dcc > 0:
            phi = stream.uniform(0.0, 1.0)
            k0_dcc = int(phi * k_dcc)
            dcc = SpeciesCounts.from_neutral(
                k_dcc, k0_dcc, stream.binomial(k0_dcc, SHORT_LIVED_PROBABILITY)
            )
        else:
            dcc = SpeciesCounts()

        if k_binomial > 0:
            k0_binomial = stream.binomial(k_binomial, NEUTRAL_PROBABILITY)
            binomial = SpeciesCounts.from_neutral(
                k_binomial, k0_binomial, stream.binomial(k0_binomial, SHORT_LIVED_PROBABILITY)
            )
        else:
            binomial = SpeciesCounts()

        return Event(centrality=centrality, binomial=binomial, dcc=dcc)

    def _dcc_share_batch(self, k: torch.Tensor) -> torch.Tensor:
        if self.config.is_pure_binomial:
            return torch.zeros_like(k)
        if self.config.is_pure_dcc:
            return k.clone()
        share = self.config.dcc_fraction * k.to(self.stream.dtype)
        rounding = self.config.rounding
        if rounding is SplitRounding.NEAREST:
            return torch.minimum(torch.floor(share + 0.5).to(torch.int64), k)
        if rounding is SplitRounding.STOCHASTIC:
            base = torch.floor(share)
            bump = self.stream.uniform_batch(k.shape[0]) < (share - base)
            return base.to(torch.int64) + bump.to(torch.int64)
        return torch.floor(share).to(torch.int64)

    def generate_batch(self, n_events: int) -> EventBatch:
        """Vectorized generation of ``n_events`` events.

        Events follow the same distributions as :meth:`generate`, but draws
        are taken stage by stage across the whole batch, so the stream is not
        consumed in per-event order.
        """
        if n_events <= 0:
            raise ConfigurationError("Number of events must be positive.")
        cfg = self.config
        stream = self.stream

        centrality = stream.uniform_batch(n_events, cfg.min_mult, cfg.max_mult)
        k = stream.binomial_batch(torch.floor(centrality), cfg.kaon_fraction)

        k_dcc = self._dcc_share_batch(k)
        k_binomial = k - k_dcc

        phi = stream.uniform_batch(n_events)
        k0_dcc = torch.floor(phi * k_dcc.to(stream.dtype)).to(torch.int64)
        k0s_dcc = stream.binomial_batch(k0_dcc, SHORT_LIVED_PROBABILITY)

        k0_binomial = stream.binomial_batch(k_binomial, NEUTRAL_PROBABILITY)
        k0s_binomial = stream.binomial_batch(k0_binomial, SHORT_LIVED_PROBABILITY)

        return EventBatch(
            centrality=centrality,
            binomial=SpeciesColumns(
                k=k_binomial,
                k0=k0_binomial,
                k0s=k0s_binomial,
                kc=k_binomial - k0_binomial,
            ),
            dcc=SpeciesColumns(
                k=k_dcc,
                k0=k0_dcc,
                k0s=k0s_dcc,
                kc=k_dcc - k0_dcc,
            ),
        )
