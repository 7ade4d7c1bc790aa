"""Seedable uniform and binomial deviates backed by a private torch generator."""
from __future__ import annotations

from typing import Optional

import torch


class RandomStream:
    """Owned source of uniform and binomial deviates.

    Each stream wraps its own ``torch.Generator``; nothing here touches the
    global torch RNG, so two streams with different seeds are independent and
    a stream with a fixed seed replays the same sequence of draws.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        generator: torch.Generator | None = None,
        dtype: torch.dtype = torch.float64,
    ) -> None:
        if generator is None:
            generator = torch.Generator(device="cpu")
            if seed is not None:
                generator.manual_seed(seed)
            else:
                generator.seed()
        elif seed is not None:
            generator.manual_seed(seed)
        self.generator = generator
        self.dtype = dtype
        self.seed = generator.initial_seed()

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        """Single deviate from Uniform[low, high)."""
        u = torch.rand((1,), generator=self.generator, dtype=self.dtype)
        return low + (high - low) * float(u.item())

    def binomial(self, n: int, p: float) -> int:
        """Single deviate from Binomial(n, p)."""
        if n < 0:
            raise ValueError("Binomial trial count must be non-negative.")
        if not 0.0 <= p <= 1.0:
            raise ValueError("Binomial probability must lie in [0, 1].")
        count = torch.full((1,), float(n), dtype=self.dtype)
        prob = torch.full((1,), float(p), dtype=self.dtype)
        return int(torch.binomial(count, prob, generator=self.generator).item())

    def uniform_batch(self, size: int, low: float = 0.0, high: float = 1.0) -> torch.Tensor:
        u = torch.rand((size,), generator=self.generator, dtype=self.dtype)
        return low + (high - low) * u

    def binomial_batch(self, counts: torch.Tensor, p: float) -> torch.Tensor:
        """Element-wise Binomial(counts[i], p) draws, returned as int64."""
        count = counts.to(dtype=self.dtype)
        if torch.any(count < 0):
            raise ValueError("Binomial trial counts must be non-negative.")
        prob = torch.full_like(count, float(p))
        return torch.binomial(count, prob, generator=self.generator).to(torch.int64)
