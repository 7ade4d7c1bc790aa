"""Event records produced by the kaon generator."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

import torch

SPECIES: tuple[str, ...] = ("k", "k0", "k0s", "kc")
CATEGORIES: tuple[str, ...] = ("total", "binomial", "dcc")


def _fraction(numerator: int, denominator: int) -> Optional[float]:
    if denominator == 0:
        return None
    return numerator / denominator


@dataclass(frozen=True)
class SpeciesCounts:
    """Kaon counts of one population split by charge and neutral subtype."""

    k: int = 0
    k0: int = 0
    k0s: int = 0
    kc: int = 0

    def __post_init__(self) -> None:
        for name in SPECIES:
            value = getattr(self, name)
            if int(value) != value:
                raise ValueError(f"{name} must be an integer count, got {value!r}.")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}.")
            object.__setattr__(self, name, int(value))
        if self.k0 + self.kc != self.k:
            raise ValueError(f"Neutral ({self.k0}) and charged ({self.kc}) counts must sum to k={self.k}.")
        if self.k0s > self.k0:
            raise ValueError(f"k0s={self.k0s} exceeds k0={self.k0}.")

    @classmethod
    def from_neutral(cls, k: int, k0: int, k0s: int) -> "SpeciesCounts":
        """Build from total and neutral counts; charged kaons take the remainder."""
        return cls(k=k, k0=k0, k0s=k0s, kc=k - k0)

    def __add__(self, other: "SpeciesCounts") -> "SpeciesCounts":
        if not isinstance(other, SpeciesCounts):
            return NotImplemented
        return SpeciesCounts(
            k=self.k + other.k,
            k0=self.k0 + other.k0,
            k0s=self.k0s + other.k0s,
            kc=self.kc + other.kc,
        )

    @property
    def k0_fraction(self) -> Optional[float]:
        """Neutral share of the population; ``None`` when it is empty."""
        return _fraction(self.k0, self.k)

    @property
    def k0s_fraction(self) -> Optional[float]:
        return _fraction(self.k0s, self.k)

    def as_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in SPECIES}


@dataclass(frozen=True)
class Event:
    """One generated collision: the binomial and DCC populations and their sum."""

    centrality: float
    binomial: SpeciesCounts
    dcc: SpeciesCounts
    total: SpeciesCounts = field(init=False)

    def __post_init__(self) -> None:
        if self.centrality < 0:
            raise ValueError("Centrality must be non-negative.")
        object.__setattr__(self, "total", self.binomial + self.dcc)

    @property
    def k(self) -> int:
        return self.total.k

    @property
    def k0(self) -> int:
        return self.total.k0

    @property
    def k0s(self) -> int:
        return self.total.k0s

    @property
    def kc(self) -> int:
        return self.total.kc

    @property
    def k0_fraction(self) -> Optional[float]:
        return self.total.k0_fraction

    @property
    def k0s_fraction(self) -> Optional[float]:
        return self.total.k0s_fraction

    def category(self, name: str) -> SpeciesCounts:
        if name not in CATEGORIES:
            raise KeyError(f"Unknown category {name!r}; expected one of {CATEGORIES}.")
        return getattr(self, name)

    def describe(self) -> str:
        """Multi-line dump of every count and fraction, for debug output."""
        lines = [f"centrality: {self.centrality:.4f}"]
        for category in CATEGORIES:
            counts = self.category(category)
            parts = ", ".join(f"{name}={value}" for name, value in counts.as_dict().items())
            k0_frac = counts.k0_fraction
            k0s_frac = counts.k0s_fraction
            lines.append(
                f"{category:>9}: {parts}, "
                f"k0/k={'undefined' if k0_frac is None else f'{k0_frac:.4f}'}, "
                f"k0s/k={'undefined' if k0s_frac is None else f'{k0s_frac:.4f}'}"
            )
        return "\n".join(lines)


@dataclass
class SpeciesColumns:
    """Column-wise counts of one population over a batch of events."""

    k: torch.Tensor
    k0: torch.Tensor
    k0s: torch.Tensor
    kc: torch.Tensor

    def __add__(self, other: "SpeciesColumns") -> "SpeciesColumns":
        return SpeciesColumns(
            k=self.k + other.k,
            k0=self.k0 + other.k0,
            k0s=self.k0s + other.k0s,
            kc=self.kc + other.kc,
        )

    def row(self, index: int) -> SpeciesCounts:
        return SpeciesCounts(
            k=int(self.k[index]),
            k0=int(self.k0[index]),
            k0s=int(self.k0s[index]),
            kc=int(self.kc[index]),
        )


@dataclass
class EventBatch:
    """A block of events generated together by the vectorized generator."""

    centrality: torch.Tensor
    binomial: SpeciesColumns
    dcc: SpeciesColumns
    total: SpeciesColumns = field(init=False)

    def __post_init__(self) -> None:
        self.total = self.binomial + self.dcc

    def __len__(self) -> int:
        return int(self.centrality.shape[0])

    def __iter__(self) -> Iterator[Event]:
        for index in range(len(self)):
            yield self.event(index)

    def event(self, index: int) -> Event:
        return Event(
            centrality=float(self.centrality[index]),
            binomial=self.binomial.row(index),
            dcc=self.dcc.row(index),
        )

    def category(self, name: str) -> SpeciesColumns:
        if name not in CATEGORIES:
            raise KeyError(f"Unknown category {name!r}; expected one of {CATEGORIES}.")
        return getattr(self, name)
