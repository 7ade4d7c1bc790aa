"""Configuration helpers for the kaon DCC toy model."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math

from .errors import ConfigurationError


class SplitRounding(str, Enum):
    """How the fractional DCC share of an event's kaons becomes a count."""

    TRUNCATE = "truncate"
    NEAREST = "nearest"
    STOCHASTIC = "stochastic"


def _require_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}.") from exc
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}.")
    return value


@dataclass(frozen=True)
class ToyModelConfig:
    """Encapsulates the production parameters of one simulation configuration."""

    kaon_fraction: float
    dcc_fraction: float
    min_mult: float
    max_mult: float
    rounding: SplitRounding = SplitRounding.TRUNCATE

    def __post_init__(self) -> None:
        kaon_fraction = _require_finite("kaon_fraction", self.kaon_fraction)
        dcc_fraction = _require_finite("dcc_fraction", self.dcc_fraction)
        min_mult = _require_finite("min_mult", self.min_mult)
        max_mult = _require_finite("max_mult", self.max_mult)

        if not 0.0 < kaon_fraction < 1.0:
            raise ConfigurationError("Kaon fraction must lie strictly between 0 and 1.")
        if not 0.0 <= dcc_fraction <= 1.0:
            raise ConfigurationError("DCC fraction must lie in [0, 1].")
        if min_mult < 0:
            raise ConfigurationError("Minimum multiplicity must be non-negative.")
        if min_mult >= max_mult:
            raise ConfigurationError("Minimum multiplicity must be below maximum multiplicity.")
        try:
            rounding = SplitRounding(self.rounding)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown rounding policy {self.rounding!r}.") from exc

        object.__setattr__(self, "kaon_fraction", kaon_fraction)
        object.__setattr__(self, "dcc_fraction", dcc_fraction)
        object.__setattr__(self, "min_mult", min_mult)
        object.__setattr__(self, "max_mult", max_mult)
        object.__setattr__(self, "rounding", rounding)

    @property
    def is_pure_binomial(self) -> bool:
        return self.dcc_fraction == 0.0

    @property
    def is_pure_dcc(self) -> bool:
        return self.dcc_fraction == 1.0

    @property
    def base_name(self) -> str:
        """Prefix used for every artifact produced by this configuration."""
        return (
            f"Kaonf={self.kaon_fraction:.2f}_"
            f"DCCf={self.dcc_fraction:.2f}_"
            f"{self.min_mult:g}M{self.max_mult:g}_"
        )

    def with_updates(self, **changes) -> "ToyModelConfig":
        """Return a validated copy with some parameters replaced."""
        values = {
            "kaon_fraction": self.kaon_fraction,
            "dcc_fraction": self.dcc_fraction,
            "min_mult": self.min_mult,
            "max_mult": self.max_mult,
            "rounding": self.rounding,
        }
        values.update(changes)
        return ToyModelConfig(**values)


def build_default_config(*, rounding: SplitRounding = SplitRounding.TRUNCATE) -> ToyModelConfig:
    """Factory for the reference configuration of the toy model."""
    return ToyModelConfig(
        kaon_fraction=0.3,
        dcc_fraction=0.9,
        min_mult=1.0,
        max_mult=200.0,
        rounding=rounding,
    )
