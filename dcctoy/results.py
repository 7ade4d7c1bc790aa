"""Result dataclasses for DCC toy-model runs and scans."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from .config import ToyModelConfig
from .moments import FluctuationSummary, MomentsAccumulator
from .recorder import DistributionRecorder


@dataclass
class SimulationResult:
    config: ToyModelConfig
    summary: FluctuationSummary
    accumulator: MomentsAccumulator
    recorders: Sequence[DistributionRecorder] = field(default_factory=tuple)


@dataclass
class ScanPoint:
    """One configuration of a parameter scan and its derived statistics."""

    value: float
    config: ToyModelConfig
    summary: FluctuationSummary


@dataclass
class ScanResult:
    variable: str
    points: list[ScanPoint] = field(default_factory=list)

    @property
    def values(self) -> list[float]:
        return [point.value for point in self.points]

    def series(self, name: str) -> list[Optional[float]]:
        """Ratio values across the scan; ``None`` where the ratio is undefined."""
        return [
            point.summary.ratio(name) if point.summary.is_defined(name) else None
            for point in self.points
        ]
