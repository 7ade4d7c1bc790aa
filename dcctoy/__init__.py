"""Kaon toy model probing disoriented chiral condensate fluctuations with nu_dyn."""
from .config import SplitRounding, ToyModelConfig, build_default_config
from .errors import (
    ConfigurationError,
    DccModelError,
    InsufficientDataError,
    NotFinalizedError,
    UndefinedRatioError,
)
from .events import Event, EventBatch, SpeciesCounts
from .generator import EventGenerator
from .moments import RATIO_FIELDS, FluctuationSummary, MomentsAccumulator, RunningSums
from .parallel import run_parallel
from .random_stream import RandomStream
from .recorder import DistributionRecorder, HistogramRecorder
from .results import ScanPoint, ScanResult, SimulationResult
from .scan import scan_dcc_fraction, scan_multiplicity
from .simulator import DccSimulator

__all__ = [
    "ToyModelConfig",
    "SplitRounding",
    "build_default_config",
    "DccModelError",
    "ConfigurationError",
    "InsufficientDataError",
    "NotFinalizedError",
    "UndefinedRatioError",
    "Event",
    "EventBatch",
    "SpeciesCounts",
    "RandomStream",
    "EventGenerator",
    "MomentsAccumulator",
    "RunningSums",
    "FluctuationSummary",
    "RATIO_FIELDS",
    "DistributionRecorder",
    "HistogramRecorder",
    "DccSimulator",
    "SimulationResult",
    "ScanPoint",
    "ScanResult",
    "run_parallel",
    "scan_multiplicity",
    "scan_dcc_fraction",
]
