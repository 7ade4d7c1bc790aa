"""Running kaon moments, correlation ratios and nu_dyn."""
from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Mapping, Optional

from loguru import logger

from .errors import InsufficientDataError, NotFinalizedError, UndefinedRatioError
from .events import CATEGORIES, SPECIES, Event, EventBatch, SpeciesColumns, SpeciesCounts

RATIO_FIELDS: tuple[str, ...] = (
    "r_00",
    "r_0s0s",
    "r_cc",
    "r_c0",
    "r_c0s",
    "nu_dyn_ch0",
    "nu_dyn_ch0s",
)


def _zeros() -> dict[str, int]:
    return dict.fromkeys(SPECIES, 0)


@dataclass
class CategorySums:
    """First sums and sums of squares of the four species of one category."""

    first: dict[str, int] = field(default_factory=_zeros)
    squares: dict[str, int] = field(default_factory=_zeros)

    def add(self, counts: SpeciesCounts) -> None:
        for name in SPECIES:
            value = getattr(counts, name)
            self.first[name] += value
            self.squares[name] += value * value

    def add_columns(self, columns: SpeciesColumns) -> None:
        for name in SPECIES:
            column = getattr(columns, name)
            self.first[name] += int(column.sum().item())
            self.squares[name] += int((column * column).sum().item())

    def __add__(self, other: "CategorySums") -> "CategorySums":
        return CategorySums(
            first={name: self.first[name] + other.first[name] for name in SPECIES},
            squares={name: self.squares[name] + other.squares[name] for name in SPECIES},
        )


@dataclass
class RunningSums:
    """Sufficient statistics of an event stream.

    Every sum is an exact Python integer, so accumulation order never changes
    the result and merging partial sums is exact.
    """

    n: int = 0
    categories: dict[str, CategorySums] = field(
        default_factory=lambda: {name: CategorySums() for name in CATEGORIES}
    )
    kc_k0: int = 0
    kc_k0s: int = 0

    def add(self, event: Event) -> None:
        self.n += 1
        for name in CATEGORIES:
            self.categories[name].add(event.category(name))
        self.kc_k0 += event.kc * event.k0
        self.kc_k0s += event.kc * event.k0s

    def add_batch(self, batch: EventBatch) -> None:
        self.n += len(batch)
        for name in CATEGORIES:
            self.categories[name].add_columns(batch.category(name))
        total = batch.total
        self.kc_k0 += int((total.kc * total.k0).sum().item())
        self.kc_k0s += int((total.kc * total.k0s).sum().item())

    def __add__(self, other: "RunningSums") -> "RunningSums":
        if not isinstance(other, RunningSums):
            return NotImplemented
        return RunningSums(
            n=self.n + other.n,
            categories={name: self.categories[name] + other.categories[name] for name in CATEGORIES},
            kc_k0=self.kc_k0 + other.kc_k0,
            kc_k0s=self.kc_k0s + other.kc_k0s,
        )

    def copy(self) -> "RunningSums":
        return self + RunningSums()


@dataclass(frozen=True)
class SpeciesMoments:
    k: float
    k0: float
    k0s: float
    kc: float


@dataclass(frozen=True)
class FluctuationSummary:
    """Derived statistics of one finalized accumulation epoch.

    Ratios whose denominator average vanished are kept in ``undefined`` and
    reading them raises :class:`UndefinedRatioError`.
    """

    n_events: int
    averages: Mapping[str, SpeciesMoments]
    factorial_averages: Mapping[str, SpeciesMoments]
    kc_k0_average: float
    kc_k0s_average: float
    ratios: Mapping[str, Optional[float]]
    undefined: Mapping[str, str] = field(default_factory=dict)

    def ratio(self, name: str) -> float:
        if name not in RATIO_FIELDS:
            raise KeyError(f"Unknown ratio {name!r}; expected one of {RATIO_FIELDS}.")
        value = self.ratios.get(name)
        if value is None:
            raise UndefinedRatioError(name, self.undefined.get(name))
        return value

    def is_defined(self, name: str) -> bool:
        return self.ratios.get(name) is not None

    @property
    def r_00(self) -> float:
        return self.ratio("r_00")

    @property
    def r_0s0s(self) -> float:
        return self.ratio("r_0s0s")

    @property
    def r_cc(self) -> float:
        return self.ratio("r_cc")

    @property
    def r_c0(self) -> float:
        return self.ratio("r_c0")

    @property
    def r_c0s(self) -> float:
        return self.ratio("r_c0s")

    @property
    def nu_dyn_ch0(self) -> float:
        return self.ratio("nu_dyn_ch0")

    @property
    def nu_dyn_ch0s(self) -> float:
        return self.ratio("nu_dyn_ch0s")


def _same_species_ratio(
    name: str,
    species: str,
    sums: CategorySums,
    n: int,
    undefined: dict[str, str],
) -> Optional[Fraction]:
    first = sums.first[species]
    if first == 0:
        undefined[name] = f"average {species} is zero"
        return None
    # <X(X-1)> / <X>^2 - 1 with both averages over the same n.
    return Fraction((sums.squares[species] - first) * n, first * first) - 1


def _cross_species_ratio(
    name: str,
    species: str,
    cross: int,
    sums: CategorySums,
    n: int,
    undefined: dict[str, str],
) -> Optional[Fraction]:
    zero = [label for label in ("kc", species) if sums.first[label] == 0]
    if zero:
        undefined[name] = "average " + " and ".join(zero) + " is zero"
        return None
    return Fraction(cross * n, sums.first["kc"] * sums.first[species]) - 1


def _nu_dyn(
    name: str,
    same: str,
    cross: str,
    exact: dict[str, Optional[Fraction]],
    undefined: dict[str, str],
) -> Optional[Fraction]:
    missing = [part for part in ("r_cc", same, cross) if exact[part] is None]
    if missing:
        undefined[name] = "depends on undefined " + ", ".join(missing)
        return None
    return exact["r_cc"] + exact[same] - 2 * exact[cross]


def compute_summary(sums: RunningSums) -> FluctuationSummary:
    """Derive averages, correlation ratios and nu_dyn from running sums."""
    n = sums.n
    if n < 2:
        raise InsufficientDataError(n)

    averages: dict[str, SpeciesMoments] = {}
    factorial_averages: dict[str, SpeciesMoments] = {}
    for category in CATEGORIES:
        cat = sums.categories[category]
        averages[category] = SpeciesMoments(
            **{name: float(Fraction(cat.first[name], n)) for name in SPECIES}
        )
        factorial_averages[category] = SpeciesMoments(
            **{name: float(Fraction(cat.squares[name] - cat.first[name], n)) for name in SPECIES}
        )

    total = sums.categories["total"]
    undefined: dict[str, str] = {}
    exact: dict[str, Optional[Fraction]] = {
        "r_00": _same_species_ratio("r_00", "k0", total, n, undefined),
        "r_0s0s": _same_species_ratio("r_0s0s", "k0s", total, n, undefined),
        "r_cc": _same_species_ratio("r_cc", "kc", total, n, undefined),
        "r_c0": _cross_species_ratio("r_c0", "k0", sums.kc_k0, total, n, undefined),
        "r_c0s": _cross_species_ratio("r_c0s", "k0s", sums.kc_k0s, total, n, undefined),
    }
    exact["nu_dyn_ch0"] = _nu_dyn("nu_dyn_ch0", "r_00", "r_c0", exact, undefined)
    exact["nu_dyn_ch0s"] = _nu_dyn("nu_dyn_ch0s", "r_0s0s", "r_c0s", exact, undefined)

    for name, reason in undefined.items():
        logger.warning("Ratio {} undefined after {} events: {}", name, n, reason)

    return FluctuationSummary(
        n_events=n,
        averages=averages,
        factorial_averages=factorial_averages,
        kc_k0_average=float(Fraction(sums.kc_k0, n)),
        kc_k0s_average=float(Fraction(sums.kc_k0s, n)),
        ratios={name: None if value is None else float(value) for name, value in exact.items()},
        undefined=undefined,
    )


class MomentsAccumulator:
    """Folds events into running sums and derives fluctuation observables on demand.

    ``add`` after ``finalize`` drops the cached summary and keeps
    accumulating on top of the existing sums; only ``reset`` zeroes them.
    """

    def __init__(self, sums: RunningSums | None = None) -> None:
        self._sums = sums.copy() if sums is not None else RunningSums()
        self._summary: Optional[FluctuationSummary] = None

    @property
    def n(self) -> int:
        return self._sums.n

    @property
    def sums(self) -> RunningSums:
        """Snapshot of the raw running sums."""
        return self._sums.copy()

    @property
    def is_finalized(self) -> bool:
        return self._summary is not None

    @property
    def summary(self) -> FluctuationSummary:
        if self._summary is None:
            if self.n < 2:
                raise InsufficientDataError(self.n)
            raise NotFinalizedError(self.n)
        return self._summary

    def add(self, event: Event) -> None:
        self._sums.add(event)
        self._summary = None

    def add_batch(self, batch: EventBatch) -> None:
        self._sums.add_batch(batch)
        self._summary = None

    def finalize(self) -> FluctuationSummary:
        summary = compute_summary(self._sums)
        self._summary = summary
        logger.debug("Moments finalized over {} events.", summary.n_events)
        return summary

    def merge(self, other: "MomentsAccumulator | RunningSums") -> "MomentsAccumulator":
        """Add another accumulator's raw sums into this one, in place."""
        other_sums = other.sums if isinstance(other, MomentsAccumulator) else other
        self._sums = self._sums + other_sums
        self._summary = None
        return self

    def __add__(self, other: "MomentsAccumulator") -> "MomentsAccumulator":
        if not isinstance(other, MomentsAccumulator):
            return NotImplemented
        return MomentsAccumulator(self._sums + other._sums)

    def reset(self) -> None:
        self._sums = RunningSums()
        self._summary = None
