from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest
from loguru import logger

from dcctoy import RandomStream, SpeciesCounts, Event


@pytest.fixture(autouse=True)
def silence_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def stream() -> RandomStream:
    return RandomStream(20180501)


class ScriptedStream:
    """Replays fixed deviates and records every draw request."""

    seed = 0

    def __init__(self, uniforms=(), binomials=()):
        self.uniforms = list(uniforms)
        self.binomials = list(binomials)
        self.calls: list[tuple] = []

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        self.calls.append(("uniform", low, high))
        return low + (high - low) * self.uniforms.pop(0)

    def binomial(self, n: int, p: float) -> int:
        self.calls.append(("binomial", n, p))
        return self.binomials.pop(0)


@pytest.fixture
def scripted_stream():
    return ScriptedStream


def make_event(binomial=(0, 0, 0), dcc=(0, 0, 0), centrality: float = 10.0) -> Event:
    """Event from (k, k0, k0s) triples per population."""
    return Event(
        centrality=centrality,
        binomial=SpeciesCounts.from_neutral(*binomial),
        dcc=SpeciesCounts.from_neutral(*dcc),
    )


@pytest.fixture
def five_events() -> list[Event]:
    return [
        make_event(binomial=(4, 2, 1)),
        make_event(binomial=(3, 1, 1), dcc=(2, 1, 0)),
        make_event(dcc=(6, 3, 2)),
        make_event(binomial=(2, 2, 0)),
        make_event(binomial=(5, 2, 2), dcc=(1, 0, 0)),
    ]


@pytest.fixture
def event_factory():
    return make_event
