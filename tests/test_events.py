"""
tests/test_events.py - Species counts and event records.
"""

import dataclasses

import pytest
import torch

from dcctoy import Event, EventBatch, SpeciesCounts
from dcctoy.events import SpeciesColumns


class TestSpeciesCounts:
    def test_from_neutral_fills_charged_remainder(self):
        counts = SpeciesCounts.from_neutral(7, 3, 2)
        assert counts == SpeciesCounts(k=7, k0=3, k0s=2, kc=4)

    def test_charge_decomposition_must_add_up(self):
        with pytest.raises(ValueError):
            SpeciesCounts(k=5, k0=2, k0s=1, kc=2)

    def test_short_lived_subset_bounded_by_neutral(self):
        with pytest.raises(ValueError):
            SpeciesCounts(k=4, k0=1, k0s=2, kc=3)

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            SpeciesCounts(k=-1, k0=0, k0s=0, kc=-1)

    def test_addition_is_component_wise(self):
        total = SpeciesCounts.from_neutral(4, 2, 1) + SpeciesCounts.from_neutral(6, 3, 2)
        assert total == SpeciesCounts(k=10, k0=5, k0s=3, kc=5)

    def test_fractions_undefined_for_empty_population(self):
        empty = SpeciesCounts()
        assert empty.k0_fraction is None
        assert empty.k0s_fraction is None

    def test_fractions(self):
        counts = SpeciesCounts.from_neutral(8, 4, 2)
        assert counts.k0_fraction == pytest.approx(0.5)
        assert counts.k0s_fraction == pytest.approx(0.25)

    def test_frozen(self):
        counts = SpeciesCounts.from_neutral(2, 1, 0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            counts.k = 3


class TestEvent:
    def test_total_is_sum_of_populations(self, event_factory):
        event = event_factory(binomial=(3, 1, 1), dcc=(2, 1, 0))
        assert event.total == SpeciesCounts(k=5, k0=2, k0s=1, kc=3)
        assert (event.k, event.k0, event.k0s, event.kc) == (5, 2, 1, 3)
        assert event.kc + event.k0 == event.k

    def test_total_is_not_settable(self):
        with pytest.raises(TypeError):
            Event(
                centrality=1.0,
                binomial=SpeciesCounts(),
                dcc=SpeciesCounts(),
                total=SpeciesCounts.from_neutral(1, 1, 0),
            )
        event = Event(centrality=1.0, binomial=SpeciesCounts(), dcc=SpeciesCounts())
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.total = SpeciesCounts.from_neutral(1, 1, 0)

    def test_negative_centrality_rejected(self):
        with pytest.raises(ValueError):
            Event(centrality=-0.5, binomial=SpeciesCounts(), dcc=SpeciesCounts())

    def test_per_category_fractions(self, event_factory):
        event = event_factory(binomial=(4, 2, 1))
        assert event.binomial.k0_fraction == pytest.approx(0.5)
        assert event.dcc.k0_fraction is None
        assert event.dcc.k0s_fraction is None
        assert event.k0s_fraction == pytest.approx(0.25)

    def test_empty_event_fractions_undefined(self, event_factory):
        event = event_factory()
        assert event.k == 0
        assert event.k0_fraction is None

    def test_category_lookup(self, event_factory):
        event = event_factory(binomial=(4, 2, 1))
        assert event.category("binomial") is event.binomial
        with pytest.raises(KeyError):
            event.category("pions")

    def test_describe_marks_undefined_fractions(self, event_factory):
        text = event_factory(binomial=(4, 2, 1)).describe()
        assert "undefined" in text
        assert "binomial" in text


class TestEventBatch:
    def _columns(self, k, k0, k0s):
        k = torch.tensor(k)
        k0 = torch.tensor(k0)
        return SpeciesColumns(k=k, k0=k0, k0s=torch.tensor(k0s), kc=k - k0)

    def test_iterates_as_events(self):
        batch = EventBatch(
            centrality=torch.tensor([10.5, 20.25], dtype=torch.float64),
            binomial=self._columns([4, 0], [2, 0], [1, 0]),
            dcc=self._columns([0, 6], [0, 3], [0, 2]),
        )
        events = list(batch)
        assert len(batch) == 2
        assert events[0].binomial == SpeciesCounts.from_neutral(4, 2, 1)
        assert events[1].dcc == SpeciesCounts.from_neutral(6, 3, 2)
        assert events[1].centrality == pytest.approx(20.25)
        assert torch.equal(batch.total.k, torch.tensor([4, 6]))
