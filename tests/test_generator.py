"""
tests/test_generator.py - Event generation, draw order and population split.
"""

import pytest
import torch

from dcctoy import ConfigurationError, EventGenerator, RandomStream, SplitRounding, ToyModelConfig


def _config(dcc_fraction=0.5, min_mult=0.0, max_mult=100.0, rounding=SplitRounding.TRUNCATE):
    return ToyModelConfig(
        kaon_fraction=0.3,
        dcc_fraction=dcc_fraction,
        min_mult=min_mult,
        max_mult=max_mult,
        rounding=rounding,
    )


def _assert_structure(event):
    assert event.kc + event.k0 == event.k
    assert event.binomial.kc + event.binomial.k0 == event.binomial.k
    assert event.dcc.kc + event.dcc.k0 == event.dcc.k
    assert event.binomial.k0s <= event.binomial.k0
    assert event.dcc.k0s <= event.dcc.k0
    assert event.binomial.k + event.dcc.k == event.k


class TestDrawOrder:
    def test_mixed_event_draw_sequence(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.505, 0.25], binomials=[10, 1, 3, 2])
        event = EventGenerator(_config(), stream).generate()

        assert stream.calls == [
            ("uniform", 0.0, 100.0),
            ("binomial", 50, 0.3),
            ("uniform", 0.0, 1.0),
            ("binomial", 1, 0.5),
            ("binomial", 5, 0.5),
            ("binomial", 3, 0.5),
        ]
        assert event.centrality == pytest.approx(50.5)
        assert event.dcc.as_dict() == {"k": 5, "k0": 1, "k0s": 1, "kc": 4}
        assert event.binomial.as_dict() == {"k": 5, "k0": 3, "k0s": 2, "kc": 2}
        assert event.k == 10

    def test_empty_event_draws_only_centrality_and_total(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.5], binomials=[0])
        event = EventGenerator(_config(), stream).generate()
        assert [call[0] for call in stream.calls] == ["uniform", "binomial"]
        assert event.k == 0
        assert event.k0_fraction is None

    def test_pure_binomial_skips_dcc_draws(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.5], binomials=[8, 4, 2])
        event = EventGenerator(_config(dcc_fraction=0.0), stream).generate()
        assert [call[0] for call in stream.calls] == ["uniform", "binomial", "binomial", "binomial"]
        assert event.dcc.k == 0
        assert event.binomial.as_dict() == {"k": 8, "k0": 4, "k0s": 2, "kc": 4}

    def test_pure_dcc_skips_binomial_draws(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.5, 0.75], binomials=[8, 3])
        event = EventGenerator(_config(dcc_fraction=1.0), stream).generate()
        assert [call[0] for call in stream.calls] == ["uniform", "binomial", "uniform", "binomial"]
        assert event.binomial.k == 0
        assert event.dcc.as_dict() == {"k": 8, "k0": 6, "k0s": 3, "kc": 2}

    def test_trial_count_truncates_centrality(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.999], binomials=[0])
        EventGenerator(_config(min_mult=1.0, max_mult=11.0), stream).generate()
        assert stream.calls[1] == ("binomial", 10, 0.3)


class TestSplitRounding:
    def test_truncation_is_default(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.5, 0.0], binomials=[10, 0, 8, 4])
        event = EventGenerator(_config(dcc_fraction=0.25), stream).generate()
        assert event.dcc.k == 2
        assert event.binomial.k == 8

    def test_nearest(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.5, 0.0], binomials=[10, 0, 7, 3])
        config = _config(dcc_fraction=0.25, rounding=SplitRounding.NEAREST)
        event = EventGenerator(config, stream).generate()
        assert event.dcc.k == 3
        assert event.binomial.k == 7

    def test_stochastic_draws_extra_uniform_after_total(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.5, 0.3, 0.0], binomials=[5, 0, 2, 1])
        config = _config(dcc_fraction=0.5, rounding=SplitRounding.STOCHASTIC)
        event = EventGenerator(config, stream).generate()
        assert [call[0] for call in stream.calls[:3]] == ["uniform", "binomial", "uniform"]
        assert event.dcc.k == 3
        assert event.binomial.k == 2

    def test_stochastic_rounds_down_above_remainder(self, scripted_stream):
        stream = scripted_stream(uniforms=[0.5, 0.7, 0.0], binomials=[5, 0, 3, 1])
        config = _config(dcc_fraction=0.5, rounding=SplitRounding.STOCHASTIC)
        event = EventGenerator(config, stream).generate()
        assert event.dcc.k == 2
        assert event.binomial.k == 3


class TestGenerator:
    def test_rejects_non_config(self):
        with pytest.raises(ConfigurationError):
            EventGenerator({"kaon_fraction": 0.3})

    def test_structural_invariants(self, stream):
        generator = EventGenerator(_config(dcc_fraction=0.4, min_mult=1, max_mult=200), stream)
        for _ in range(2000):
            _assert_structure(generator.generate())

    def test_fixed_seed_replays_events(self):
        config = _config(dcc_fraction=0.6, min_mult=1, max_mult=200)
        first = EventGenerator(config, RandomStream(77))
        second = EventGenerator(config, RandomStream(77))
        assert [first.generate() for _ in range(50)] == [second.generate() for _ in range(50)]

    def test_pure_binomial_never_produces_dcc(self, stream):
        generator = EventGenerator(_config(dcc_fraction=0.0, min_mult=1, max_mult=200), stream)
        assert all(generator.generate().dcc.k == 0 for _ in range(1000))

    def test_pure_dcc_scenario(self, stream):
        config = ToyModelConfig(kaon_fraction=0.3, dcc_fraction=1.0, min_mult=800, max_mult=1000)
        generator = EventGenerator(config, stream)
        for _ in range(1000):
            event = generator.generate()
            assert event.binomial.as_dict() == {"k": 0, "k0": 0, "k0s": 0, "kc": 0}
            assert 800 <= event.centrality < 1000
            assert event.dcc.k == event.k

    def test_mean_total_kaons(self, stream):
        generator = EventGenerator(_config(dcc_fraction=0.0, min_mult=1, max_mult=200), stream)
        mean_k = sum(generator.generate().k for _ in range(2000)) / 2000
        assert mean_k == pytest.approx(0.3 * 100.0, abs=2.0)


class TestBatchGeneration:
    def test_batch_structure(self, stream):
        generator = EventGenerator(_config(dcc_fraction=0.35, min_mult=1, max_mult=200), stream)
        batch = generator.generate_batch(5000)
        assert len(batch) == 5000
        assert torch.equal(batch.total.k0 + batch.total.kc, batch.total.k)
        assert torch.all(batch.binomial.k0s <= batch.binomial.k0)
        assert torch.all(batch.dcc.k0s <= batch.dcc.k0)
        assert torch.all(batch.dcc.k0 <= batch.dcc.k)
        assert torch.all(batch.binomial.kc >= 0)
        assert torch.equal(batch.dcc.k, torch.floor(0.35 * batch.total.k.double()).long())

    def test_batch_pure_populations(self, stream):
        binomial_only = EventGenerator(_config(dcc_fraction=0.0), stream).generate_batch(500)
        assert torch.all(binomial_only.dcc.k == 0)
        dcc_only = EventGenerator(_config(dcc_fraction=1.0), stream).generate_batch(500)
        assert torch.all(dcc_only.binomial.k == 0)
        assert torch.all(dcc_only.binomial.k0s == 0)

    def test_batch_matches_scalar_means(self):
        config = _config(dcc_fraction=0.5, min_mult=1, max_mult=200)
        batch = EventGenerator(config, RandomStream(3)).generate_batch(20000)
        scalar = EventGenerator(config, RandomStream(4))
        scalar_mean = sum(scalar.generate().k0 for _ in range(4000)) / 4000
        assert float(batch.total.k0.double().mean()) == pytest.approx(scalar_mean, abs=1.5)

    def test_batch_size_validated(self, stream):
        with pytest.raises(ConfigurationError):
            EventGenerator(_config(), stream).generate_batch(0)
