"""Tests for the static particle factory."""

import os
import pickle
import sys

import numpy as np
import pytest

# Add the project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from constants import TWO_PI
from particle import Bounds, ParticleRanges, ParticleSet, make_particles
from seeding import seeded_hash
from utils import ConfigurationError

BOX = Bounds(0, 0, 100, 100)


class TestMakeParticles:
    """Tests for make_particles."""

    def test_single_particle_is_repeatable(self):
        """The same inputs always place the particle at the same spot."""
        first = make_particles(count=1, seed=10, bounds=BOX)
        for _ in range(5):
            again = make_particles(count=1, seed=10, bounds=BOX)
            assert again.x[0] == first.x[0]
            assert again.y[0] == first.y[0]

    def test_single_particle_position_follows_hash(self):
        particles = make_particles(count=1, seed=10, bounds=BOX)
        assert particles.x[0] == pytest.approx(seeded_hash(10) * 100, abs=1e-6)
        assert particles.y[0] == pytest.approx(seeded_hash(10) * 100, abs=1e-6)

    def test_attributes_use_distinct_multipliers(self):
        """Attribute of particle i comes from hash(seed + i * k_attr)."""
        ranges = ParticleRanges(size=(1.0, 2.0), speed=(0.0, 1.0), opacity=(0.0, 1.0))
        particles = make_particles(count=4, seed=3, bounds=BOX, ranges=ranges)
        i = 3
        assert particles.x[i] == pytest.approx(seeded_hash(3 + i * 1.1) * 100, abs=1e-6)
        assert particles.y[i] == pytest.approx(seeded_hash(3 + i * 2.3) * 100, abs=1e-6)
        assert particles.size[i] == pytest.approx(1.0 + seeded_hash(3 + i * 3.7), abs=1e-8)
        assert particles.speed[i] == pytest.approx(seeded_hash(3 + i * 4.1), abs=1e-8)
        assert particles.opacity[i] == pytest.approx(seeded_hash(3 + i * 5.9), abs=1e-8)
        assert particles.phase[i] == pytest.approx(seeded_hash(3 + i * 6.3) * TWO_PI, abs=1e-7)

    def test_within_bounds_and_ranges(self):
        bounds = Bounds(150, 300, 380, 650)
        particles = make_particles(count=200, seed=20, bounds=bounds)
        assert np.all((particles.x >= 150) & (particles.x < 380))
        assert np.all((particles.y >= 300) & (particles.y < 650))
        assert np.all((particles.size >= 1.5) & (particles.size <= 5.5))
        assert np.all((particles.speed >= 0.2) & (particles.speed <= 1.0))
        assert np.all((particles.opacity >= 0.15) & (particles.opacity <= 0.6))
        assert np.all((particles.phase >= 0) & (particles.phase < TWO_PI))

    def test_ranges_from_mapping(self):
        """A mapping overrides only the ranges it names."""
        particles = make_particles(20, 4, BOX, {"speed": (2.0, 2.0)})
        assert np.all(particles.speed == 2.0)
        default = make_particles(20, 4, BOX)
        np.testing.assert_array_equal(particles.size, default.size)

    def test_zero_count(self):
        particles = make_particles(count=0, seed=1, bounds=BOX)
        assert len(particles) == 0
        assert particles.x.shape == (0,)

    def test_accepts_plain_tuple_bounds(self):
        particles = make_particles(3, 1, (0, 0, 10, 10))
        assert particles.bounds == Bounds(0, 0, 10, 10)


class TestImmutability:
    """ParticleSet must stay read-only for the whole render."""

    def test_arrays_not_writeable(self):
        particles = make_particles(5, 1, BOX)
        with pytest.raises(ValueError):
            particles.x[0] = 1.0

    def test_attributes_not_reassignable(self):
        particles = make_particles(5, 1, BOX)
        with pytest.raises(AttributeError):
            particles.x = np.zeros(5)

    def test_pickle_round_trip_stays_frozen(self):
        """Worker processes receive a copy that is just as read-only."""
        particles = make_particles(5, 1, BOX)
        copy = pickle.loads(pickle.dumps(particles))
        np.testing.assert_array_equal(copy.x, particles.x)
        assert not copy.x.flags.writeable


class TestValidation:
    """Configuration errors surface at construction time."""

    @pytest.mark.parametrize("count", [-1, 2.5, True, "3", None])
    def test_bad_count(self, count):
        with pytest.raises(ConfigurationError):
            make_particles(count, 1, BOX)

    @pytest.mark.parametrize("bounds", [
        (0, 0, 0, 100),
        (0, 0, 100, 0),
        (10, 0, 5, 100),
        (0, 50, 100, 10),
    ])
    def test_degenerate_bounds(self, bounds):
        with pytest.raises(ConfigurationError):
            make_particles(3, 1, bounds)

    def test_non_finite_seed(self):
        with pytest.raises(ConfigurationError):
            make_particles(3, float("nan"), BOX)

    def test_reversed_range(self):
        with pytest.raises(ConfigurationError):
            make_particles(3, 1, BOX, ParticleRanges(size=(4.0, 2.0)))

    def test_opacity_range_outside_unit_interval(self):
        with pytest.raises(ConfigurationError):
            make_particles(3, 1, BOX, ParticleRanges(opacity=(0.5, 1.5)))

    @pytest.mark.parametrize("bounds", [(0, 0, 10), (0, 0, 10, 10, 5), "0,0,10,10", 7, None])
    def test_malformed_bounds(self, bounds):
        with pytest.raises(ConfigurationError):
            make_particles(3, 1, bounds)

    @pytest.mark.parametrize("ranges", [
        {"colour": (0, 1)},
        {"size": 3.0},
        {"size": (1.0, 2.0, 3.0)},
        [(1.0, 2.0), (0.1, 0.2), (0.1, 0.2), (0.1, 0.2)],
        "size",
        5,
    ])
    def test_malformed_ranges(self, ranges):
        with pytest.raises(ConfigurationError):
            make_particles(3, 1, BOX, ranges)

    def test_direct_construction_is_frozen(self):
        particles = ParticleSet(1, BOX, [1.0], [2.0], [3.0], [1.0], [0.5], [0.0])
        assert particles.count == 1
        assert not particles.opacity.flags.writeable
