"""Tests for config module."""

import sys
import pytest

from compacting_queue import config, CompactingQueue, CompactionPolicy


@pytest.fixture
def restore_config():
    """Put config back the way it was after a test changes it."""
    saved = (
        config.small_queue_threshold,
        config.empty_fraction_threshold,
        config.enable_statistics,
    )
    yield config
    (
        config.small_queue_threshold,
        config.empty_fraction_threshold,
        config.enable_statistics,
    ) = saved


class TestGILDetection:
    """Tests for GIL detection."""

    def test_gil_disabled_is_bool(self):
        """gil_disabled returns a boolean."""
        assert isinstance(config.gil_disabled, bool)

    def test_gil_disabled_matches_python_build(self):
        """gil_disabled matches Python build type."""
        abiflags = getattr(sys, 'abiflags', '')
        if 't' in abiflags:
            if hasattr(sys, '_is_gil_enabled'):
                expected = not sys._is_gil_enabled()
            else:
                expected = True
            assert config.gil_disabled == expected
        else:
            assert config.gil_disabled is False


class TestDefaults:
    """Tests for default values."""

    def test_defaults_without_environment(self, monkeypatch, restore_config):
        """Unset variables give the standard defaults."""
        monkeypatch.delenv('COMPACTING_QUEUE_SMALL_QUEUE_THRESHOLD', raising=False)
        monkeypatch.delenv('COMPACTING_QUEUE_EMPTY_FRACTION_THRESHOLD', raising=False)
        monkeypatch.delenv('COMPACTING_QUEUE_ENABLE_STATS', raising=False)
        config.reload()

        assert config.small_queue_threshold == 32
        assert config.empty_fraction_threshold == 0.6
        assert config.enable_statistics is False

    def test_default_policy(self, restore_config):
        """default_policy reflects current values."""
        config.small_queue_threshold = 10
        config.empty_fraction_threshold = 0.5
        assert config.default_policy() == CompactionPolicy(10, 0.5)


class TestEnvironment:
    """Tests for environment variable parsing."""

    def test_env_values(self, monkeypatch, restore_config):
        """Valid environment values are used."""
        monkeypatch.setenv('COMPACTING_QUEUE_SMALL_QUEUE_THRESHOLD', '8')
        monkeypatch.setenv('COMPACTING_QUEUE_EMPTY_FRACTION_THRESHOLD', '0.25')
        monkeypatch.setenv('COMPACTING_QUEUE_ENABLE_STATS', 'yes')
        config.reload()

        assert config.small_queue_threshold == 8
        assert config.empty_fraction_threshold == 0.25
        assert config.enable_statistics is True

    def test_env_malformed_falls_back(self, monkeypatch, restore_config):
        """Malformed values fall back to defaults."""
        monkeypatch.setenv('COMPACTING_QUEUE_SMALL_QUEUE_THRESHOLD', 'many')
        monkeypatch.setenv('COMPACTING_QUEUE_EMPTY_FRACTION_THRESHOLD', 'half')
        monkeypatch.setenv('COMPACTING_QUEUE_ENABLE_STATS', 'maybe')
        config.reload()

        assert config.small_queue_threshold == 32
        assert config.empty_fraction_threshold == 0.6
        assert config.enable_statistics is False

    def test_env_out_of_range_falls_back(self, monkeypatch, restore_config):
        """Out-of-range values fall back to defaults."""
        monkeypatch.setenv('COMPACTING_QUEUE_SMALL_QUEUE_THRESHOLD', '-4')
        monkeypatch.setenv('COMPACTING_QUEUE_EMPTY_FRACTION_THRESHOLD', '1.5')
        config.reload()

        assert config.small_queue_threshold == 32
        assert config.empty_fraction_threshold == 0.6

    def test_env_zero_fraction_falls_back(self, monkeypatch, restore_config):
        """A zero fraction from the environment falls back to the default."""
        monkeypatch.setenv('COMPACTING_QUEUE_EMPTY_FRACTION_THRESHOLD', '0.0')
        config.reload()

        assert config.empty_fraction_threshold == 0.6


class TestSetters:
    """Tests for configurable properties."""

    def test_small_queue_threshold_setter(self, restore_config):
        """small_queue_threshold can be set."""
        config.small_queue_threshold = 0
        assert config.small_queue_threshold == 0

    def test_small_queue_threshold_invalid(self):
        """Negative thresholds are rejected."""
        with pytest.raises(ValueError):
            config.small_queue_threshold = -1

    def test_empty_fraction_threshold_invalid(self):
        """Fractions outside (0, 1) are rejected."""
        with pytest.raises(ValueError):
            config.empty_fraction_threshold = 1.0
        with pytest.raises(ValueError):
            config.empty_fraction_threshold = -0.5
        with pytest.raises(ValueError):
            config.empty_fraction_threshold = 0.0

    def test_small_queue_threshold_not_truncated(self):
        """Non-integer thresholds are rejected rather than truncated."""
        original = config.small_queue_threshold
        with pytest.raises(TypeError):
            config.small_queue_threshold = 3.7
        with pytest.raises(TypeError):
            config.small_queue_threshold = True
        assert config.small_queue_threshold == original

    def test_enable_statistics_setter(self, restore_config):
        """enable_statistics coerces to bool."""
        config.enable_statistics = 1
        assert config.enable_statistics is True

    def test_changes_affect_new_queues_only(self, restore_config):
        """Existing queues keep the policy they were created with."""
        config.small_queue_threshold = 32
        before = CompactingQueue()
        config.small_queue_threshold = 4
        after = CompactingQueue()

        assert before.policy.small_queue_threshold == 32
        assert after.policy.small_queue_threshold == 4


class TestRepr:
    """Tests for config representation."""

    def test_repr(self):
        """repr contains key values."""
        r = repr(config)
        assert 'Config(' in r
        assert 'gil_disabled=' in r
        assert 'small_queue_threshold=' in r
