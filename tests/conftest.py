"""Root-level pytest fixtures for the lodview test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests build configs through these fixtures instead of
hand-written dicts.
"""

import pytest

from lodview.schemas import ParamConfig, UserConfig, resolve_config

from tests.helpers.fake_clock import FakeClock, ManualTimer


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_engine_init(internal_config):
    ...     engine = ReductionEngine(internal_config)
    ...     assert engine.lod_levels == (100, 500, 1000, 5000, 10000)
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_small_window(make_config):
    ...     config = make_config(window_size=5)
    ...     buffer = StreamingBuffer(config)
    ...     assert buffer.window_size == 5
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Clock Fixtures
# =============================================================================

@pytest.fixture
def fake_clock():
    """Manually advanced clock starting at t=1000.0 s."""
    return FakeClock(1000.0)


@pytest.fixture(autouse=True)
def reset_manual_timers():
    """Each test sees only the ManualTimers it created."""
    ManualTimer.instances.clear()
    yield
    ManualTimer.instances.clear()
