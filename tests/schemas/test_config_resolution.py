"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

from lodview.schemas import (
    AdaptiveSampling,
    CLIConfig,
    InternalConfig,
    LTTBSampling,
    MinMaxSampling,
    ParamConfig,
    UserConfig,
)
from lodview.schemas.resolve import deep_merge, resolve_config
from lodview.schemas.user import UserSamplingConfig, UserStreamConfig

pytestmark = pytest.mark.unit


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.sampling.strategy == LTTBSampling(buckets=1000)
        assert config.sampling.lod_levels == (100, 500, 1000, 5000, 10000)
        assert config.sampling.eager_threshold == 10000
        assert config.spatial.grid_size == 100
        assert config.stream.window_size == 100
        assert config.stream.update_frequency == 30.0
        assert config.logging.level == "INFO"

    def test_resolve_config_without_param(self):
        """param_cfg defaults to ParamConfig()."""
        assert resolve_config() == resolve_config(ParamConfig(), None, None)

    def test_user_config_overrides_param_config(self):
        config = resolve_config(ParamConfig(), UserConfig(window_size=500, grid_size=20), None)

        assert config.stream.window_size == 500
        assert config.spatial.grid_size == 20

    def test_cli_overrides_user(self):
        user = UserConfig(strategy="minmax", log_level="warning")
        cli = CLIConfig(strategy="uniform", log_level="DEBUG")
        config = resolve_config(ParamConfig(), user, cli)

        assert config.sampling.strategy.kind == "uniform"
        assert config.logging.level == "DEBUG"

    def test_strategy_override_replaces_variant(self):
        """A new strategy variant replaces the default instead of merging fields."""
        config = resolve_config(ParamConfig(), UserConfig(strategy="minmax"), None)

        assert config.sampling.strategy == MinMaxSampling()

    def test_dict_inputs_are_accepted(self):
        config = resolve_config({"stream": {"window_size": 7}}, {"FPS": 60}, {"iterations": 3})

        assert config.stream.window_size == 7
        assert config.stream.update_frequency == 60.0
        assert config.benchmark.iterations == 3

    def test_internal_config_is_frozen(self, internal_config):
        with pytest.raises(ValidationError):
            internal_config.sampling = None

    def test_flush_interval(self, make_config):
        config = make_config(fps=60)
        assert config.stream.flush_interval == pytest.approx(1 / 60)


class TestUserConfigAliases:
    """Test UserConfig flat aliases map correctly."""

    def test_uppercase_keys_are_handled(self):
        user = UserConfig.model_validate({
            "WINDOW_SIZE": 250,
            "FPS": "fps120",
            "STRATEGY": "LTTB",
            "BUCKETS": 300,
            "GRID_SIZE": 10,
        })
        config = resolve_config(ParamConfig(), user, None)

        assert config.stream.window_size == 250
        assert config.stream.update_frequency == 120.0
        assert config.sampling.strategy == LTTBSampling(buckets=300)
        assert config.spatial.grid_size == 10

    def test_unknown_keys_are_ignored(self):
        user = UserConfig.model_validate({"WINDOW_SIZE": 10, "UNKNOWN_LEGACY": 12345})

        assert user.window_size == 10
        assert not hasattr(user, "UNKNOWN_LEGACY")

    def test_buckets_alone_implies_lttb(self):
        user = UserConfig(buckets=64)
        assert user.strategy == LTTBSampling(buckets=64)

    def test_threshold_folds_into_adaptive(self):
        user = UserConfig(strategy="adaptive", threshold=0.25)
        assert user.strategy == AdaptiveSampling(threshold=0.25)

    def test_threshold_alone_implies_adaptive(self):
        assert UserConfig(threshold=0.5).strategy == AdaptiveSampling(threshold=0.5)

    def test_buckets_and_threshold_without_strategy_rejected(self):
        with pytest.raises(ValidationError, match="set strategy explicitly"):
            UserConfig(buckets=10, threshold=0.5)

    def test_target_points_alias(self, make_config):
        config = make_config(target_points=250)
        assert config.sampling.default_target_points == 250

    def test_nested_sampling_override_wins(self):
        user = UserConfig(strategy="uniform", sampling=UserSamplingConfig(strategy="minmax"))
        config = resolve_config(ParamConfig(), user, None)

        assert config.sampling.strategy.kind == "minmax"

    def test_nested_stream_override_wins(self):
        user = UserConfig(window_size=10, stream=UserStreamConfig(window_size=20, update_frequency="15hz"))
        config = resolve_config(ParamConfig(), user, None)

        assert config.stream.window_size == 20
        assert config.stream.update_frequency == 15.0

    def test_log_level_normalized(self):
        assert UserConfig(log_level=" debug ").log_level == "DEBUG"

    def test_lod_levels_are_sorted_and_deduplicated(self, make_config):
        config = make_config(lod_levels=[500, 100, 500, 2000])
        assert config.sampling.lod_levels == (100, 500, 2000)


class TestValidationErrors:
    """Invalid configuration is rejected at resolution time."""

    @pytest.mark.parametrize("overrides", [
        {"window_size": 0},
        {"fps": 0},
        {"fps": -30},
        {"grid_size": 0},
        {"lod_levels": [1, 100]},
        {"lod_levels": []},
    ])
    def test_invalid_values_raise(self, make_config, overrides):
        with pytest.raises(ValidationError):
            make_config(**overrides)

    def test_buckets_below_two_rejected(self):
        with pytest.raises(ValidationError):
            UserConfig(buckets=1)

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError, match="Unknown sampling strategy"):
            UserConfig(strategy="bogus")

    def test_param_config_forbids_extra_keys(self):
        with pytest.raises(ValidationError):
            ParamConfig(stream={"window": 10})

    def test_invalid_frequency_string(self):
        with pytest.raises(ValidationError, match="Invalid update frequency"):
            UserConfig(fps="fast")


def test_deep_merge_nested():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    merged = deep_merge(base, {"b": {"d": 4, "e": 5}}, {"f": 6})

    assert merged == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}
