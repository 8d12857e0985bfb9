import pytest

from fleetsim.config import FleetConfig


def test_defaults():
    config = FleetConfig.load(env={})
    assert config.fleet_size == 1000
    assert config.seed is None
    assert config.drift_probability == 0.35
    assert config.event_display_cap == 20


def test_yaml_then_env_precedence(tmp_path):
    path = tmp_path / "fleet.yaml"
    path.write_text("fleet_size: 250\nseed: 42\nlog_level: debug\n")
    config = FleetConfig.load(env={"FLEET_CONFIG_PATH": str(path), "FLEET_SIZE": "300"})
    assert config.fleet_size == 300
    assert config.seed == 42
    assert config.log_level == "DEBUG"


def test_missing_yaml_is_ignored(tmp_path):
    config = FleetConfig.load(path=str(tmp_path / "nope.yaml"), env={})
    assert config == FleetConfig()


def test_unknown_yaml_keys_are_ignored(tmp_path):
    path = tmp_path / "fleet.yaml"
    path.write_text("fleet_size: 10\nflux_capacitor: true\n")
    assert FleetConfig.load(path=str(path), env={}).fleet_size == 10


@pytest.mark.parametrize(
    "env",
    [
        {"FLEET_SIZE": "many"},
        {"FLEET_SIZE": "-3"},
        {"FLEET_DRIFT_PROBABILITY": "1.5"},
        {"FLEET_SEED": "abc"},
        {"FLEET_SIZE": "200001"},
        {"FLEET_SIZE": "500", "FLEET_MAX_SIZE": "100"},
    ],
)
def test_malformed_values_raise(env):
    with pytest.raises(ValueError):
        FleetConfig.load(env=env)


def test_fractional_yaml_size_is_rejected(tmp_path):
    path = tmp_path / "fleet.yaml"
    path.write_text("fleet_size: 2.7\n")
    with pytest.raises(ValueError):
        FleetConfig.load(path=str(path), env={})


def test_whole_float_yaml_size_is_accepted(tmp_path):
    path = tmp_path / "fleet.yaml"
    path.write_text("fleet_size: 250.0\nmax_fleet_size: 300\n")
    config = FleetConfig.load(path=str(path), env={})
    assert config.fleet_size == 250
    assert config.max_fleet_size == 300
