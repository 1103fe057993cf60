"""
Pytest test suite for convertx.config and config-driven normalizers.
"""

import pytest

from convertx import GraphNormalizer, get_default_config, get_default_normalizer, load_config, normalize
from convertx.config import get_config_path


def write_config(home, content):
    config_dir = home / '.convertx' / 'config'
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / 'config.yaml'
    config_file.write_text(content)
    return config_file


def test_default_config(isolated_home):
    """Test that default configuration is returned when no file exists."""
    config = load_config()

    assert config == get_default_config()
    assert config['normalizer']['cycle_policy'] == 'reference'
    assert config['logging']['log_level'] == 'INFO'
    assert config['logging']['logs_dir'] == 'logs'


def test_config_path_follows_home(isolated_home):
    assert get_config_path() == isolated_home / '.convertx' / 'config' / 'config.yaml'


def test_yaml_config(isolated_home):
    """Test that YAML configuration is loaded and merged with defaults."""
    write_config(isolated_home, """
normalizer:
  cycle_policy: error
logging:
  log_level: DEBUG
""")

    config = load_config()

    assert config['normalizer']['cycle_policy'] == 'error'
    assert config['logging']['log_level'] == 'DEBUG'
    # Keys missing from the file keep their defaults
    assert config['logging']['logs_dir'] == 'logs'


def test_empty_yaml_config(isolated_home):
    write_config(isolated_home, "")

    assert load_config() == get_default_config()


def test_invalid_yaml_falls_back_to_defaults(isolated_home, capsys):
    """Test that unparsable YAML prints a warning and yields defaults."""
    write_config(isolated_home, "normalizer: [unclosed\n")

    config = load_config()

    assert config == get_default_config()
    assert "Error loading config file" in capsys.readouterr().err


def test_non_mapping_yaml_falls_back_to_defaults(isolated_home, capsys):
    write_config(isolated_home, "- normalizer\n- logging\n")

    config = load_config()

    assert config == get_default_config()
    assert "must contain a mapping" in capsys.readouterr().err


def test_normalizer_from_config_dict():
    normalizer = GraphNormalizer.from_config({'normalizer': {'cycle_policy': 'ignore'}})

    assert normalizer.cycle_policy == 'ignore'


def test_normalizer_from_config_without_section():
    assert GraphNormalizer.from_config({}).cycle_policy == 'reference'


def test_normalizer_from_config_rejects_bad_policy():
    with pytest.raises(ValueError):
        GraphNormalizer.from_config({'normalizer': {'cycle_policy': 'sometimes'}})


def test_default_normalizer_reads_config_file(isolated_home):
    """Test the module-level normalizer picks up the user's config file."""
    write_config(isolated_home, "normalizer:\n  cycle_policy: error\n")
    get_default_normalizer.cache_clear()

    assert get_default_normalizer().cycle_policy == 'error'
    assert get_default_normalizer() is get_default_normalizer()


@pytest.mark.parametrize("policy", ["refrence", "null", "[reference]"])
def test_invalid_cycle_policy_in_file_falls_back(isolated_home, capsys, policy):
    """Test a bad cycle_policy in the config file warns and uses 'reference'."""
    write_config(isolated_home, f"normalizer:\n  cycle_policy: {policy}\n")

    config = load_config()

    assert config['normalizer']['cycle_policy'] == 'reference'
    assert "Invalid cycle_policy" in capsys.readouterr().err


def test_module_normalize_survives_bad_config_file(isolated_home, capsys):
    """Test module-level normalize() keeps working with a mistyped policy in the file."""
    write_config(isolated_home, "normalizer:\n  cycle_policy: refrence\n")
    get_default_normalizer.cache_clear()

    assert normalize(42) == 42
    assert normalize({"code": "CODE1"}) == {"code": "CODE1"}
    assert get_default_normalizer().cycle_policy == 'reference'
