"""
Unit tests for configuration resolution.
"""
import pytest
import yaml
from pathlib import Path

from traitindex.config import IndexConfig, get_config


class TestIndexConfig:
    """Test config defaults, YAML and environment overrides."""

    def test_defaults(self):
        """Defaults arm after all shards in path order."""
        config = IndexConfig()

        assert config.shards_dir == Path('implementors')
        assert config.arm_after is None
        assert config.load_order == 'path'
        assert config.seed is None
        assert config.log_level == 'WARNING'

    def test_from_yaml(self, tmp_path):
        """The index section of a YAML file is loaded."""
        config_file = tmp_path / 'traitindex.yaml'
        with open(config_file, 'w') as f:
            yaml.dump({'index': {
                'shards_dir': str(tmp_path / 'docs' / 'implementors'),
                'arm_after': 3,
                'load_order': 'shuffle',
                'seed': 11,
                'log_level': 'debug',
            }}, f)

        config = IndexConfig.from_yaml(config_file)

        assert config.shards_dir == tmp_path / 'docs' / 'implementors'
        assert config.arm_after == 3
        assert config.load_order == 'shuffle'
        assert config.seed == 11
        assert config.log_level == 'DEBUG'

    def test_empty_yaml_gives_defaults(self, tmp_path):
        """An empty file is the same as no settings."""
        config_file = tmp_path / 'traitindex.yaml'
        config_file.write_text('')

        assert IndexConfig.from_yaml(config_file) == IndexConfig()

    def test_missing_yaml(self, tmp_path):
        """A missing explicit config file is an error."""
        with pytest.raises(FileNotFoundError):
            IndexConfig.from_yaml(tmp_path / 'missing.yaml')

    def test_yaml_list_rejected(self, tmp_path):
        """The YAML document must be a mapping."""
        config_file = tmp_path / 'traitindex.yaml'
        config_file.write_text('- a\n- b\n')

        with pytest.raises(ValueError):
            IndexConfig.from_yaml(config_file)

    def test_unknown_key_rejected(self):
        """Typos in the index section are reported."""
        with pytest.raises(ValueError, match="arm_afterr"):
            IndexConfig.from_dict({'index': {'arm_afterr': 1}})

    def test_invalid_values_rejected(self):
        """Bad load orders and arm points are rejected."""
        with pytest.raises(ValueError):
            IndexConfig(load_order='sideways')
        with pytest.raises(ValueError):
            IndexConfig(arm_after=-1)
        with pytest.raises(ValueError):
            IndexConfig(arm_after='soon')
        with pytest.raises(ValueError):
            IndexConfig(arm_after=True)

    def test_env_overrides(self):
        """TRAITINDEX_* variables override file values."""
        config = IndexConfig(load_order='reverse').with_env({
            'TRAITINDEX_SHARDS_DIR': '/srv/docs/implementors',
            'TRAITINDEX_ARM_AFTER': '2',
            'TRAITINDEX_LOAD_ORDER': 'shuffle',
            'TRAITINDEX_SEED': '5',
            'TRAITINDEX_LOG_LEVEL': 'info',
        })

        assert config.shards_dir == Path('/srv/docs/implementors')
        assert config.arm_after == 2
        assert config.load_order == 'shuffle'
        assert config.seed == 5
        assert config.log_level == 'INFO'

    def test_empty_env_ignored(self):
        """Unset or empty variables leave values alone."""
        config = IndexConfig(seed=9).with_env({'TRAITINDEX_SEED': ''})
        assert config.seed == 9

    def test_get_config_explicit_file_then_env(self, tmp_path):
        """get_config reads the given file, then applies the environment."""
        config_file = tmp_path / 'custom.yaml'
        with open(config_file, 'w') as f:
            yaml.dump({'index': {'arm_after': 1, 'load_order': 'reverse'}}, f)

        config = get_config(config_file, environ={'TRAITINDEX_ARM_AFTER': '0'})

        assert config.arm_after == 0
        assert config.load_order == 'reverse'

    def test_get_config_default_file(self, tmp_path, monkeypatch):
        """./traitindex.yaml is picked up when present."""
        monkeypatch.chdir(tmp_path)
        with open(tmp_path / 'traitindex.yaml', 'w') as f:
            yaml.dump({'index': {'seed': 42}}, f)

        assert get_config(environ={}).seed == 42

    def test_get_config_no_file(self, tmp_path, monkeypatch):
        """Without a file, defaults plus environment are used."""
        monkeypatch.chdir(tmp_path)
        assert get_config(environ={}) == IndexConfig()
