"""
Configuration for traitindex.

Values come from defaults, the ``index:`` section of a YAML file, and
environment variables, in increasing order of precedence. CLI flags override
all of them.
"""
import os
import yaml
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from traitindex.shards.loader import LOAD_ORDERS


DEFAULT_CONFIG_FILE = 'traitindex.yaml'


@dataclass
class IndexConfig:
    """Settings for loading a shard directory into a session."""
    shards_dir: Path = Path('implementors')
    arm_after: Optional[int] = None
    load_order: str = 'path'
    seed: Optional[int] = None
    log_level: str = 'WARNING'

    def __post_init__(self):
        self.shards_dir = Path(self.shards_dir).expanduser()
        if self.arm_after is not None:
            self.arm_after = _parse_int('arm_after', self.arm_after)
            if self.arm_after < 0:
                raise ValueError(f"arm_after must be >= 0, got {self.arm_after}")
        if self.seed is not None:
            self.seed = _parse_int('seed', self.seed)
        if self.load_order not in LOAD_ORDERS:
            raise ValueError(
                f"Unknown load_order: {self.load_order} (expected one of {', '.join(LOAD_ORDERS)})"
            )
        self.log_level = str(self.log_level).upper()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IndexConfig':
        """Build from a dict with an optional ``index`` section."""
        section = data.get('index', {}) if data else {}
        if not isinstance(section, dict):
            raise ValueError("'index' section must be a mapping")

        known = {'shards_dir', 'arm_after', 'load_order', 'seed', 'log_level'}
        unknown = set(section) - known
        if unknown:
            raise ValueError(f"Unknown config keys in 'index': {', '.join(sorted(unknown))}")

        return cls(**section)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> 'IndexConfig':
        """
        Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not a YAML mapping
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config in {yaml_path}: must be a YAML dict")

        return cls.from_dict(data)

    def with_env(self, environ: Optional[Dict[str, str]] = None) -> 'IndexConfig':
        """Return a copy with ``TRAITINDEX_*`` environment overrides applied."""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        if environ.get('TRAITINDEX_SHARDS_DIR'):
            overrides['shards_dir'] = Path(environ['TRAITINDEX_SHARDS_DIR'])
        if environ.get('TRAITINDEX_ARM_AFTER'):
            overrides['arm_after'] = environ['TRAITINDEX_ARM_AFTER']
        if environ.get('TRAITINDEX_LOAD_ORDER'):
            overrides['load_order'] = environ['TRAITINDEX_LOAD_ORDER']
        if environ.get('TRAITINDEX_SEED'):
            overrides['seed'] = environ['TRAITINDEX_SEED']
        if environ.get('TRAITINDEX_LOG_LEVEL'):
            overrides['log_level'] = environ['TRAITINDEX_LOG_LEVEL']

        return replace(self, **overrides)


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def get_config(config_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None) -> IndexConfig:
    """
    Resolve configuration from file and environment.

    Args:
        config_path: Explicit YAML file; if None, ``traitindex.yaml`` in the
            working directory is used when present
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        IndexConfig
    """
    if config_path is not None:
        config = IndexConfig.from_yaml(Path(config_path))
    elif Path(DEFAULT_CONFIG_FILE).exists():
        config = IndexConfig.from_yaml(Path(DEFAULT_CONFIG_FILE))
    else:
        config = IndexConfig()

    return config.with_env(environ)
