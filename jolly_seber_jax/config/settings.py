"""
Configuration management system for jolly-seber-jax.

Provides a hierarchical configuration system with support for
file-based configuration, environment variables, and runtime updates.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union, List, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from ..core.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DegeneratePolicy(str, Enum):
    """What to do when the remaining entry mass collapses before occasion T."""
    CLAMP = "clamp"
    RAISE = "raise"


class BetaPrior(BaseModel):
    """Beta(a, b) prior on a probability. Beta(1, 1) is uniform on (0, 1)."""
    a: float = 1.0
    b: float = 1.0

    @field_validator('a', 'b')
    @classmethod
    def validate_shape(cls, v):
        if v <= 0:
            raise ValueError("Beta shape parameters must be positive")
        return v


class GammaPrior(BaseModel):
    """Gamma(shape, rate) prior applied independently to each entry weight."""
    shape: float = 1.0
    rate: float = 1.0

    @field_validator('shape', 'rate')
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Gamma parameters must be positive")
        return v


class ModelConfig(BaseModel):
    """Model specification configuration."""
    survival_prior: BetaPrior = Field(default_factory=BetaPrior)
    capture_prior: BetaPrior = Field(default_factory=BetaPrior)
    inclusion_prior: BetaPrior = Field(default_factory=BetaPrior)
    entry_weight_prior: GammaPrior = Field(default_factory=GammaPrior)
    degenerate_policy: DegeneratePolicy = DegeneratePolicy.CLAMP
    mass_floor: float = 1e-12
    validate_parameters: bool = True

    @field_validator('mass_floor')
    @classmethod
    def validate_mass_floor(cls, v):
        if not 0 < v < 1:
            raise ValueError("mass_floor must lie in (0, 1)")
        return v


class SimulationConfig(BaseModel):
    """Latent-state simulation configuration."""
    random_seed: int = 0
    quantiles: Tuple[float, ...] = (0.025, 0.5, 0.975)

    @field_validator('quantiles')
    @classmethod
    def validate_quantiles(cls, v):
        if any(q < 0 or q > 1 for q in v):
            raise ValueError("quantiles must lie in [0, 1]")
        return tuple(sorted(v))


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    file_logging: bool = False
    log_file: Optional[Path] = None
    console_logging: bool = True
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator('log_file', mode='before')
    @classmethod
    def validate_log_file(cls, v):
        return Path(v) if v else None


class PerformanceConfig(BaseModel):
    """Numerical and compilation settings."""
    enable_x64: bool = True
    enable_jit_compilation: bool = True


class JollySeberConfig(BaseModel):
    """Main configuration class for jolly-seber-jax."""

    model_config = ConfigDict(validate_assignment=True, use_enum_values=True)

    model: ModelConfig = Field(default_factory=ModelConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)

    def __init__(self, config_file: Optional[Union[str, Path]] = None, **kwargs):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
            **kwargs: Override specific configuration values
        """
        config_data = {}
        if config_file:
            config_data = self._load_config_file(config_file)

        _merge(config_data, self._load_environment_variables())
        _merge(config_data, kwargs)

        super().__init__(**config_data)

    @staticmethod
    def _load_config_file(config_file: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(config_key=str(config_path)) from e

        if not isinstance(data, dict):
            raise ConfigurationError(config_key=str(config_path))
        return data

    @staticmethod
    def _load_environment_variables() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config = {}

        env_mappings = {
            'JOLLY_SEBER_JAX_LOG_LEVEL': ('logging', 'level'),
            'JOLLY_SEBER_JAX_RANDOM_SEED': ('simulation', 'random_seed'),
            'JOLLY_SEBER_JAX_ENABLE_X64': ('performance', 'enable_x64'),
            'JOLLY_SEBER_JAX_DEGENERATE_POLICY': ('model', 'degenerate_policy'),
        }

        for env_var, (section, key) in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                if section not in config:
                    config[section] = {}

                if key in ['random_seed']:
                    try:
                        value = int(value)
                    except ValueError as e:
                        raise ConfigurationError(config_key=env_var) from e
                elif key in ['enable_x64']:
                    value = value.lower() in ('true', '1', 'yes', 'on')

                config[section][key] = value

        return config

    def save_config(self, config_file: Union[str, Path]) -> None:
        """Save current configuration to YAML file."""
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.safe_dump(self.model_dump(mode='json'), f, default_flow_style=False, indent=2)

    def update(self, **kwargs) -> None:
        """Update configuration values. Nested keys use dotted names."""
        for key, value in kwargs.items():
            if '.' in key:
                section, subkey = key.split('.', 1)
                section_obj = getattr(self, section, None)
                if section_obj is None or not hasattr(section_obj, subkey):
                    raise ConfigurationError(config_key=key)
                setattr(section_obj, subkey, value)
            elif hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ConfigurationError(config_key=key)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base, in place."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


# Default configuration instance
_default_config: Optional[JollySeberConfig] = None


def get_default_config() -> JollySeberConfig:
    """Get the default configuration instance."""
    global _default_config
    if _default_config is None:
        _default_config = JollySeberConfig()
    return _default_config
