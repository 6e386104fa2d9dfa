"""Configuration management for jolly-seber-jax."""

from .settings import (
    JollySeberConfig,
    ModelConfig,
    SimulationConfig,
    LoggingConfig,
    PerformanceConfig,
    BetaPrior,
    GammaPrior,
    DegeneratePolicy,
    get_default_config,
)

__all__ = [
    "JollySeberConfig",
    "ModelConfig",
    "SimulationConfig",
    "LoggingConfig",
    "PerformanceConfig",
    "BetaPrior",
    "GammaPrior",
    "DegeneratePolicy",
    "get_default_config",
]
