"""Centralized default values for benchmark configuration.

This module provides a single source of truth for the constants that drive
the iteration-scaling loop. Tests and embedding tools can swap the global
instance with ``set_defaults``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from microharness.exceptions import ConfigurationError


NS_PER_MS = 1_000_000
NS_PER_S = 1_000_000_000

# Absolute ceiling on iterations per invocation in duration-target mode
MAX_ITERATIONS = 1_000_000_000


@dataclass
class BenchmarkDefaults:
    """Centralized default values for benchmark configuration.
    
    The scaling step extrapolates linearly toward the duration target, adds
    ``1/headroom_divisor`` on top, and never grows by more than
    ``max_growth_factor`` per step or beyond ``max_iterations`` in total.
    """
    
    # Scaling loop
    initial_iterations: int = 1
    max_iterations: int = MAX_ITERATIONS
    max_growth_factor: int = 100
    headroom_divisor: int = 5
    
    # Duration-target mode when the caller gives no explicit target
    default_duration_ns: int = NS_PER_S
    
    # Logging
    log_level: str = "INFO"
    
    def __post_init__(self):
        for key in ("initial_iterations", "max_iterations", "max_growth_factor", "headroom_divisor"):
            value = getattr(self, key)
            if value < 1:
                raise ConfigurationError(
                    f"{key} must be >= 1, got {value}",
                    config_key=key,
                    config_value=value,
                    reason="scaling parameters must be positive",
                )
    
    @classmethod
    def from_env(cls) -> BenchmarkDefaults:
        """Create BenchmarkDefaults with default values.
        
        Environment variables are not consulted; callers override values by
        constructing a new instance and passing it to ``set_defaults``.
        """
        return cls()
    
    def to_dict(self) -> dict:
        """Convert defaults to dictionary."""
        return asdict(self)


# Global instance - can be overridden for testing or custom configurations
_defaults = BenchmarkDefaults.from_env()


def get_defaults() -> BenchmarkDefaults:
    """Get the global BenchmarkDefaults instance."""
    return _defaults


def set_defaults(defaults: BenchmarkDefaults) -> None:
    """Set the global BenchmarkDefaults instance (useful for testing)."""
    global _defaults
    _defaults = defaults
