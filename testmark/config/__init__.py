from .loader import load_config, regen_requested
from .models import TestmarkConfig

__all__ = [
    "TestmarkConfig",
    "load_config",
    "regen_requested",
]
