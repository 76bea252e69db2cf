"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Config validation (validators)
    - Atomic image/YAML I/O (fs)
    - Stage timing (profiler)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (saliency_map, data_pipeline).

Convenience imports:
    from src.utils import fs, validators
    from src.utils.logging_config import setup_logging, get_logger
"""

# Re-export commonly used modules for convenience
from . import fs
from . import logging_config
from . import profiler
from . import validators

# Common functions for direct import
from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    # Modules
    'fs',
    'logging_config',
    'profiler',
    'validators',
    # Direct exports
    'get_logger',
    'push_context',
    'setup_logging',
]
