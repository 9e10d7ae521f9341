"""
dimred core infrastructure.

Exceptions, configuration, type aliases, validation helpers and the abstract
base classes shared by the PCA engine and the distance comparator.
"""

import logging

logger = logging.getLogger("dimred.core")

from .exceptions import (
    DimRedError, InvalidInputError, DimensionError, DataError, ParameterError,
    NumericalDegeneracyError, ConfigurationError, NotFittedError,
    DimRedWarning, NumericWarning
)
from .config import (
    initialize_config, get_config, set_config, reset_config, save_config,
    get_config_manager, get_numerical_config, get_performance_config,
    get_logging_config
)
from .base import ModelBase, ModelResult

__all__ = [
    # Exceptions
    'DimRedError',
    'InvalidInputError',
    'DimensionError',
    'DataError',
    'ParameterError',
    'NumericalDegeneracyError',
    'ConfigurationError',
    'NotFittedError',
    'DimRedWarning',
    'NumericWarning',

    # Configuration
    'initialize_config',
    'get_config',
    'set_config',
    'reset_config',
    'save_config',
    'get_config_manager',
    'get_numerical_config',
    'get_performance_config',
    'get_logging_config',

    # Base classes
    'ModelBase',
    'ModelResult',
]
