'''
Configuration management for dimred.

Settings are grouped into dataclass sections and resolved in layers:

1. Defaults built into the package
2. A JSON user configuration file, if one exists
3. Environment variables named DIMRED_<SECTION>_<OPTION>
4. Runtime modifications through set_config()

The PCA engine reads its eigenvalue tolerance and default decomposition
method from the numerical section, and both the engine and the distance
comparator consult the performance section to decide whether the numba
kernels are used.
'''

import json
import logging
import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from .exceptions import ConfigurationError
from .types import ConfigDict, LogLevel

logger = logging.getLogger("dimred.core.config")

CONFIG_ENV_PREFIX = "DIMRED_"
DEFAULT_CONFIG_FILENAME = "dimred_config.json"
USER_CONFIG_DIR_ENV = "DIMRED_CONFIG_DIR"

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_VALID_METHODS = ("eigh", "svd")


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    NUMERICAL = "numerical"
    PERFORMANCE = "performance"
    LOGGING = "logging"


@dataclass
class NumericalConfig:
    """
    Numerical settings used by the PCA engine.

    Attributes:
        eigenvalue_tolerance: Relative size below which negative eigenvalues
            are treated as rounding noise and clipped to zero
        orthonormality_tolerance: Tolerance used when checking that a basis
            is orthonormal
        default_method: Decomposition used when none is requested
            ("eigh" or "svd")
    """
    eigenvalue_tolerance: float = 1e-10
    orthonormality_tolerance: float = 1e-6
    default_method: str = "eigh"


@dataclass
class PerformanceConfig:
    """
    Performance settings.

    Attributes:
        enable_numba: Whether the parallel numba kernels replace the
            NumPy/SciPy code paths for covariance and pairwise distances
    """
    enable_numba: bool = True


@dataclass
class LoggingConfig:
    """
    Logging settings applied to the "dimred" logger.

    Attributes:
        log_level: Default logging level
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to log to the console
        file_logging: Whether to log to a file
        log_file: Path to the log file (None for no file logging)
    """
    log_level: LogLevel = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True
    file_logging: bool = False
    log_file: Optional[Path] = None


@dataclass
class DimRedConfig:
    """Complete configuration, one attribute per section."""
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigManager:
    """
    Configuration manager for dimred.

    Holds the current DimRedConfig and implements the layered lookup described
    in the module docstring.

    Attributes:
        _config: The current configuration object
        _initialized: Whether initialize() has run
        _config_file: Path to the user configuration file
        _modified_keys: "section.option" keys changed at runtime
    """

    def __init__(self):
        self._config = DimRedConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()

    def initialize(self) -> None:
        """
        Initialize the configuration manager.

        Loads the user configuration file when present, applies environment
        variable overrides, validates the result and configures logging.
        """
        if self._initialized:
            return

        self._config_file = self.get_user_config_dir() / DEFAULT_CONFIG_FILENAME
        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def get_user_config_dir(self) -> Path:
        """Directory holding the user configuration file."""
        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            return Path(env_config_dir)
        return Path.home() / ".dimred"

    def get_config_file(self) -> Optional[Path]:
        return self._config_file

    def _load_user_config(self) -> None:
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load user configuration: {e}")
            return

        self._update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """
        Apply DIMRED_<SECTION>_<OPTION> environment variables.

        Values are converted to the type of the current default; variables
        that do not name a known section and option are ignored.
        """
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == USER_CONFIG_DIR_ENV:
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section)
            if not hasattr(section_obj, option):
                continue

            try:
                typed_value = self._convert(getattr(section_obj, option), value)
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")
                continue

            setattr(section_obj, option, typed_value)
            logger.debug(f"Applied environment override: {env_var}={value}")

    @staticmethod
    def _convert(current_value: Any, value: Any) -> Any:
        """Convert value to the type of current_value."""
        if isinstance(current_value, bool):
            if isinstance(value, str):
                return value.lower() in ('true', 'yes', '1', 'y')
            return bool(value)
        if isinstance(current_value, Path) or (current_value is None and isinstance(value, str)):
            return Path(value)
        if current_value is None or isinstance(value, type(current_value)):
            return value
        return type(current_value)(value)

    def _setup_logging(self) -> None:
        """Configure the "dimred" logger from the logging section."""
        root_logger = logging.getLogger("dimred")

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        root_logger.setLevel(getattr(logging, self._config.logging.log_level))

        formatter = logging.Formatter(
            fmt=self._config.logging.log_format,
            datefmt=self._config.logging.log_date_format
        )

        if self._config.logging.console_logging:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            root_logger.addHandler(console_handler)

        if self._config.logging.file_logging and self._config.logging.log_file:
            log_file = Path(self._config.logging.log_file)
            try:
                log_file.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_file)
            except OSError as e:
                logger.warning(f"Failed to set up file logging: {e}")
            else:
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)

    def _validate_config(self) -> None:
        """Reset invalid values to their defaults, logging a warning for each."""
        numerical = self._config.numerical
        defaults = NumericalConfig()

        for name in ("eigenvalue_tolerance", "orthonormality_tolerance"):
            if getattr(numerical, name) <= 0:
                logger.warning(f"Invalid {name}: {getattr(numerical, name)}, using default")
                setattr(numerical, name, getattr(defaults, name))

        if numerical.default_method not in _VALID_METHODS:
            logger.warning(f"Invalid default_method: {numerical.default_method}, using eigh")
            numerical.default_method = defaults.default_method

        if self._config.logging.log_level not in _VALID_LOG_LEVELS:
            logger.warning(f"Invalid log_level: {self._config.logging.log_level}, using INFO")
            self._config.logging.log_level = "INFO"

    @staticmethod
    def _check_value(section: str, option: str, value: Any) -> Optional[str]:
        """Describe why a value is not acceptable for an option, or return None."""
        if section == ConfigSection.NUMERICAL.value:
            if option in ("eigenvalue_tolerance", "orthonormality_tolerance") and value <= 0:
                return "Tolerance must be positive"
            if option == "default_method" and value not in _VALID_METHODS:
                return f"Method must be one of {', '.join(_VALID_METHODS)}"
        elif section == ConfigSection.LOGGING.value:
            if option == "log_level" and value not in _VALID_LOG_LEVELS:
                return f"Log level must be one of {', '.join(_VALID_LOG_LEVELS)}"
        return None

    def _update_from_dict(self, config_dict: ConfigDict) -> None:
        for section_name, section_dict in config_dict.items():
            if not hasattr(self._config, section_name):
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section = getattr(self._config, section_name)
            for option_name, option_value in section_dict.items():
                if not hasattr(section, option_name):
                    logger.warning(f"Unknown configuration option: {section_name}.{option_name}")
                    continue
                try:
                    option_value = self._convert(getattr(section, option_name), option_value)
                except (TypeError, ValueError) as e:
                    logger.warning(f"Failed to set {section_name}.{option_name}: {e}")
                    continue
                setattr(section, option_name, option_value)

    def save_user_config(self) -> None:
        """Write the current configuration to the user configuration file."""
        if not self._config_file:
            self._config_file = self.get_user_config_dir() / DEFAULT_CONFIG_FILENAME

        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.debug(f"Saved user configuration to {self._config_file}")

    def to_dict(self) -> ConfigDict:
        """
        Convert the configuration to a dictionary.

        Returns:
            Nested dictionary keyed by section then option, with Path values
            rendered as strings
        """
        result = {}
        for section_field in fields(self._config):
            section = getattr(self._config, section_field.name)
            section_dict = {}
            for option_field in fields(section):
                value = getattr(section, option_field.name)
                if isinstance(value, Path):
                    value = str(value)
                section_dict[option_field.name] = value
            result[section_field.name] = section_dict
        return result

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Returns:
            The configuration value, or default if the section or option
            does not exist
        """
        section_obj = getattr(self._config, section, None)
        if section_obj is None or not hasattr(section_obj, option):
            return default
        return getattr(section_obj, option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Raises:
            ConfigurationError: If the section or option is not found, or the
                value cannot be converted to the option's type
        """
        section_obj = self.get_section(section)

        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Option not found"
            )

        try:
            typed_value = self._convert(getattr(section_obj, option), value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e

        issue = self._check_value(section, option, typed_value)
        if issue is not None:
            raise ConfigurationError(
                f"Invalid value for configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=issue
            )

        setattr(section_obj, option, typed_value)
        self._modified_keys.add(f"{section}.{option}")

        if section == ConfigSection.LOGGING.value:
            self._validate_config()
            self._setup_logging()

        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: Section to reset, or None to reset everything
            option: Option to reset, or None to reset the whole section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = DimRedConfig()
            self._modified_keys.clear()
            logger.debug("Reset all configuration to defaults")
            return

        section_obj = self.get_section(section)
        default_section = type(section_obj)()

        if option is None:
            setattr(self._config, section, default_section)
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
            logger.debug(f"Reset configuration section {section} to defaults")
            return

        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )

        setattr(section_obj, option, getattr(default_section, option))
        self._modified_keys.discard(f"{section}.{option}")
        logger.debug(f"Reset configuration option {section}.{option} to default")

    def get_modified_options(self) -> List[str]:
        return sorted(self._modified_keys)

    def get_sections(self) -> List[str]:
        return [f.name for f in fields(self._config)]

    def get_section(self, section: str) -> Any:
        """
        Get a configuration section object.

        Raises:
            ConfigurationError: If the section is not found
        """
        if section not in self.get_sections():
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )
        return getattr(self._config, section)


# Singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """Initialize the configuration system."""
    _config_manager.initialize()


def get_config_manager() -> ConfigManager:
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    return get_config_manager().get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section or option is not found
    """
    get_config_manager().set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """Reset configuration to default values."""
    get_config_manager().reset(section, option)


def save_config() -> None:
    """Save the current configuration to the user configuration file."""
    get_config_manager().save_user_config()


def get_numerical_config() -> NumericalConfig:
    return get_config_manager().get_section("numerical")


def get_performance_config() -> PerformanceConfig:
    return get_config_manager().get_section("performance")


def get_logging_config() -> LoggingConfig:
    return get_config_manager().get_section("logging")
