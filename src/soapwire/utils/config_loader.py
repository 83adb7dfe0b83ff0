# soapwire/utils/config_loader.py
"""
soapwire Configuration Loader with Pydantic Validation

This module loads and validates configuration from a YAML file using Pydantic
for strong type checking and validation. The resulting configuration object
holds every default a SOAP call reads: SOAP version, namespaces, headers,
WS-Security credentials, and the raise-errors policy.

Key Design Decisions:
- Pydantic models mirror the exact structure of config.yaml for maintainability
- All models are frozen; a configuration is shared between clients and threads
  without locking, and changes produce a new object (model_copy)
- Validation occurs at load time to fail fast if config is malformed
- Sensitive values (passwords) use SecretStr to prevent accidental logging
- An unsupported SOAP version is ignored, keeping the default (SOAP 1.1)
"""

import logging
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
    PositiveFloat,
    ValidationError,
    field_validator,
    model_validator,
)

from soapwire.models import Operation, OperationTable, SoapVersion, WsseCredentials

# Set up a logger for this module
logger: logging.Logger = logging.getLogger(__name__)

# =============================================================================
# Type Aliases for Clarity
# =============================================================================

# Level names accepted in config.yaml and their numeric values
LOG_LEVELS: dict[str, int] = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


def _to_log_level(value: Any) -> Any:
    """Convert a level name (any case) to its number; reject unknown numbers."""
    if isinstance(value, str):
        level: int | None = LOG_LEVELS.get(value.strip().upper())
        if level is None:
            raise ValueError(
                f'Unknown log level {value!r}, expected one of {", ".join(LOG_LEVELS)}'
            )
        return level
    if isinstance(value, int) and value not in LOG_LEVELS.values():
        raise ValueError(
            f'Numeric log level must be one of {sorted(LOG_LEVELS.values())}, got {value}'
        )
    return value


# A logging level, given in YAML as 'DEBUG' / 'debug' / 10, stored as an int
LogLevel = Annotated[int, BeforeValidator(_to_log_level)]

# (connect, read) timeouts in seconds
TimeoutPair = tuple[PositiveFloat, PositiveFloat]

# =============================================================================
# Configuration Models (Schema)
# =============================================================================
# These models mirror the structure of config.yaml exactly.

class SoapSection(BaseModel):
    """
    Schema for the 'soap' section of config.yaml.

    Envelope defaults applied to every call. Per-call values passed to the
    envelope builder are merged over these.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')
    version: SoapVersion = Field(
        default=SoapVersion.V1_1,
        description='Default SOAP version: 1 (SOAP 1.1) or 2 (SOAP 1.2). '
        'The strings "1.1" and "1.2" are accepted as well. '
        'Unsupported values are ignored and SOAP 1.1 is used.',
    )

    endpoint_url: HttpUrl | None = Field(
        default=None,
        description='Default SOAP endpoint, used when an operation has none.',
    )

    namespaces: dict[str, str] = Field(
        default_factory=dict,
        description='Namespaces declared on every envelope. Keys are prefixes '
        '("wsdl") or attribute names ("xmlns:wsdl").',
    )

    header: dict[str, Any] | str = Field(
        default_factory=dict,
        description='Header content sent with every call: a mapping rendered to '
        'XML elements, or a raw XML string.',
    )

    @field_validator('version', mode='before')
    @classmethod
    def ignore_unsupported_version(cls, v: Any) -> SoapVersion:
        """Keep the default version when the configured one is not supported."""
        return SoapVersion.coerce(v, SoapVersion.V1_1)

    @field_validator('header', mode='before')
    @classmethod
    def empty_header(cls, v: Any) -> Any:
        """A 'header:' key with no value in YAML means no header."""
        return {} if v is None else v


class ResponseSection(BaseModel):
    """
    Schema for the 'response' section of config.yaml.

    Controls whether SOAP faults and HTTP errors are raised as exceptions or
    only reported on the returned CallOutcome.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')
    raise_errors: bool = Field(
        default=True,
        description='Raise SoapFaultError and HttpError. When False, callers must '
        'inspect CallOutcome.is_soap_fault and CallOutcome.is_http_error.',
    )


class ClientSection(BaseModel):
    """
    Schema for the 'client' section of config.yaml.

    Settings of the HTTP transport that carries the SOAP envelopes.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')
    request_timeout: TimeoutPair = Field(
        default=(10.0, 30.0),
        description='[connect, read] timeouts in seconds for every SOAP request. '
        'Both must be positive and the connect timeout may not exceed the read timeout.',
    )

    verify_ssl: bool = Field(
        default=True,
        description='Verify the endpoint certificate. Disable only for test servers.',
    )

    @model_validator(mode='after')
    def connect_within_read_timeout(self) -> 'ClientSection':
        connect_timeout, read_timeout = self.request_timeout
        if connect_timeout > read_timeout:
            raise ValueError(
                f'Connect timeout ({connect_timeout}s) should not exceed '
                f'read timeout ({read_timeout}s)'
            )
        return self


class LoggingSection(BaseModel):
    """
    Schema for the 'logging' section of config.yaml.

    The console handler is always installed. A log file is optional and has
    its own level; since envelopes and responses are only logged at DEBUG,
    a DEBUG file next to an INFO console is the usual troubleshooting setup.
    Levels are stored as logging module integers.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')
    console_level: LogLevel = Field(
        default=logging.INFO,
        description='Console level: DEBUG, INFO, WARNING, ERROR, CRITICAL or 10-50.',
    )

    file_path: Path | None = Field(
        default=None,
        description='Optional path to a log file. If provided, logs will be written to '
        'this file in addition to the console.',
    )

    file_level: LogLevel | None = Field(
        default=None,
        description='File level. Defaults to DEBUG when file_path is set.',
    )

    @model_validator(mode='before')
    @classmethod
    def default_file_level(cls, data: Any) -> Any:
        """A log file without a level receives everything down to DEBUG."""
        if isinstance(data, dict) and data.get('file_path') and data.get('file_level') is None:
            logger.debug('No file_level configured for %r, using DEBUG', data['file_path'])
            return {**data, 'file_level': logging.DEBUG}
        return data

    @model_validator(mode='after')
    def file_level_needs_file(self) -> 'LoggingSection':
        if self.file_level is not None and self.file_path is None:
            raise ValueError('file_level is set but file_path is missing')
        return self


class SoapwireConfig(BaseModel):
    """
    Root configuration model.

    Aggregates all configuration sections into a single, validated, immutable
    object. Every section has defaults, so SoapwireConfig() is a valid
    configuration for SOAP 1.1 without headers or WS-Security.

    Usage:
        config = load_config()
        version = config.soap.version
        soap12 = config.with_soap_version(2)
        quiet = config.model_copy(
            update={'response': ResponseSection(raise_errors=False)}
        )
    """

    model_config = ConfigDict(frozen=True, extra='forbid')
    soap: SoapSection = Field(default_factory=SoapSection)
    wsse: WsseCredentials = Field(default_factory=WsseCredentials)
    response: ResponseSection = Field(default_factory=ResponseSection)
    client: ClientSection = Field(default_factory=ClientSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)
    operations: dict[str, Operation] = Field(
        default_factory=dict,
        description='Operation table: operation name -> action, input, '
        'target_namespace and endpoint.',
    )

    @field_validator('soap', 'wsse', 'response', 'client', 'logging', 'operations', mode='before')
    @classmethod
    def empty_section(cls, v: Any) -> Any:
        """A section key with no value in YAML means all defaults."""
        return {} if v is None else v

    def with_soap_version(self, version: Any) -> 'SoapwireConfig':
        """
        Return a copy of this configuration using another default SOAP version.

        Unsupported versions are ignored: the configuration is returned
        unchanged.
        """
        new_version: SoapVersion = SoapVersion.coerce(version, self.soap.version)
        if new_version is self.soap.version:
            return self
        soap: SoapSection = self.soap.model_copy(update={'version': new_version})
        return self.model_copy(update={'soap': soap})

    def operation_table(self) -> OperationTable:
        """Return the configured operations as an OperationTable."""
        return OperationTable(self.operations)


# =============================================================================
# Loader Logic
# =============================================================================


def _get_default_config_path() -> Path:
    """
    Resolve the absolute path to the default config.yaml file.

    Directory Structure:
        src/
        └── soapwire/
            ├── config/
            │   └── config.yaml       <-- Target file
            └── utils/
                └── config_loader.py  <-- This file

    Returns:
        Absolute path to config.yaml
    """
    current_file: Path = Path(__file__).resolve()

    # Navigate up two levels: utils/ -> soapwire/
    package_root: Path = current_file.parent.parent

    return package_root / 'config' / 'config.yaml'


def load_config(config_path: Path | str | None = None) -> SoapwireConfig:
    """
    Load, parse, and validate the configuration file.

    This is the primary entry point for configuration loading. It handles the entire
    pipeline: file resolution -> YAML parsing -> Pydantic validation -> typed object.

    Args:
        config_path: Optional explicit path to a config file. If None, uses the
                     default location determined by _get_default_config_path().

    Returns:
        A fully validated, frozen SoapwireConfig object.

    Raises:
        FileNotFoundError: The specified config file does not exist on disk.
        yaml.YAMLError: The file exists but contains invalid YAML syntax.
        ValidationError: The YAML is valid but the configuration is invalid.

    Example:
        # Use default config location
        config = load_config()

        # Use explicit config for testing
        test_config = load_config('/tmp/test_config.yaml')
    """
    # 1. Resolve and check the file
    # ------------------------------
    path_obj: Path = Path(config_path) if config_path else _get_default_config_path()
    logger.debug('Resolving configuration from: %s', path_obj)

    if not path_obj.is_file():
        error_msg: str = f'Configuration file not found at: {path_obj}'
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    # 2. Parse YAML; an empty file means all defaults
    # ------------------------------------------------
    try:
        with open(path_obj, encoding='utf-8') as f:
            raw_config: Any = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error('Failed to parse YAML config file %s: %s', path_obj, e)
        raise

    # 3. Validate with Pydantic (a non-mapping document fails here as well)
    # ----------------------------------------------------------------------
    try:
        config: SoapwireConfig = SoapwireConfig.model_validate(raw_config)
    except ValidationError as e:
        logger.error('Configuration validation failed for %s: %s', path_obj, e)
        raise

    logger.debug(
        'Configuration loaded: SOAP %s, %d operations, raise_errors=%s',
        '1.2' if config.soap.version is SoapVersion.V1_2 else '1.1',
        len(config.operations),
        config.response.raise_errors,
    )
    return config
