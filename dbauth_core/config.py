"""
Configuration for DbTable authentication.

Supports YAML configuration files describing which table and columns to
authenticate against, plus the validators used before any name or
expression is interpolated into SQL.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import InvalidArgumentError

# Safe identifier pattern for SQL injection prevention
_SAFE_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_SAFE_FQN_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*){0,2}$")

# Blocks: statement terminators, comments, and DDL/DML keywords
_DANGEROUS_SQL_RE = re.compile(
    r"(;\s*$|;\s*\w|--\s|/\*|\*/"
    r"|\b(INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|GRANT|REVOKE|TRUNCATE"
    r"|EXEC|EXECUTE|UNION\s+ALL|UNION\s+SELECT)\b)",
    re.IGNORECASE,
)

_KNOWN_KEYS = frozenset(
    {
        "table",
        "identity_column",
        "credential_column",
        "credential_treatment",
        "ambiguity_identity",
    }
)


def validate_identifier(value: str, name: str = "identifier") -> str:
    """
    Validate a string is safe for use as SQL identifier.

    Args:
        value: String to validate
        name: Name of the field (for error messages)

    Returns:
        The validated string

    Raises:
        InvalidArgumentError: If string is not safe for SQL use
    """
    if not value:
        raise InvalidArgumentError(f"{name} cannot be empty")
    if not _SAFE_IDENTIFIER_RE.match(value):
        raise InvalidArgumentError(
            f"Invalid {name}: '{value}'. Must be alphanumeric with underscores."
        )
    return value


def validate_fqn(value: str, name: str = "table") -> str:
    """
    Validate a table name, optionally qualified as schema.table or
    catalog.schema.table.
    """
    if not value:
        raise InvalidArgumentError(f"{name} cannot be empty")
    clean = value.replace("`", "").replace('"', "")
    if not _SAFE_FQN_RE.match(clean):
        raise InvalidArgumentError(f"Invalid {name}: '{value}'. Must be valid table FQN.")
    return value


def validate_sql_expr(value: str, name: str = "expression") -> str:
    """
    Validate a SQL expression is safe for interpolation.

    Used for credential treatments such as ``MD5(?)`` or
    ``SHA256(CONCAT(?, salt))``, which may call functions but must never
    contain DDL/DML or injection attempts.

    Raises:
        InvalidArgumentError: If expression contains dangerous SQL patterns
    """
    if not value:
        raise InvalidArgumentError(f"{name} cannot be empty")
    if _DANGEROUS_SQL_RE.search(value):
        raise InvalidArgumentError(
            f"Unsafe SQL detected in {name}: '{value}'. "
            f"Expressions must not contain DDL/DML statements, "
            f"semicolons, or SQL comments."
        )
    return value


@dataclass
class AdapterConfig:
    """Table and column settings for a DbTableAuthAdapter."""

    table: str
    identity_column: str
    credential_column: str
    credential_treatment: Optional[str] = None
    ambiguity_identity: bool = False

    def __post_init__(self):
        validate_fqn(self.table, "table")
        validate_identifier(self.identity_column, "identity_column")
        validate_identifier(self.credential_column, "credential_column")
        if self.credential_treatment is not None:
            validate_sql_expr(self.credential_treatment, "credential_treatment")
        if not isinstance(self.ambiguity_identity, bool):
            raise InvalidArgumentError(
                f"ambiguity_identity must be a boolean, got {self.ambiguity_identity!r}"
            )

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "AdapterConfig":
        validate_config(config)
        return cls(**{key: config[key] for key in _KNOWN_KEYS if key in config})


def load_config(path: str) -> AdapterConfig:
    """
    Load YAML configuration file.

    Example file:

        table: users
        identity_column: username
        credential_column: password
        credential_treatment: "MD5(?)"
        ambiguity_identity: false

    Raises:
        FileNotFoundError: If config file doesn't exist
        InvalidArgumentError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    return AdapterConfig.from_dict(config)


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure.

    Returns:
        True if valid

    Raises:
        InvalidArgumentError: If configuration is invalid
    """
    if not config:
        raise InvalidArgumentError("Configuration cannot be empty")
    if not isinstance(config, dict):
        raise InvalidArgumentError("Configuration must be a mapping")

    for key in ("table", "identity_column", "credential_column"):
        if key not in config:
            raise InvalidArgumentError(f"Configuration must have '{key}'")

    unknown = sorted(set(config) - _KNOWN_KEYS)
    if unknown:
        raise InvalidArgumentError(f"Unknown configuration keys: {', '.join(unknown)}")

    validate_fqn(config["table"], "table")
    validate_identifier(config["identity_column"], "identity_column")
    validate_identifier(config["credential_column"], "credential_column")
    if config.get("credential_treatment") is not None:
        validate_sql_expr(config["credential_treatment"], "credential_treatment")

    return True
