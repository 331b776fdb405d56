"""Exceptions raised by the DbTable authentication adapter.

Authentication *failures* are never raised; they come back as an
``AuthResult``. These exceptions signal a misconfigured adapter.
"""


class DbAuthError(Exception):
    """Base class for all dbauth_core errors."""


class ConfigurationError(DbAuthError, RuntimeError):
    """Adapter cannot run: missing table/columns/values, or the lookup SQL failed."""


class InvalidArgumentError(DbAuthError, ValueError):
    """A setter or constructor received an unusable value."""
