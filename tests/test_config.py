"""
Tests for dbauth_core.config.

Validators that guard SQL interpolation, the AdapterConfig dataclass,
YAML loading, and building an adapter from configuration.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dbauth_core import DbTableAuthAdapter
from dbauth_core.config import (
    AdapterConfig,
    load_config,
    validate_config,
    validate_fqn,
    validate_identifier,
    validate_sql_expr,
)
from dbauth_core.exceptions import InvalidArgumentError


@pytest.fixture
def minimal_config():
    return {
        "table": "users",
        "identity_column": "username",
        "credential_column": "password",
    }


class TestValidateIdentifier:
    """Tests for identifier validation."""

    def test_valid_simple_identifier(self):
        assert validate_identifier("username") == "username"
        assert validate_identifier("USER_NAME") == "USER_NAME"
        assert validate_identifier("col1") == "col1"

    def test_invalid_identifier_with_spaces(self):
        with pytest.raises(ValueError):
            validate_identifier("user name")

    def test_invalid_identifier_with_special_chars(self):
        with pytest.raises(InvalidArgumentError):
            validate_identifier("password; DROP TABLE")

    def test_invalid_identifier_starting_with_number(self):
        with pytest.raises(InvalidArgumentError):
            validate_identifier("1password")

    def test_empty_identifier(self):
        with pytest.raises(InvalidArgumentError, match="cannot be empty"):
            validate_identifier("", "identity_column")


class TestValidateFQN:
    """Tests for table name validation."""

    def test_valid_names(self):
        assert validate_fqn("users") == "users"
        assert validate_fqn("auth.users") == "auth.users"
        assert validate_fqn("main.auth.users") == "main.auth.users"

    def test_rejects_injection(self):
        with pytest.raises(InvalidArgumentError):
            validate_fqn("users; DROP TABLE users")

    def test_rejects_four_parts(self):
        with pytest.raises(InvalidArgumentError):
            validate_fqn("a.b.c.d")


class TestValidateSqlExpr:
    """Tests for treatment expression validation."""

    def test_hash_functions(self):
        assert validate_sql_expr("MD5(?)") == "MD5(?)"
        assert validate_sql_expr("SHA256(CONCAT(?, salt))") == "SHA256(CONCAT(?, salt))"

    def test_rejects_semicolon(self):
        with pytest.raises(InvalidArgumentError, match="Unsafe SQL"):
            validate_sql_expr("?; DELETE FROM users")

    def test_rejects_comment(self):
        with pytest.raises(InvalidArgumentError, match="Unsafe SQL"):
            validate_sql_expr("? -- ignore the rest")

    def test_rejects_union_select(self):
        with pytest.raises(InvalidArgumentError, match="Unsafe SQL"):
            validate_sql_expr("? UNION SELECT password FROM users")


class TestValidateConfig:
    """Tests for configuration mapping validation."""

    def test_valid_config_passes(self, minimal_config):
        assert validate_config(minimal_config) is True

    def test_empty_config_raises(self):
        with pytest.raises(InvalidArgumentError, match="cannot be empty"):
            validate_config({})

    @pytest.mark.parametrize("key", ["table", "identity_column", "credential_column"])
    def test_missing_required_key(self, minimal_config, key):
        del minimal_config[key]
        with pytest.raises(InvalidArgumentError, match=key):
            validate_config(minimal_config)

    def test_unknown_key(self, minimal_config):
        minimal_config["password_column"] = "pw"
        with pytest.raises(InvalidArgumentError, match="Unknown configuration keys"):
            validate_config(minimal_config)

    def test_unsafe_treatment(self, minimal_config):
        minimal_config["credential_treatment"] = "MD5(?); DROP TABLE users"
        with pytest.raises(InvalidArgumentError, match="Unsafe SQL"):
            validate_config(minimal_config)


class TestAdapterConfig:
    """Tests for the AdapterConfig dataclass."""

    def test_defaults(self):
        config = AdapterConfig("users", "username", "password")
        assert config.credential_treatment is None
        assert config.ambiguity_identity is False

    def test_rejects_bad_column(self):
        with pytest.raises(InvalidArgumentError):
            AdapterConfig("users", "user name", "password")

    def test_rejects_non_bool_flag(self):
        with pytest.raises(InvalidArgumentError, match="ambiguity_identity"):
            AdapterConfig("users", "username", "password", ambiguity_identity="yes")

    def test_from_dict(self, minimal_config):
        minimal_config["ambiguity_identity"] = True
        config = AdapterConfig.from_dict(minimal_config)
        assert config.table == "users"
        assert config.ambiguity_identity is True


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_load(self, tmp_path):
        path = tmp_path / "auth.yaml"
        path.write_text(
            "table: auth.users\n"
            "identity_column: username\n"
            "credential_column: password\n"
            'credential_treatment: "MD5(?)"\n'
            "ambiguity_identity: true\n"
        )
        config = load_config(str(path))
        assert config == AdapterConfig(
            table="auth.users",
            identity_column="username",
            credential_column="password",
            credential_treatment="MD5(?)",
            ambiguity_identity=True,
        )

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "auth.yaml"
        path.write_text("table: users\n")
        with pytest.raises(InvalidArgumentError, match="identity_column"):
            load_config(str(path))


class TestAdapterFromConfig:
    """Tests for DbTableAuthAdapter.from_config()."""

    def test_from_mapping(self, minimal_config):
        minimal_config["credential_treatment"] = "MD5(?)"
        auth = DbTableAuthAdapter.from_config(MagicMock(), minimal_config)
        assert auth.table_name == "users"
        assert auth.identity_column == "username"
        assert auth.credential_column == "password"
        assert auth.get_comparator().treatment == "MD5(?)"
        assert auth.get_ambiguity_identity() is False

    def test_from_dataclass(self):
        config = AdapterConfig("users", "email", "pw_hash", ambiguity_identity=True)
        auth = DbTableAuthAdapter.from_config(MagicMock(), config)
        assert auth.identity_column == "email"
        assert auth.get_ambiguity_identity() is True

    def test_setters_validate_names(self):
        auth = DbTableAuthAdapter(MagicMock())
        with pytest.raises(InvalidArgumentError):
            auth.set_identity_column("username OR 1=1")
