"""
Tests for the validation utilities.
"""

import pytest
from roster_scanner.utils.validation import (
    validate_character_id,
    validate_directory_path,
    validate_enum_value,
    validate_numeric_range,
    validate_url,
)
from roster_scanner.utils.error_handler import ConfigurationError


class TestValidateDirectoryPath:
    """Test directory path validation functionality."""

    def test_validate_directory_path_valid(self, tmp_path):
        result = validate_directory_path(tmp_path)
        assert result == tmp_path.resolve()

    def test_validate_directory_path_create_if_missing(self, tmp_path):
        new_dir = tmp_path / "assets" / "portraits"

        result = validate_directory_path(new_dir, create_if_missing=True)

        assert new_dir.is_dir()
        assert result == new_dir.resolve()

    def test_validate_directory_path_missing(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_directory_path(tmp_path / "nope")

        assert "Directory does not exist" in exc_info.value.message

    def test_validate_directory_path_is_file(self, tmp_path):
        test_file = tmp_path / "roster.json"
        test_file.write_text("[]")

        with pytest.raises(ConfigurationError) as exc_info:
            validate_directory_path(test_file)

        assert "not a directory" in exc_info.value.message


class TestValidateUrl:
    """Test URL validation functionality."""

    @pytest.mark.parametrize("url", [
        "https://assets.example.com",
        "http://localhost:8080/static",
        "http://127.0.0.1:9000",
    ])
    def test_validate_url_valid(self, url):
        assert validate_url(url) == url

    def test_validate_url_strips_trailing_slash(self):
        assert validate_url("https://assets.example.com/") == "https://assets.example.com"

    @pytest.mark.parametrize("url", ["not a url", "ftp://assets.example.com", "", None])
    def test_validate_url_invalid(self, url):
        with pytest.raises(ConfigurationError):
            validate_url(url)


class TestValidateNumericRange:
    """Test numeric range validation."""

    def test_within_range(self):
        assert validate_numeric_range(5, min_value=1, max_value=10) == 5
        assert validate_numeric_range(1, min_value=1, max_value=10) == 1

    def test_below_minimum(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_numeric_range(0, min_value=1, field_name="columns")

        assert exc_info.value.details["field_name"] == "columns"
        assert "below minimum" in exc_info.value.message

    def test_above_maximum(self):
        with pytest.raises(ConfigurationError):
            validate_numeric_range(11, max_value=10)

    def test_exclusive_bounds(self):
        with pytest.raises(ConfigurationError):
            validate_numeric_range(0.0, min_value=0.0, exclusive_min=True)
        with pytest.raises(ConfigurationError):
            validate_numeric_range(1.0, max_value=1.0, exclusive_max=True)
        assert validate_numeric_range(0.5, min_value=0.0, max_value=1.0, exclusive_min=True, exclusive_max=True) == 0.5

    @pytest.mark.parametrize("value", ["5", None, True])
    def test_non_numeric(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_numeric_range(value, min_value=0)

        assert "must be numeric" in exc_info.value.message


class TestValidateEnumValue:
    """Test enum validation."""

    def test_allowed(self):
        assert validate_enum_value("hybrid", ["pixel", "hash", "hybrid"]) == "hybrid"

    def test_not_allowed(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_enum_value("fuzzy", ["pixel", "hash", "hybrid"], field_name="match mode")

        assert exc_info.value.details["allowed_values"] == ["pixel", "hash", "hybrid"]


class TestValidateCharacterId:
    """Test character id validation."""

    @pytest.mark.parametrize("character_id", ["batman", "harley-quinn", "flash_2", "Superman.v2"])
    def test_valid_ids(self, character_id):
        assert validate_character_id(character_id) == character_id

    @pytest.mark.parametrize("character_id", ["", "../secrets", "bat man", "/etc/passwd", ".hidden", None])
    def test_invalid_ids(self, character_id):
        with pytest.raises(ConfigurationError):
            validate_character_id(character_id)


class TestValidateUrlSchemes:
    """Test restricting URL schemes."""

    def test_custom_schemes(self):
        assert validate_url("https://cdn.example.com/", allowed_schemes=("https",)) == "https://cdn.example.com"

        with pytest.raises(ConfigurationError) as exc_info:
            validate_url("http://cdn.example.com", allowed_schemes=("https",))

        assert exc_info.value.details["scheme"] == "http"


class TestValidateInteger:
    """Test the integer-only variant of the range check."""

    def test_float_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_numeric_range(7.0, min_value=1, field_name="columns", integer=True)

        assert "must be an integer" in exc_info.value.message

    def test_int_accepted(self):
        assert validate_numeric_range(7, min_value=1, integer=True) == 7
