"""
Guards for settings, grid geometry and asset identifiers.

Every check raises ``ConfigurationError`` with the offending field in
``details`` so the failure can be logged without string parsing.
"""

import re
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union
from urllib.parse import urlsplit

from .error_handler import ConfigurationError

CHARACTER_ID_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_.-]*$')

Number = Union[int, float]


def validate_directory_path(dir_path: Union[str, Path], create_if_missing: bool = False) -> Path:
    """Resolve ``dir_path`` and make sure it is an existing directory.

    With ``create_if_missing`` the directory (and parents) is created first.
    """
    path = Path(dir_path)
    try:
        if not path.exists():
            if not create_if_missing:
                raise ConfigurationError(
                    f"Directory does not exist: {path}",
                    details={"dir_path": str(path)}
                )
            path.mkdir(parents=True, exist_ok=True)
        resolved = path.resolve()
    except OSError as e:
        raise ConfigurationError(
            f"Unusable directory path: {dir_path}",
            details={"dir_path": str(dir_path), "error": str(e)}
        )

    if not resolved.is_dir():
        raise ConfigurationError(f"Path is not a directory: {resolved}", details={"dir_path": str(resolved)})
    return resolved


def validate_url(url: str, allowed_schemes: Sequence[str] = ("http", "https")) -> str:
    """Check an asset base URL and return it without a trailing slash."""
    parts = urlsplit(url) if isinstance(url, str) else None
    if parts is None or not parts.scheme or not parts.hostname:
        raise ConfigurationError(f"Invalid URL: {url!r}", details={"url": url})

    if parts.scheme.lower() not in allowed_schemes:
        raise ConfigurationError(
            f"URL scheme '{parts.scheme}' is not one of {list(allowed_schemes)}",
            details={"url": url, "scheme": parts.scheme, "allowed_schemes": list(allowed_schemes)}
        )
    return url.rstrip('/')


def validate_numeric_range(
    value: Number,
    min_value: Optional[Number] = None,
    max_value: Optional[Number] = None,
    field_name: str = "value",
    exclusive_min: bool = False,
    exclusive_max: bool = False,
    integer: bool = False,
) -> Number:
    """Bounds check, inclusive unless the matching ``exclusive_*`` flag is set.

    Booleans are rejected even though they are ints. With ``integer`` a float
    such as ``7.0`` is rejected too.
    """
    details = {"field_name": field_name, "value": value, "min_value": min_value, "max_value": max_value}

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{field_name} must be numeric, got {type(value).__name__}", details=details)

    if integer and not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer, got {value!r}", details=details)

    if min_value is not None and (value <= min_value if exclusive_min else value < min_value):
        raise ConfigurationError(f"{field_name} {value} is below minimum {min_value}", details=details)

    if max_value is not None and (value >= max_value if exclusive_max else value > max_value):
        raise ConfigurationError(f"{field_name} {value} is above maximum {max_value}", details=details)

    return value


def validate_enum_value(value: Any, allowed_values: List[Any], field_name: str = "value") -> Any:
    if value not in allowed_values:
        raise ConfigurationError(
            f"{field_name} '{value}' must be one of {allowed_values}",
            details={"field_name": field_name, "value": value, "allowed_values": allowed_values}
        )
    return value


def validate_character_id(character_id: str) -> str:
    """Ensure a character id is safe to splice into an asset path."""
    if not isinstance(character_id, str) or not CHARACTER_ID_PATTERN.match(character_id):
        raise ConfigurationError(f"Invalid character id: {character_id!r}", details={"character_id": character_id})
    return character_id
