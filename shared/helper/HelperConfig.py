"""Environment-backed configuration for the legal QA gateway."""

import logging
import os
from typing import Any

_TRUE_VALUES = ("true", "1", "yes", "on")


class HelperConfig:
    """Reads every setting from environment variables.

    A variable that is unset or empty counts as missing. A missing variable
    resolves to the given default; with no default it is a configuration error.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _lookup(self, key: str, default: Any) -> tuple[str, str | None]:
        """Return the normalized key and the stripped raw value, or None when the default applies.

        Raises:
            ValueError: If the variable is missing and no default is given.
        """
        key = key.upper()
        raw = (os.getenv(key) or "").strip()
        if raw:
            return key, raw
        if default is None:
            raise ValueError(f"Environment variable '{key}' is not set.")
        return key, None

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string setting.

        Raises:
            ValueError: If the variable is not set and no default is provided.
        """
        _, raw = self._lookup(key, default)
        return raw if raw is not None else default

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric setting. "30" yields an int, "2.5" a float.

        Raises:
            ValueError: If the variable is not set and no default is provided,
                        or if the value is not a number.
        """
        key, raw = self._lookup(key, default)
        if raw is None:
            return default
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a boolean setting. true/1/yes/on are true, anything else false.

        Raises:
            ValueError: If the variable is not set and no default is provided.
        """
        _, raw = self._lookup(key, default)
        if raw is None:
            return default
        return raw.lower() in _TRUE_VALUES

    def get_list_val(self, key: str, default: list | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a list setting written as "[elem1,elem2,...]", e.g. API_KEY_HOSTS=[n8n.internal,*.example.com].

        Raises:
            ValueError: If the variable is not set and no default is provided,
                        if it is not in bracket syntax, or if an element cannot be cast.
        """
        key, raw = self._lookup(key, default)
        if raw is None:
            return list(default)
        if not (raw.startswith("[") and raw.endswith("]")):
            raise ValueError(f"Environment variable '{key}' must be in the format '[elem1{separator}elem2{separator}...]'. Got: '{raw}'")
        elements = [v.strip() for v in raw[1:-1].split(separator) if v.strip()]
        try:
            return [element_type(elem) for elem in elements]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key}' contains invalid elements: {e}. Type set to {element_type.__name__}. Got: '{raw}'")

    def get_logger(self) -> logging.Logger:
        """Return the application logger shared by all components."""
        return self._logger
