"""Free-text attribute validation.

Every free-text attribute (hive ``name`` and ``structureType``, queen ``name``
and ``species``, beekeeper first/last names) must consist only of ASCII
letters, digits and spaces, and must not be empty.  Numeric attributes are
type-checked by the request schemas instead.
"""

from __future__ import annotations

import re
from typing import Any

from apiary.results import Failure, validation_error

_VALID_ATTRIBUTE = re.compile(r"[A-Za-z0-9 ]+")


def validate_attribute(value: Any) -> Failure | None:
    """Return None if *value* is a valid attribute, otherwise a VALIDATION failure."""
    if not isinstance(value, str) or _VALID_ATTRIBUTE.fullmatch(value) is None:
        return validation_error("attributes must include only alphanumeric characters and spaces")
    return None


def validate_attributes(values: dict[str, Any]) -> Failure | None:
    """Validate every attribute in *values*, returning the first failure found.

    ``None`` values are skipped so a PATCH body can be validated as-is.
    """
    for field_name, value in values.items():
        if value is None:
            continue
        if validate_attribute(value) is not None:
            return validation_error(
                f"{field_name} must include only alphanumeric characters and spaces"
            )
    return None
