from __future__ import annotations

import pytest

from apiary.results import FailureKind
from apiary.validation import validate_attribute, validate_attributes


@pytest.mark.parametrize("value", ["Apiary 1", "Langstroth", "42", "Top Bar Hive 2"])
def test_alphanumeric_and_spaces_accepted(value) -> None:
    assert validate_attribute(value) is None


@pytest.mark.parametrize("value", ["Apiary#1", "", "Ruche-3", "Königin", "line\nbreak", None, 7])
def test_other_input_rejected(value) -> None:
    failure = validate_attribute(value)
    assert failure is not None
    assert failure.kind is FailureKind.VALIDATION


def test_validate_attributes_names_the_offending_field() -> None:
    failure = validate_attributes({"name": "Good Name", "structureType": "Box!"})
    assert failure is not None
    assert "structureType" in failure.message


def test_validate_attributes_skips_unset_values() -> None:
    assert validate_attributes({"name": None, "species": "Carnica"}) is None
