"""Tests for sqlroute.__init__: the lazy public API."""

import pytest

import sqlroute


@pytest.mark.parametrize("name", sqlroute.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(sqlroute, name)
    assert obj is not None, f"sqlroute.{name} resolved to None"


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        sqlroute.__getattr__("ThisDoesNotExist")


def test_version() -> None:
    assert sqlroute.__version__ == "0.1.0"
