import dataclasses
import importlib

import litemap
import pytest
from litemap.fields import MISSING, Field, FieldKind


def test_public_names_resolve():
    """Test every exported name is importable from the package"""
    module = importlib.import_module('litemap')
    for name in litemap.__all__:
        assert hasattr(module, name), name


def test_field_defaults_to_no_default():
    """Test a Field built from required arguments carries no default"""
    field = Field(name='Id', type=int, kind=FieldKind.PRIMITIVE, base_type=int)
    assert field.init is True
    assert field.default is MISSING
    assert field.default_factory is MISSING
    assert not field.has_default


def test_field_is_frozen():
    """Test field descriptors cannot be modified"""
    field = Field(name='Id', type=int, kind=FieldKind.PRIMITIVE, base_type=int)
    with pytest.raises(dataclasses.FrozenInstanceError):
        field.name = 'Other'
