import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from typing import ClassVar

from litemap.fields import FieldKind, default_for, default_value, field_kind
from litemap.fields import fields_of, is_scalar_type, new_instance

from tests.fixtures.records import Account, Basket, Point, Reading, User


def test_dataclass_fields_in_declaration_order():
    """Test dataclass fields come back in declaration order"""
    assert [f.name for f in fields_of(User)] == ['Id', 'Name', 'Age']


def test_fields_of_instance_matches_type():
    """Test an instance reflects the same fields as its type"""
    assert fields_of(User(1, 'Ann', 30)) == fields_of(User)


def test_field_kinds():
    """Test declared types are tagged with their semantic kind"""
    kinds = {f.name: f.kind for f in fields_of(Reading)}
    assert kinds == {
        'Id': FieldKind.PRIMITIVE,
        'Taken': FieldKind.NULLABLE_PRIMITIVE,
        'Value': FieldKind.NULLABLE_PRIMITIVE,
        'Valid': FieldKind.PRIMITIVE,
    }


def test_optional_is_unwrapped_to_base_type():
    """Test Optional fields expose their underlying type"""
    taken = fields_of(Reading)[1]
    assert taken.base_type is datetime.datetime
    assert taken.type == (datetime.datetime | None)


def test_field_kind_of_other_types():
    """Test types outside the primitive set are OTHER, strings are STRING"""
    assert field_kind(str) is FieldKind.STRING
    assert field_kind(str | None) is FieldKind.STRING
    assert field_kind(bytes) is FieldKind.OTHER
    assert field_kind(list) is FieldKind.OTHER
    assert field_kind(Decimal) is FieldKind.PRIMITIVE


def test_scalar_types():
    """Test scalar detection used for first-column queries"""
    assert is_scalar_type(int)
    assert is_scalar_type(str)
    assert is_scalar_type(bytes)
    assert is_scalar_type(datetime.date | None)
    assert not is_scalar_type(User)


def test_type_without_fields_is_empty():
    """Test a type with no declared fields yields no fields, not an error"""
    class Empty:
        pass

    assert fields_of(Empty) == ()


def test_annotated_class_fields():
    """Test plain classes contribute annotated public attributes"""
    fields = fields_of(Account)
    assert [f.name for f in fields] == ['Id', 'Owner', 'Balance']
    assert fields[2].default == 0.0
    assert not fields[0].has_default


def test_annotated_class_skips_private_and_classvars():
    """Test ClassVar and underscore attributes are not fields"""
    class Tracked:
        registry: ClassVar[dict] = {}
        _secret: str = 'x'
        Id: int

    assert [f.name for f in fields_of(Tracked)] == ['Id']


def test_annotated_class_inherits_base_fields_first():
    """Test base class fields precede subclass fields"""
    class Base:
        Id: int

    class Child(Base):
        Name: str

    assert [f.name for f in fields_of(Child)] == ['Id', 'Name']


def test_default_values():
    """Test type defaults: zero for numbers, None otherwise"""
    assert default_value(int) == 0
    assert default_value(bool) is False
    assert default_value(Decimal) == Decimal(0)
    assert default_value(datetime.datetime) is None
    assert default_value(int | None) is None
    assert default_value(str) is None


def test_default_for_uses_declared_default_and_factory():
    """Test declared defaults win over type defaults"""
    items, note = fields_of(Basket)[1:]
    assert default_for(items) == []
    assert default_for(items) is not default_for(items)
    assert default_for(note) == 'empty'


def test_new_instance_fills_missing_fields():
    """Test fields absent from the values keep their defaults"""
    user = new_instance(User, {'Name': 'Ann'})
    assert user == User(Id=0, Name='Ann', Age=0)

    basket = new_instance(Basket, {'Id': 3})
    assert basket == Basket(Id=3, Items=[], Note='empty')


def test_new_instance_frozen_dataclass():
    """Test frozen dataclasses are built through their constructor"""
    assert new_instance(Point, {'X': 1, 'Y': 2}) == Point(1, 2)


def test_new_instance_non_init_field():
    """Test init=False fields are assigned after construction"""
    @dataclass
    class Audited:
        Id: int
        Version: int = field(default=0, init=False)

    obj = new_instance(Audited, {'Id': 1, 'Version': 7})
    assert obj.Id == 1
    assert obj.Version == 7


def test_new_instance_plain_class():
    """Test plain classes are constructed empty and populated by attribute"""
    account = new_instance(Account, {'Id': 5, 'Owner': 'Ann'})
    assert (account.Id, account.Owner, account.Balance) == (5, 'Ann', 0.0)

    blank = new_instance(Account, {})
    assert (blank.Id, blank.Owner, blank.Balance) == (0, None, 0.0)
