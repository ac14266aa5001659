import datetime
from dataclasses import dataclass
from decimal import Decimal

import pytest
from litemap.exceptions import TypeConversionError
from litemap.materialize import Column, columns_of, materialize

from tests.fixtures.records import Account, Basket, Bus, Category, Point
from tests.fixtures.records import Reading, User


def test_columns_of(fake_cursor):
    """Test column descriptors keep their ordinal position"""
    cursor = fake_cursor(['Id', 'Name'], [])
    assert columns_of(cursor) == [Column('Id', 0), Column('Name', 1)]


def test_columns_of_without_result_set(fake_cursor):
    """Test a cursor with no description has no columns"""
    cursor = fake_cursor([], [])
    cursor.description = None
    assert columns_of(cursor) == []


def test_scalars_take_first_column(fake_cursor):
    """Test scalar targets read only the first column of each row"""
    cursor = fake_cursor(['Age', 'Name'], [(10, 'a'), (20, 'b')])
    assert list(materialize(cursor, int)) == [10, 20]


def test_scalar_null_becomes_type_default(fake_cursor):
    """Test a null first column yields the target's default"""
    assert list(materialize(fake_cursor(['n'], [(None,)]), int)) == [0]
    assert list(materialize(fake_cursor(['n'], [(None,)]), int | None)) == [None]
    assert list(materialize(fake_cursor(['n'], [(None,)]), str)) == [None]


def test_scalar_coercion(fake_cursor):
    """Test scalar values are converted to the requested type"""
    cursor = fake_cursor(['Total'], [('1.50',), (2,)])
    assert list(materialize(cursor, Decimal)) == [Decimal('1.50'), Decimal(2)]


def test_empty_result(fake_cursor):
    """Test an empty result yields an empty sequence"""
    assert list(materialize(fake_cursor(['Id', 'Name', 'Age'], []), User)) == []
    assert list(materialize(fake_cursor(['Id'], []), int)) == []


def test_records_by_column_name(fake_cursor):
    """Test columns populate fields by exact name"""
    cursor = fake_cursor(['Id', 'Name', 'Age'], [(1, 'Ann', 30), (2, 'Bob', 40)])
    assert list(materialize(cursor, User)) == [User(1, 'Ann', 30), User(2, 'Bob', 40)]


def test_records_ignore_column_order(fake_cursor):
    """Test column order does not matter, only names"""
    cursor = fake_cursor(['Age', 'Id', 'Name'], [(30, 1, 'Ann')])
    assert list(materialize(cursor, User)) == [User(1, 'Ann', 30)]


def test_unmatched_columns_are_skipped(fake_cursor):
    """Test columns without a field are ignored"""
    cursor = fake_cursor(['Id', 'Name', 'Age', 'Email'], [(1, 'Ann', 30, 'a@b.c')])
    assert list(materialize(cursor, User)) == [User(1, 'Ann', 30)]


def test_column_names_match_case_sensitively(fake_cursor):
    """Test a column differing only in case populates nothing"""
    cursor = fake_cursor(['Id', 'name', 'Age'], [(1, 'Ann', 30)])
    assert list(materialize(cursor, User)) == [User(1, None, 30)]


def test_null_columns_keep_defaults(fake_cursor):
    """Test null values leave the field at its default"""
    cursor = fake_cursor(['Id', 'Seats'], [(1, None)])
    assert list(materialize(cursor, Bus)) == [Bus(Id=1, Seats=40)]

    cursor = fake_cursor(['Id', 'Title', 'Rank'], [(2, None, None)])
    assert list(materialize(cursor, Category)) == [Category(Id=2)]


def test_missing_columns_keep_defaults(fake_cursor):
    """Test fields without a column keep their declared defaults"""
    cursor = fake_cursor(['Id'], [(1,), (2,)])
    first, second = materialize(cursor, Basket)
    assert first == Basket(Id=1)
    assert first.Items is not second.Items


def test_each_row_is_a_fresh_instance(fake_cursor):
    """Test identical rows produce distinct objects"""
    cursor = fake_cursor(['Id', 'Name', 'Age'], [(1, 'Ann', 30), (1, 'Ann', 30)])
    first, second = materialize(cursor, User)
    assert first == second
    assert first is not second


def test_record_coercion(fake_cursor):
    """Test column values are coerced to the field types"""
    cursor = fake_cursor(['Id', 'Taken', 'Value', 'Valid'],
                         [('7', '2024-01-02 03:04:05', '9.99', 1)])
    assert list(materialize(cursor, Reading)) == [
        Reading(Id=7, Taken=datetime.datetime(2024, 1, 2, 3, 4, 5),
                Value=Decimal('9.99'), Valid=True)
        ]


def test_frozen_dataclass(fake_cursor):
    """Test frozen dataclasses are materialized"""
    cursor = fake_cursor(['X', 'Y'], [(1, 2)])
    assert list(materialize(cursor, Point)) == [Point(1, 2)]


def test_plain_class(fake_cursor):
    """Test annotated plain classes are materialized"""
    cursor = fake_cursor(['Id', 'Owner', 'Balance'], [(1, 'Ann', 12)])
    [account] = materialize(cursor, Account)
    assert isinstance(account, Account)
    assert (account.Id, account.Owner, account.Balance) == (1, 'Ann', 12.0)
    assert type(account.Balance) is float


def test_conversion_failure_ends_iteration(fake_cursor):
    """Test an unconvertible value raises and ends the sequence"""
    cursor = fake_cursor(['Id', 'Name', 'Age'], [(1, 'Ann', 30), (2, 'Bob', 'old'), (3, 'Cy', 5)])
    result = materialize(cursor, User)
    assert next(result) == User(1, 'Ann', 30)
    with pytest.raises(TypeConversionError) as exc:
        next(result)
    assert exc.value.field == 'Age'
    assert list(result) == []


def test_materialize_is_lazy(fake_cursor):
    """Test rows are fetched only as the result is iterated"""
    cursor = fake_cursor(['Id'], [(1,), (2,)])
    result = materialize(cursor, int)
    assert cursor.fetched == 0
    assert next(result) == 1
    assert cursor.fetched == 1


def test_binary_column_into_text_field_raises(fake_cursor):
    """Test a blob column mapped onto a text field fails conversion"""
    @dataclass
    class Doc:
        Id: int
        Body: str | None = None

    cursor = fake_cursor(['Id', 'Body'], [(1, memoryview(b'abc'))])
    with pytest.raises(TypeConversionError) as exc:
        list(materialize(cursor, Doc))
    assert exc.value.field == 'Body'
