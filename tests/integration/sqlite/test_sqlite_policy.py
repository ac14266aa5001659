from litemap.exceptions import IntegrityError, NoMatchingTableError
from litemap.exceptions import NoRowsAffectedError

from tests.fixtures.records import Person, User


def test_swallowed_duplicate_insert(lenient_repo):
    """Test a failed insert is reported and swallowed"""
    assert lenient_repo.insert(User(1, 'Again', 1)) is None
    [error] = lenient_repo.errors
    assert isinstance(error, IntegrityError)


def test_swallowed_missing_update(lenient_repo):
    """Test a no-op update is reported and swallowed"""
    lenient_repo.update(User(42, 'Nobody', 0))
    assert isinstance(lenient_repo.errors[0], NoRowsAffectedError)


def test_swallowed_bad_sql(lenient_repo):
    """Test SQL errors return the empty value of each operation"""
    assert lenient_repo.execute('DELETE FROM Nowhere') == -1
    assert lenient_repo.query(int, 'SELECT Id FROM Nowhere') == []
    assert len(lenient_repo.errors) == 2


def test_swallowed_unknown_table(lenient_repo):
    """Test unresolvable types return empty results"""
    assert lenient_repo.all(Person) == []
    assert lenient_repo.get(Person, 1) is None
    assert all(isinstance(e, NoMatchingTableError) for e in lenient_repo.errors)


def test_connection_usable_after_error(lenient_repo):
    """Test the connection keeps working after a swallowed error"""
    lenient_repo.insert(User(1, 'Again', 1))
    lenient_repo.insert(User(5, 'Eve', 50))
    assert lenient_repo.get(User, 5) == User(5, 'Eve', 50)
