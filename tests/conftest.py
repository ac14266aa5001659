import pathlib
import site

import pytest
from litemap.fields import clear_field_cache

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear reflected fields before and after each test to ensure test isolation."""
    clear_field_cache()
    yield
    clear_field_cache()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
