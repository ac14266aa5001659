"""
Record types shared by the test suite.

Table names in the SQLite fixtures follow the resolver's rules:
User -> Users, Category -> Categories, Bus -> Bus.
"""
import datetime
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class User:
    Id: int
    Name: str
    Age: int


@dataclass
class Category:
    Id: int
    Title: str | None = None
    Rank: int | None = None


@dataclass
class Bus:
    Id: int
    Seats: int = 40


@dataclass
class Widget:
    Id: int


@dataclass
class Person:
    Id: int
    Name: str


@dataclass
class Reading:
    Id: int
    Taken: datetime.datetime | None = None
    Value: Decimal | None = None
    Valid: bool = False


@dataclass
class Basket:
    Id: int
    Items: list = field(default_factory=list)
    Note: str = 'empty'


@dataclass(frozen=True)
class Point:
    X: int
    Y: int


class Account:
    """Plain annotated class, populated attribute by attribute."""
    Id: int
    Owner: str
    Balance: float = 0.0
