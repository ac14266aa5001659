"""
SQL text processing for named ``@name`` placeholders.

Generated and user SQL both write parameters as ``@name``. Before execution
the text is rewritten to the driver's paramstyle:

    sqlite      @name -> :name
    postgresql  @name -> %(name)s   (and literal % doubled)

String literals and quoted identifiers are copied through untouched, apart
from percent doubling for psycopg, which scans the whole statement.
"""
import re
from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Token types identified during SQL parsing."""
    SQL_TEXT = auto()
    STRING_LITERAL = auto()
    NAMED_PH = auto()


@dataclass(slots=True)
class Token:
    """Token from SQL parsing."""
    type: TokenType
    text: str
    name: str | None = None


_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<named>(?<![@\w])@(?P<pname>[A-Za-z_]\w*))
""", re.VERBOSE)

_HAS_PLACEHOLDER = re.compile(r'(?<![@\w])@[A-Za-z_]\w*')

PLACEHOLDER_FORMATS = {
    'sqlite': ':{}',
    'postgresql': '%({})s',
}


def tokenize_sql(sql: str) -> list[Token]:
    """Split SQL into text, string literals and named placeholders.

    >>> [t.type.name for t in tokenize_sql("a = @a AND b = '@b'")]
    ['SQL_TEXT', 'NAMED_PH', 'SQL_TEXT', 'STRING_LITERAL']
    """
    tokens = []
    last_end = 0

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()
        if start > last_end:
            tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:start]))

        if match.group('string'):
            tokens.append(Token(TokenType.STRING_LITERAL, match.group(0)))
        else:
            tokens.append(Token(TokenType.NAMED_PH, match.group(0), match.group('pname')))
        last_end = end

    if last_end < len(sql):
        tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:]))

    return tokens


def has_placeholders(sql: str) -> bool:
    """Check if SQL has ``@name`` placeholders outside string literals.

    >>> has_placeholders('SELECT * FROM Users WHERE Id = @id')
    True
    >>> has_placeholders("SELECT '@home' FROM Users")
    False
    """
    return any(t.type is TokenType.NAMED_PH for t in tokenize_sql(sql))


def standardize_placeholders(sql: str, dialect: str) -> str:
    """Rewrite ``@name`` placeholders to the dialect's paramstyle.

    >>> standardize_placeholders('UPDATE T SET A= @A WHERE Id = @Id', 'sqlite')
    'UPDATE T SET A= :A WHERE Id = :Id'
    >>> standardize_placeholders("SELECT * FROM T WHERE A LIKE '5%' AND B = @B", 'postgresql')
    "SELECT * FROM T WHERE A LIKE '5%%' AND B = %(B)s"
    """
    if dialect not in PLACEHOLDER_FORMATS:
        raise ValueError(f'Unsupported dialect: {dialect}')
    fmt = PLACEHOLDER_FORMATS[dialect]
    escape_percent = '%' in fmt

    parts = []
    for token in tokenize_sql(sql):
        if token.type is TokenType.NAMED_PH:
            parts.append(fmt.format(token.name))
        elif escape_percent:
            parts.append(token.text.replace('%', '%%'))
        else:
            parts.append(token.text)
    return ''.join(parts)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
