"""Statement parser built on the sqlglot tokenizer.

The command language is SQL-shaped but not SQL: values are bare words
(``VALUES (Alice, 30)``), column definitions are free text, and there is a
handful of fixed statement shapes. sqlglot's parser would reject or
rewrite most of that, so only its tokenizer is used; a small
recursive-descent parser turns the tokens into typed commands.

Supported statements:
    - CREATE DATABASE <name>
    - USE <name>
    - CREATE TABLE <table> (<column> <definition...>, ...)
    - INSERT INTO <table> (<col>, ...) VALUES (<val>, ...)
    - SELECT <col, ...|*> FROM <table> [WHERE <col> = <val> [AND ...]]
    - UPDATE <table> SET <col> = <val> WHERE <col> = <val> [AND ...]
    - DELETE FROM <table> WHERE <col> = <val> [AND ...]
    - DROP TABLE <table>

Keywords are case-insensitive and a trailing ``;`` is accepted. A value is
either a single-quoted string or the verbatim source text up to the next
delimiter. There is no comment syntax: ``--`` and ``/*`` are ordinary value
text, so ``VALUES (a--b)`` stores ``a--b``.

References:
    - sqlglot documentation: https://sqlglot.com/
"""

from __future__ import annotations

import re
from typing import Callable

from sqlglot.errors import TokenError
from sqlglot.tokens import Token, Tokenizer, TokenType

from kvsql.domain.entities import (
    ColumnDefinition,
    Command,
    CreateDatabase,
    CreateTable,
    Delete,
    DropTable,
    Insert,
    Select,
    Update,
    UseDatabase,
)
from kvsql.domain.errors import QuerySyntaxError, UnknownCommandError
from kvsql.domain.value_objects import FilterExpression, Predicate

_WORD = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

# Tokens whose text is a value rather than a keyword.
_QUOTED = (TokenType.STRING, TokenType.IDENTIFIER)


class _CommandTokenizer(Tokenizer):
    """sqlglot tokenizer with SQL comments switched off."""

    COMMENTS: list = []


class _TokenStream:
    """Cursor over the tokens of one statement."""

    def __init__(self, source: str, tokens: list[Token], command: str) -> None:
        self._source = source
        self._tokens = tokens
        self._pos = 0
        self.command = command

    def error(self, detail: str) -> QuerySyntaxError:
        return QuerySyntaxError(f"invalid syntax for {self.command}: {detail}")

    def peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def advance(self) -> Token:
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of statement")
        self._pos += 1
        return token

    def is_word(self, word: str) -> bool:
        token = self.peek()
        return (
            token is not None
            and token.token_type not in _QUOTED
            and token.text.upper() == word
        )

    def expect_word(self, word: str) -> None:
        if not self.is_word(word):
            raise self.error(f"expected {word}, found {self._describe(self.peek())}")
        self._pos += 1

    def accept(self, token_type: TokenType) -> bool:
        token = self.peek()
        if token is not None and token.token_type == token_type:
            self._pos += 1
            return True
        return False

    def expect(self, token_type: TokenType, description: str) -> None:
        if not self.accept(token_type):
            raise self.error(f"expected {description}, found {self._describe(self.peek())}")

    def identifier(self, what: str) -> str:
        token = self.peek()
        name = _identifier_text(token)
        if name is None:
            raise self.error(f"expected {what}, found {self._describe(token)}")
        self._pos += 1
        return name

    def literal(self, stop: Callable[[Token], bool]) -> str:
        """Consume tokens up to ``stop`` (or the end) and return the value."""
        tokens: list[Token] = []
        while not self.at_end() and not stop(self.peek()):
            tokens.append(self.advance())
        if not tokens:
            raise self.error(f"expected a value, found {self._describe(self.peek())}")
        if len(tokens) == 1 and tokens[0].token_type in _QUOTED:
            return tokens[0].text
        return self.text_between(tokens[0], tokens[-1])

    def text_between(self, first: Token, last: Token) -> str:
        return self._source[first.start : last.end + 1]

    def finish(self) -> None:
        self.accept(TokenType.SEMICOLON)
        if not self.at_end():
            raise self.error(f"unexpected {self._describe(self.peek())}")

    @staticmethod
    def _describe(token: Token | None) -> str:
        return "end of statement" if token is None else f"'{token.text}'"


def _identifier_text(token: Token | None) -> str | None:
    """Return the identifier spelled by ``token``, or None if it is not one."""
    if token is None:
        return None
    if token.token_type == TokenType.IDENTIFIER:
        text = token.text
        return text if text and ":" not in text else None
    if token.token_type == TokenType.VAR or _WORD.match(token.text):
        return token.text
    return None


class StatementParser:
    """Parses one line of input into a typed command.

    Example:
        >>> parser = StatementParser()
        >>> parser.parse("SELECT name FROM users WHERE age = 30")
        Select(table='users', columns=('name',), filter=...)

    Raises ``QuerySyntaxError`` (``UnknownCommandError`` for an unknown
    leading keyword); nothing else escapes ``parse``.
    """

    def __init__(self) -> None:
        self._tokenizer = _CommandTokenizer()
        self._handlers: dict[str, Callable[[_TokenStream], Command]] = {
            "CREATE": self._parse_create,
            "USE": self._parse_use,
            "INSERT": self._parse_insert,
            "SELECT": self._parse_select,
            "UPDATE": self._parse_update,
            "DELETE": self._parse_delete,
            "DROP": self._parse_drop,
        }

    def parse(self, statement: str) -> Command:
        """Parse a statement.

        Args:
            statement: The raw statement text.

        Returns:
            The typed command.

        Raises:
            QuerySyntaxError: If the statement is empty, unknown or malformed.
        """
        text = statement.strip()
        if not text:
            raise QuerySyntaxError("No command provided")

        keyword = text.split(None, 1)[0].rstrip(";").upper()
        handler = self._handlers.get(keyword)
        if handler is None:
            raise UnknownCommandError(keyword)

        try:
            tokens = self._tokenizer.tokenize(text)
        except TokenError as e:
            raise QuerySyntaxError(f"invalid syntax for {keyword}: {e}") from e

        return handler(_TokenStream(text, tokens, keyword))

    # Statement handlers

    def _parse_create(self, ts: _TokenStream) -> Command:
        ts.advance()
        if ts.is_word("DATABASE"):
            ts.advance()
            ts.command = "CREATE DATABASE"
            name = ts.identifier("database name")
            ts.finish()
            return CreateDatabase(name=name)
        if ts.is_word("TABLE"):
            ts.advance()
            ts.command = "CREATE TABLE"
            return self._parse_create_table(ts)
        raise ts.error("expected DATABASE or TABLE")

    def _parse_create_table(self, ts: _TokenStream) -> CreateTable:
        table = ts.identifier("table name")
        ts.expect(TokenType.L_PAREN, "'('")

        columns: list[ColumnDefinition] = []
        group: list[Token] = []
        depth = 0
        while True:
            if ts.at_end():
                raise ts.error("missing ')'")
            token = ts.advance()
            if token.token_type == TokenType.L_PAREN:
                depth += 1
            elif token.token_type == TokenType.R_PAREN:
                if depth == 0:
                    columns.append(self._column_definition(ts, group))
                    break
                depth -= 1
            elif token.token_type == TokenType.COMMA and depth == 0:
                columns.append(self._column_definition(ts, group))
                group = []
                continue
            group.append(token)

        ts.finish()
        return CreateTable(table=table, columns=tuple(columns))

    @staticmethod
    def _column_definition(ts: _TokenStream, group: list[Token]) -> ColumnDefinition:
        if not group:
            raise ts.error("empty column definition")
        name = _identifier_text(group[0])
        if name is None:
            raise ts.error(f"invalid column name '{group[0].text}'")
        return ColumnDefinition(name=name, definition=ts.text_between(group[0], group[-1]))

    def _parse_use(self, ts: _TokenStream) -> Command:
        ts.advance()
        name = ts.identifier("database name")
        ts.finish()
        return UseDatabase(name=name)

    def _parse_insert(self, ts: _TokenStream) -> Command:
        ts.advance()
        ts.expect_word("INTO")
        table = ts.identifier("table name")
        columns = self._identifier_list(ts)
        ts.expect_word("VALUES")
        values = self._value_list(ts)
        ts.finish()

        if len(columns) != len(values):
            raise ts.error(f"{len(columns)} column(s) but {len(values)} value(s)")
        duplicates = sorted({c for c in columns if columns.count(c) > 1})
        if duplicates:
            raise ts.error(f"duplicate column(s) {', '.join(duplicates)}")

        return Insert(table=table, columns=tuple(columns), values=tuple(values))

    def _parse_select(self, ts: _TokenStream) -> Command:
        ts.advance()
        columns: list[str] = []
        if not ts.accept(TokenType.STAR) and not ts.is_word("FROM"):
            columns.append(ts.identifier("column name"))
            while ts.accept(TokenType.COMMA):
                columns.append(ts.identifier("column name"))
        ts.expect_word("FROM")
        table = ts.identifier("table name")

        where = FilterExpression()
        if ts.is_word("WHERE"):
            ts.advance()
            where = self._filter(ts)
        ts.finish()

        return Select(table=table, columns=tuple(columns), filter=where)

    def _parse_update(self, ts: _TokenStream) -> Command:
        ts.advance()
        table = ts.identifier("table name")
        ts.expect_word("SET")
        column = ts.identifier("column name")
        ts.expect(TokenType.EQ, "'='")
        value = ts.literal(
            lambda t: t.token_type == TokenType.COMMA
            or (t.token_type not in _QUOTED and t.text.upper() == "WHERE")
        )
        if ts.accept(TokenType.COMMA):
            raise ts.error("only one column can be SET per statement")
        ts.expect_word("WHERE")
        where = self._filter(ts)
        ts.finish()

        return Update(table=table, column=column, value=value, filter=where)

    def _parse_delete(self, ts: _TokenStream) -> Command:
        ts.advance()
        ts.expect_word("FROM")
        table = ts.identifier("table name")
        ts.expect_word("WHERE")
        where = self._filter(ts)
        ts.finish()

        return Delete(table=table, filter=where)

    def _parse_drop(self, ts: _TokenStream) -> Command:
        ts.advance()
        ts.expect_word("TABLE")
        ts.command = "DROP TABLE"
        table = ts.identifier("table name")
        ts.finish()

        return DropTable(table=table)

    # Shared pieces

    def _filter(self, ts: _TokenStream) -> FilterExpression:
        predicates = [self._predicate(ts)]
        while ts.is_word("AND"):
            ts.advance()
            predicates.append(self._predicate(ts))
        return FilterExpression(tuple(predicates))

    @staticmethod
    def _predicate(ts: _TokenStream) -> Predicate:
        column = ts.identifier("column name")
        ts.expect(TokenType.EQ, "'='")
        value = ts.literal(
            lambda t: t.token_type == TokenType.SEMICOLON
            or (t.token_type not in _QUOTED and t.text.upper() == "AND")
        )
        return Predicate(column=column, value=value)

    @staticmethod
    def _identifier_list(ts: _TokenStream) -> list[str]:
        ts.expect(TokenType.L_PAREN, "'('")
        names = [ts.identifier("column name")]
        while ts.accept(TokenType.COMMA):
            names.append(ts.identifier("column name"))
        ts.expect(TokenType.R_PAREN, "')'")
        return names

    @staticmethod
    def _value_list(ts: _TokenStream) -> list[str]:
        ts.expect(TokenType.L_PAREN, "'('")
        stop = lambda t: t.token_type in (TokenType.COMMA, TokenType.R_PAREN)  # noqa: E731
        values = [ts.literal(stop)]
        while ts.accept(TokenType.COMMA):
            values.append(ts.literal(stop))
        ts.expect(TokenType.R_PAREN, "')'")
        return values
