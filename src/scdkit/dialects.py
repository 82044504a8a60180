"""SQL dialect fragments used by the SCD query builders."""

from __future__ import annotations
from dataclasses import dataclass


class UnsupportedDialectError(ValueError):
    """Raised when a dialect name has no registered fragments."""
    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(
            f"Unsupported dialect '{dialect}'. Supported: {sorted(_DIALECTS)}"
        )


@dataclass(frozen=True)
class Dialect:
    name: str
    string_type: str
    current_timestamp: str
    star_except_keyword: str      # EXCEPT (bigquery) | EXCLUDE (duckdb)
    hex_md5: str                  # format string with one {} for the hashed text

    def hash(self, expr: str) -> str:
        return self.hex_md5.format(expr)

    def cast_string(self, expr: str) -> str:
        return f"CAST({expr} AS {self.string_type})"

    def null_timestamp(self) -> str:
        return "CAST(NULL AS TIMESTAMP)"

    def star_except(self, *columns: str) -> str:
        return f"* {self.star_except_keyword}({', '.join(columns)})"


BIGQUERY = Dialect(
    name="bigquery",
    string_type="STRING",
    current_timestamp="CURRENT_TIMESTAMP()",
    star_except_keyword="EXCEPT",
    hex_md5="TO_HEX(MD5({}))",
)

# DuckDB's md5() already returns the lowercase hex digest. CURRENT_TIMESTAMP is
# zoned there, so it is cast to match the TIMESTAMP type of scd_valid_to.
DUCKDB = Dialect(
    name="duckdb",
    string_type="VARCHAR",
    current_timestamp="CAST(CURRENT_TIMESTAMP AS TIMESTAMP)",
    star_except_keyword="EXCLUDE",
    hex_md5="MD5({})",
)

_DIALECTS: dict[str, Dialect] = {d.name: d for d in (BIGQUERY, DUCKDB)}


def get_dialect(dialect: str | Dialect) -> Dialect:
    if isinstance(dialect, Dialect):
        return dialect
    try:
        return _DIALECTS[dialect.lower()]
    except KeyError:
        raise UnsupportedDialectError(dialect) from None


def supported_dialects() -> list[str]:
    return sorted(_DIALECTS)
