"""Tests for schema comparison between declared and introspected columns.

Pure logic -- no database.  Covers enum set comparison, default
normalization, the on-update trigger check, and removal eligibility.
"""

import pytest

from ledger_db.schema.comparator import (
    column_needs_update,
    diff_columns,
    normalize_stored_default,
    parse_enum_values,
    removable_columns,
)
from ledger_db.schema.models import (
    CURRENT_TIMESTAMP,
    ColumnDescriptor,
    ColumnType,
    IntrospectedColumn,
)


def _enum(values: tuple[str, ...], default: str | None = None) -> ColumnDescriptor:
    return ColumnDescriptor(name="type", type=ColumnType.ENUM, enum_values=values, default=default)


# ============================================================================
# Test: Parsing helpers
# ============================================================================


class TestParsing:
    """Verify parsing of live enum types and stored defaults."""

    def test_parse_enum_values(self) -> None:
        assert parse_enum_values("enum('income','expense')") == {"income", "expense"}

    def test_parse_enum_values_escaped_quote(self) -> None:
        assert parse_enum_values("enum('it''s','b')") == {"it's", "b"}

    def test_parse_non_enum(self) -> None:
        assert parse_enum_values("varchar(255)") == set()

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, "NULL"),
            ("dark", "DARK"),
            ("'dark'", "DARK"),
            ("current_timestamp()", "CURRENT_TIMESTAMP()"),
            ("0", "0"),
        ],
    )
    def test_normalize_stored_default(self, raw: str | None, expected: str) -> None:
        assert normalize_stored_default(raw) == expected


# ============================================================================
# Test: column_needs_update()
# ============================================================================


class TestColumnNeedsUpdate:
    """Verify the three drift criteria and their absence."""

    def test_enum_order_independent(self) -> None:
        """Same enum values in a different order are not drift."""
        existing = IntrospectedColumn(name="type", sql_type="enum('expense','income')")
        assert column_needs_update(_enum(("income", "expense")), existing) is False

    def test_enum_value_added(self) -> None:
        existing = IntrospectedColumn(name="type", sql_type="enum('income')")
        assert column_needs_update(_enum(("income", "expense")), existing) is True

    def test_enum_value_removed(self) -> None:
        existing = IntrospectedColumn(name="type", sql_type="enum('income','expense','other')")
        assert column_needs_update(_enum(("income", "expense")), existing) is True

    def test_boolean_false_matches_stored_zero(self) -> None:
        """A stored '0' matches a declared False default."""
        col = ColumnDescriptor(name="active", type=ColumnType.BOOLEAN, default=False)
        existing = IntrospectedColumn(name="active", sql_type="tinyint(1)", default_raw="0")
        assert column_needs_update(col, existing) is False

    def test_boolean_default_changed(self) -> None:
        col = ColumnDescriptor(name="active", type=ColumnType.BOOLEAN, default=True)
        existing = IntrospectedColumn(name="active", sql_type="tinyint(1)", default_raw="0")
        assert column_needs_update(col, existing) is True

    def test_default_case_insensitive(self) -> None:
        col = _enum(("dark", "light"), default="dark")
        existing = IntrospectedColumn(
            name="type", sql_type="enum('dark','light')", default_raw="DARK"
        )
        assert column_needs_update(col, existing) is False

    def test_quoted_stored_default(self) -> None:
        """MariaDB reports string defaults quoted."""
        col = _enum(("dark", "light"), default="dark")
        existing = IntrospectedColumn(
            name="type", sql_type="enum('dark','light')", default_raw="'dark'"
        )
        assert column_needs_update(col, existing) is False

    def test_null_default_matches_none(self) -> None:
        col = ColumnDescriptor(name="name")
        existing = IntrospectedColumn(name="name", sql_type="varchar(255)", default_raw=None)
        assert column_needs_update(col, existing) is False

    def test_default_added(self) -> None:
        col = ColumnDescriptor(name="name", default="unknown")
        existing = IntrospectedColumn(name="name", sql_type="varchar(255)")
        assert column_needs_update(col, existing) is True

    def test_current_timestamp_substring_match(self) -> None:
        """Any stored default containing CURRENT_TIMESTAMP matches."""
        col = ColumnDescriptor(name="created_at", type=ColumnType.TIMESTAMP, default=CURRENT_TIMESTAMP)
        existing = IntrospectedColumn(
            name="created_at", sql_type="timestamp", default_raw="current_timestamp()"
        )
        assert column_needs_update(col, existing) is False

    def test_on_update_missing(self) -> None:
        col = ColumnDescriptor(
            name="updated_at",
            type=ColumnType.TIMESTAMP,
            default=CURRENT_TIMESTAMP,
            on_update_timestamp=True,
        )
        existing = IntrospectedColumn(
            name="updated_at", sql_type="timestamp", default_raw="CURRENT_TIMESTAMP",
            extra="DEFAULT_GENERATED",
        )
        assert column_needs_update(col, existing) is True

    def test_on_update_present(self) -> None:
        col = ColumnDescriptor(
            name="updated_at",
            type=ColumnType.TIMESTAMP,
            default=CURRENT_TIMESTAMP,
            on_update_timestamp=True,
        )
        existing = IntrospectedColumn(
            name="updated_at", sql_type="timestamp", default_raw="current_timestamp()",
            extra="on update current_timestamp()",
        )
        assert column_needs_update(col, existing) is False

    def test_type_difference_alone_ignored(self) -> None:
        """A textual SQL type difference alone never triggers a change."""
        col = ColumnDescriptor(name="note", type=ColumnType.TEXT)
        existing = IntrospectedColumn(name="note", sql_type="varchar(255)")
        assert column_needs_update(col, existing) is False


# ============================================================================
# Test: removable_columns() / diff_columns()
# ============================================================================


class TestRemovableColumns:
    """Verify id and foreign key columns are never removed."""

    def _live(self, *names: str) -> list[IntrospectedColumn]:
        return [IntrospectedColumn(name=n, sql_type="int") for n in names]

    def test_id_never_removed(self) -> None:
        assert removable_columns(["name"], self._live("id", "name"), []) == []

    def test_fk_columns_protected(self) -> None:
        live = self._live("id", "name", "user_id", "legacy")
        assert removable_columns(["name"], live, ["user_id"]) == ["legacy"]

    def test_live_order_preserved(self) -> None:
        live = self._live("id", "b_old", "name", "a_old")
        assert removable_columns(["name"], live, []) == ["b_old", "a_old"]


class TestDiffColumns:
    """Verify the combined change set."""

    def test_added_updated_removed(self) -> None:
        declared = [
            ColumnDescriptor(name="name"),
            ColumnDescriptor(name="active", type=ColumnType.BOOLEAN, default=True),
            ColumnDescriptor(name="note", type=ColumnType.TEXT),
        ]
        live = [
            IntrospectedColumn(name="id", sql_type="int"),
            IntrospectedColumn(name="name", sql_type="varchar(255)"),
            IntrospectedColumn(name="active", sql_type="tinyint(1)", default_raw="0"),
            IntrospectedColumn(name="legacy", sql_type="text"),
        ]
        changes = diff_columns(declared, live)
        assert changes.added == ["note"]
        assert changes.updated == ["active"]
        assert changes.removed == ["legacy"]

    def test_no_drift(self) -> None:
        declared = [ColumnDescriptor(name="id"), ColumnDescriptor(name="name")]
        live = [
            IntrospectedColumn(name="id", sql_type="int", extra="auto_increment"),
            IntrospectedColumn(name="name", sql_type="varchar(255)"),
        ]
        assert diff_columns(declared, live).is_empty
