"""Tests for the declared model registry."""

import pytest

from ledger_db.registry import MODELS, get_model
from ledger_db.schema.models import ColumnDescriptor, ColumnType, ModelDescriptor


class TestRegistry:
    """Verify registry shape and lookups."""

    def test_migration_tables_first(self) -> None:
        assert [m.table_name for m in MODELS[:2]] == ["migration_group", "migration"]

    def test_table_names_unique(self) -> None:
        names = [m.table_name for m in MODELS]
        assert len(names) == len(set(names))

    def test_relation_targets_registered(self) -> None:
        names = {m.table_name for m in MODELS}
        for model in MODELS:
            for relation in model.relations:
                assert relation.target in names

    def test_relation_targets_declared_earlier(self) -> None:
        """Targets precede their dependents, except self-references."""
        seen: set[str] = set()
        for model in MODELS:
            for relation in model.relations:
                assert relation.target in seen | {model.table_name}
            seen.add(model.table_name)

    def test_get_model(self) -> None:
        assert get_model("Account").table_name == "account"

    def test_get_model_unknown(self) -> None:
        with pytest.raises(KeyError):
            get_model("ghost")

    def test_user_email_unique(self) -> None:
        email = next(c for c in get_model("user").columns if c.name == "email")
        assert email.unique is True


class TestDescriptorValidation:
    """Verify descriptor model validation."""

    def test_enum_requires_values(self) -> None:
        with pytest.raises(ValueError):
            ColumnDescriptor(name="t", type=ColumnType.ENUM)

    def test_table_name_lower_cased(self) -> None:
        assert ModelDescriptor(table_name="CreditCard").table_name == "creditcard"

    def test_id_prepended_once(self) -> None:
        model = ModelDescriptor(table_name="t", columns=(ColumnDescriptor(name="name"),))
        assert model.column_names == ["id", "name"]

        explicit = ModelDescriptor(
            table_name="t",
            columns=(ColumnDescriptor(name="id"), ColumnDescriptor(name="name")),
        )
        assert explicit.column_names == ["id", "name"]
