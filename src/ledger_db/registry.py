"""Declared models of the finance bookkeeping database.

``MODELS`` is the explicit, ordered registry consumed by
``sync_database()``.  Order matters: relations are synchronized after all
tables exist, but tables are created in this order, bookkeeping tables first.

Usage:
    from ledger_db.registry import MODELS, get_model

    account = get_model("account")
"""

from ledger_db.logs import LogCategory, LogType, Operation
from ledger_db.schema.models import (
    CURRENT_TIMESTAMP,
    ColumnDescriptor,
    ColumnType,
    ModelDescriptor,
    Relation,
)

# ============================================================================
# Enumerated values
# ============================================================================

THEMES = ("dark", "light")
LANGUAGES = ("en-US", "es-ES", "pt-BR")
DATE_FORMATS = ("DD/MM/YYYY", "MM/DD/YYYY")
CURRENCIES = ("ARS", "COP", "BRL", "EUR", "USD")
PROFILES = ("starter", "pro", "master")
ACCOUNT_TYPES = ("checking", "payroll", "savings", "investment", "loan", "other")
CATEGORY_TYPES = ("income", "expense")
CATEGORY_COLORS = (
    "red", "blue", "green", "purple", "yellow",
    "orange", "pink", "gray", "cyan", "indigo",
)
CREDIT_CARD_FLAGS = ("visa", "mastercard", "amex", "elo", "hipercard", "discover", "diners")
TRANSACTION_TYPES = ("income", "expense")
TRANSACTION_SOURCES = ("account", "credit_card")


def _timestamps() -> tuple[ColumnDescriptor, ColumnDescriptor]:
    return (
        ColumnDescriptor(name="created_at", type=ColumnType.TIMESTAMP, default=CURRENT_TIMESTAMP),
        ColumnDescriptor(
            name="updated_at",
            type=ColumnType.TIMESTAMP,
            default=CURRENT_TIMESTAMP,
            on_update_timestamp=True,
        ),
    )


def _active(default: bool = True) -> ColumnDescriptor:
    return ColumnDescriptor(name="active", type=ColumnType.BOOLEAN, default=default)


# ============================================================================
# Migration bookkeeping
# ============================================================================

MIGRATION_GROUP = ModelDescriptor(
    table_name="migration_group",
    columns=(
        ColumnDescriptor(name="name", index=True),
        ColumnDescriptor(name="up", type=ColumnType.TEXT),
        ColumnDescriptor(name="down", type=ColumnType.TEXT),
        ColumnDescriptor(name="created_at", type=ColumnType.TIMESTAMP, default=CURRENT_TIMESTAMP),
    ),
)

MIGRATION = ModelDescriptor(
    table_name="migration",
    columns=(
        ColumnDescriptor(name="name"),
        ColumnDescriptor(name="table_name"),
        ColumnDescriptor(name="column_name"),
        ColumnDescriptor(
            name="operation",
            type=ColumnType.ENUM,
            enum_values=(Operation.CREATE.value, Operation.DELETE.value),
            default=Operation.CREATE.value,
        ),
        ColumnDescriptor(name="up", type=ColumnType.TEXT),
        ColumnDescriptor(name="down", type=ColumnType.TEXT),
        ColumnDescriptor(name="migration_group_id", type=ColumnType.INTEGER, index=True),
        *_timestamps(),
    ),
)

# ============================================================================
# Finance domain
# ============================================================================

USER = ModelDescriptor(
    table_name="user",
    columns=(
        ColumnDescriptor(name="first_name"),
        ColumnDescriptor(name="last_name"),
        ColumnDescriptor(name="email", unique=True),
        ColumnDescriptor(name="password"),
        ColumnDescriptor(name="birth_date", type=ColumnType.DATE),
        ColumnDescriptor(name="phone"),
        ColumnDescriptor(name="theme", type=ColumnType.ENUM, enum_values=THEMES, default="dark"),
        ColumnDescriptor(name="language", type=ColumnType.ENUM, enum_values=LANGUAGES, default="en-US"),
        ColumnDescriptor(
            name="date_format", type=ColumnType.ENUM, enum_values=DATE_FORMATS, default="DD/MM/YYYY"
        ),
        ColumnDescriptor(name="currency", type=ColumnType.ENUM, enum_values=CURRENCIES, default="BRL"),
        ColumnDescriptor(name="profile", type=ColumnType.ENUM, enum_values=PROFILES, default="starter"),
        _active(),
        *_timestamps(),
    ),
)

ACCOUNT = ModelDescriptor(
    table_name="account",
    columns=(
        ColumnDescriptor(name="name"),
        ColumnDescriptor(name="institution"),
        ColumnDescriptor(name="type", type=ColumnType.ENUM, enum_values=ACCOUNT_TYPES, default="other"),
        ColumnDescriptor(name="observation", type=ColumnType.TEXT),
        _active(),
        *_timestamps(),
    ),
    relations=(Relation(name="user", target="user"),),
)

CATEGORY = ModelDescriptor(
    table_name="category",
    columns=(
        ColumnDescriptor(name="name"),
        ColumnDescriptor(name="type", type=ColumnType.ENUM, enum_values=CATEGORY_TYPES),
        ColumnDescriptor(
            name="color", type=ColumnType.ENUM, enum_values=CATEGORY_COLORS, default="purple"
        ),
        _active(),
        *_timestamps(),
    ),
    relations=(Relation(name="user", target="user"),),
)

SUBCATEGORY = ModelDescriptor(
    table_name="subcategory",
    columns=(
        ColumnDescriptor(name="name"),
        _active(),
        *_timestamps(),
    ),
    relations=(Relation(name="category", target="category"),),
)

CREDIT_CARD = ModelDescriptor(
    table_name="credit_card",
    columns=(
        ColumnDescriptor(name="name"),
        ColumnDescriptor(name="flag", type=ColumnType.ENUM, enum_values=CREDIT_CARD_FLAGS),
        ColumnDescriptor(name="closing_day", type=ColumnType.INTEGER),
        ColumnDescriptor(name="due_day", type=ColumnType.INTEGER),
        ColumnDescriptor(name="observation", type=ColumnType.TEXT),
        _active(),
        *_timestamps(),
    ),
    relations=(
        Relation(name="user", target="user"),
        Relation(name="account", target="account"),
    ),
)

TAG = ModelDescriptor(
    table_name="tag",
    columns=(
        ColumnDescriptor(name="name", index=True),
        _active(),
        *_timestamps(),
    ),
    relations=(Relation(name="user", target="user"),),
)

TRANSACTION = ModelDescriptor(
    table_name="transaction",
    columns=(
        ColumnDescriptor(name="value", type=ColumnType.DECIMAL),
        ColumnDescriptor(name="date", type=ColumnType.DATE, index=True),
        ColumnDescriptor(name="transaction_type", type=ColumnType.ENUM, enum_values=TRANSACTION_TYPES),
        ColumnDescriptor(name="observation", type=ColumnType.TEXT),
        ColumnDescriptor(
            name="transaction_source", type=ColumnType.ENUM, enum_values=TRANSACTION_SOURCES
        ),
        ColumnDescriptor(name="is_installment", type=ColumnType.BOOLEAN, default=False),
        ColumnDescriptor(name="total_months", type=ColumnType.INTEGER),
        ColumnDescriptor(name="is_recurring", type=ColumnType.BOOLEAN, default=False),
        ColumnDescriptor(name="payment_day", type=ColumnType.INTEGER),
        _active(),
        *_timestamps(),
    ),
    relations=(
        Relation(name="user", target="user"),
        Relation(name="account", target="account"),
        Relation(name="credit_card", target="credit_card"),
        Relation(name="category", target="category"),
        Relation(name="subcategory", target="subcategory"),
    ),
)

LOG = ModelDescriptor(
    table_name="log",
    columns=(
        ColumnDescriptor(name="type", type=ColumnType.ENUM, enum_values=tuple(t.value for t in LogType)),
        ColumnDescriptor(
            name="operation",
            type=ColumnType.ENUM,
            enum_values=tuple(o.value for o in Operation),
            default=Operation.CREATE.value,
        ),
        ColumnDescriptor(
            name="category",
            type=ColumnType.ENUM,
            enum_values=tuple(c.value for c in LogCategory),
            default=LogCategory.DATABASE.value,
        ),
        ColumnDescriptor(name="detail", type=ColumnType.TEXT),
        ColumnDescriptor(name="timestamp", type=ColumnType.DATETIME),
        *_timestamps(),
    ),
    relations=(Relation(name="user", target="user"),),
)

MODELS: tuple[ModelDescriptor, ...] = (
    MIGRATION_GROUP,
    MIGRATION,
    USER,
    ACCOUNT,
    CATEGORY,
    SUBCATEGORY,
    CREDIT_CARD,
    TAG,
    TRANSACTION,
    LOG,
)


def get_model(table_name: str) -> ModelDescriptor:
    """Look up a registered model by table name.

    Raises:
        KeyError: If no model is registered for *table_name*.
    """
    for model in MODELS:
        if model.table_name == table_name.lower():
            return model
    raise KeyError(f"No model registered for table '{table_name}'")
