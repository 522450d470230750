"""Alembic helpers for applications sharing a database with JWKSmith."""

from typing import Any

JWKSMITH_TABLES = frozenset(
    {
        "jwksmith_signing_keys",
        "jwksmith_alembic_version",
    }
)


def alembic_filters() -> dict[str, Any]:
    """Return Alembic filters that skip all JWKSmith-managed tables.

    JWKSmith migrates its own tables (``smith.migrate()``). Without these
    filters, autogenerate in the host application would emit ``drop_table``
    for them. Spread into your ``context.configure()``::

        from jwksmith import alembic_filters

        context.configure(
            ...,
            **alembic_filters(),
        )
    """

    def include_name(name: str | None, type_: str, parent_names: dict) -> bool:
        return not (type_ == "table" and name in JWKSMITH_TABLES)

    def include_object(
        object: Any, name: str | None, type_: str, reflected: bool, compare_to: Any
    ) -> bool:
        if type_ == "table":
            return name not in JWKSMITH_TABLES
        if type_ == "index" and getattr(object, "table", None) is not None:
            return object.table.name not in JWKSMITH_TABLES
        return True

    return {"include_name": include_name, "include_object": include_object}
