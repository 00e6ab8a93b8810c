from pytest_archon import archrule


def test_domain_isolation() -> None:
    """
    Template model, validation and exceptions are the foundation.
    They must not import the engine, stores or caches.
    """
    (
        archrule("domain_isolation")
        .match("cqrs_ddd_templates.template")
        .match("cqrs_ddd_templates.validation")
        .match("cqrs_ddd_templates.exceptions")
        .should_not_import("cqrs_ddd_templates.resolver")
        .should_not_import("cqrs_ddd_templates.manager")
        .should_not_import("cqrs_ddd_templates.stores*")
        .should_not_import("cqrs_ddd_templates.cache*")
        .check("cqrs_ddd_templates")
    )


def test_ports_are_abstract() -> None:
    """Ports describe contracts and never depend on adapters."""
    (
        archrule("ports_isolation")
        .match("cqrs_ddd_templates.ports*")
        .should_not_import("cqrs_ddd_templates.stores*")
        .should_not_import("cqrs_ddd_templates.cache*")
        .should_not_import("cqrs_ddd_templates.resolver")
        .should_not_import("sqlalchemy*")
        .should_not_import("pymongo*")
        .should_not_import("redis*")
        .check("cqrs_ddd_templates")
    )


def test_engine_is_storage_agnostic() -> None:
    """
    The resolver, fallback policy and merger work through ports only.
    They must not import a concrete store or driver.
    """
    (
        archrule("engine_storage_agnostic")
        .match("cqrs_ddd_templates.resolver")
        .match("cqrs_ddd_templates.fallback")
        .match("cqrs_ddd_templates.merge")
        .should_not_import("cqrs_ddd_templates.stores*")
        .should_not_import("cqrs_ddd_templates.cache*")
        .should_not_import("sqlalchemy*")
        .should_not_import("pymongo*")
        .should_not_import("redis*")
        .check("cqrs_ddd_templates")
    )


def test_stores_do_not_depend_on_each_other() -> None:
    """Each durable store only needs its own driver."""
    (
        archrule("sqlalchemy_store_isolation")
        .match("cqrs_ddd_templates.stores.sqlalchemy*")
        .should_not_import("pymongo*")
        .should_not_import("cqrs_ddd_templates.stores.mongo*")
        .check("cqrs_ddd_templates")
    )
    (
        archrule("mongo_store_isolation")
        .match("cqrs_ddd_templates.stores.mongo*")
        .should_not_import("sqlalchemy*")
        .should_not_import("cqrs_ddd_templates.stores.sqlalchemy*")
        .check("cqrs_ddd_templates")
    )
