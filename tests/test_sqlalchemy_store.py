"""SQLAlchemy-specific store tests."""

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import TENANT, email
from cqrs_ddd_templates.exceptions import TemplateStoreError
from cqrs_ddd_templates.stores.sqlalchemy import (
    AppTemplateModel,
    OrgTemplateModel,
    ScenarioModel,
    SQLAlchemyTemplateStore,
    create_schema,
)
from cqrs_ddd_templates.template import NotificationChannel

EMAIL = NotificationChannel.EMAIL


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(engine)
    return engine


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine)


@pytest.fixture
def store(session_factory):
    return SQLAlchemyTemplateStore(session_factory)


def test_rows_use_normalized_name(store, session_factory):
    store.write(email("Password Reset", locale="fr-fr"), TENANT)
    store.write(email("Password Reset", locale="fr-fr"), TENANT, "billing")

    with session_factory() as session:
        scenario = session.scalars(select(ScenarioModel)).one()
        org = session.scalars(select(OrgTemplateModel)).one()
        app = session.scalars(select(AppTemplateModel)).one()

    assert (scenario.name, scenario.display_name) == ("passwordreset", "Password Reset")
    assert scenario.channel is EMAIL
    assert org.scenario_id == scenario.id
    assert (app.application, app.locale) == ("billing", "fr-fr")


def test_content_type_is_stored_as_given(store, session_factory):
    store.write(email(content_type="text/plain"), TENANT)

    with session_factory() as session:
        row = session.scalars(select(OrgTemplateModel)).one()

    assert row.content_type == "text/plain"
    assert store.read("Password Reset", "en-us", EMAIL, TENANT).content_type == (
        "text/plain; charset=UTF-8"
    )


def test_delete_scenario_removes_every_row(store, session_factory):
    store.write(email(locale="en-us"), TENANT)
    store.write(email(locale="de-de"), TENANT, "billing")

    store.delete_scenario("Password Reset", EMAIL, TENANT)

    with session_factory() as session:
        for model in (ScenarioModel, OrgTemplateModel, AppTemplateModel):
            assert session.scalars(select(model)).all() == []


def test_driver_errors_are_wrapped():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = SQLAlchemyTemplateStore.from_engine(engine)  # schema never created

    with pytest.raises(TemplateStoreError) as exc_info:
        store.read("Password Reset", "en-us", EMAIL, TENANT)

    assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
    assert exc_info.value.context["operation"] == "read"


def test_failed_write_rolls_back(store, session_factory, monkeypatch):
    store.write(email(body="v1"), TENANT)

    def broken_flush(self, *args, **kwargs):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr("sqlalchemy.orm.Session.flush", broken_flush)
    with pytest.raises(TemplateStoreError):
        store.write(email("Other"), TENANT)
    monkeypatch.undo()

    assert not store.scenario_exists("Other", EMAIL, TENANT)
    assert store.read("Password Reset", "en-us", EMAIL, TENANT).body == "v1"
