"""ORM tables of the relational template store."""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ...template import NotificationChannel

_PK = Integer().with_variant(BigInteger, "postgresql")


class Base(DeclarativeBase):
    """Declarative base for the template tables."""


class ScenarioModel(Base):
    """
    A scenario known to one tenant on one channel.

    ``name`` is the normalized identity; ``display_name`` is what was given on
    creation and what listings return.
    """

    __tablename__ = "notification_scenario"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(Integer, index=True)
    channel: Mapped[NotificationChannel] = mapped_column(
        Enum(
            NotificationChannel,
            native_enum=False,
            length=16,
            values_callable=lambda e: [m.value for m in e],
        )
    )
    name: Mapped[str] = mapped_column(String(255))
    display_name: Mapped[str] = mapped_column(String(255))

    __table_args__ = (
        UniqueConstraint("tenant_id", "channel", "name", name="uq_notification_scenario"),
    )


class _TemplateColumns:
    locale: Mapped[str] = mapped_column(String(35))
    subject: Mapped[str | None] = mapped_column(String(998), nullable=True)
    body: Mapped[str] = mapped_column(Text)
    footer: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(255), nullable=True)


class OrgTemplateModel(_TemplateColumns, Base):
    """Tenant-wide template of one scenario in one locale."""

    __tablename__ = "org_notification_template"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    scenario_id: Mapped[int] = mapped_column(
        ForeignKey("notification_scenario.id", ondelete="CASCADE"), index=True
    )
    scenario: Mapped[ScenarioModel] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("scenario_id", "locale", name="uq_org_notification_template"),
    )


class AppTemplateModel(_TemplateColumns, Base):
    """Application override of one scenario in one locale."""

    __tablename__ = "app_notification_template"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    scenario_id: Mapped[int] = mapped_column(
        ForeignKey("notification_scenario.id", ondelete="CASCADE"), index=True
    )
    application: Mapped[str] = mapped_column(String(255), index=True)
    scenario: Mapped[ScenarioModel] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint(
            "scenario_id", "application", "locale", name="uq_app_notification_template"
        ),
    )
