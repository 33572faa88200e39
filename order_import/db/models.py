"""
ORM tables for the sync ledger and the per-shop remote connection settings.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, Text, func, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SyncLedgerRow(Base):
    __tablename__ = "order_sync_ledger"
    __table_args__ = (
        Index("ix_order_sync_ledger_shop_order", "shop", "source_order_number"),
        Index("ix_order_sync_ledger_shop_created", "shop", "created_at"),
        # At most one synced row per source order
        Index(
            "uq_order_sync_ledger_synced",
            "shop",
            "source_order_number",
            unique=True,
            sqlite_where=text("status = 'synced'"),
            postgresql_where=text("status = 'synced'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop: Mapped[str] = mapped_column(String(255), nullable=False)
    source_order_number: Mapped[str] = mapped_column(String(64), nullable=False)
    host_order_id: Mapped[str | None] = mapped_column(String(128))
    host_order_name: Mapped[str | None] = mapped_column(String(64))
    host_customer_id: Mapped[str | None] = mapped_column(String(128))
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    customer_email: Mapped[str | None] = mapped_column(String(255))
    customer_phone: Mapped[str | None] = mapped_column(String(32))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text)
    order_snapshot: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class RemoteConnectionConfigRow(Base):
    """Written by the surrounding application; this package only reads it."""

    __tablename__ = "remote_connection_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    wsdl_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    member_code: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
