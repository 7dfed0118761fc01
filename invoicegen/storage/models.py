"""SQLAlchemy models backing the InvoiceGen document collections."""

import datetime as dt
from typing import Dict, Any

from sqlalchemy import String, JSON, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column, declared_attr

from invoicegen.storage.db import Base


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class DocumentMixin:
    """Columns shared by every collection: opaque id, owner and JSON body."""

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False
    )

    @declared_attr.directive
    def __table_args__(cls):
        return (
            Index(f"ix_{cls.__tablename__}_owner_created", "owner_id", "created_at"),
        )


class InvoiceDocument(DocumentMixin, Base):
    """Invoice documents, one row per invoice."""

    __tablename__ = "invoices"


class ClientDocument(DocumentMixin, Base):
    """Explicitly saved client directory entries."""

    __tablename__ = "clients"


class AccountDocument(DocumentMixin, Base):
    """Owner profile: subscription tier and connected payment provider.

    The document id is the owner id itself.
    """

    __tablename__ = "accounts"


# ==== END OF MODELS ==== #
