"""
SQLAlchemy models for the marketplace tables the gateway touches.
Used by postgres_real when DATABASE_URL is set. The tables themselves are
owned by the marketplace database; only the columns read or patched here
are mapped.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from uuid import uuid4
from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Music(Base):
    __tablename__ = "musicas"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    titulo: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    preco: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    em_venda: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Purchase(Base):
    __tablename__ = "compras"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    musica_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("musicas.id"), nullable=True, index=True)
    usuario_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(32), default="pendente", nullable=False)
    stripe_session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    stripe_payment_intent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    criado_em: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "musica_id": self.musica_id,
            "usuario_id": self.usuario_id,
            "status": self.status,
            "stripe_session_id": self.stripe_session_id,
            "stripe_payment_intent_id": self.stripe_payment_intent_id,
            "error_message": self.error_message,
            "criado_em": self.criado_em.isoformat() if self.criado_em else None,
        }
