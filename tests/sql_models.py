"""Mapped classes for the SQLAlchemy tests, mirroring the in-memory products."""

from __future__ import annotations

import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class SupplierRecord(Base):
    __tablename__ = "suppliers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)

    products: Mapped[list[ProductRecord]] = relationship(
        back_populates="supplier", lazy="selectin"
    )


class ProductRecord(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    category: Mapped[str] = mapped_column(String(50))
    value: Mapped[int]
    rating: Mapped[float | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime.datetime | None] = mapped_column(nullable=True)
    supplier_id: Mapped[int | None] = mapped_column(
        ForeignKey("suppliers.id"), nullable=True
    )

    supplier: Mapped[SupplierRecord | None] = relationship(
        back_populates="products", lazy="selectin"
    )


def make_records() -> list[SupplierRecord | ProductRecord]:
    acme = SupplierRecord(id=1, name="Acme", city="Berlin")
    brightly = SupplierRecord(id=2, name="Brightly")
    rows: list[SupplierRecord | ProductRecord] = [acme, brightly]
    for pk, name, category, value, rating, created, supplier in [
        (1, "Laptop", "Electronics", 10, 4.5, datetime.datetime(2024, 1, 10), acme),
        (2, "Desk Lamp", "Lighting", 3, None, datetime.datetime(2024, 2, 1), brightly),
        (3, "Phone", "Electronics", 8, 4.8, datetime.datetime(2024, 3, 15), acme),
        (4, "Chair", "Furniture", 5, 3.9, None, None),
        (5, "Ceiling Light", "Lighting", 4, 4.1, datetime.datetime(2024, 1, 20), brightly),
        (6, "Monitor", "Electronics", 7, None, datetime.datetime(2024, 2, 20), None),
    ]:
        rows.append(
            ProductRecord(
                id=pk,
                name=name,
                category=category,
                value=value,
                rating=rating,
                created_at=created,
                supplier=supplier,
            )
        )
    return rows
