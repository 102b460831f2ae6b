"""Domain objects shared by the in-memory tests."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TypedDict
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from cqrs_ddd_querying.types import UInt8


class Status(Enum):
    ACTIVE = 1
    DISCONTINUED = 2


@dataclass(frozen=True)
class Address:
    city: str
    postcode: str | None = None


@dataclass(frozen=True)
class Supplier:
    name: str
    address: Address | None = None


@dataclass
class Product:
    id: UUID
    name: str
    category: str
    value: int
    price: Decimal
    status: Status = Status.ACTIVE
    tags: list[str] = field(default_factory=list)
    supplier: Supplier | None = None
    created_at: datetime.datetime | None = None
    rating: float | None = None
    channel: UInt8 = 0

    @property
    def display_name(self) -> str:
        return f"{self.category}/{self.name}"


class Reading(BaseModel):
    sensor: str
    level: int = Field(ge=0, le=255)
    taken_at: datetime.datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def label(self) -> str:
        return f"{self.sensor}:{self.level}"


class StockRow(TypedDict):
    sku: str
    quantity: int


class Gadget:
    """A plain annotated class."""

    name: str
    weight: float

    def __init__(self, name: str, weight: float) -> None:
        self.name = name
        self.weight = weight


ACME = Supplier("Acme", Address("Berlin", "10115"))
BRIGHTLY = Supplier("Brightly")


def make_products() -> list[Product]:
    return [
        Product(
            id=UUID("00000000-0000-0000-0000-000000000001"),
            name="Laptop",
            category="Electronics",
            value=10,
            price=Decimal("999.99"),
            tags=["computer", "portable"],
            supplier=ACME,
            created_at=datetime.datetime(2024, 1, 10),
            rating=4.5,
            channel=1,
        ),
        Product(
            id=UUID("00000000-0000-0000-0000-000000000002"),
            name="Desk Lamp",
            category="Lighting",
            value=3,
            price=Decimal("29.90"),
            tags=["home"],
            supplier=BRIGHTLY,
            created_at=datetime.datetime(2024, 2, 1),
            channel=2,
        ),
        Product(
            id=UUID("00000000-0000-0000-0000-000000000003"),
            name="Phone",
            category="Electronics",
            value=8,
            price=Decimal("599.00"),
            tags=["portable", "mobile"],
            supplier=ACME,
            created_at=datetime.datetime(2024, 3, 15),
            rating=4.8,
            channel=3,
        ),
        Product(
            id=UUID("00000000-0000-0000-0000-000000000004"),
            name="Chair",
            category="Furniture",
            value=5,
            price=Decimal("149.50"),
            status=Status.DISCONTINUED,
            rating=3.9,
            channel=4,
        ),
        Product(
            id=UUID("00000000-0000-0000-0000-000000000005"),
            name="Ceiling Light",
            category="Lighting",
            value=4,
            price=Decimal("89.00"),
            tags=["home"],
            supplier=BRIGHTLY,
            created_at=datetime.datetime(2024, 1, 20),
            rating=4.1,
            channel=5,
        ),
        Product(
            id=UUID("00000000-0000-0000-0000-000000000006"),
            name="Monitor",
            category="Electronics",
            value=7,
            price=Decimal("249.99"),
            tags=["computer"],
            created_at=datetime.datetime(2024, 2, 20),
            channel=6,
        ),
    ]


def names(items: object) -> list[str]:
    return [item.name for item in items]  # type: ignore[attr-defined]
