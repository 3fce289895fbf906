"""Product records read from the catalog."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Product:
    """Washing machine as stored in the catalog. Missing attributes are ``None``."""

    id: int | None = None
    brand: str | None = None
    model: str | None = None
    type: str | None = None
    price: float | None = None
    capacity_kg: int | None = None
    width_cm: float | None = None
    height_cm: float | None = None
    depth_cm: float | None = None
    description: str | None = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "Product":
        def _float(key: str) -> float | None:
            value = row.get(key)
            return float(value) if value is not None else None

        capacity = row.get("capacity_kg")
        identifier = row.get("id")
        return cls(
            id=int(identifier) if identifier is not None else None,
            brand=row.get("brand"),
            model=row.get("model"),
            type=row.get("type"),
            price=_float("price"),
            capacity_kg=int(capacity) if capacity is not None else None,
            width_cm=_float("width_cm"),
            height_cm=_float("height_cm"),
            depth_cm=_float("depth_cm"),
            description=row.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def label(self) -> str:
        return f"{self.brand} {self.model}"
