# brewja_backend/app/services/production/errors.py
"""
Typed errors raised by production transitions.

Every error is a rejected operation: the engine state is left exactly as it
was before the call, so the caller may retry with corrected input.

    ProductionError
    +-- NotFoundError
    |   +-- LotNotFoundError
    +-- CapacityExceededError
    +-- InsufficientStockError
    |   +-- InsufficientTankVolumeError
    |   +-- InsufficientKegVolumeError
    |   +-- InsufficientBottleStockError
    +-- KegNotAvailableError
    +-- DuplicateKegIdError
    +-- ValidationError
        +-- TankNotEmptyError
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ProductionError(Exception):
    code: str = "PRODUCTION_ERROR"

    def __init__(self, message: str, **data: Any):
        super().__init__(message)
        self.message = message
        self.data: Dict[str, Any] = data

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "detail": self.message, **self.data}


class NotFoundError(ProductionError):
    code = "NOT_FOUND"

    def __init__(self, kind: str, ref: str, message: Optional[str] = None):
        super().__init__(message or f"{kind} not found: {ref}", kind=kind, ref=ref)
        self.kind = kind
        self.ref = ref


class LotNotFoundError(NotFoundError):
    code = "LOT_NOT_FOUND"

    def __init__(self, recipe_name: str, label_name: str):
        super().__init__("bottle lot", f"{recipe_name} / {label_name}")
        self.data.update(recipe_name=recipe_name, label_name=label_name)


class CapacityExceededError(ProductionError):
    code = "CAPACITY_EXCEEDED"

    def __init__(self, ref: str, requested: float, capacity: float):
        super().__init__(
            f"volume {requested:g}L exceeds capacity of {ref} ({capacity:g}L)",
            ref=ref, requested=requested, capacity=capacity,
        )
        self.requested = requested
        self.capacity = capacity


class InsufficientStockError(ProductionError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, ref: str, required: float, available: float, unit: str = "", message: Optional[str] = None):
        super().__init__(
            message or f"insufficient stock of {ref}: required {required:.2f}{unit}, available {available:g}{unit}",
            ref=ref, required=required, available=available, unit=unit,
        )
        self.ref = ref
        self.required = required
        self.available = available


class InsufficientTankVolumeError(InsufficientStockError):
    code = "INSUFFICIENT_TANK_VOLUME"

    def __init__(self, ref: str, required: float, available: float):
        super().__init__(ref, required, available, "L",
                         message=f"not enough beer in tank {ref}: required {required:g}L, available {available:g}L")


class InsufficientKegVolumeError(InsufficientStockError):
    code = "INSUFFICIENT_KEG_VOLUME"

    def __init__(self, ref: str, required: float, available: float):
        super().__init__(ref, required, available, "L",
                         message=f"not enough beer in keg {ref}: required {required:g}L, available {available:g}L")


class InsufficientBottleStockError(InsufficientStockError):
    code = "INSUFFICIENT_BOTTLE_STOCK"

    def __init__(self, ref: str, required: int, available: int):
        super().__init__(ref, required, available,
                         message=f"not enough bottles of {ref}: requested {required}, in stock {available}")


class KegNotAvailableError(ProductionError):
    code = "KEG_NOT_AVAILABLE"

    def __init__(self, keg_id: str, status: str):
        super().__init__(f"keg {keg_id} is not empty (status {status})", keg_id=keg_id, status=status)
        self.keg_id = keg_id


class DuplicateKegIdError(ProductionError):
    code = "DUPLICATE_KEG_ID"

    def __init__(self, keg_id: str):
        super().__init__(f"keg id already exists: {keg_id}", keg_id=keg_id)
        self.keg_id = keg_id


class ValidationError(ProductionError):
    code = "VALIDATION_ERROR"


class TankNotEmptyError(ValidationError):
    code = "TANK_NOT_EMPTY"

    def __init__(self, tank_id: str, status: str):
        super().__init__(f"tank {tank_id} already holds a batch (status {status})", tank_id=tank_id, status=status)
        self.tank_id = tank_id


__all__ = [
    "ProductionError",
    "NotFoundError",
    "LotNotFoundError",
    "CapacityExceededError",
    "InsufficientStockError",
    "InsufficientTankVolumeError",
    "InsufficientKegVolumeError",
    "InsufficientBottleStockError",
    "KegNotAvailableError",
    "DuplicateKegIdError",
    "ValidationError",
    "TankNotEmptyError",
]
