"""
Catalog configuration tables.

Models, trims, fuel types, exterior colors, transmissions and accessories
with their prices and compatibility lists. An empty compatibility list
means the entry fits every model (or trim).
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Numeric, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from dealerhub.database.base import RecordRow


def _compatibility_column(comment: str) -> Mapped[list[str]]:
    return mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
        comment=comment,
    )


class VehicleModelRow(RecordRow):
    """Vehicle model with its base price."""

    __tablename__ = "settings_models"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    base_price: Mapped[Decimal] = mapped_column(
        "baseprice", Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    image_url: Mapped[Optional[str]] = mapped_column("imageurl", String(500))

    __table_args__ = (
        CheckConstraint("baseprice >= 0", name="ck_settings_models_price"),
        {"comment": "Vehicle models"},
    )


class VehicleTrimRow(RecordRow):
    """Trim level priced on top of the model."""

    __tablename__ = "settings_trims"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(
        "baseprice", Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    compatible_models: Mapped[list[str]] = _compatibility_column(
        "Model ids this trim fits, empty for all"
    )


class FuelTypeRow(RecordRow):
    __tablename__ = "settings_fuel_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price_adjustment: Mapped[Decimal] = mapped_column(
        "priceadjustment", Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    compatible_models: Mapped[list[str]] = _compatibility_column(
        "Model ids this fuel type fits, empty for all"
    )


class ExteriorColorRow(RecordRow):
    __tablename__ = "settings_colors"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    price_adjustment: Mapped[Decimal] = mapped_column(
        "priceadjustment", Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    compatible_models: Mapped[list[str]] = _compatibility_column(
        "Model ids this color fits, empty for all"
    )


class TransmissionRow(RecordRow):
    __tablename__ = "settings_transmissions"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price_adjustment: Mapped[Decimal] = mapped_column(
        "priceadjustment", Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    compatible_models: Mapped[list[str]] = _compatibility_column(
        "Model ids this transmission fits, empty for all"
    )


class AccessoryRow(RecordRow):
    """Optional accessory restricted by model and by trim."""

    __tablename__ = "settings_accessories"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    price_with_vat: Mapped[Decimal] = mapped_column(
        "pricewithvat", Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    price_without_vat: Mapped[Decimal] = mapped_column(
        "pricewithoutvat", Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    compatible_models: Mapped[list[str]] = _compatibility_column(
        "Model ids this accessory fits, empty for all"
    )
    compatible_trims: Mapped[list[str]] = _compatibility_column(
        "Trim ids this accessory fits, empty for all"
    )
