"""
Catalog configuration schemas.

Each catalog entity has a record schema, a create request and a partial
update request. An empty compatibility list means the entry fits every
model (or, for accessories, every trim).
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from dealerhub.schemas.common import CamelModel, Money, Record, SignedMoney


# =============================================================================
# Models
# =============================================================================


class VehicleModelCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, description="Model name")
    base_price: Money = Field(..., description="Base list price of the model")
    image_url: Optional[str] = Field(None, max_length=500)


class VehicleModel(VehicleModelCreate, Record):
    """Vehicle model with its base price."""


class VehicleModelUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    base_price: Optional[Money] = None
    image_url: Optional[str] = Field(None, max_length=500)


# =============================================================================
# Trims
# =============================================================================


class VehicleTrimCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    base_price: Money = Field(..., description="Price added on top of the model")
    compatible_models: list[str] = Field(default_factory=list)


class VehicleTrim(VehicleTrimCreate, Record):
    """Trim level with the models it fits."""


class VehicleTrimUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    base_price: Optional[Money] = None
    compatible_models: Optional[list[str]] = None


# =============================================================================
# Fuel types, colors and transmissions
# =============================================================================


class FuelTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    price_adjustment: SignedMoney = Field(default=Decimal("0"))
    compatible_models: list[str] = Field(default_factory=list)


class FuelType(FuelTypeCreate, Record):
    pass


class FuelTypeUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price_adjustment: Optional[SignedMoney] = None
    compatible_models: Optional[list[str]] = None


class ExteriorColorCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: str = Field(default="", max_length=50, description="Paint type, e.g. metallizzato")
    price_adjustment: SignedMoney = Field(default=Decimal("0"))
    compatible_models: list[str] = Field(default_factory=list)


class ExteriorColor(ExteriorColorCreate, Record):
    @property
    def label(self) -> str:
        """Label used on vehicles, "Name (type)" when a type is set."""
        return f"{self.name} ({self.type})" if self.type else self.name


class ExteriorColorUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[str] = Field(None, max_length=50)
    price_adjustment: Optional[SignedMoney] = None
    compatible_models: Optional[list[str]] = None


class TransmissionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    price_adjustment: SignedMoney = Field(default=Decimal("0"))
    compatible_models: list[str] = Field(default_factory=list)


class Transmission(TransmissionCreate, Record):
    pass


class TransmissionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price_adjustment: Optional[SignedMoney] = None
    compatible_models: Optional[list[str]] = None


# =============================================================================
# Accessories
# =============================================================================


class AccessoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    price_with_vat: Money = Field(..., description="Price charged, VAT included")
    price_without_vat: Money = Field(default=Decimal("0"))
    compatible_models: list[str] = Field(default_factory=list)
    compatible_trims: list[str] = Field(default_factory=list)


class Accessory(AccessoryCreate, Record):
    """Optional accessory restricted by model and by trim."""


class AccessoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    price_with_vat: Optional[Money] = None
    price_without_vat: Optional[Money] = None
    compatible_models: Optional[list[str]] = None
    compatible_trims: Optional[list[str]] = None


class CatalogSnapshot(CamelModel):
    """Every catalog table loaded at once, as consumed by the pricing engine."""

    models: list[VehicleModel] = Field(default_factory=list)
    trims: list[VehicleTrim] = Field(default_factory=list)
    fuel_types: list[FuelType] = Field(default_factory=list)
    colors: list[ExteriorColor] = Field(default_factory=list)
    transmissions: list[Transmission] = Field(default_factory=list)
    accessories: list[Accessory] = Field(default_factory=list)
