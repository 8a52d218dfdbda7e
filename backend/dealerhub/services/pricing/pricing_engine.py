"""
Pricing calculation engine for vehicles and quotes.

The vehicle list price is the sum of the model base price, the trim base
price, the signed fuel type, color and transmission adjustments and the VAT
inclusive price of each selected accessory. Neither price goes below zero. The
quote final price applies discounts, bonuses, trade-in value and fees on top
of a list price. All amounts are ``Decimal``; the engine is synchronous and
has no side effects.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from dealerhub.core.config import get_settings
from dealerhub.core.logging import get_logger
from dealerhub.schemas.catalog import (
    Accessory,
    CatalogSnapshot,
    ExteriorColor,
)
from dealerhub.schemas.quotes import QuotePriceBreakdown
from dealerhub.schemas.vehicles import PriceBreakdown
from dealerhub.services.catalog.compatibility import fits_model_and_trim

logger = get_logger(__name__)

ZERO = Decimal("0")

_COLOR_LABEL = re.compile(r"^(?P<name>.+) \((?P<type>.+)\)$")


class PricingError(Exception):
    """Base exception for pricing calculation errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class PricingValidationError(PricingError):
    """Exception raised when a pricing input is out of range."""

    pass


@dataclass
class VehicleSelection:
    """Catalog names picked for a vehicle, as stored on the vehicle."""

    model: str
    trim: str = ""
    fuel_type: str = ""
    exterior_color: str = ""
    transmission: str = ""
    accessories: Sequence[str] = field(default_factory=list)
    location: Optional[str] = None

    @classmethod
    def of(cls, vehicle: Any, **overrides: Any) -> "VehicleSelection":
        """Build a selection from any object exposing the vehicle fields."""
        values = {
            "model": vehicle.model,
            "trim": vehicle.trim,
            "fuel_type": vehicle.fuel_type,
            "exterior_color": vehicle.exterior_color,
            "transmission": vehicle.transmission,
            "accessories": list(vehicle.accessories),
            "location": getattr(vehicle, "location", None),
        }
        values.update(overrides)
        return cls(**values)


def split_color_label(label: str) -> tuple[str, Optional[str]]:
    """Split "Name (type)" into its parts; a plain name has no type."""
    match = _COLOR_LABEL.match(label)
    if match:
        return match.group("name"), match.group("type")
    return label, None


def _find_by_name(entries: Iterable[Any], name: str) -> Optional[Any]:
    if not name:
        return None
    return next((entry for entry in entries if entry.name == name), None)


def find_color(colors: Iterable[ExteriorColor], label: str) -> Optional[ExteriorColor]:
    """
    Resolve a color label.

    "Name (type)" matches the color with that name and paint type. A plain
    name only matches a color stored without a paint type.
    """
    if not label:
        return None
    colors = list(colors)
    name, color_type = split_color_label(label)
    if color_type is not None:
        for color in colors:
            if color.name == name and color.type == color_type:
                return color
    # plain names, or a name that itself ends in parentheses
    return next(
        (color for color in colors if color.name == label and not color.type), None
    )


class PricingEngine:
    """
    Vehicle and quote price calculator.

    Example:
        engine = PricingEngine()
        breakdown = engine.calculate_vehicle_price(catalog, selection)
        if breakdown is None:
            ...  # price pending, configuration incomplete
    """

    MIN_PRICE = ZERO

    def __init__(
        self,
        virtual_stock_location: Optional[str] = None,
        default_road_preparation_fee: Optional[Decimal] = None,
    ):
        settings = get_settings()
        self.virtual_stock_location = (
            virtual_stock_location
            if virtual_stock_location is not None
            else settings.virtual_stock_location
        )
        self.default_road_preparation_fee = (
            default_road_preparation_fee
            if default_road_preparation_fee is not None
            else settings.default_road_preparation_fee
        )

    def _validate_amount(self, amount: Decimal, field_name: str) -> Decimal:
        """
        Validate a monetary input.

        Raises:
            PricingValidationError: If the amount is negative
        """
        amount = Decimal(amount)
        if amount < self.MIN_PRICE:
            raise PricingValidationError(
                f"{field_name} cannot be negative",
                field=field_name,
                value=str(amount),
            )
        return amount

    def is_virtual_stock(self, location: Optional[str]) -> bool:
        return location == self.virtual_stock_location

    def compatible_accessories(
        self, catalog: CatalogSnapshot, model_id: str, trim_id: str
    ) -> list[Accessory]:
        """Accessories that fit both the given model and trim."""
        return [
            accessory
            for accessory in catalog.accessories
            if fits_model_and_trim(accessory, model_id, trim_id)
        ]

    def calculate_vehicle_price(
        self,
        catalog: CatalogSnapshot,
        selection: VehicleSelection,
        stock_accessories: Iterable[str] = (),
    ) -> Optional[PriceBreakdown]:
        """
        Calculate the list price of a vehicle configuration.

        Args:
            catalog: Catalog tables to price against
            selection: Names chosen for each catalog dimension
            stock_accessories: Accessories already fitted on the vehicle,
                which are never charged again

        Returns:
            Price breakdown, or None while any of model, trim, fuel type,
            color or transmission does not resolve. Virtual stock is always
            priced at zero.
        """
        if self.is_virtual_stock(selection.location):
            return PriceBreakdown(
                model_price=ZERO,
                trim_price=ZERO,
                fuel_type_adjustment=ZERO,
                color_adjustment=ZERO,
                transmission_adjustment=ZERO,
                accessories={},
                accessories_total=ZERO,
                total=ZERO,
            )

        model = _find_by_name(catalog.models, selection.model)
        trim = _find_by_name(catalog.trims, selection.trim)
        fuel_type = _find_by_name(catalog.fuel_types, selection.fuel_type)
        color = find_color(catalog.colors, selection.exterior_color)
        transmission = _find_by_name(catalog.transmissions, selection.transmission)

        missing = [
            name
            for name, entry in (
                ("model", model),
                ("trim", trim),
                ("fuel_type", fuel_type),
                ("exterior_color", color),
                ("transmission", transmission),
            )
            if entry is None
        ]
        if missing:
            logger.debug("Vehicle price pending", missing=missing, model=selection.model)
            return None

        accessories_by_name = {
            accessory.name: accessory
            for accessory in self.compatible_accessories(catalog, model.id, trim.id)
        }
        already_fitted = set(stock_accessories)

        charged: dict[str, Decimal] = {}
        for name in selection.accessories:
            accessory = accessories_by_name.get(name)
            if accessory is None or name in already_fitted or name in charged:
                continue
            charged[name] = self._validate_amount(accessory.price_with_vat, name)

        accessories_total = sum(charged.values(), ZERO)
        components = {
            "model_price": self._validate_amount(model.base_price, "model_price"),
            "trim_price": self._validate_amount(trim.base_price, "trim_price"),
            # adjustments are signed
            "fuel_type_adjustment": Decimal(fuel_type.price_adjustment),
            "color_adjustment": Decimal(color.price_adjustment),
            "transmission_adjustment": Decimal(transmission.price_adjustment),
        }
        total = max(sum(components.values(), ZERO) + accessories_total, self.MIN_PRICE)

        return PriceBreakdown(
            **components,
            accessories=charged,
            accessories_total=accessories_total,
            total=total,
        )

    def vehicle_price(
        self,
        catalog: CatalogSnapshot,
        selection: VehicleSelection,
        stock_accessories: Iterable[str] = (),
    ) -> Decimal:
        """List price to store on a vehicle; zero while the price is pending."""
        breakdown = self.calculate_vehicle_price(catalog, selection, stock_accessories)
        return breakdown.total if breakdown is not None else ZERO

    def accessories_total(
        self,
        catalog: CatalogSnapshot,
        model_name: str,
        trim_name: str,
        accessory_names: Iterable[str],
        stock_accessories: Iterable[str] = (),
    ) -> Decimal:
        """Sum of the VAT inclusive prices of compatible accessories not yet fitted."""
        model = _find_by_name(catalog.models, model_name)
        trim = _find_by_name(catalog.trims, trim_name)
        if model is None or trim is None:
            candidates = catalog.accessories
        else:
            candidates = self.compatible_accessories(catalog, model.id, trim.id)

        already_fitted = set(stock_accessories)
        prices = {accessory.name: accessory.price_with_vat for accessory in candidates}
        return sum(
            (
                prices[name]
                for name in dict.fromkeys(accessory_names)
                if name in prices and name not in already_fitted
            ),
            ZERO,
        )

    def calculate_quote_price(
        self,
        base_price: Decimal,
        accessory_total: Decimal = ZERO,
        discount: Decimal = ZERO,
        license_plate_bonus: Decimal = ZERO,
        trade_in_bonus: Decimal = ZERO,
        trade_in_value: Decimal = ZERO,
        safety_kit: Decimal = ZERO,
        trade_in_handling_fee: Decimal = ZERO,
        road_preparation_fee: Optional[Decimal] = None,
    ) -> QuotePriceBreakdown:
        """
        Derive the final price of a quote.

        final = base + accessories + road preparation fee
                - (discount + license plate bonus + trade-in bonus)
                - trade-in value + safety kit + trade-in handling fee

        The road preparation fee falls back to the configured default only
        when it is not given; an explicit zero is kept. The result is clamped
        at zero.

        Raises:
            PricingValidationError: If any input is negative
        """
        fee = (
            self.default_road_preparation_fee
            if road_preparation_fee is None
            else road_preparation_fee
        )
        amounts = {
            name: self._validate_amount(value, name)
            for name, value in (
                ("base_price", base_price),
                ("accessory_total", accessory_total),
                ("discount", discount),
                ("license_plate_bonus", license_plate_bonus),
                ("trade_in_bonus", trade_in_bonus),
                ("trade_in_value", trade_in_value),
                ("safety_kit", safety_kit),
                ("trade_in_handling_fee", trade_in_handling_fee),
                ("road_preparation_fee", fee),
            )
        }

        total_discount = (
            amounts["discount"] + amounts["license_plate_bonus"] + amounts["trade_in_bonus"]
        )
        final_price = (
            amounts["base_price"]
            + amounts["accessory_total"]
            + amounts["road_preparation_fee"]
            - total_discount
            - amounts["trade_in_value"]
            + amounts["safety_kit"]
            + amounts["trade_in_handling_fee"]
        )

        return QuotePriceBreakdown(
            base_price=amounts["base_price"],
            accessory_total=amounts["accessory_total"],
            road_preparation_fee=amounts["road_preparation_fee"],
            total_discount=total_discount,
            trade_in_value=amounts["trade_in_value"],
            safety_kit=amounts["safety_kit"],
            trade_in_handling_fee=amounts["trade_in_handling_fee"],
            final_price=max(final_price, ZERO),
        )
