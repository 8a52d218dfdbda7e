"""
Sample records loaded into the in-memory store.

The catalog mirrors the price list dealers start from; vehicles are priced
with the pricing engine so their stored price matches the catalog.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from dealerhub.core.logging import get_logger
from dealerhub.core.security import hash_password
from dealerhub.database.models import (
    AccessoryRow,
    DealerRow,
    DefectReportRow,
    ExteriorColorRow,
    FuelTypeRow,
    OrderRow,
    QuoteRow,
    TransmissionRow,
    VehicleModelRow,
    VehicleRow,
    VehicleTrimRow,
)
from dealerhub.schemas.catalog import (
    Accessory,
    CatalogSnapshot,
    ExteriorColor,
    FuelType,
    Transmission,
    VehicleModel,
    VehicleTrim,
)
from dealerhub.schemas.dealers import Dealer
from dealerhub.schemas.defect_reports import DefectReport
from dealerhub.schemas.orders import Order, OrderDetails
from dealerhub.schemas.quotes import Quote
from dealerhub.schemas.vehicles import Vehicle
from dealerhub.services.pricing.pricing_engine import PricingEngine, VehicleSelection

logger = get_logger(__name__)


def _catalog() -> CatalogSnapshot:
    models = [
        VehicleModel(id="model-1", name="Cirelli 1", base_price=Decimal("15000")),
        VehicleModel(id="model-2", name="Cirelli 2", base_price=Decimal("18000")),
        VehicleModel(id="model-3", name="Cirelli 3", base_price=Decimal("22000")),
        VehicleModel(id="model-4", name="Cirelli 4", base_price=Decimal("24000")),
        VehicleModel(id="model-5", name="Cirelli 5", base_price=Decimal("28000")),
        VehicleModel(id="model-6", name="Cirelli 7", base_price=Decimal("35000")),
        VehicleModel(id="model-7", name="Cirelli 8", base_price=Decimal("42000")),
        VehicleModel(id="model-8", name="Cirelli Sport Coupè", base_price=Decimal("65000")),
    ]
    trims = [
        VehicleTrim(id="trim-1", name="Plus", base_price=Decimal("0")),
        VehicleTrim(id="trim-2", name="Premium", base_price=Decimal("2500")),
        VehicleTrim(id="trim-3", name="Cross", base_price=Decimal("3000")),
        VehicleTrim(id="trim-4", name="Sport", base_price=Decimal("4000")),
    ]
    fuel_types = [
        FuelType(id="fuel-1", name="Benzina", price_adjustment=Decimal("0")),
        FuelType(id="fuel-2", name="Gpl", price_adjustment=Decimal("1500")),
        FuelType(id="fuel-3", name="Mhev", price_adjustment=Decimal("2500")),
        FuelType(id="fuel-4", name="Mhev Gpl", price_adjustment=Decimal("4000")),
        FuelType(id="fuel-5", name="Phev", price_adjustment=Decimal("6000")),
        FuelType(id="fuel-6", name="EV", price_adjustment=Decimal("8000")),
    ]
    colors = [
        ExteriorColor(id="color-1", name="Pure Ice", type="metallizzato", price_adjustment=Decimal("800")),
        ExteriorColor(id="color-2", name="Obsydian Black", type="metallizzato", price_adjustment=Decimal("800")),
        ExteriorColor(id="color-3", name="Metallic Sky", type="metallizzato", price_adjustment=Decimal("800")),
        ExteriorColor(id="color-4", name="Red Flame", type="metallizzato", price_adjustment=Decimal("1000")),
        ExteriorColor(id="color-5", name="Petrol Green", type="metallizzato", price_adjustment=Decimal("800")),
        ExteriorColor(id="color-6", name="Solid Green", type="pastello", price_adjustment=Decimal("0")),
    ]
    transmissions = [
        Transmission(id="transmission-1", name="Manuale", price_adjustment=Decimal("0")),
        Transmission(id="transmission-2", name="Automatico CVT 6", price_adjustment=Decimal("1500")),
        Transmission(id="transmission-3", name="Automatico DCT 7", price_adjustment=Decimal("2500")),
        Transmission(id="transmission-4", name="Automatico DCT 8", price_adjustment=Decimal("3000")),
    ]
    accessories = [
        Accessory(
            id="accessory-1",
            name="Vetri Privacy",
            price_with_vat=Decimal("200"),
            price_without_vat=Decimal("164"),
        ),
        Accessory(
            id="accessory-2",
            name="Sistema di Navigazione",
            price_with_vat=Decimal("1500"),
            price_without_vat=Decimal("1230"),
            compatible_trims=["trim-2", "trim-3", "trim-4"],
        ),
        Accessory(
            id="accessory-3",
            name="Sedili in Pelle",
            price_with_vat=Decimal("2000"),
            price_without_vat=Decimal("1640"),
            compatible_trims=["trim-2", "trim-4"],
        ),
        Accessory(
            id="accessory-4",
            name="Audio Premium",
            price_with_vat=Decimal("1200"),
            price_without_vat=Decimal("984"),
            compatible_trims=["trim-2", "trim-4"],
        ),
        Accessory(
            id="accessory-5",
            name='Cerchi in lega da 22"',
            price_with_vat=Decimal("2500"),
            price_without_vat=Decimal("2050"),
            compatible_models=["model-5"],
            compatible_trims=["trim-4"],
        ),
    ]
    return CatalogSnapshot(
        models=models,
        trims=trims,
        fuel_types=fuel_types,
        colors=colors,
        transmissions=transmissions,
        accessories=accessories,
    )


def _vehicles(catalog: CatalogSnapshot, engine: PricingEngine) -> list[Vehicle]:
    drafts: list[dict[str, Any]] = [
        {
            "id": "vehicle-1",
            "model": "Cirelli 5",
            "trim": "Sport",
            "fuel_type": "Mhev",
            "exterior_color": "Red Flame (metallizzato)",
            "transmission": "Automatico DCT 7",
            "accessories": ["Sedili in Pelle", 'Cerchi in lega da 22"'],
            "location": "Stock CMC",
            "telaio": "ZCR5SPT0000000001",
            "date_added": date(2024, 11, 15),
            "year": "2024",
        },
        {
            "id": "vehicle-2",
            "model": "Cirelli 3",
            "trim": "Premium",
            "fuel_type": "Benzina",
            "exterior_color": "Pure Ice (metallizzato)",
            "transmission": "Manuale",
            "accessories": ["Vetri Privacy"],
            "location": "Stock CMC",
            "telaio": "ZCR3PRM0000000002",
            "date_added": date(2024, 12, 1),
            "year": "2024",
        },
        {
            "id": "vehicle-3",
            "model": "Cirelli 1",
            "trim": "Plus",
            "fuel_type": "Gpl",
            "exterior_color": "Solid Green (pastello)",
            "transmission": "Manuale",
            "accessories": [],
            "location": "Stock CMC",
            "telaio": "ZCR1PLS0000000003",
            "date_added": date(2025, 1, 10),
            "year": "2025",
            "status": "ordered",
            "reserved_by": "dealer-1",
            "reservation_destination": "Showroom",
        },
        {
            "id": "vehicle-4",
            "model": "Cirelli 7",
            "location": "Stock Virtuale",
            "date_added": date(2025, 2, 3),
            "original_stock": "Cina",
            "estimated_arrival_days": 90,
        },
    ]

    vehicles = []
    for draft in drafts:
        selection = VehicleSelection(
            model=draft["model"],
            trim=draft.get("trim", ""),
            fuel_type=draft.get("fuel_type", ""),
            exterior_color=draft.get("exterior_color", ""),
            transmission=draft.get("transmission", ""),
            accessories=draft.get("accessories", []),
            location=draft["location"],
        )
        draft["price"] = engine.vehicle_price(catalog, selection)
        vehicles.append(Vehicle.model_validate(draft))
    return vehicles


def _dealers() -> list[Dealer]:
    created = datetime(2024, 9, 1, tzinfo=timezone.utc)
    return [
        Dealer(
            id="dealer-1",
            company_name="Autocirelli Milano Srl",
            address="Via Torino 12",
            city="Milano",
            province="MI",
            zip_code="20123",
            contact_name="Marco Bianchi",
            email="milano@autocirelli.it",
            password=hash_password("milano-demo-2024"),
            credit_limit=Decimal("250000"),
            created_at=created,
        ),
        Dealer(
            id="dealer-2",
            company_name="Cirelli Point Roma",
            address="Viale Marconi 88",
            city="Roma",
            province="RM",
            zip_code="00146",
            contact_name="Giulia Rossi",
            email="roma@cirellipoint.it",
            password=hash_password("roma-demo-2024"),
            created_at=created,
        ),
    ]


def seed_memory_store(store) -> None:
    """Fill an empty memory store with the sample records."""
    engine = PricingEngine()
    catalog = _catalog()
    vehicles = _vehicles(catalog, engine)
    dealers = _dealers()
    now = datetime.now(timezone.utc)

    vehicle_2 = vehicles[1]
    quote_price = engine.calculate_quote_price(base_price=vehicle_2.price, discount=Decimal("1000"))
    quotes = [
        Quote(
            id="quote-1",
            vehicle_id=vehicle_2.id,
            dealer_id="dealer-1",
            customer_name="Luca Verdi",
            customer_email="luca.verdi@example.it",
            price=vehicle_2.price,
            discount=Decimal("1000"),
            final_price=quote_price.final_price,
            road_preparation_fee=quote_price.road_preparation_fee,
            created_at=now - timedelta(days=2),
        )
    ]

    vehicle_3 = vehicles[2]
    orders = [
        Order(
            id="order-1",
            vehicle_id=vehicle_3.id,
            dealer_id="dealer-1",
            customer_name="Anna Neri",
            order_date=now - timedelta(days=1),
            progressive_number=1,
            price=vehicle_3.price,
            dealer_name=dealers[0].company_name,
            model_name=vehicle_3.model,
            plafond_dealer=dealers[0].credit_limit,
            details=OrderDetails(is_licensable=True, funding_type="Factor"),
        )
    ]

    defect_reports = [
        DefectReport(
            id="defect-1",
            case_number=1,
            dealer_id="dealer-2",
            dealer_name=dealers[1].company_name,
            email=dealers[1].email,
            reason="Danni da trasporto",
            description="Graffio profondo sulla portiera posteriore sinistra",
            vehicle_receipt_date=now - timedelta(days=10),
            repair_cost=Decimal("450"),
            created_at=now - timedelta(days=9),
            updated_at=now - timedelta(days=9),
        )
    ]

    tables = {
        VehicleModelRow.__tablename__: catalog.models,
        VehicleTrimRow.__tablename__: catalog.trims,
        FuelTypeRow.__tablename__: catalog.fuel_types,
        ExteriorColorRow.__tablename__: catalog.colors,
        TransmissionRow.__tablename__: catalog.transmissions,
        AccessoryRow.__tablename__: catalog.accessories,
        VehicleRow.__tablename__: vehicles,
        DealerRow.__tablename__: dealers,
        QuoteRow.__tablename__: quotes,
        OrderRow.__tablename__: orders,
        DefectReportRow.__tablename__: defect_reports,
    }
    for name, records in tables.items():
        table = store.table(name)
        for record in records:
            table[record.id] = record

    logger.info(
        "Memory store seeded",
        tables={name: len(records) for name, records in tables.items()},
    )
