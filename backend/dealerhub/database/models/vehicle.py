"""
Vehicle stock table.

Each row is a physical (or, for virtual stock, planned) vehicle with its
configuration, list price, location and reservation state. Column names
keep the legacy lower-case layout of the original table.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import Date, DateTime, Index, Integer, Numeric, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from dealerhub.database.base import RecordRow


class VehicleRow(RecordRow):
    """
    Vehicle inventory row.

    Attributes:
        model: Model name as shown in the catalog
        trim: Trim name
        fuel_type: Fuel type name (column ``fueltype``)
        exterior_color: Color name, optionally "Name (type)"
        accessories: Factory-installed accessory names
        price: List price computed by the pricing engine at last save
        status: available, reserved, sold, ordered or delivered
        location: Stock location; "Stock Virtuale" for unbuilt vehicles
        telaio: Chassis number
        virtual_config: Configuration chosen when reserving virtual stock
    """

    __tablename__ = "vehicles"

    model: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    trim: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    fuel_type: Mapped[str] = mapped_column(
        "fueltype", String(100), nullable=False, default=""
    )
    exterior_color: Mapped[str] = mapped_column(
        "exteriorcolor", String(150), nullable=False, default=""
    )
    transmission: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    accessories: Mapped[list[str]] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb")
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    location: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="available", index=True
    )
    telaio: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    date_added: Mapped[date] = mapped_column("dateadded", Date, nullable=False)
    year: Mapped[Optional[str]] = mapped_column(String(4))
    image_url: Mapped[Optional[str]] = mapped_column("imageurl", String(500))
    custom_image_url: Mapped[Optional[str]] = mapped_column(String(500))
    previous_chassis: Mapped[Optional[str]] = mapped_column(String(50))
    original_stock: Mapped[Optional[str]] = mapped_column(String(20))
    reserved_by: Mapped[Optional[str]] = mapped_column("reservedby", String(255))
    reserved_accessories: Mapped[list[str]] = mapped_column(
        "reservedaccessories",
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )
    reservation_destination: Mapped[Optional[str]] = mapped_column(String(100))
    reservation_timestamp: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True)
    )
    estimated_arrival_days: Mapped[Optional[int]] = mapped_column(Integer)
    virtual_config: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "virtualconfig", JSONB
    )

    __table_args__ = (
        Index("ix_vehicles_model_status", "model", "status"),
        {"comment": "Vehicle stock with configuration and list price"},
    )
