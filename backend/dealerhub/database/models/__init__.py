"""
Record store tables.

Importing this package registers every table on ``Base.metadata``, which
the migration environment relies on.
"""

from dealerhub.database.base import Base, IdMixin, RecordRow, TimestampMixin
from dealerhub.database.models.catalog import (
    AccessoryRow,
    ExteriorColorRow,
    FuelTypeRow,
    TransmissionRow,
    VehicleModelRow,
    VehicleTrimRow,
)
from dealerhub.database.models.dealer import (
    DealerContractRow,
    DealerRow,
    DefectReportRow,
)
from dealerhub.database.models.order import OrderRow
from dealerhub.database.models.quote import QuoteRow
from dealerhub.database.models.vehicle import VehicleRow

__all__ = [
    "Base",
    "RecordRow",
    "IdMixin",
    "TimestampMixin",
    "AccessoryRow",
    "ExteriorColorRow",
    "FuelTypeRow",
    "TransmissionRow",
    "VehicleModelRow",
    "VehicleTrimRow",
    "DealerContractRow",
    "DealerRow",
    "DefectReportRow",
    "OrderRow",
    "QuoteRow",
    "VehicleRow",
]
