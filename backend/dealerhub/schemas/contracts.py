"""
Dealer contract schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field

from dealerhub.schemas.common import CamelModel, Record
from dealerhub.schemas.quotes import ContractorData, Quote
from dealerhub.services.contracts.enums import ContractStatus


class ContractDetails(CamelModel):
    """Contract terms stored as a JSON document on the contract."""

    contractor: Optional[ContractorData] = None
    customer_name: Optional[str] = None
    quote_id: Optional[str] = None
    price: Decimal
    discount: Decimal = Decimal("0")
    final_price: Decimal


class DealerContractCreate(CamelModel):
    dealer_id: str = Field(..., min_length=1)
    vehicle_id: str = Field(..., min_length=1)
    contract_date: datetime
    contract_details: dict[str, Any] = Field(default_factory=dict)
    status: ContractStatus = ContractStatus.ACTIVE


class DealerContract(DealerContractCreate, Record):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DealerContractUpdate(CamelModel):
    contract_date: Optional[datetime] = None
    contract_details: Optional[dict[str, Any]] = None
    status: Optional[ContractStatus] = None


class QuoteConversion(CamelModel):
    """Result of converting a quote: the converted quote and its contract."""

    quote: Quote
    contract: DealerContract
