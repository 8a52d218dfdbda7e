"""
Dealer contract service.
"""

from typing import Any, Optional

from dealerhub.core.logging import get_logger
from dealerhub.repositories.registry import RepositoryRegistry
from dealerhub.schemas.contracts import (
    DealerContract,
    DealerContractCreate,
    DealerContractUpdate,
)
from dealerhub.services.contracts.enums import ContractStatus

logger = get_logger(__name__)


class ContractServiceError(Exception):
    """Base exception for contract service errors."""

    def __init__(self, message: str, code: str, **context: Any):
        super().__init__(message)
        self.code = code
        self.context = context


class ContractStateError(ContractServiceError):
    def __init__(self, contract_id: str, status: ContractStatus):
        super().__init__(
            f"Contract is already {status.value}",
            code="CONTRACT_INVALID_STATE",
            contract_id=contract_id,
            status=status.value,
        )


class ContractService:
    def __init__(self, repositories: RepositoryRegistry):
        self.repositories = repositories

    async def list_contracts(
        self,
        dealer_id: Optional[str] = None,
        status: Optional[ContractStatus] = None,
    ) -> list[DealerContract]:
        filters: dict[str, Any] = {}
        if dealer_id:
            filters["dealer_id"] = dealer_id
        if status is not None:
            filters["status"] = status

        if not filters:
            return await self.repositories.contracts.get_all()
        return await self.repositories.contracts.find_by(**filters)

    async def get_contract(self, contract_id: str) -> DealerContract:
        return await self.repositories.contracts.get_by_id(contract_id)

    async def create_contract(self, data: DealerContractCreate) -> DealerContract:
        """
        Record a contract between a dealer and a vehicle.

        Raises:
            RecordNotFoundError: If the dealer or vehicle does not exist
        """
        await self.repositories.dealers.get_by_id(data.dealer_id)
        await self.repositories.vehicles.get_by_id(data.vehicle_id)

        contract = await self.repositories.contracts.create(data.model_dump())
        logger.info(
            "Contract created",
            contract_id=contract.id,
            dealer_id=contract.dealer_id,
            vehicle_id=contract.vehicle_id,
        )
        return contract

    async def update_contract(
        self, contract_id: str, data: DealerContractUpdate
    ) -> DealerContract:
        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        contract = await self.repositories.contracts.update(contract_id, changes)
        logger.info("Contract updated", contract_id=contract_id, fields=sorted(changes))
        return contract

    async def complete_contract(self, contract_id: str) -> DealerContract:
        """
        Close an active contract.

        Raises:
            ContractStateError: If the contract is already completed
        """
        contract = await self.repositories.contracts.get_by_id(contract_id)
        if contract.status != ContractStatus.ACTIVE:
            raise ContractStateError(contract_id, contract.status)

        completed = await self.repositories.contracts.update(
            contract_id, {"status": ContractStatus.COMPLETED}
        )
        logger.info("Contract completed", contract_id=contract_id)
        return completed

    async def delete_contract(self, contract_id: str) -> None:
        await self.repositories.contracts.delete(contract_id)
        logger.info("Contract deleted", contract_id=contract_id)
