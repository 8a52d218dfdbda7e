"""
Dealer contract API endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from dealerhub.api.deps import ContractServiceDep
from dealerhub.core.logging import get_logger
from dealerhub.schemas.common import ListResponse
from dealerhub.schemas.contracts import (
    DealerContract,
    DealerContractCreate,
    DealerContractUpdate,
)
from dealerhub.services.contracts.enums import ContractStatus
from dealerhub.services.contracts.service import ContractStateError

logger = get_logger(__name__)

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("", response_model=ListResponse[DealerContract], summary="List contracts")
async def list_contracts(
    service: ContractServiceDep,
    dealer_id: Annotated[str | None, Query(alias="dealerId")] = None,
    contract_status: Annotated[ContractStatus | None, Query(alias="status")] = None,
) -> ListResponse[DealerContract]:
    items = await service.list_contracts(dealer_id=dealer_id, status=contract_status)
    return ListResponse[DealerContract](items=items, total=len(items))


@router.get("/{contract_id}", response_model=DealerContract, summary="Get contract")
async def get_contract(contract_id: str, service: ContractServiceDep) -> DealerContract:
    return await service.get_contract(contract_id)


@router.post(
    "",
    response_model=DealerContract,
    status_code=status.HTTP_201_CREATED,
    summary="Create contract",
)
async def create_contract(
    request: DealerContractCreate, service: ContractServiceDep
) -> DealerContract:
    return await service.create_contract(request)


@router.patch("/{contract_id}", response_model=DealerContract, summary="Update contract")
async def update_contract(
    contract_id: str, request: DealerContractUpdate, service: ContractServiceDep
) -> DealerContract:
    return await service.update_contract(contract_id, request)


@router.post(
    "/{contract_id}/complete",
    response_model=DealerContract,
    summary="Complete contract",
)
async def complete_contract(contract_id: str, service: ContractServiceDep) -> DealerContract:
    try:
        return await service.complete_contract(contract_id)
    except ContractStateError as e:
        logger.warning("Contract completion rejected", error=str(e), **e.context)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.delete(
    "/{contract_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete contract",
)
async def delete_contract(contract_id: str, service: ContractServiceDep) -> None:
    await service.delete_contract(contract_id)
