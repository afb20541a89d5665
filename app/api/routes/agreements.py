"""Agreement routes."""

from fastapi import APIRouter

from app.core.dependencies import Agreements, Store
from app.core.errors import NotFoundError
from app.schemas.v1.agreements import AgreementCreate, AgreementUpdate

router = APIRouter(prefix="/agreements", tags=["agreements"])


@router.get("")
async def list_agreements(
    store: Store,
    status: str | None = None,
    participant: str | None = None,
):
    """List agreements, optionally filtered by status or participant address."""
    if status is not None:
        return await store.list_agreements_by_status(status)
    if participant is not None:
        return await store.list_agreements_by_participant(participant)
    return await store.list_agreements()


@router.post("", status_code=201)
async def create_agreement(request: AgreementCreate, service: Agreements):
    """Create an agreement and run relay analysis on it."""
    return await service.create_agreement(request.to_record())


@router.get("/{agreement_id}")
async def get_agreement(agreement_id: str, store: Store):
    agreement = await store.get_agreement(agreement_id)
    if agreement is None:
        raise NotFoundError(f"Agreement not found: {agreement_id}")
    return agreement


@router.put("/{agreement_id}")
async def update_agreement(agreement_id: str, request: AgreementUpdate, store: Store):
    return await store.update_agreement(agreement_id, request.to_record())
