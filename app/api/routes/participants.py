"""Participant and document routes."""

from fastapi import APIRouter

from app.core.dependencies import Store
from app.core.errors import NotFoundError
from app.schemas.v1.records import DocumentCreate, ParticipantCreate, ParticipantUpdate

router = APIRouter(tags=["participants"])


@router.get("/participants")
async def list_participants(store: Store):
    return await store.list_participants()


@router.post("/participants", status_code=201)
async def register_participant(request: ParticipantCreate, store: Store):
    fields = request.to_record()
    address = fields.pop("address")
    return await store.register_participant(address, fields)


@router.get("/participants/{address}")
async def get_participant(address: str, store: Store):
    participant = await store.get_participant(address)
    if participant is None:
        raise NotFoundError(f"Participant not found: {address}")
    return participant


@router.put("/participants/{address}")
async def update_participant(address: str, request: ParticipantUpdate, store: Store):
    """Update profile fields, reputation score or verification status."""
    return await store.update_participant(address, request.to_record())


@router.post("/documents", status_code=201)
async def store_document(request: DocumentCreate, store: Store):
    fields = request.to_record()
    agreement_id = fields.pop("agreementId")
    return await store.store_document(agreement_id, fields)


@router.get("/documents/{agreement_id}")
async def get_documents(agreement_id: str, store: Store):
    return await store.get_documents(agreement_id)
