from fastapi import Depends, HTTPException, Path

from config.app_config import MAX_OPEN_DRAFTS
from dependencies.auth import AuthContext, get_auth_context
from services.vehicle_api_client import VehicleApiClient
from services.vehicle_draft import DraftStore, VehicleDraft
from utils.image_normalizer import ImageNormalizer, image_normalizer

draft_store = DraftStore(max_drafts=MAX_OPEN_DRAFTS)


def get_draft_store() -> DraftStore:
    return draft_store


def get_normalizer() -> ImageNormalizer:
    return image_normalizer


def get_api_client(auth: AuthContext = Depends(get_auth_context)):
    client = VehicleApiClient(auth=auth)
    try:
        yield client
    finally:
        client.close()


def get_draft(
    draft_id: str = Path(..., description="ID del borrador abierto"),
    store: DraftStore = Depends(get_draft_store),
) -> VehicleDraft:
    draft = store.get(draft_id)
    if draft is None:
        raise HTTPException(status_code=404, detail="Borrador no encontrado")
    return draft
