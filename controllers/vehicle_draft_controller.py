from fastapi import APIRouter, Depends, File, HTTPException, Path, UploadFile, status
from fastapi.responses import JSONResponse
import logging

from dependencies.pipeline import get_api_client, get_draft, get_draft_store, get_normalizer
from schemas.base_schemas import ResponseBase
from schemas.draft_schema import (
    ColorSlotResponse,
    DraftResponse,
    FieldUpdateRequest,
    ImageUrlRequest,
    OpenDraftRequest,
    SubmitDraftResponse,
)
from services.vehicle_api_client import VehicleApiClient
from services.vehicle_draft import DraftStore, VehicleDraft, hydrate_draft
from utils.image_normalizer import ImageNormalizer
from utils.pipeline_errors import PipelineError

logger = logging.getLogger("vehicle_draft_controller")

# Create router for this controller
router = APIRouter(
    prefix="/vehicle-drafts",
    tags=["Borradores"],
    responses={
        404: {"description": "Borrador no encontrado"},
        422: {"description": "Errores de validación"}
    },
)

def _draft_response(draft: VehicleDraft, with_errors: bool = False) -> DraftResponse:
    colors = [
        ColorSlotResponse(
            colorId=slot.color_id,
            imageUrl=slot.image_url,
            hasUploadedImage=slot.image is not None,
            uploadedImageKb=slot.image.size_kb if slot.image is not None else None,
            imageError=draft.image_errors.get(slot.color_id)
        )
        for slot in draft.assignments()
    ]
    return DraftResponse(
        draftId=draft.id,
        vehicleId=draft.vehicle_id,
        mode="edit" if draft.is_edit else "create",
        fields=draft.spec,
        colors=colors,
        errors=draft.validate() if with_errors else {}
    )

def _require_color(draft: VehicleDraft, color_id: int) -> None:
    if color_id not in draft.slots:
        raise HTTPException(status_code=404, detail=f"El color {color_id} no está seleccionado en este borrador")

@router.post("/", response_model=ResponseBase[DraftResponse], status_code=status.HTTP_201_CREATED)
def open_draft(
    request: OpenDraftRequest,
    store: DraftStore = Depends(get_draft_store),
    client: VehicleApiClient = Depends(get_api_client)
):
    """
    Abrir un borrador de vehículo.

    - Sin **vehicleId**: borrador vacío para el flujo "agregar vehículo"
    - Con **vehicleId**: carga el vehículo desde el backend para editar esa variante
    """
    if request.vehicleId is not None:
        vehicle = client.get_vehicle(request.vehicleId)
        if vehicle is None:
            raise HTTPException(status_code=404, detail="Vehículo no encontrado")
        colors = client.list_colors() if vehicle.colorId is None else []
        draft = store.add(hydrate_draft(vehicle, colors))
    else:
        draft = store.open(request.fields)
        draft.set_selected_colors(request.colorIds)

    logger.info(f"Borrador {draft.id} abierto ({'edición' if draft.is_edit else 'creación'})")
    return ResponseBase[DraftResponse](
        message="Borrador abierto exitosamente",
        data=_draft_response(draft)
    )

@router.get("/{draft_id}", response_model=ResponseBase[DraftResponse])
def get_draft_state(draft: VehicleDraft = Depends(get_draft)):
    """Consultar el estado actual de un borrador con sus errores de validación"""
    return ResponseBase[DraftResponse](data=_draft_response(draft, with_errors=True))

@router.patch("/{draft_id}/fields", response_model=ResponseBase[DraftResponse])
def update_fields(request: FieldUpdateRequest, draft: VehicleDraft = Depends(get_draft)):
    """Actualizar uno o varios campos; devuelve los mensajes de los campos modificados"""
    values = dict(request.values or {})
    if request.field:
        values[request.field] = request.value
    if not values:
        raise HTTPException(status_code=400, detail="No se indicó ningún campo")

    try:
        errors = draft.update_fields(values)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response = _draft_response(draft)
    response.errors = errors
    return ResponseBase[DraftResponse](
        success=not errors,
        message="Campos actualizados" if not errors else "Campos actualizados con errores",
        data=response,
        errors=errors or None
    )

@router.put("/{draft_id}/colors/{color_id}", response_model=ResponseBase[DraftResponse])
def select_color(
    color_id: int = Path(..., ge=1),
    draft: VehicleDraft = Depends(get_draft)
):
    """Seleccionar un color para el borrador"""
    draft.select_color(color_id)
    return ResponseBase[DraftResponse](data=_draft_response(draft))

@router.delete("/{draft_id}/colors/{color_id}", response_model=ResponseBase[DraftResponse])
def remove_color(color_id: int, draft: VehicleDraft = Depends(get_draft)):
    """Quitar un color del borrador junto con su imagen"""
    _require_color(draft, color_id)
    draft.remove_color(color_id)
    return ResponseBase[DraftResponse](message="Color eliminado", data=_draft_response(draft))

@router.put("/{draft_id}/colors/{color_id}/image-url", response_model=ResponseBase[DraftResponse])
def set_image_url(color_id: int, request: ImageUrlRequest, draft: VehicleDraft = Depends(get_draft)):
    """Asignar una URL remota como imagen del color (tiene prioridad sobre la imagen subida)"""
    _require_color(draft, color_id)
    draft.set_image_url(color_id, request.imageUrl)
    return ResponseBase[DraftResponse](data=_draft_response(draft))

@router.post("/{draft_id}/colors/{color_id}/image", response_model=ResponseBase[DraftResponse])
async def upload_image(
    color_id: int,
    file: UploadFile = File(...),
    draft: VehicleDraft = Depends(get_draft),
    normalizer: ImageNormalizer = Depends(get_normalizer)
):
    """
    Subir una imagen local para un color.

    Si la imagen no es válida el color conserva la imagen anterior y el error
    se informa solo para ese color.
    """
    _require_color(draft, color_id)
    try:
        image = await draft.attach_image(color_id, file, normalizer)
    except PipelineError as e:
        logger.warning(f"Imagen rechazada para el color {color_id}: {e.message}")
        return JSONResponse(
            status_code=e.status_code,
            content=ResponseBase(
                success=False,
                message=e.message,
                data=_draft_response(draft).model_dump(),
                errors={f"colors.{color_id}": e.message}
            ).model_dump()
        )
    finally:
        await file.close()

    message = "Imagen asignada" if image is not None else "El color fue eliminado; imagen descartada"
    return ResponseBase[DraftResponse](message=message, data=_draft_response(draft))

@router.get("/{draft_id}/payload", response_model=ResponseBase[dict])
def preview_payload(draft: VehicleDraft = Depends(get_draft)):
    """Vista previa del payload que se enviará al backend"""
    return ResponseBase[dict](data=draft.build_request().model_dump())

@router.post("/{draft_id}/submit", response_model=ResponseBase[SubmitDraftResponse])
def submit_draft(
    draft: VehicleDraft = Depends(get_draft),
    store: DraftStore = Depends(get_draft_store),
    client: VehicleApiClient = Depends(get_api_client)
):
    """
    Validar, armar y enviar el borrador al backend.

    En creación se genera un vehículo por cada color; en edición se actualiza la
    variante. El borrador se descarta solo si el backend acepta la solicitud.
    """
    request = draft.build_request()
    if draft.is_edit:
        vehicles = client.update_vehicle(draft.vehicle_id, request)
        message = "Vehículo actualizado exitosamente"
    else:
        vehicles = client.create_vehicles(request)
        message = f"{len(request.colors)} vehículos creados exitosamente"

    store.discard(draft.id)
    return ResponseBase[SubmitDraftResponse](message=message, data=SubmitDraftResponse(vehicles=vehicles))

@router.delete("/{draft_id}", response_model=ResponseBase)
def close_draft(draft_id: str, store: DraftStore = Depends(get_draft_store)):
    """Cerrar un borrador sin enviarlo"""
    if not store.discard(draft_id):
        raise HTTPException(status_code=404, detail="Borrador no encontrado")
    return ResponseBase(message="Borrador descartado")
