from fastapi import APIRouter, Query
from typing import Dict, Optional

from schemas.base_schemas import ResponseBase
from schemas.dealer_schema import DealerForm
from schemas.vehicle_schema import FieldValidationRequest, FieldValidationResponse, VehicleSpecDraft
from services.field_validation import (
    validate_dealer,
    validate_dealer_field,
    validate_vehicle,
    validate_vehicle_field,
)

# Create router for this controller
router = APIRouter(
    prefix="/validation",
    tags=["Validacion"],
)

def _field_response(request: FieldValidationRequest, message: str) -> ResponseBase[FieldValidationResponse]:
    return ResponseBase[FieldValidationResponse](
        success=not message,
        message=message or "Campo válido",
        data=FieldValidationResponse(field=request.field, message=message, valid=not message)
    )

def _form_response(errors: Dict[str, str]) -> ResponseBase[Dict[str, str]]:
    if errors:
        return ResponseBase[Dict[str, str]](
            success=False,
            message=f"{len(errors)} campos con errores",
            data=errors,
            errors=errors
        )
    return ResponseBase[Dict[str, str]](message="Formulario válido", data={})

@router.post("/vehicle/field", response_model=ResponseBase[FieldValidationResponse])
def validate_vehicle_field_endpoint(request: FieldValidationRequest):
    """Validar un solo campo del formulario de vehículo mientras el usuario escribe"""
    return _field_response(request, validate_vehicle_field(request.field, request.value, request.siblings))

@router.post("/vehicle", response_model=ResponseBase[Dict[str, str]])
def validate_vehicle_endpoint(
    draft: VehicleSpecDraft,
    include_color: bool = Query(False, alias="includeColor", description="Validar también el campo color (edición de una variante)"),
    color: Optional[str] = Query(None, description="Color de la variante editada")
):
    """Validar el formulario completo de vehículo (al enviar)"""
    values = draft.model_dump()
    values["color"] = color
    return _form_response(validate_vehicle(values, include_color=include_color))

@router.post("/dealer/field", response_model=ResponseBase[FieldValidationResponse])
def validate_dealer_field_endpoint(request: FieldValidationRequest):
    """Validar un solo campo del formulario de concesionario"""
    return _field_response(request, validate_dealer_field(request.field, request.value, request.siblings))

@router.post("/dealer", response_model=ResponseBase[Dict[str, str]])
def validate_dealer_endpoint(form: DealerForm):
    """Validar el formulario completo de concesionario"""
    return _form_response(validate_dealer(form))
