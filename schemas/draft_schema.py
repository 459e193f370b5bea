from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from schemas.vehicle_schema import VehicleRecord, VehicleSpecDraft


class OpenDraftRequest(BaseModel):
    vehicleId: Optional[int] = Field(None, description="Vehículo a editar; vacío para crear uno nuevo")
    fields: Optional[VehicleSpecDraft] = None
    colorIds: List[int] = Field(default_factory=list)


class FieldUpdateRequest(BaseModel):
    field: Optional[str] = None
    value: Any = None
    values: Optional[Dict[str, Any]] = Field(None, description="Varios campos a la vez")


class ImageUrlRequest(BaseModel):
    imageUrl: str = ""


class ColorSlotResponse(BaseModel):
    colorId: int
    imageUrl: str = ""
    hasUploadedImage: bool = False
    uploadedImageKb: Optional[int] = None
    imageError: Optional[str] = None


class DraftResponse(BaseModel):
    draftId: str
    vehicleId: Optional[int] = None
    mode: str
    fields: VehicleSpecDraft
    colors: List[ColorSlotResponse]
    errors: Dict[str, str] = Field(default_factory=dict)


class SubmitDraftResponse(BaseModel):
    vehicles: List[VehicleRecord]
