from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Literal, Optional, Union

# Valores del formulario: llegan como texto mientras el usuario escribe
FormValue = Optional[Union[float, int, str]]


class VehicleSpecDraft(BaseModel):
    """Editable attributes of a vehicle before it is submitted (one model+version)."""
    modelName: Optional[str] = None
    version: Optional[str] = None
    batteryCapacityKwh: FormValue = None
    rangeKm: FormValue = None
    maxSpeedKmh: FormValue = None
    chargingTimeHours: FormValue = None
    seatingCapacity: FormValue = None
    motorPowerKw: FormValue = None
    weightKg: FormValue = None
    lengthMm: FormValue = None
    widthMm: FormValue = None
    heightMm: FormValue = None
    priceRetail: FormValue = None
    finalPrice: FormValue = None
    status: Optional[str] = "AVAILABLE"
    manufactureYear: FormValue = None

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "modelName": "VF 8",
                "version": "Plus",
                "batteryCapacityKwh": 87.7,
                "rangeKm": 447,
                "maxSpeedKmh": 200,
                "chargingTimeHours": 7.5,
                "seatingCapacity": 5,
                "motorPowerKw": 300,
                "weightKg": 2600,
                "lengthMm": 4750,
                "widthMm": 1934,
                "heightMm": 1667,
                "priceRetail": 1200000000,
                "finalPrice": 0,
                "status": "AVAILABLE",
                "manufactureYear": 2024
            }
        }
    )


class ColorImage(BaseModel):
    colorId: int
    imageUrl: str = ""


class CreateVehiclesRequest(BaseModel):
    """Wire payload for POST /vehicles: fans out into one vehicle row per color."""
    modelName: str
    version: str
    colors: List[ColorImage]
    batteryCapacityKwh: float
    rangeKm: int
    maxSpeedKmh: int
    chargingTimeHours: float
    seatingCapacity: int
    motorPowerKw: float
    weightKg: float
    lengthMm: int
    widthMm: int
    heightMm: int
    priceRetail: float
    finalPrice: float = 0
    status: Literal["AVAILABLE", "DISCONTINUED"] = "AVAILABLE"
    manufactureYear: int


class UpdateVehicleRequest(CreateVehiclesRequest):
    """Same field set as create; colors holds exactly one entry."""
    colors: List[ColorImage] = Field(..., min_length=1, max_length=1)


class VehicleRecord(BaseModel):
    """A persisted vehicle row as returned by the backend (one color variant)."""
    vehicleId: Optional[int] = None
    modelName: str
    version: str
    color: Optional[str] = None
    colorId: Optional[int] = None
    imageUrl: Optional[str] = None
    batteryCapacityKwh: Optional[float] = None
    rangeKm: Optional[float] = None
    maxSpeedKmh: Optional[float] = None
    chargingTimeHours: Optional[float] = None
    seatingCapacity: Optional[float] = None
    motorPowerKw: Optional[float] = None
    weightKg: Optional[float] = None
    lengthMm: Optional[float] = None
    widthMm: Optional[float] = None
    heightMm: Optional[float] = None
    priceRetail: Optional[float] = None
    finalPrice: Optional[float] = None
    status: Optional[str] = None
    manufactureYear: Optional[int] = None

    model_config = ConfigDict(extra="allow")


class FieldValidationRequest(BaseModel):
    field: str = Field(..., description="Nombre del campo a validar")
    value: Any = None
    siblings: Optional[Dict[str, Any]] = Field(None, description="Valores de los demás campos del formulario")


class FieldValidationResponse(BaseModel):
    field: str
    message: str = ""
    valid: bool = True


class FamilyMember(BaseModel):
    vehicleId: Optional[int] = None
    color: Optional[str] = None
    imageUrl: Optional[str] = None
    priceRetail: Optional[float] = None
    finalPrice: Optional[float] = None
    inStock: bool = False


class VehicleFamilyResponse(BaseModel):
    familyKey: str
    modelName: str
    version: str
    members: List[FamilyMember]
    selectedIndex: int = 0
    selected: Optional[FamilyMember] = None


class GroupVehiclesRequest(BaseModel):
    vehicles: List[VehicleRecord]
    selected: Dict[str, int] = Field(default_factory=dict, description="Índice seleccionado por familia")
