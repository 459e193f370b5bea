from pydantic import BaseModel, ConfigDict
from typing import Optional


class VehicleColor(BaseModel):
    """Entrada del catálogo de colores (solo lectura para este servicio)"""
    colorId: int
    colorName: str
    hexCode: str
    description: Optional[str] = None
    inUse: bool = True

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "colorId": 3,
                "colorName": "Crimson Red",
                "hexCode": "#B8001F",
                "inUse": True
            }
        }
    )
