from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, Optional, Generic, TypeVar

# Generic type for response models
T = TypeVar('T')

class ResponseBase(BaseModel, Generic[T]):
    """
    Modelo base de respuesta para todas las operaciones API.
    
    Proporciona una estructura consistente para todas las respuestas de la API,
    incluyendo un campo de éxito, un mensaje, los datos (opcional) y los errores
    por campo cuando la operación falla por validación.
    """
    success: bool = Field(True, description="Indica si la operación fue exitosa")
    message: str = Field("Operation successful", description="Mensaje informativo sobre el resultado de la operación")
    data: Optional[T] = Field(None, description="Datos retornados por la operación (si aplica)")
    errors: Optional[Dict[str, str]] = Field(None, description="Errores por campo (solo en respuestas fallidas)")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Operación realizada con éxito",
                "data": "Depende del tipo de respuesta"
            }
        }
    )
