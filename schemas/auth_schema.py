from pydantic import BaseModel, ConfigDict
from typing import List, Optional

class UserAuthInfo(BaseModel):
    """Esquema para información del usuario que abrió la sesión de la consola"""
    user_id: Optional[int] = None
    email: Optional[str] = None
    role: Optional[str] = None
    permissions: List[str] = []
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": 1,
                "email": "admin@example.com",
                "role": "ADMIN",
                "permissions": []
            }
        }
    )
