from pydantic import BaseModel
from typing import Optional


class DealerForm(BaseModel):
    """Formulario de concesionario tal como lo envía la consola (sin validar)"""
    dealerName: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
