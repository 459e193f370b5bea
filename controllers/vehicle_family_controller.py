from fastapi import APIRouter, Depends
from typing import List

from dependencies.pipeline import get_api_client
from schemas.base_schemas import ResponseBase
from schemas.vehicle_schema import GroupVehiclesRequest, VehicleFamilyResponse
from services.variant_disassembler import summarize_families
from services.vehicle_api_client import VehicleApiClient

# Create router for this controller
router = APIRouter(
    prefix="/vehicle-families",
    tags=["Familias"],
    responses={502: {"description": "El backend de vehículos rechazó la solicitud"}},
)

@router.post("/", response_model=ResponseBase[List[VehicleFamilyResponse]])
def group_vehicles(request: GroupVehiclesRequest):
    """
    Agrupar vehículos por modelo y versión.

    - **vehicles**: lista plana de vehículos (una fila por color)
    - **selected**: índice de color elegido por familia; los índices fuera de rango vuelven a 0
    """
    families = summarize_families(request.vehicles, request.selected)
    return ResponseBase[List[VehicleFamilyResponse]](data=families)

@router.get("/", response_model=ResponseBase[List[VehicleFamilyResponse]])
def get_vehicle_families(client: VehicleApiClient = Depends(get_api_client)):
    """Obtener los vehículos del backend y agruparlos en familias"""
    vehicles = client.list_vehicles()
    return ResponseBase[List[VehicleFamilyResponse]](data=summarize_families(vehicles))
