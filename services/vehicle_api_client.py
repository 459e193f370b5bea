import logging
from typing import Any, Dict, List, Optional

import requests

from config.app_config import BACKEND_CONFIG
from dependencies.auth import AuthContext
from schemas.color_schema import VehicleColor
from schemas.vehicle_schema import CreateVehiclesRequest, UpdateVehicleRequest, VehicleRecord
from services.variant_assembler import decompose_backend_error
from utils.pipeline_errors import BackendRejected

logger = logging.getLogger("vehicle_api_client")


def _looks_like_vehicle(data: Any) -> bool:
    return isinstance(data, dict) and "modelName" in data


def unwrap_vehicle_payload(data: Any) -> List[Dict[str, Any]]:
    """
    Normalize the three response shapes the backend uses into a list of vehicles:
    a {statusCode, message, data} envelope (data list or object), a bare array,
    or a single vehicle object.
    """
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]

    if isinstance(data, dict):
        if "data" in data or "statusCode" in data:
            status_code = data.get("statusCode")
            if status_code is not None and not 200 <= int(status_code) < 300:
                raise BackendRejected(
                    str(data.get("message") or f"Backend returned status {status_code}"),
                    decompose_backend_error(data),
                    upstream_status=int(status_code),
                )
            inner = data.get("data")
            if inner is None:
                return []
            return unwrap_vehicle_payload(inner)
        if _looks_like_vehicle(data):
            return [data]

    raise BackendRejected("Unexpected response format from vehicle API")


def _unwrap_list(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, dict) and "data" in data:
        data = data["data"]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise BackendRejected("Unexpected response format from color API")
    return data


class VehicleApiClient:
    """Cliente del backend REST de vehículos y colores"""

    def __init__(self, auth: Optional[AuthContext] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.auth = auth or AuthContext.anonymous()
        self.base_url = (base_url or BACKEND_CONFIG["base_url"]).rstrip("/")
        self.timeout = timeout if timeout is not None else BACKEND_CONFIG["timeout"]
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json", **self.auth.headers()}
        logger.info(f"{method} {url}")
        try:
            response = self.session.request(method, url, json=json, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error de conexión con el backend: {str(e)}")
            raise BackendRejected(f"Could not reach vehicle API: {str(e)}")

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = response.text

        if not response.ok:
            if isinstance(body, dict):
                raw = str(body.get("message") or body.get("error") or response.reason)
            else:
                raw = str(body or response.reason)
            logger.error(f"Backend rechazó {method} {path} ({response.status_code}): {raw}")
            raise BackendRejected(raw, decompose_backend_error(body if body is not None else raw),
                                  upstream_status=response.status_code)
        return body

    def list_colors(self) -> List[VehicleColor]:
        return [VehicleColor(**item) for item in _unwrap_list(self._request("GET", "/colors"))]

    def list_vehicles(self) -> List[VehicleRecord]:
        return [VehicleRecord(**item) for item in unwrap_vehicle_payload(self._request("GET", "/vehicles"))]

    def get_vehicle(self, vehicle_id: int) -> Optional[VehicleRecord]:
        vehicles = unwrap_vehicle_payload(self._request("GET", f"/vehicles/{vehicle_id}"))
        return VehicleRecord(**vehicles[0]) if vehicles else None

    def create_vehicles(self, request: CreateVehiclesRequest) -> List[VehicleRecord]:
        body = self._request("POST", "/vehicles", json=request.model_dump())
        return [VehicleRecord(**item) for item in unwrap_vehicle_payload(body)]

    def update_vehicle(self, vehicle_id: int, request: UpdateVehicleRequest) -> List[VehicleRecord]:
        body = self._request("PUT", f"/vehicles/{vehicle_id}", json=request.model_dump())
        return [VehicleRecord(**item) for item in unwrap_vehicle_payload(body)]
