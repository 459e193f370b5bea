from typing import Any, Dict, List, Mapping, Optional, Sequence

from schemas.vehicle_schema import FamilyMember, VehicleFamilyResponse


def _get(vehicle: Any, name: str, default=None):
    if isinstance(vehicle, Mapping):
        return vehicle.get(name, default)
    return getattr(vehicle, name, default)


def family_key(vehicle: Any) -> str:
    return f"{_get(vehicle, 'modelName') or ''} {_get(vehicle, 'version') or ''}"


def group_by_family(vehicles: Sequence[Any]) -> Dict[str, List[Any]]:
    """Group persisted vehicles by "modelName version", keeping input order everywhere."""
    families: Dict[str, List[Any]] = {}
    for vehicle in vehicles:
        families.setdefault(family_key(vehicle), []).append(vehicle)
    return families


def clamp_index(family: Sequence[Any], index: Optional[int]) -> int:
    if index is None or index < 0 or index >= len(family):
        return 0
    return index


def select_member(family: Sequence[Any], index: Optional[int]) -> Any:
    """Member at index; out-of-range requests fall back to the first member."""
    if not family:
        raise ValueError("Cannot select a member of an empty family")
    return family[clamp_index(family, index)]


def _member(vehicle: Any) -> FamilyMember:
    return FamilyMember(
        vehicleId=_get(vehicle, "vehicleId"),
        color=_get(vehicle, "color"),
        imageUrl=_get(vehicle, "imageUrl"),
        priceRetail=_get(vehicle, "priceRetail"),
        finalPrice=_get(vehicle, "finalPrice"),
        inStock=_get(vehicle, "status") == "AVAILABLE",
    )


def summarize_families(vehicles: Sequence[Any],
                       selected: Optional[Mapping[str, int]] = None) -> List[VehicleFamilyResponse]:
    """Display view of every family with the caller's selected member resolved."""
    selected = selected or {}
    summaries = []
    for key, members in group_by_family(vehicles).items():
        index = clamp_index(members, selected.get(key))
        views = [_member(vehicle) for vehicle in members]
        summaries.append(VehicleFamilyResponse(
            familyKey=key,
            modelName=_get(members[0], "modelName") or "",
            version=_get(members[0], "version") or "",
            members=views,
            selectedIndex=index,
            selected=views[index],
        ))
    return summaries
