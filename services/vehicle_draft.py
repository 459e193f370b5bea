import logging
import uuid
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional

from schemas.color_schema import VehicleColor
from schemas.vehicle_schema import CreateVehiclesRequest, UpdateVehicleRequest, VehicleSpecDraft
from services.field_validation import validate_vehicle, validate_vehicle_field
from services.variant_assembler import ColorAssignment, build_create_request, build_update_request
from utils.image_normalizer import ImageNormalizer, NormalizedImage, image_normalizer

logger = logging.getLogger("vehicle_draft")

DRAFT_FIELDS = tuple(VehicleSpecDraft.model_fields.keys())


class VehicleDraft:
    """
    In-progress vehicle being edited in the admin console.

    Owns the vehicle spec fields and one image slot per selected color, keyed by colorId
    in selection order. In edit mode (vehicle_id set) it targets a single
    already-persisted variant.
    """

    def __init__(self, spec: Optional[VehicleSpecDraft] = None, vehicle_id: Optional[int] = None):
        self.id = uuid.uuid4().hex
        self.spec = spec or VehicleSpecDraft()
        self.vehicle_id = vehicle_id
        self.slots: "OrderedDict[int, ColorAssignment]" = OrderedDict()
        self.image_errors: Dict[int, str] = {}

    @property
    def is_edit(self) -> bool:
        return self.vehicle_id is not None

    def values(self) -> Dict[str, Any]:
        return self.spec.model_dump()

    def set_field(self, name: str, value: Any) -> str:
        if name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown field '{name}'")
        setattr(self.spec, name, value)
        return validate_vehicle_field(name, value, self.values())

    def update_fields(self, values: Mapping[str, Any]) -> Dict[str, str]:
        messages = {}
        for name, value in values.items():
            messages[name] = self.set_field(name, value)
        return {name: message for name, message in messages.items() if message}

    def validate(self) -> Dict[str, str]:
        return validate_vehicle(self.spec)

    # Color slots

    def select_color(self, color_id: int) -> ColorAssignment:
        if self.is_edit and self.slots and color_id not in self.slots:
            # Editing acts on one variant: picking another color replaces it
            self.slots.clear()
            self.image_errors.clear()
        return self.slots.setdefault(color_id, ColorAssignment(color_id=color_id))

    def remove_color(self, color_id: int) -> bool:
        self.image_errors.pop(color_id, None)
        return self.slots.pop(color_id, None) is not None

    def set_selected_colors(self, color_ids: Iterable[int]) -> None:
        wanted = list(dict.fromkeys(color_ids))
        for color_id in list(self.slots):
            if color_id not in wanted:
                self.remove_color(color_id)
        for color_id in wanted:
            self.select_color(color_id)

    def _slot(self, color_id: int) -> ColorAssignment:
        slot = self.slots.get(color_id)
        if slot is None:
            raise KeyError(color_id)
        return slot

    def set_image_url(self, color_id: int, url: str) -> ColorAssignment:
        slot = self._slot(color_id)
        slot.image_url = (url or "").strip()
        return slot

    async def attach_image(self, color_id: int, source,
                           normalizer: ImageNormalizer = image_normalizer) -> Optional[NormalizedImage]:
        """
        Normalize an uploaded image into the color's slot.

        On failure the previous image stays in place and the error is re-raised.
        If the color was deselected while normalizing, the result is dropped and
        None is returned.
        """
        self._slot(color_id)
        try:
            normalized = await normalizer.normalize(source)
        except Exception as e:
            if color_id in self.slots:
                self.image_errors[color_id] = str(e)
            raise

        slot = self.slots.get(color_id)
        if slot is None:
            logger.info(f"Color {color_id} eliminado durante la normalización; se descarta la imagen")
            return None
        slot.image = normalized
        self.image_errors.pop(color_id, None)
        return normalized

    def assignments(self) -> List[ColorAssignment]:
        return list(self.slots.values())

    # Assembly

    def build_create_request(self) -> CreateVehiclesRequest:
        return build_create_request(self.spec, self.assignments())

    def build_update_request(self, color_id: Optional[int] = None) -> UpdateVehicleRequest:
        if color_id is None:
            color_id = next(iter(self.slots), None)
        assignment = self.slots.get(color_id) if color_id is not None else None
        return build_update_request(self.spec, assignment)

    def build_request(self):
        return self.build_update_request() if self.is_edit else self.build_create_request()


def _resolve_color_id(vehicle: Mapping[str, Any], colors: Iterable[VehicleColor]) -> Optional[int]:
    if vehicle.get("colorId") is not None:
        return int(vehicle["colorId"])
    name = (vehicle.get("color") or "").strip().lower()
    for color in colors:
        if color.colorName.strip().lower() == name:
            return color.colorId
    return None


def hydrate_draft(vehicle: Any, colors: Iterable[VehicleColor] = ()) -> VehicleDraft:
    """Build an edit-mode draft from a vehicle returned by the vehicle-by-id endpoint."""
    if hasattr(vehicle, "model_dump"):
        vehicle = vehicle.model_dump()
    spec = VehicleSpecDraft(**{k: v for k, v in vehicle.items() if k in DRAFT_FIELDS})
    draft = VehicleDraft(spec=spec, vehicle_id=vehicle.get("vehicleId"))

    color_id = _resolve_color_id(vehicle, colors)
    if color_id is not None:
        slot = draft.select_color(color_id)
        slot.image_url = (vehicle.get("imageUrl") or "").strip()
    else:
        logger.warning(f"No se pudo resolver el color '{vehicle.get('color')}' del vehículo {vehicle.get('vehicleId')}")
    return draft


class DraftStore:
    """Open drafts keyed by id. Oldest drafts are dropped once max_drafts is reached."""

    def __init__(self, max_drafts: int = 200):
        self.max_drafts = max_drafts
        self._drafts: "OrderedDict[str, VehicleDraft]" = OrderedDict()

    def add(self, draft: VehicleDraft) -> VehicleDraft:
        self._drafts[draft.id] = draft
        while len(self._drafts) > self.max_drafts:
            dropped, _ = self._drafts.popitem(last=False)
            logger.info(f"Borrador {dropped} descartado por límite de borradores abiertos")
        return draft

    def open(self, spec: Optional[VehicleSpecDraft] = None) -> VehicleDraft:
        return self.add(VehicleDraft(spec=spec))

    def get(self, draft_id: str) -> Optional[VehicleDraft]:
        return self._drafts.get(draft_id)

    def discard(self, draft_id: str) -> bool:
        return self._drafts.pop(draft_id, None) is not None

    def __len__(self) -> int:
        return len(self._drafts)
