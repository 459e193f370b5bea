import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from schemas.vehicle_schema import (
    ColorImage,
    CreateVehiclesRequest,
    UpdateVehicleRequest,
    VehicleSpecDraft,
)
from services.field_validation import (
    NUMERIC_VEHICLE_FIELDS,
    VEHICLE_RULES,
    to_number,
    validate_vehicle,
)
from utils.image_normalizer import NormalizedImage
from utils.pipeline_errors import ImagePayloadTooLarge, NoColorSelected, ValidationFailed

logger = logging.getLogger("variant_assembler")

# Ancho fijo de la columna de imagen en el backend
MAX_IMAGE_PAYLOAD_CHARS = 1024
COLOR_FIELD = "colors"
GENERAL_KEY = "general"

INTEGER_FIELDS = {
    "rangeKm",
    "maxSpeedKmh",
    "seatingCapacity",
    "lengthMm",
    "widthMm",
    "heightMm",
    "manufactureYear",
}


@dataclass
class ColorAssignment:
    """Image chosen for one selected color: a remote URL, a normalized upload, or nothing."""
    color_id: int
    image_url: str = ""
    image: Optional[NormalizedImage] = None


def resolve_image(assignment: ColorAssignment) -> str:
    """Explicit remote URL (trimmed) wins over a normalized upload; otherwise empty."""
    url = (assignment.image_url or "").strip()
    if url:
        return url
    if assignment.image is not None:
        image = assignment.image.data_uri
        # TODO: route normalized uploads through an out-of-band upload endpoint once the
        # backend exposes one; embedded data-URIs practically never fit in 1024 chars.
        if len(image) > MAX_IMAGE_PAYLOAD_CHARS:
            raise ImagePayloadTooLarge(assignment.color_id, len(image), MAX_IMAGE_PAYLOAD_CHARS)
        return image
    return ""


def _spec_values(draft: Union[VehicleSpecDraft, Mapping[str, Any]]) -> Dict[str, Any]:
    values = draft.model_dump() if hasattr(draft, "model_dump") else dict(draft)
    payload = {
        "modelName": str(values.get("modelName") or "").strip(),
        "version": str(values.get("version") or "").strip(),
        "status": str(values.get("status") or "AVAILABLE").upper(),
    }
    for name in NUMERIC_VEHICLE_FIELDS:
        number = to_number(values.get(name))
        if number is None:
            # Solo finalPrice puede llegar vacío tras la validación
            number = 0.0
        payload[name] = int(round(number)) if name in INTEGER_FIELDS else number
    return payload


def _validate(draft, assignments: Sequence[ColorAssignment]) -> None:
    errors = validate_vehicle(draft)
    if not assignments:
        errors[COLOR_FIELD] = "Please select at least one color"
        logger.info("Borrador rechazado: no hay colores seleccionados")
        raise NoColorSelected(errors)
    if errors:
        logger.info(f"Borrador rechazado con {len(errors)} errores: {sorted(errors)}")
        raise ValidationFailed(errors)


def _check_duplicates(assignments: Sequence[ColorAssignment]) -> None:
    seen = set()
    for assignment in assignments:
        if assignment.color_id in seen:
            raise ValidationFailed({COLOR_FIELD: f"Color {assignment.color_id} is selected more than once"})
        seen.add(assignment.color_id)


def build_create_request(draft, assignments: Sequence[ColorAssignment]) -> CreateVehiclesRequest:
    """
    Assemble the multi-variant create payload.

    Raises:
        NoColorSelected: no color assignment was supplied
        ValidationFailed: one or more spec fields are invalid
        ImagePayloadTooLarge: an embedded normalized image exceeds the backend column width
    """
    assignments = list(assignments)
    _validate(draft, assignments)
    _check_duplicates(assignments)

    colors = [ColorImage(colorId=a.color_id, imageUrl=resolve_image(a)) for a in assignments]
    request = CreateVehiclesRequest(colors=colors, **_spec_values(draft))
    logger.info(
        f"Solicitud de creación armada: {request.modelName} {request.version}, "
        f"{len(colors)} variantes de color"
    )
    return request


def build_update_request(draft, assignment: ColorAssignment) -> UpdateVehicleRequest:
    """Same validation as create, for the single color variant being edited."""
    assignments = [assignment] if assignment is not None else []
    _validate(draft, assignments)

    request = UpdateVehicleRequest(
        colors=[ColorImage(colorId=assignment.color_id, imageUrl=resolve_image(assignment))],
        **_spec_values(draft),
    )
    logger.info(f"Solicitud de actualización armada: {request.modelName} {request.version}, color {assignment.color_id}")
    return request


# Backend error decomposition

def _known_fields() -> List[str]:
    # Longest first so e.g. "priceRetail" is not shadowed by a shorter prefix
    return sorted(set(VEHICLE_RULES.fields) | {COLOR_FIELD}, key=len, reverse=True)


def decompose_error_message(message: str, known_fields: Optional[Iterable[str]] = None) -> Dict[str, str]:
    """
    Best-effort split of an opaque backend message into per-field errors.

    Fragments look like "field: message" separated by commas or semicolons.
    Text that does not belong to a known field ends up under "general".
    """
    message = (message or "").strip()
    if not message:
        return {}

    fields = list(known_fields) if known_fields is not None else _known_fields()
    pattern = re.compile(
        r"\b(" + "|".join(re.escape(f) for f in fields) + r")\s*:\s*([^,;]*)"
    )

    errors = {}
    leftovers = []
    cursor = 0
    for match in pattern.finditer(message):
        leftovers.append(message[cursor:match.start()])
        cursor = match.end()
        text = match.group(2).strip()
        if text and match.group(1) not in errors:
            errors[match.group(1)] = text
    leftovers.append(message[cursor:])

    if not errors:
        return {GENERAL_KEY: message}

    general = " ".join(
        fragment.strip(" ,;:")
        for fragment in re.split(r"[,;]", "".join(leftovers))
        if fragment.strip(" ,;:")
    )
    if general:
        errors[GENERAL_KEY] = general
    return errors


def decompose_backend_error(payload: Any) -> Dict[str, str]:
    """
    Map a backend validation failure to {field: message}.

    Accepts the structured form ([{"field": ..., "message": ...}], or a dict with
    an "errors" list) and falls back to decompose_error_message for plain strings.
    """
    if isinstance(payload, Mapping):
        if isinstance(payload.get("errors"), list):
            return decompose_backend_error(payload["errors"])
        return decompose_error_message(str(payload.get("message") or payload.get("error") or ""))

    if isinstance(payload, list):
        known = set(_known_fields())
        errors = {}
        general = []
        for item in payload:
            if not isinstance(item, Mapping):
                general.append(str(item))
                continue
            field = item.get("field")
            text = str(item.get("message") or item.get("defaultMessage") or "").strip()
            if not text:
                continue
            if field in known:
                errors.setdefault(field, text)
            else:
                general.append(f"{field}: {text}" if field else text)
        if general:
            errors[GENERAL_KEY] = "; ".join(general)
        return errors

    if payload is None:
        return {}
    return decompose_error_message(str(payload))
