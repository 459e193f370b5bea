"""
Field validation rule tables for the admin console forms.

Each table maps a field name to a rule. A rule receives the raw value and the
sibling values of the form and returns a message; an empty string means the
field is valid. Rules never raise.
"""

import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

Rule = Callable[[Any, Mapping[str, Any]], str]

MAX_TEXT_LENGTH = 100
VEHICLE_STATUSES = ("AVAILABLE", "DISCONTINUED")
PHONE_PATTERN = re.compile(r"^[0-9]{10,11}$")


def to_number(value: Any) -> Optional[float]:
    """Coerce a form value to float. Returns None for empty, non-numeric, NaN or unrepresentable input."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except (OverflowError, ValueError):
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _fmt(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


def text_rule(label: str, max_length: Optional[int] = MAX_TEXT_LENGTH) -> Rule:
    def rule(value: Any, siblings: Mapping[str, Any]) -> str:
        text = "" if value is None else str(value).strip()
        if not text:
            return f"{label} is required"
        if max_length is not None and len(text) > max_length:
            return f"{label} must be at most {max_length} characters"
        return ""
    return rule


def range_rule(label: str, minimum: float, maximum: float, unit: str = "",
               positive: bool = False) -> Rule:
    """Required numeric field within [minimum, maximum]."""
    suffix = f" {unit}" if unit else ""

    def rule(value: Any, siblings: Mapping[str, Any]) -> str:
        number = to_number(value)
        if number is None:
            return f"{label} is required"
        if positive and number <= 0:
            return f"{label} must be greater than 0"
        if number < minimum or number > maximum:
            return f"{label} must be between {_fmt(minimum)} and {_fmt(maximum)}{suffix}"
        return ""
    return rule


def _price_retail(value: Any, siblings: Mapping[str, Any]) -> str:
    number = to_number(value)
    if number is None:
        return "Retail price is required"
    if number <= 0:
        return "Retail price must be greater than 0"
    return ""


def _final_price(value: Any, siblings: Mapping[str, Any]) -> str:
    # Empty final price means "no promotion"
    if value is None or (isinstance(value, str) and not value.strip()):
        return ""
    number = to_number(value)
    if number is None:
        return "Final price must be a valid number"
    if number < 0:
        return "Final price cannot be negative"
    if number > 0:
        retail = to_number(siblings.get("priceRetail"))
        if retail is not None and number > retail:
            return "Final price cannot exceed original price"
    return ""


def _manufacture_year(value: Any, siblings: Mapping[str, Any]) -> str:
    latest = datetime.now().year + 1
    number = to_number(value)
    if number is None:
        return "Manufacture year is required"
    if number < 2000 or number > latest:
        return f"Manufacture year must be between 2000 and {latest}"
    return ""


def _status(value: Any, siblings: Mapping[str, Any]) -> str:
    if value is None or value == "":
        return ""
    if str(value).upper() not in VEHICLE_STATUSES:
        return f"Status must be one of {', '.join(VEHICLE_STATUSES)}"
    return ""


def _phone(value: Any, siblings: Mapping[str, Any]) -> str:
    text = "" if value is None else re.sub(r"\s", "", str(value))
    if not text:
        return "Phone number is required"
    if not PHONE_PATTERN.match(text):
        return "Phone number must contain 10-11 digits"
    return ""


class RuleTable:
    """Evaluates a declarative {field: rule} table one field at a time or as a whole form."""

    def __init__(self, rules: Dict[str, Rule], optional_fields: Iterable[str] = ()):
        self.rules = rules
        # Fields only checked by validate_all when explicitly requested
        self.optional_fields = frozenset(optional_fields)

    @property
    def fields(self):
        return list(self.rules.keys())

    def validate_field(self, name: str, value: Any,
                       siblings: Optional[Mapping[str, Any]] = None) -> str:
        rule = self.rules.get(name)
        if rule is None:
            return ""
        return rule(value, siblings or {})

    def validate_all(self, values: Any, include: Iterable[str] = ()) -> Dict[str, str]:
        if hasattr(values, "model_dump"):
            values = values.model_dump()
        values = values or {}
        extra = set(include)

        errors = {}
        for name, rule in self.rules.items():
            if name in self.optional_fields and name not in extra:
                continue
            message = rule(values.get(name), values)
            if message:
                errors[name] = message
        return errors


VEHICLE_RULES = RuleTable(
    {
        "modelName": text_rule("Model name"),
        "version": text_rule("Version"),
        "color": text_rule("Color", max_length=None),
        "batteryCapacityKwh": range_rule("Battery capacity", 5, 300, "kWh"),
        "rangeKm": range_rule("Range", 10, 2000, "km"),
        "maxSpeedKmh": range_rule("Max speed", 10, 500, "km/h"),
        "chargingTimeHours": range_rule("Charging time", 0.1, 72, "hours"),
        "seatingCapacity": range_rule("Seating capacity", 1, 12, "seats"),
        "motorPowerKw": range_rule("Motor power", 1, 1500, "kW"),
        "weightKg": range_rule("Weight", 100, 10000, "kg"),
        "lengthMm": range_rule("Length", 500, 10000, "mm"),
        "widthMm": range_rule("Width", 300, 5000, "mm"),
        "heightMm": range_rule("Height", 100, 5000, "mm", positive=True),
        "priceRetail": _price_retail,
        "finalPrice": _final_price,
        "status": _status,
        "manufactureYear": _manufacture_year,
    },
    optional_fields=("color",),
)

NUMERIC_VEHICLE_FIELDS = (
    "batteryCapacityKwh",
    "rangeKm",
    "maxSpeedKmh",
    "chargingTimeHours",
    "seatingCapacity",
    "motorPowerKw",
    "weightKg",
    "lengthMm",
    "widthMm",
    "heightMm",
    "priceRetail",
    "finalPrice",
    "manufactureYear",
)

DEALER_RULES = RuleTable(
    {
        "dealerName": text_rule("Dealer name", max_length=None),
        "address": text_rule("Address", max_length=None),
        "phone": _phone,
        "email": text_rule("Email", max_length=None),
    }
)


def validate_vehicle_field(name: str, value: Any,
                           siblings: Optional[Mapping[str, Any]] = None) -> str:
    return VEHICLE_RULES.validate_field(name, value, siblings)


def validate_vehicle(draft: Any, include_color: bool = False) -> Dict[str, str]:
    return VEHICLE_RULES.validate_all(draft, include=("color",) if include_color else ())


def validate_dealer_field(name: str, value: Any,
                          siblings: Optional[Mapping[str, Any]] = None) -> str:
    return DEALER_RULES.validate_field(name, value, siblings)


def validate_dealer(form: Any) -> Dict[str, str]:
    return DEALER_RULES.validate_all(form)
