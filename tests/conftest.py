import pytest


@pytest.fixture
def valid_spec():
    return {
        "modelName": "VF 8",
        "version": "Plus",
        "batteryCapacityKwh": 87.7,
        "rangeKm": 447,
        "maxSpeedKmh": 200,
        "chargingTimeHours": 7.5,
        "seatingCapacity": 5,
        "motorPowerKw": 300,
        "weightKg": 2600,
        "lengthMm": 4750,
        "widthMm": 1934,
        "heightMm": 1667,
        "priceRetail": 1200000000,
        "finalPrice": 0,
        "status": "AVAILABLE",
        "manufactureYear": 2024,
    }
