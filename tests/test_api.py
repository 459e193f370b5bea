import pytest
from fastapi.testclient import TestClient
from PIL import Image

from dependencies.pipeline import get_api_client, get_draft_store
from main import app
from schemas.vehicle_schema import VehicleRecord
from services.vehicle_draft import DraftStore
from tests.helpers import make_image_bytes
from utils.pipeline_errors import BackendRejected


class FakeVehicleApi:
    def __init__(self):
        self.created = []
        self.updated = []
        self.reject_with = None

    def create_vehicles(self, request):
        if self.reject_with:
            raise self.reject_with
        self.created.append(request)
        return [
            VehicleRecord(vehicleId=100 + i, modelName=request.modelName, version=request.version,
                          colorId=color.colorId, imageUrl=color.imageUrl)
            for i, color in enumerate(request.colors)
        ]

    def update_vehicle(self, vehicle_id, request):
        self.updated.append((vehicle_id, request))
        return [VehicleRecord(vehicleId=vehicle_id, modelName=request.modelName, version=request.version)]

    def get_vehicle(self, vehicle_id):
        if vehicle_id != 42:
            return None
        return VehicleRecord(
            vehicleId=42, modelName="VF 8", version="Plus", colorId=3, imageUrl="https://cdn/vf8.jpg",
            batteryCapacityKwh=87.7, rangeKm=447, maxSpeedKmh=200, chargingTimeHours=7.5,
            seatingCapacity=5, motorPowerKw=300, weightKg=2600, lengthMm=4750, widthMm=1934,
            heightMm=1667, priceRetail=1200000000, finalPrice=0, status="AVAILABLE", manufactureYear=2024,
        )

    def list_colors(self):
        return []

    def list_vehicles(self):
        return [
            VehicleRecord(vehicleId=1, modelName="X", version="1", color="Red", status="AVAILABLE"),
            VehicleRecord(vehicleId=2, modelName="X", version="1", color="Blue", status="AVAILABLE"),
        ]


@pytest.fixture
def fake_api():
    return FakeVehicleApi()


@pytest.fixture
def client(fake_api):
    store = DraftStore()
    app.dependency_overrides[get_api_client] = lambda: fake_api
    app.dependency_overrides[get_draft_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def open_draft(client, **body):
    response = client.post("/vehicle-drafts/", json=body)
    assert response.status_code == 201
    return response.json()["data"]["draftId"]


def test_status(client):
    assert client.get("/").json()["status"] == "online"


def test_validate_single_field(client):
    response = client.post("/validation/vehicle/field", json={"field": "batteryCapacityKwh", "value": 4})
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is False
    assert body["data"] == {
        "field": "batteryCapacityKwh",
        "message": "Battery capacity must be between 5 and 300 kWh",
        "valid": False,
    }


def test_validate_final_price_with_siblings(client):
    response = client.post("/validation/vehicle/field",
                           json={"field": "finalPrice", "value": 150, "siblings": {"priceRetail": 100}})
    assert response.json()["data"]["message"] == "Final price cannot exceed original price"


def test_validate_field_with_number_beyond_float_range(client):
    response = client.post("/validation/vehicle/field", json={"field": "rangeKm", "value": 10 ** 400})
    assert response.status_code == 200
    assert response.json()["data"]["message"] == "Range is required"


def test_validate_whole_vehicle(client, valid_spec):
    assert client.post("/validation/vehicle", json=valid_spec).json()["data"] == {}

    body = client.post("/validation/vehicle?includeColor=true", json=valid_spec).json()
    assert body["success"] is False
    assert body["errors"] == {"color": "Color is required"}


def test_validate_dealer(client):
    body = client.post("/validation/dealer", json={"dealerName": "A", "address": "B", "phone": "12", "email": "c@d.vn"}).json()
    assert body["errors"] == {"phone": "Phone number must contain 10-11 digits"}


def test_normalize_image_endpoint(client):
    files = {"file": ("car.png", make_image_bytes(1600, 900), "image/png")}
    body = client.post("/images/normalize", files=files).json()
    assert body["data"]["width"] == 800
    assert body["data"]["height"] == 450
    assert body["data"]["dataUri"].startswith("data:image/jpeg;base64,")


def test_normalize_rejects_non_images(client):
    files = {"file": ("notes.txt", b"hello", "text/plain")}
    response = client.post("/images/normalize", files=files)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_create_flow(client, fake_api, valid_spec):
    draft_id = open_draft(client)

    patch = client.patch(f"/vehicle-drafts/{draft_id}/fields", json={"values": valid_spec})
    assert patch.json()["success"] is True

    client.put(f"/vehicle-drafts/{draft_id}/colors/1")
    client.put(f"/vehicle-drafts/{draft_id}/colors/2")
    client.put(f"/vehicle-drafts/{draft_id}/colors/1/image-url", json={"imageUrl": " https://cdn/red.jpg "})

    preview = client.get(f"/vehicle-drafts/{draft_id}/payload").json()["data"]
    assert preview["colors"] == [
        {"colorId": 1, "imageUrl": "https://cdn/red.jpg"},
        {"colorId": 2, "imageUrl": ""},
    ]

    response = client.post(f"/vehicle-drafts/{draft_id}/submit")
    assert response.status_code == 200
    assert [v["vehicleId"] for v in response.json()["data"]["vehicles"]] == [100, 101]
    assert len(fake_api.created) == 1

    assert client.get(f"/vehicle-drafts/{draft_id}").status_code == 404


def test_field_patch_reports_error(client):
    draft_id = open_draft(client)
    body = client.patch(f"/vehicle-drafts/{draft_id}/fields", json={"field": "heightMm", "value": 0}).json()
    assert body["success"] is False
    assert body["errors"] == {"heightMm": "Height must be greater than 0"}


def test_unknown_field_patch_is_bad_request(client):
    draft_id = open_draft(client)
    assert client.patch(f"/vehicle-drafts/{draft_id}/fields", json={"field": "sunroof", "value": 1}).status_code == 400


def test_submit_without_colors_is_rejected(client, fake_api, valid_spec):
    draft_id = open_draft(client, fields=valid_spec)
    response = client.post(f"/vehicle-drafts/{draft_id}/submit")
    assert response.status_code == 422
    assert response.json()["errors"] == {"colors": "Please select at least one color"}
    assert fake_api.created == []
    assert client.get(f"/vehicle-drafts/{draft_id}").status_code == 200


def test_backend_rejection_keeps_draft_open(client, fake_api, valid_spec):
    fake_api.reject_with = BackendRejected("rangeKm: too short", {"rangeKm": "too short"}, upstream_status=400)
    draft_id = open_draft(client, fields=valid_spec, colorIds=[1])

    response = client.post(f"/vehicle-drafts/{draft_id}/submit")
    assert response.status_code == 502
    assert response.json()["errors"] == {"rangeKm": "too short"}
    assert client.get(f"/vehicle-drafts/{draft_id}").status_code == 200


def test_image_upload_failure_is_scoped_to_color(client):
    draft_id = open_draft(client, colorIds=[1, 2])
    good = {"file": ("car.png", make_image_bytes(1200, 600), "image/png")}
    bad = {"file": ("car.png", b"not an image", "image/png")}

    ok = client.post(f"/vehicle-drafts/{draft_id}/colors/1/image", files=good).json()
    assert ok["data"]["colors"][0]["hasUploadedImage"] is True

    response = client.post(f"/vehicle-drafts/{draft_id}/colors/1/image", files=bad)
    assert response.status_code == 400
    body = response.json()
    assert list(body["errors"]) == ["colors.1"]
    assert body["data"]["colors"][0]["hasUploadedImage"] is True
    assert body["data"]["colors"][1]["imageError"] is None


def test_image_canvas_failure_is_scoped_to_color(client, monkeypatch):
    draft_id = open_draft(client, colorIds=[1, 2])
    files = {"file": ("car.png", make_image_bytes(1200, 600), "image/png")}

    def no_memory(*args, **kwargs):
        raise MemoryError("out of memory")

    monkeypatch.setattr(Image, "new", no_memory)
    response = client.post(f"/vehicle-drafts/{draft_id}/colors/1/image", files=files)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert list(body["errors"]) == ["colors.1"]
    assert body["data"]["colors"][0]["imageError"] == body["message"]
    assert body["data"]["colors"][1]["imageError"] is None


def test_normalize_rejects_decompression_bomb(client, monkeypatch):
    files = {"file": ("huge.png", make_image_bytes(50, 50), "image/png")}
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    response = client.post("/images/normalize", files=files)
    assert response.status_code == 500
    assert response.json()["success"] is False


def test_upload_to_unselected_color_is_404(client):
    draft_id = open_draft(client)
    files = {"file": ("car.png", make_image_bytes(10, 10), "image/png")}
    assert client.post(f"/vehicle-drafts/{draft_id}/colors/5/image", files=files).status_code == 404


def test_edit_flow_updates_single_variant(client, fake_api):
    response = client.post("/vehicle-drafts/", json={"vehicleId": 42})
    data = response.json()["data"]
    assert data["mode"] == "edit"
    assert data["colors"] == [{
        "colorId": 3, "imageUrl": "https://cdn/vf8.jpg", "hasUploadedImage": False,
        "uploadedImageKb": None, "imageError": None,
    }]

    client.patch(f"/vehicle-drafts/{data['draftId']}/fields", json={"field": "finalPrice", "value": 1100000000})
    assert client.post(f"/vehicle-drafts/{data['draftId']}/submit").status_code == 200

    vehicle_id, request = fake_api.updated[0]
    assert vehicle_id == 42
    assert len(request.colors) == 1
    assert request.finalPrice == 1100000000


def test_edit_unknown_vehicle_is_404(client):
    assert client.post("/vehicle-drafts/", json={"vehicleId": 7}).status_code == 404


def test_close_draft(client):
    draft_id = open_draft(client)
    assert client.delete(f"/vehicle-drafts/{draft_id}").status_code == 200
    assert client.delete(f"/vehicle-drafts/{draft_id}").status_code == 404


def test_group_vehicle_families(client):
    body = client.post("/vehicle-families/", json={
        "vehicles": [
            {"modelName": "X", "version": "1", "color": "Red"},
            {"modelName": "X", "version": "1", "color": "Blue"},
            {"modelName": "Y", "version": "2", "color": "Red"},
        ],
        "selected": {"X 1": 99},
    }).json()
    families = body["data"]
    assert [f["familyKey"] for f in families] == ["X 1", "Y 2"]
    assert len(families[0]["members"]) == 2
    assert families[0]["selectedIndex"] == 0


def test_families_from_backend(client):
    families = client.get("/vehicle-families/").json()["data"]
    assert [f["familyKey"] for f in families] == ["X 1"]
    assert [m["color"] for m in families[0]["members"]] == ["Red", "Blue"]


def test_malformed_token_is_rejected():
    client = TestClient(app)
    response = client.get("/vehicle-families/", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
