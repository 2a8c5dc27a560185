from pathlib import Path

import httpx
from fastapi.testclient import TestClient

from dinewave.db.session import Database
from dinewave.main import create_app
from dinewave.services.geocoding import Geocoder


def _reverse_handler(request: httpx.Request) -> httpx.Response:
    lat, _, _ = request.url.params["latlng"].partition(",")
    if float(lat) < 0:
        return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
    return httpx.Response(
        200,
        json={
            "status": "OK",
            "results": [
                {
                    "formatted_address": "12 MG Road, Bengaluru, Karnataka 560001, India",
                    "address_components": [
                        {"long_name": "Bengaluru", "types": ["locality", "political"]},
                        {"long_name": "Karnataka", "types": ["administrative_area_level_1", "political"]},
                        {"long_name": "India", "types": ["country", "political"]},
                        {"long_name": "560001", "types": ["postal_code"]},
                    ],
                }
            ],
        },
    )


def _build_app(tmp_path: Path, geocoder: Geocoder):
    database = Database(f"sqlite:///{tmp_path / 'api_geocoding.db'}")
    return create_app(database=database, geocoder=geocoder)


def _geocoder() -> Geocoder:
    return Geocoder(api_key="test-key", client=httpx.Client(transport=httpx.MockTransport(_reverse_handler)))


def test_reverse_geocoding_returns_address_parts(tmp_path: Path) -> None:
    app = _build_app(tmp_path, _geocoder())

    with TestClient(app) as client:
        response = client.get("/api/v1/geocoding/reverse", params={"lat": 12.9716, "lng": 77.5946})

    assert response.status_code == 200
    assert response.json() == {
        "latitude": 12.9716,
        "longitude": 77.5946,
        "formatted_address": "12 MG Road, Bengaluru, Karnataka 560001, India",
        "city": "Bengaluru",
        "state": "Karnataka",
        "country": "India",
        "zip_code": "560001",
    }


def test_reverse_geocoding_rejects_invalid_coordinates(tmp_path: Path) -> None:
    app = _build_app(tmp_path, _geocoder())

    with TestClient(app) as client:
        out_of_range = client.get("/api/v1/geocoding/reverse", params={"lat": 95, "lng": 77.5946})
        missing = client.get("/api/v1/geocoding/reverse", params={"lat": 12.9716})

    assert out_of_range.status_code == 400
    assert missing.status_code == 422


def test_reverse_geocoding_without_result_is_not_found(tmp_path: Path) -> None:
    with TestClient(_build_app(tmp_path, _geocoder())) as client:
        nothing = client.get("/api/v1/geocoding/reverse", params={"lat": -45.0, "lng": 170.0})
    assert nothing.status_code == 404

    with TestClient(_build_app(tmp_path, Geocoder(api_key=""))) as client:
        unconfigured = client.get("/api/v1/geocoding/reverse", params={"lat": 12.9716, "lng": 77.5946})
    assert unconfigured.status_code == 404
