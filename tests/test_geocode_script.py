from pathlib import Path

import httpx
from sqlalchemy import select

from dinewave.db.session import Database
from dinewave.models import Restaurant, User
from dinewave.scripts import geocode_restaurants
from dinewave.services.geocoding import Geocoder


def _geocoder() -> Geocoder:
    def handler(request: httpx.Request) -> httpx.Response:
        if "Nowhere" in request.url.params["address"]:
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [{"formatted_address": "Resolved", "geometry": {"location": {"lat": 12.97, "lng": 77.59}}}],
            },
        )

    return Geocoder(api_key="test-key", client=httpx.Client(transport=httpx.MockTransport(handler)))


def _seed(db_url: str) -> None:
    database = Database(db_url)
    database.connect()
    database.create_all()
    with database.session() as db:
        db.add(User(id="owner", email="owner@example.com", user_type="restaurant_owner"))
        for name, address, lat, lng in [
            ("Missing", "12 MG Road", None, None),
            ("Zeroed", "5 Brigade Road", 0.0, 0.0),
            ("Lost", "1 Nowhere Lane", None, None),
            ("Placed", "9 Church Street", 12.975, 77.605),
        ]:
            db.add(
                Restaurant(
                    owner_id="owner",
                    name=name,
                    address=address,
                    city="Bengaluru",
                    state="Karnataka",
                    zip_code="560001",
                    latitude=lat,
                    longitude=lng,
                )
            )
        db.commit()
    database.disconnect()


def _coordinates(db_url: str) -> dict[str, tuple[float | None, float | None]]:
    database = Database(db_url)
    database.connect()
    with database.session() as db:
        rows = db.scalars(select(Restaurant)).all()
        result = {r.name: (r.latitude, r.longitude) for r in rows}
    database.disconnect()
    return result


def test_backfill_updates_restaurants_missing_coordinates(tmp_path: Path) -> None:
    db_url = f"sqlite:///{tmp_path / 'backfill.db'}"
    _seed(db_url)

    exit_code = geocode_restaurants.main(["--database-url", db_url, "--delay", "0"], geocoder=_geocoder())

    assert exit_code == 2
    coordinates = _coordinates(db_url)
    assert coordinates["Missing"] == (12.97, 77.59)
    assert coordinates["Zeroed"] == (12.97, 77.59)
    assert coordinates["Lost"] == (None, None)
    assert coordinates["Placed"] == (12.975, 77.605)


def test_dry_run_leaves_database_untouched(tmp_path: Path) -> None:
    db_url = f"sqlite:///{tmp_path / 'dry_run.db'}"
    _seed(db_url)

    geocode_restaurants.main(["--database-url", db_url, "--delay", "0", "--dry-run"], geocoder=_geocoder())

    assert _coordinates(db_url)["Missing"] == (None, None)


def test_backfill_requires_api_key(tmp_path: Path) -> None:
    db_url = f"sqlite:///{tmp_path / 'no_key.db'}"

    assert geocode_restaurants.main(["--database-url", db_url], geocoder=Geocoder(api_key="")) == 1
