import base64

from app.models import PickupRequest


def _count(session_factory):
    session = session_factory()
    try:
        return session.query(PickupRequest).count()
    finally:
        session.close()


def test_json_submission_returns_created_row(client, geocoder, session_factory):
    res = client.post("/api/pickup", json={
        "sku": "ms108",
        "itemNo": "KDA0001",
        "qty": 2000,
        "loadStatus": "x",
        "note": "  " + "n" * 120,
        "lat": 37.5665,
        "lng": 126.978,
        "accuracy": 18.2,
    })

    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["address"] == geocoder.address
    assert body["photoUrl"] is None

    row = body["row"]
    assert row["sku"] == "MS108"
    assert row["item_no"] == "KDA0001"
    assert row["qty"] == 999
    assert row["load_status"] == "X"
    assert row["note"] == "n" * 100
    assert row["accuracy"] == 18.2
    assert _count(session_factory) == 1


def test_multipart_submission_with_photo(client, storage):
    res = client.post(
        "/api/pickup",
        data={
            "sku": "BPS",
            "item_no": "kda0002",
            "qty": "abc",
            "load_status": "O",
            "lat": "37.55",
            "lng": "126.97",
        },
        files={"photo": ("pickup_BPS.jpg", b"\xff\xd8\xff jpeg", "image/jpeg")},
    )

    assert res.status_code == 200
    body = res.json()
    (path,) = storage.uploads
    assert path.startswith("BPS/") and path.endswith(".jpg")
    assert storage.uploads[path] == (b"\xff\xd8\xff jpeg", "image/jpeg")
    assert body["photoUrl"].endswith(path)
    assert body["row"]["photo_url"] == body["photoUrl"]
    assert body["row"]["qty"] == 1
    assert body["row"]["item_no"] == "kda0002"


def test_json_submission_with_photo_data_url(client, storage):
    data_url = "data:image/webp;base64," + base64.b64encode(b"RIFFwebp").decode()

    res = client.post("/api/pickup", json={
        "sku": "MS112", "lat": 37.5, "lng": 127.0, "photoDataUrl": data_url,
    })

    assert res.status_code == 200
    (path,) = storage.uploads
    assert path.endswith(".webp")


def test_invalid_sku_is_400_plain_text(client, session_factory):
    res = client.post("/api/pickup", json={"sku": "NOPE", "lat": 37.5, "lng": 127.0})

    assert res.status_code == 400
    assert res.text == "Invalid sku"
    assert res.headers["content-type"].startswith("text/plain")
    assert _count(session_factory) == 0


def test_missing_coordinates_create_no_row(client, geocoder, session_factory):
    res = client.post("/api/pickup", json={"sku": "BPS", "lat": 37.5})

    assert res.status_code == 400
    assert res.text == "Invalid lat/lng"
    assert geocoder.calls == []
    assert _count(session_factory) == 0


def test_disallowed_photo_type_is_400(client, storage):
    res = client.post(
        "/api/pickup",
        data={"sku": "BPS", "lat": "37.5", "lng": "127.0"},
        files={"photo": ("a.gif", b"GIF89a", "image/gif")},
    )

    assert res.status_code == 400
    assert storage.uploads == {}


def test_malformed_json_is_400(client):
    res = client.post("/api/pickup", content=b"{not json", headers={"content-type": "application/json"})

    assert res.status_code == 400


def test_geocoder_failure_still_succeeds(client, geocoder):
    geocoder.address = None

    res = client.post("/api/pickup", json={"sku": "BPS", "lat": 37.5, "lng": 127.0})

    assert res.status_code == 200
    assert res.json()["address"] is None
    assert res.json()["row"]["address"] is None


def test_storage_failure_is_500_and_creates_no_row(client, storage, session_factory):
    storage.fail = True

    res = client.post(
        "/api/pickup",
        data={"sku": "BPS", "lat": "37.5", "lng": "127.0"},
        files={"photo": ("a.png", b"\x89PNG", "image/png")},
    )

    assert res.status_code == 500
    assert "사진 업로드 실패" in res.text
    assert _count(session_factory) == 0


def test_product_page_data(client):
    res = client.get("/api/products/ms108_KDA0001")

    assert res.status_code == 200
    body = res.json()
    assert body["sku"] == "MS108"
    assert body["item_no"] == "KDA0001"
    assert body["product"]["image"] == "/products/MS108.jpg"
    assert body["target_accuracy_m"] == 30
    assert body["max_wait_ms"] == 15000

    assert client.get("/api/products/ZZZ").status_code == 404


def test_health(client):
    res = client.get("/api/health")

    assert res.status_code == 200
    assert res.json()["db_connected"] is True
