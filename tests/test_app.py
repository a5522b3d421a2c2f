import json

import catalog
import paystack_api
import settings


def test_public_config_endpoint(client, monkeypatch):
    monkeypatch.setattr(settings, "PAYSTACK_SECRET_KEY", "sk_test_secret")
    resp = client.get("/api/config")
    assert resp.status_code == 200
    assert resp.get_json()["FIXED_PRICE"] == 2500
    assert "sk_test_secret" not in resp.get_data(as_text=True)


def test_home_embeds_public_config(client, monkeypatch):
    monkeypatch.setattr(settings, "PAYSTACK_PUBLIC_KEY", "pk_test_public")
    html = client.get("/").get_data(as_text=True)
    assert 'id="app-config"' in html
    assert "pk_test_public" in html


def test_verify_requires_reference(client):
    resp = client.post("/api/verify", json={})
    assert resp.status_code == 400
    assert resp.get_json()["verified"] is False


def test_verify_passes_result_through(client, monkeypatch):
    monkeypatch.setattr(paystack_api, "verify_transaction",
                        lambda ref: {"success": True, "verified": True, "reference": ref, "amount": 2500})
    resp = client.post("/api/verify", json={"reference": " PRJ_1_ABC "})
    assert resp.status_code == 200
    assert resp.get_json()["reference"] == "PRJ_1_ABC"


def test_verify_transport_failure_is_502(client, monkeypatch):
    monkeypatch.setattr(paystack_api, "verify_transaction", lambda ref: {"success": False, "error": "timeout"})
    assert client.post("/api/verify", json={"reference": "x"}).status_code == 502


def test_initialize_validates_input(client):
    resp = client.post("/api/initialize", data="not json", content_type="text/plain")
    assert resp.status_code == 400
    assert client.post("/api/initialize", json={"email": "a@b.co"}).status_code == 400


def test_initialize_lga_kind(client, monkeypatch):
    seen = {}

    def fake_init(email, item_id, item_name, callback_url=None, prefix="PRJ", extra_metadata=None):
        seen.update(email=email, item_id=item_id, prefix=prefix, extra=extra_metadata)
        return {"success": True, "data": {"reference": "LGA_1_X", "authorization_url": "https://pay.test"}}

    monkeypatch.setattr(paystack_api, "initialize_transaction", fake_init)
    resp = client.post("/api/initialize", json={"email": "a@b.co", "project_id": "Ikeja", "kind": "lga",
                                                "metadata": {"token": "ABCD2345WXYZ"}})

    assert resp.status_code == 200
    assert seen == {"email": "a@b.co", "item_id": "Ikeja", "prefix": "LGA", "extra": {"token": "ABCD2345WXYZ"}}


def test_initialize_refused_is_502(client, monkeypatch):
    monkeypatch.setattr(paystack_api, "initialize_transaction",
                        lambda *a, **kw: {"success": False, "error": "Invalid key"})
    resp = client.post("/api/initialize", json={"email": "a@b.co", "project_id": "p1"})
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "Invalid key"


def test_projects_listing(client, monkeypatch):
    monkeypatch.setattr(catalog, "fetch_project_files",
                        lambda: [{"name": "Web_Portal.pdf", "size": 10}, "Hostel_Management.docx"])

    data = json.loads(client.get("/api/projects").get_data(as_text=True))
    assert [p["id"] for p in data["projects"]] == ["web_portal", "hostel_management"]
    assert data["categories"] == ["all", "Hostel", "Web Development"]

    data = client.get("/api/projects?q=hostel").get_json()
    assert [p["id"] for p in data["projects"]] == ["hostel_management"]
    assert len(data["categories"]) == 3


def test_verify_rejects_path_like_reference(client, monkeypatch):
    called = []
    monkeypatch.setattr(paystack_api, "verify_transaction", called.append)

    resp = client.post("/api/verify", json={"reference": "../../customer?perPage=100"})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid reference"
    assert called == []


def test_verify_rejects_non_string_reference(client):
    resp = client.post("/api/verify", json={"reference": 12345})
    assert resp.status_code == 400


def test_initialize_rejects_non_string_fields(client, monkeypatch):
    called = []
    monkeypatch.setattr(paystack_api, "initialize_transaction", lambda *a, **kw: called.append(a))

    assert client.post("/api/initialize", json={"email": 5, "project_id": "p1"}).status_code == 400
    assert client.post("/api/initialize", json={"email": "a@b.co", "project_id": ["p1"]}).status_code == 400
    assert client.post("/api/initialize", json={"email": "a@b.co", "project_id": "p1",
                                                "project_name": {"x": 1}}).status_code == 400
    assert client.post("/api/initialize", json={"email": "a@b.co", "project_id": "p1",
                                                "callback_url": 7}).status_code == 400
    assert called == []


def test_array_body_is_bad_request(client):
    assert client.post("/api/initialize", json=["a"]).status_code == 400
    assert client.post("/api/verify", json=["a"]).status_code == 400
