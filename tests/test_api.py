"""
End-to-end checks of the HTTP surface through FastAPI's TestClient.
"""
from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from conftest import fast_hasher
from webapp.app import create_app
from webapp.repositories.object_storage import FileSystemObjectStore
from webapp.repositories.sql_repository import AccountRepository, CatalogRepository
from webapp.services.account_service import AccountService
from webapp.services.catalog_service import CatalogService
from webapp.services.health_service import LivenessProber

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PRODUCT = {"name": "Widget", "description": "A widget", "sku": "SKU-1", "manufacturer": "Acme", "quantity": 5}


class RecordingCatalogService(CatalogService):
    """Remembers how many upload bytes reached the service."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.received_sizes: list[int] = []

    def upload_image(self, actor_id, product_id, upload):
        self.received_sizes.append(len(upload.data))
        return super().upload_image(actor_id, product_id, upload)


@pytest.fixture()
def client(temp_db, tmp_path, clock, publisher):
    accounts = AccountService(
        repository=AccountRepository(),
        hasher=fast_hasher(),
        publisher=publisher,
        clock=clock,
        verification_ttl=timedelta(seconds=60),
    )
    catalog = RecordingCatalogService(
        repository=CatalogRepository(),
        accounts=accounts.repository,
        object_store=FileSystemObjectStore(tmp_path / "blobs"),
        clock=clock,
        max_upload_bytes=1024,
    )
    app = create_app(account_service=accounts, catalog_service=catalog, liveness_prober=LivenessProber(clock=clock))
    return TestClient(app)


def _register(client, email: str, password: str = "pw-123") -> dict:
    resp = client.post(
        "/v1/user",
        json={"username": email, "password": password, "first_name": "Jane", "last_name": "Doe"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _register_verified(client, publisher, email: str, password: str = "pw-123") -> dict:
    user = _register(client, email, password)
    resp = client.get("/validateEmail", params={"email": email, "token": publisher.token_for(email)})
    assert resp.status_code == 200
    return user


# -------------------------------------- health --------------------------------------
def test_healthz_ok_is_empty_and_uncached(client):
    resp = client.get("/healthz")

    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["cache-control"] == "no-cache, no-store, must-revalidate"
    assert resp.headers["pragma"] == "no-cache"
    assert resp.headers["x-content-type-options"] == "nosniff"


def test_healthz_rejects_query_and_other_methods(client):
    assert client.get("/healthz?probe=1").status_code == 400
    for method in ("POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"):
        resp = client.request(method, "/healthz")
        assert resp.status_code == 405, method
        assert resp.headers["cache-control"] == "no-cache, no-store, must-revalidate"


def test_root_banner(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Use /healthz" in resp.text


# -------------------------------------- users --------------------------------------
def test_registration_and_verification_flow(client, publisher):
    created = _register(client, "jane@example.com")

    assert set(created) == {"id", "username", "firstName", "lastName", "accountCreated", "accountUpdated"}
    assert created["username"] == "jane@example.com"

    auth = ("jane@example.com", "pw-123")
    assert client.get(f"/v1/user/{created['id']}", auth=auth).status_code == 403

    token = publisher.token_for("jane@example.com")
    resp = client.get("/validateEmail", params={"email": "jane@example.com", "token": token})
    assert resp.status_code == 200
    assert resp.text == "Email verified successfully"

    resp = client.get(f"/v1/user/{created['id']}", auth=auth)
    assert resp.status_code == 200
    assert resp.json()["firstName"] == "Jane"

    # the token is single use
    again = client.get("/validateEmail", params={"email": "jane@example.com", "token": token})
    assert again.status_code == 400


def test_registration_rejects_duplicates_and_bad_input(client):
    _register(client, "jane@example.com")

    dup = client.post(
        "/v1/user",
        json={"username": "jane@example.com", "password": "x", "first_name": "J", "last_name": "D"},
    )
    assert dup.status_code == 400
    bad_email = client.post(
        "/v1/user",
        json={"username": "not-an-email", "password": "x", "first_name": "J", "last_name": "D"},
    )
    assert bad_email.status_code == 400
    blank = client.post(
        "/v1/user",
        json={"username": "x@example.com", "password": "x", "first_name": " ", "last_name": "D"},
    )
    assert blank.status_code == 400


def test_registration_keeps_email_exactly_as_sent(client, publisher):
    email = "Alice@Example.COM"
    created = _register(client, email)
    assert created["username"] == email

    resp = client.get("/validateEmail", params={"email": email, "token": publisher.token_for(email)})
    assert resp.status_code == 200

    fetched = client.get(f"/v1/user/{created['id']}", auth=(email, "pw-123"))
    assert fetched.status_code == 200
    assert fetched.json()["username"] == email


def test_validate_email_missing_params(client):
    assert client.get("/validateEmail").status_code == 400
    assert client.get("/validateEmail", params={"email": "a@example.com"}).status_code == 400


def test_user_endpoints_require_credentials(client, publisher):
    user = _register_verified(client, publisher, "jane@example.com")

    resp = client.get(f"/v1/user/{user['id']}")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Basic"
    assert client.get(f"/v1/user/{user['id']}", auth=("jane@example.com", "wrong")).status_code == 401


def test_update_user_self_only_and_username_immutable(client, publisher):
    jane = _register_verified(client, publisher, "jane@example.com")
    bob = _register_verified(client, publisher, "bob@example.com")
    auth = ("jane@example.com", "pw-123")

    body = {"first_name": "Janet", "last_name": "Doe"}
    assert client.put(f"/v1/user/{bob['id']}", json=body, auth=auth).status_code == 403
    assert client.put(f"/v1/user/{jane['id']}", json={**body, "username": "x@example.com"}, auth=auth).status_code == 400

    resp = client.put(f"/v1/user/{jane['id']}", json={**body, "password": "new-pw"}, auth=auth)
    assert resp.status_code == 204
    assert client.get(f"/v1/user/{jane['id']}", auth=auth).status_code == 401
    fetched = client.get(f"/v1/user/{jane['id']}", auth=("jane@example.com", "new-pw"))
    assert fetched.json()["firstName"] == "Janet"


# -------------------------------------- products --------------------------------------
def test_product_lifecycle_and_ownership(client, publisher):
    owner = _register_verified(client, publisher, "owner@example.com")
    _register_verified(client, publisher, "other@example.com")
    owner_auth = ("owner@example.com", "pw-123")
    other_auth = ("other@example.com", "pw-123")

    created = client.post("/v1/product", json=PRODUCT, auth=owner_auth)
    assert created.status_code == 201
    product = created.json()
    assert product["ownerUserId"] == owner["id"]
    pid = product["id"]

    assert client.get(f"/v1/product/{pid}").json()["sku"] == "SKU-1"
    assert client.put(f"/v1/product/{pid}", json=PRODUCT, auth=other_auth).status_code == 403
    assert client.patch(f"/v1/product/{pid}", json={"quantity": 1}, auth=other_auth).status_code == 403
    assert client.delete(f"/v1/product/{pid}", auth=other_auth).status_code == 403
    assert client.patch("/v1/product/999", json={"quantity": 1}, auth=owner_auth).status_code == 403
    assert client.delete("/v1/product/999", auth=owner_auth).status_code == 404

    assert client.patch(f"/v1/product/{pid}", json={"quantity": 100}, auth=owner_auth).status_code == 204
    patched = client.get(f"/v1/product/{pid}").json()
    assert patched["quantity"] == 100
    assert patched["name"] == "Widget"

    assert client.delete(f"/v1/product/{pid}", auth=owner_auth).status_code == 204
    assert client.get(f"/v1/product/{pid}").status_code == 404
    assert client.put(f"/v1/product/{pid}", json=PRODUCT, auth=owner_auth).status_code == 404
    assert client.delete(f"/v1/product/{pid}", auth=owner_auth).status_code == 404


def test_product_validation_and_sku_conflict(client, publisher):
    _register_verified(client, publisher, "owner@example.com")
    auth = ("owner@example.com", "pw-123")

    assert client.post("/v1/product", json={**PRODUCT, "quantity": -1}, auth=auth).status_code == 400
    assert client.post("/v1/product", json={**PRODUCT, "name": ""}, auth=auth).status_code == 400
    assert client.post("/v1/product", json=PRODUCT, auth=auth).status_code == 201
    assert client.post("/v1/product", json=PRODUCT, auth=auth).status_code == 400
    assert client.post("/v1/product", json=PRODUCT).status_code == 401


def test_unverified_user_cannot_create_product(client):
    _register(client, "new@example.com")
    resp = client.post("/v1/product", json=PRODUCT, auth=("new@example.com", "pw-123"))
    assert resp.status_code == 403


# -------------------------------------- images --------------------------------------
def test_image_upload_list_and_delete(client, publisher):
    _register_verified(client, publisher, "owner@example.com")
    _register_verified(client, publisher, "other@example.com")
    auth = ("owner@example.com", "pw-123")
    pid = client.post("/v1/product", json=PRODUCT, auth=auth).json()["id"]
    url = f"/v1/product/{pid}/image"

    rejected = client.post(url, files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")}, auth=auth)
    assert rejected.status_code == 400
    foreign = client.post(url, files={"file": ("a.png", PNG, "image/png")}, auth=("other@example.com", "pw-123"))
    assert foreign.status_code == 403

    uploaded = client.post(url, files={"file": ("a.png", PNG, "image/png")}, auth=auth)
    assert uploaded.status_code == 201
    image = uploaded.json()
    assert set(image) == {"image_id", "product_id", "file_name", "date_created", "s3_bucket_path"}
    assert image["product_id"] == pid
    assert image["file_name"] == "a.png"

    listing = client.get(url)
    assert [i["image_id"] for i in listing.json()] == [image["image_id"]]
    assert client.get(f"{url}/{image['image_id']}").status_code == 200

    assert client.delete(f"{url}/{image['image_id']}", auth=("other@example.com", "pw-123")).status_code == 403
    assert client.delete(f"{url}/{image['image_id']}", auth=auth).status_code == 204
    assert client.get(f"{url}/{image['image_id']}").status_code == 404
    assert client.get(url).json() == []


def test_image_endpoints_for_missing_product(client):
    assert client.get("/v1/product/999/image").status_code == 404
    assert client.get("/v1/product/999/image/1").status_code == 404


def test_oversized_upload_is_read_only_past_the_limit(client, publisher):
    _register_verified(client, publisher, "owner@example.com")
    auth = ("owner@example.com", "pw-123")
    pid = client.post("/v1/product", json=PRODUCT, auth=auth).json()["id"]

    resp = client.post(
        f"/v1/product/{pid}/image",
        files={"file": ("big.png", PNG + b"\x00" * 8192, "image/png")},
        auth=auth,
    )

    assert resp.status_code == 400
    assert client.app.state.catalog_service.received_sizes == [1025]
    assert client.get(f"/v1/product/{pid}/image").json() == []
