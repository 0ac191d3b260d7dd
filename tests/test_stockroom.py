# tests/test_stockroom.py
import json

import httpx
import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from stockroom_api.main import app
from stockroom.config import ClientConfig
from stockroom.errors import ProductNotFound, RemoteUnavailable
from stockroom.client import StockroomClient

api = TestClient(app)

def make_config(tmp_path, **overrides):
    return ClientConfig(base_url="http://testserver/api", storage_path=tmp_path / "storage.json", **overrides)

def online_client(tmp_path, **overrides):
    api.post("/api/reset")
    return StockroomClient(make_config(tmp_path, **overrides), http_client=api)

def offline_client(tmp_path, calls=None, **overrides):
    def refuse(request):
        if calls is not None:
            calls.append((request.method, request.url.path))
        raise httpx.ConnectError("connection refused", request=request)
    http = httpx.Client(transport=httpx.MockTransport(refuse))
    return StockroomClient(make_config(tmp_path, **overrides), http_client=http)

def stored(tmp_path):
    return json.loads((tmp_path / "storage.json").read_text())["sim_products_v1"]

NEW = {"name": "Desk Lamp", "sku": "DL-3003", "price": 34.5, "stock": 12, "category": "Lighting"}

# ---------------------------
# Remote path
# ---------------------------
def test_remote_crud(tmp_path):
    c = online_client(tmp_path)
    created = c.create_product(NEW)
    assert c.last_source == "remote"
    assert created.sku == "DL-3003"

    listed = c.list_products()
    assert [p.id for p in listed] == [created.id]

    updated = c.update_product(created.id, {"price": 30})
    assert updated.price == 30
    assert updated.stock == 12
    assert updated.updated_at

    assert c.delete_product(created.id) == {"id": created.id}
    assert c.list_products() == []
    # the local store was never touched
    assert not (tmp_path / "storage.json").exists()

def test_remote_health(tmp_path):
    c = online_client(tmp_path)
    health = c.get_health()
    assert health.status == "ok"
    assert health.db == "memory"

def test_bare_array_and_bare_product_responses(tmp_path):
    record = {"id": "p1", "name": "Mouse", "sku": "M-1", "price": 10, "stock": 5, "createdAt": "2024-01-01T00:00:00.000Z"}

    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json=[record])
        return httpx.Response(200, json=record)

    http = httpx.Client(transport=httpx.MockTransport(handler))
    c = StockroomClient(make_config(tmp_path), http_client=http)
    assert [p.id for p in c.list_products()] == ["p1"]
    assert c.create_product(NEW).id == "p1"
    assert c.last_source == "remote"

def test_unknown_remote_id_falls_back_without_going_offline(tmp_path):
    c = online_client(tmp_path)
    with pytest.raises(ProductNotFound):
        c.update_product("missing", {"stock": 1})
    assert c.last_source == "local"
    # a 404 means the API is up, so the next call goes remote again
    assert not c.offline
    c.list_products()
    assert c.last_source == "remote"

# ---------------------------
# Fallback path
# ---------------------------
def test_seeding_on_first_list(tmp_path):
    c = offline_client(tmp_path)
    products = c.list_products()
    assert c.last_source == "local"
    assert len(products) == 3
    assert all(p.id and p.created_at for p in products)
    assert len({p.id for p in products}) == 3
    assert [p.sku for p in products] == ["WM-1001", "MK-2002", "MN-2700"]

    again = c.list_products()
    assert [p.id for p in again] == [p.id for p in products]
    assert len(stored(tmp_path)) == 3

def test_create_then_list_round_trip(tmp_path):
    c = offline_client(tmp_path)
    created = c.create_product(NEW)
    assert created.id
    assert created.created_at.endswith("Z")

    listed = c.list_products()
    assert len(listed) == 1
    assert [p.model_dump() for p in listed if p.id == created.id] == [created.model_dump()]
    found = listed[0]
    assert (found.name, found.sku, found.price, found.stock, found.category) == \
        ("Desk Lamp", "DL-3003", 34.5, 12, "Lighting")

def test_create_prepends(tmp_path):
    c = offline_client(tmp_path)
    c.list_products()
    created = c.create_product(NEW)
    assert stored(tmp_path)[0]["id"] == created.id
    assert len(stored(tmp_path)) == 4

def test_update_merges_and_stamps(tmp_path):
    c = offline_client(tmp_path)
    mouse = c.list_products()[0]
    updated = c.update_product(mouse.id, {"stock": 7})
    assert updated.stock == 7
    assert updated.name == mouse.name
    assert updated.created_at == mouse.created_at
    assert updated.updated_at
    assert stored(tmp_path)[0]["stock"] == 7
    assert stored(tmp_path)[0]["updatedAt"] == updated.updated_at

def test_update_missing_id_raises_and_leaves_storage(tmp_path):
    c = offline_client(tmp_path)
    c.list_products()
    before = (tmp_path / "storage.json").read_text()
    with pytest.raises(ProductNotFound) as exc:
        c.update_product("missing", {"stock": 1})
    assert "missing" in str(exc.value)
    assert c.last_source == "local"
    assert (tmp_path / "storage.json").read_text() == before

def test_delete_is_idempotent(tmp_path):
    c = offline_client(tmp_path)
    products = c.list_products()
    assert c.delete_product("missing") == {"id": "missing"}
    assert [p.id for p in c.list_products()] == [p.id for p in products]

    assert c.delete_product(products[1].id) == {"id": products[1].id}
    assert [p.id for p in c.list_products()] == [products[0].id, products[2].id]

def test_malformed_storage_is_empty(tmp_path):
    (tmp_path / "storage.json").write_text(json.dumps({"sim_products_v1": {"not": "a list"}}))
    c = offline_client(tmp_path)
    assert c.local.read() == []
    # reads never raise; listing reseeds
    assert len(c.list_products()) == 3

def test_unparseable_storage_is_empty(tmp_path):
    (tmp_path / "storage.json").write_text("{ definitely not json")
    c = offline_client(tmp_path)
    assert c.local.read() == []
    created = c.create_product(NEW)
    assert [p["id"] for p in stored(tmp_path)] == [created.id]

def test_undecodable_storage_is_empty(tmp_path):
    (tmp_path / "storage.json").write_bytes(b'{"sim_products_v1": "\xff\xfe"}')
    c = offline_client(tmp_path)
    assert c.local.read() == []
    assert len(c.list_products()) == 3
    c.delete_product("missing")
    assert len(stored(tmp_path)) == 3

def test_reads_retry_once_writes_never(tmp_path):
    calls = []
    c = offline_client(tmp_path, calls=calls, sticky_fallback=False)
    c.list_products()
    assert calls == [("GET", "/api/products"), ("GET", "/api/products")]

    calls.clear()
    c.create_product(NEW)
    assert calls == [("POST", "/api/products")]

def test_sticky_fallback_stays_local(tmp_path):
    calls = []
    c = offline_client(tmp_path, calls=calls)
    c.list_products()
    assert c.offline
    calls.clear()
    c.create_product(NEW)
    c.list_products()
    assert calls == []
    assert c.last_source == "local"

def test_reconnect(tmp_path):
    c = offline_client(tmp_path)
    c.list_products()
    assert c.reconnect() is False
    assert c.offline

    c.remote.client = api
    api.post("/api/reset")
    assert c.reconnect() is True
    assert c.list_products() == []
    assert c.last_source == "remote"

def test_health_has_no_fallback(tmp_path):
    c = offline_client(tmp_path)
    with pytest.raises(RemoteUnavailable):
        c.get_health()

def test_server_error_falls_back(tmp_path):
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    c = StockroomClient(make_config(tmp_path, read_retries=0), http_client=http)
    assert len(c.list_products()) == 3
    assert c.last_source == "local"
    assert c.offline

def test_blank_name_or_sku_rejected_before_any_call(tmp_path):
    calls = []
    c = offline_client(tmp_path, calls=calls)
    with pytest.raises(ValidationError):
        c.create_product({**NEW, "name": ""})
    with pytest.raises(ValidationError):
        c.update_product("p1", {"sku": ""})
    assert calls == []
    assert c.last_source is None
    assert not (tmp_path / "storage.json").exists()

def test_blank_name_never_reaches_either_store_online(tmp_path):
    c = online_client(tmp_path)
    with pytest.raises(ValidationError):
        c.create_product({**NEW, "name": ""})
    assert c.list_products() == []
    assert c.last_source == "remote"
    assert not (tmp_path / "storage.json").exists()
