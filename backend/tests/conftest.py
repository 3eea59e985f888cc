import json as jsonlib
from typing import Any, Callable, Dict, List, Tuple, Union

import pytest
from fastapi.testclient import TestClient

from core.cache import BoundedCache, get_cache
from core.retry import RequestThrottle
from core.square_client import SquareClient, get_square_client
from main import app

BASE_URL = "https://square.test/v2"


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self._body = body if body is not None else {}
        self.text = jsonlib.dumps(self._body)
        self.content = self.text.encode() if body is not None else b""

    def json(self):
        return self._body


Handler = Union[FakeResponse, Callable[..., FakeResponse], List[FakeResponse]]


class FakeSession:
    """
    Stands in for requests.Session. Routes are keyed by (METHOD, path); a
    route can be a single response, a list consumed in order, or a callable
    taking (json, params).
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def add(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), path)] = handler

    def calls_to(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method.upper() and c["path"] == path]

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        path = url[len(BASE_URL):]
        self.calls.append({
            "method": method.upper(),
            "path": path,
            "json": json,
            "params": params,
            "headers": headers,
            "timeout": timeout,
        })
        handler = self.routes.get((method.upper(), path))
        if handler is None:
            return FakeResponse(404, {"errors": [{"category": "INVALID_REQUEST_ERROR", "code": "NOT_FOUND", "detail": f"no route {path}"}]})
        if isinstance(handler, list):
            return handler.pop(0)
        if callable(handler):
            return handler(json, params)
        return handler

    def close(self):
        self.closed = True


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def client(session, sleeps) -> SquareClient:
    return SquareClient(
        base_url=BASE_URL,
        access_token="test-token",
        location_id="L1",
        max_retries=3,
        retry_delay=1.0,
        page_delay=0,
        batch_size=100,
        throttle=RequestThrottle(max_per_second=0),
        session=session,
        sleep=sleeps.append,
    )


@pytest.fixture
def cache() -> BoundedCache:
    return BoundedCache(100)


@pytest.fixture
def api(client, cache):
    app.dependency_overrides[get_square_client] = lambda: client
    app.dependency_overrides[get_cache] = lambda: cache
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ----------------------------
# Square object builders
# ----------------------------

def make_variation(variation_id, name="Regular", sku="", amount=None, ordinal=None, unit_id=None, vendor_id=None, vendor_sku=None, **extra):
    data: Dict[str, Any] = {"name": name, "sku": sku}
    if amount is not None:
        data["price_money"] = {"amount": amount, "currency": "USD"}
    if ordinal is not None:
        data["ordinal"] = ordinal
    if unit_id:
        data["measurement_unit_id"] = unit_id
    if vendor_id:
        info = {"vendor_id": vendor_id}
        if vendor_sku:
            info["sku"] = vendor_sku
        data["item_variation_vendor_infos"] = [{"item_variation_vendor_info_data": info}]
    data.update(extra)
    return {"type": "ITEM_VARIATION", "id": variation_id, "item_variation_data": data}


def make_item(item_id, name, variations=None, category_ids=None, categories=None, image_ids=None, **extra):
    item_data: Dict[str, Any] = {"name": name, "variations": variations or []}
    if category_ids is not None:
        item_data["category_ids"] = category_ids
    if categories is not None:
        item_data["categories"] = [{"id": c} for c in categories]
    if image_ids is not None:
        item_data["image_ids"] = image_ids
    item_data.update(extra)
    return {"type": "ITEM", "id": item_id, "is_deleted": False, "version": 1, "item_data": item_data}


def make_category(category_id, name):
    return {"type": "CATEGORY", "id": category_id, "is_deleted": False, "category_data": {"name": name}}
