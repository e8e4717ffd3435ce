import json
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

import pytest
import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront.app.config import Config
from storefront.app.factory import create_app
from storefront.app.common.request_context import current_request_id
from storefront.backend.client import BackendClient

BASE_URL = "http://backend.test"
USER_ID = "68f586a57de06319a5ef9d2b"


def make_response(status: int = 200, body: Any = None, text: Optional[str] = None, reason: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason or {200: "OK", 201: "Created", 400: "Bad Request", 404: "Not Found", 500: "Internal Server Error"}.get(status, "")
    resp.encoding = "utf-8"
    if body is not None:
        resp._content = json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = (text or "").encode("utf-8")
    return resp


@dataclass
class Call:
    method: str
    path: str
    json: Optional[Dict[str, Any]]
    headers: Dict[str, str]
    timeout: Optional[float]


class FakeHttp:
    """Stands in for requests.Session: canned responses per (method, path).

    Queued results are consumed in order; the last one keeps answering.
    An exception instance in the queue is raised instead of returned.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, *results):
        self.routes.setdefault((method, path), []).extend(results)
        return self

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method and c.path == path]

    def request(self, method, url, json=None, headers=None, timeout=None):
        assert url.startswith(BASE_URL), url
        path = url[len(BASE_URL):]
        self.calls.append(Call(method, path, json, dict(headers or {}), timeout))

        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"unexpected backend call {method} {path}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result


def product_json(pid="p1", name="Blue Shirt", price=25000, **extra):
    data = {"_id": pid, "nombre": name, "precio": price}
    data.update(extra)
    return data


def cart_json(user_id=USER_ID, items=None, total=None):
    items = items if items is not None else [
        {"_id": "i1", "product": product_json(), "cantidad": 2, "subtotal": 50000},
        {"_id": "i2", "product": product_json("p2", "Red Hat", 10000), "cantidad": 1, "subtotal": 10000},
    ]
    return {
        "_id": "c1",
        "user": user_id,
        "items": items,
        "total": total if total is not None else sum(i["subtotal"] for i in items),
    }


@pytest.fixture()
def http():
    return FakeHttp()


@pytest.fixture()
def backend(http):
    return BackendClient(BASE_URL, timeout=5, http=http, request_id=current_request_id)


@pytest.fixture()
def app(backend, tmp_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        BACKEND_URL = BASE_URL
        COMMENT_RETRY_BASE_DELAY = 0.0
        SESSION_REVALIDATE_ON_RESTORE = True
        SESSION_FILE = str(tmp_path / "session.json")

    return create_app(TestConfig, backend=backend)


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def logged_in(client, http):
    http.add("GET", f"/users/{USER_ID}", make_response(200, {"_id": USER_ID}))
    r = client.post("/api/auth/login", json={"user_id": USER_ID})
    assert r.status_code == 200
    return client
