"""
Thin REST client for the HMIS API.

Each resource groups the endpoints of one area of the backend and every
method is a single JSON request.  Non-2xx responses raise
:class:`ApiError`; a 401 also drops the stored token so the caller has
to log in again.

Example::

    client = HmisClient()
    client.login("reception1", "123456")
    patient = client.patients.create({"firstName": "Jane", "lastName": "Doe"})
    client.queue.list(servicePoint="cashier")
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class ApiError(Exception):
    """Raised for any non-2xx response."""

    def __init__(self, message: str, status: int, response: Any = None):
        super().__init__(message)
        self.status = status
        self.response = response


def error_message(status: int, body: Any) -> str:
    """Pick the human readable message out of an error body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("error", "message", "msg", "detail"):
            if body.get(key) and not isinstance(body[key], dict):
                return str(body[key])
    return f"HTTP error! status: {status}"


class HmisClient:
    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None, timeout: float = 10.0):
        self.base_url = (base_url or os.getenv("HMIS_API_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self.token = token
        self.timeout = timeout

        self.auth = AuthResource(self)
        self.patients = PatientsResource(self)
        self.departments = Resource(self, "/api/departments")
        self.inventory = InventoryResource(self)
        self.charges = Resource(self, "/api/billing/charges")
        self.invoices = Resource(self, "/api/billing/invoices")
        self.queue = QueueResource(self)
        self.ledger = LedgerResource(self)
        self.vendors = Resource(self, "/api/vendors")
        self.payables = FinanceResource(self, "/api/payables")
        self.receivables = FinanceResource(self, "/api/receivables")
        self.assets = StatsResource(self, "/api/assets")
        self.cash = CashResource(self)
        self.inpatient = WardResource(self, "inpatient")
        self.maternity = MaternityResource(self, "maternity")
        self.icu = WardResource(self, "icu")
        self.theme = ThemeResource(self)

    # -- transport ---------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        # JWTs carry dots, DRF tokens are plain hex keys
        scheme = "Bearer" if self.token.count(".") == 2 else "Token"
        return {"Authorization": f"{scheme} {self.token}"}

    def request(self, method: str, path: str, *, params: Optional[dict] = None, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        response = self.session.request(
            method, url, params=params, json=json, headers=self._headers(), timeout=self.timeout
        )
        try:
            body = response.json() if response.content else None
        except ValueError:
            body = response.text

        if not response.ok:
            if response.status_code == 401:
                self.token = None
            message = error_message(response.status_code, body)
            logger.warning("%s %s -> %s: %s", method, path, response.status_code, message)
            raise ApiError(message, response.status_code, body)
        return body

    def get(self, path: str, **params) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, data: Any = None) -> Any:
        return self.request("POST", path, json=data or {})

    def put(self, path: str, data: Any = None) -> Any:
        return self.request("PUT", path, json=data or {})

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    # -- auth shortcuts ----------------------------------------------------

    def login(self, username: str, password: str) -> dict:
        return self.auth.login(username, password)

    def logout(self) -> None:
        self.auth.logout()


class Resource:
    """CRUD endpoints rooted at ``path``."""

    def __init__(self, client: HmisClient, path: str):
        self.client = client
        self.path = path

    def list(self, **params) -> Any:
        return self.client.get(self.path, **params)

    def get(self, pk) -> Any:
        return self.client.get(f"{self.path}/{pk}")

    def create(self, data: dict) -> Any:
        return self.client.post(self.path, data)

    def update(self, pk, data: dict) -> Any:
        return self.client.put(f"{self.path}/{pk}", data)

    def delete(self, pk) -> Any:
        return self.client.delete(f"{self.path}/{pk}")


class StatsResource(Resource):
    def stats(self) -> Any:
        return self.client.get(f"{self.path}/stats/summary")


class AuthResource:
    def __init__(self, client: HmisClient):
        self.client = client

    def login(self, username: str, password: str) -> dict:
        data = self.client.post("/api/auth/login", {"username": username, "password": password})
        self.client.token = data.get("token")
        self.refresh_token = data.get("jwt_refresh")
        return data

    def me(self) -> dict:
        return self.client.get("/api/auth/me")

    def refresh(self, refresh_token: Optional[str] = None) -> dict:
        return self.client.post("/api/auth/refresh", {"refresh": refresh_token or getattr(self, "refresh_token", None)})

    def logout(self) -> None:
        body = {"refresh": getattr(self, "refresh_token", None)}
        try:
            self.client.post("/api/auth/logout", body)
        finally:
            self.client.token = None


class PatientsResource(Resource):
    def __init__(self, client: HmisClient):
        super().__init__(client, "/api/patients")

    def search(self, term: str, **params) -> Any:
        return self.list(search=term, **params)

    def invoices(self, pk) -> Any:
        return self.client.get(f"{self.path}/{pk}/invoices")


class InventoryResource(Resource):
    def __init__(self, client: HmisClient):
        super().__init__(client, "/api/inventory")
        self.transactions = Resource(client, "/api/inventory/transactions")

    def summary(self) -> Any:
        return self.client.get(f"{self.path}/summary")

    def adjust(self, item_id, adjustment_type: str, quantity: int, reason: str, **extra) -> Any:
        data = {"itemId": item_id, "adjustmentType": adjustment_type, "quantity": quantity, "reason": reason}
        data.update(extra)
        return self.transactions.create(data)


class QueueResource(Resource):
    def __init__(self, client: HmisClient):
        super().__init__(client, "/api/queue")

    def set_status(self, pk, status: str, reason: Optional[str] = None) -> Any:
        data = {"status": status}
        if reason:
            data["reason"] = reason
        return self.client.put(f"{self.path}/{pk}/status", data)

    def call_next(self, service_point: str) -> Any:
        return self.client.post(f"{self.path}/call-next", {"servicePoint": service_point})

    def archive(self, pk) -> Any:
        return self.client.post(f"{self.path}/{pk}/archive")

    def archive_completed(self, service_point: Optional[str] = None) -> Any:
        return self.client.post(f"{self.path}/archive-completed", {"servicePoint": service_point})

    def history(self, **params) -> Any:
        return self.client.get(f"{self.path}/history", **params)

    def stats(self, service_point: Optional[str] = None) -> Any:
        return self.client.get(f"{self.path}/stats", servicePoint=service_point)


class LedgerResource:
    def __init__(self, client: HmisClient):
        self.accounts = Resource(client, "/api/ledger/accounts")
        self.transactions = Resource(client, "/api/ledger/transactions")


class FinanceResource(StatsResource):
    def pay(self, pk, amount, payment_date: Optional[str] = None) -> Any:
        data = {"amount": str(amount)}
        if payment_date:
            data["paymentDate"] = payment_date
        return self.client.post(f"{self.path}/{pk}/payment", data)


class CashResource(Resource):
    def __init__(self, client: HmisClient):
        super().__init__(client, "/api/cash/transactions")

    def accounts(self, **params) -> Any:
        return self.client.get("/api/cash/accounts", **params)

    def stats(self) -> Any:
        return self.client.get("/api/cash/stats/summary")


class WardResource:
    """Admissions and beds of one ward family (inpatient, maternity or icu)."""

    def __init__(self, client: HmisClient, kind: str):
        self.client = client
        self.admissions = Resource(client, f"/api/{kind}/admissions")
        self.beds = Resource(client, "/api/icu/beds" if kind == "icu" else "/api/inpatient/beds")
        self.wards = Resource(client, "/api/inpatient/wards")

    def admit(self, data: dict) -> Any:
        return self.admissions.create(data)

    def discharge(self, pk, discharge_date: Optional[str] = None) -> Any:
        data = {"dischargeDate": discharge_date} if discharge_date else {}
        return self.client.post(f"{self.admissions.path}/{pk}/discharge", data)


class MaternityResource(WardResource):
    def __init__(self, client: HmisClient, kind: str):
        super().__init__(client, kind)
        self.deliveries = Resource(client, "/api/maternity/deliveries")


class ThemeResource:
    def __init__(self, client: HmisClient):
        self.client = client

    def contrast(self, foreground: str, background: str = "#ffffff") -> Any:
        return self.client.get("/api/theme/contrast", foreground=foreground, background=background)

    def palettes(self, base: str) -> Any:
        return self.client.get("/api/theme/palettes", base=base)
