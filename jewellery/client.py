"""Small HTTP client for the storefront API.

Keeps the issued bearer token between calls and turns every envelope into
either ``Ok(value)`` or ``Err(ErrorInfo)``.
"""
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar, Union

import httpx
from jose import jwt, JWTError
from pydantic.alias_generators import to_camel

T = TypeVar("T")


@dataclass(frozen=True)
class ErrorInfo:
    status_code: int
    message: str
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class Err:
    error: ErrorInfo
    ok: bool = False


Result = Union[Ok[Any], Err]


class StorefrontClient:
    def __init__(self, base_url: str = "http://localhost:8000", http: Optional[httpx.Client] = None,
                 timeout: float = 10.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token: Optional[str] = None

    def close(self):
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # --- plumbing ---

    def _request(self, method: str, path: str, **kwargs) -> Result:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = self.http.request(method, f"/api{path}", headers=headers, **kwargs)
        except httpx.HTTPError as e:
            return Err(ErrorInfo(status_code=0, message=f"Network error: {e}"))

        try:
            body = response.json()
        except ValueError:
            return Err(ErrorInfo(status_code=response.status_code, message=response.text or "Invalid response"))

        if response.is_success and body.get("success"):
            return Ok(body.get("data"))
        return Err(ErrorInfo(
            status_code=response.status_code,
            message=body.get("message", ""),
            errors=body.get("errors") or [],
        ))

    # --- session ---

    def register(self, first_name: str, last_name: str, email: str, password: str,
                 phone_number: Optional[str] = None, role: Optional[str] = None) -> Result:
        payload = {"firstName": first_name, "lastName": last_name, "email": email, "password": password}
        if phone_number:
            payload["phoneNumber"] = phone_number
        if role:
            payload["role"] = role
        result = self._request("POST", "/auth/register", json=payload)
        if result.ok:
            self.token = result.value["token"]
        return result

    def login(self, email: str, password: str) -> Result:
        result = self._request("POST", "/auth/login", json={"email": email, "password": password})
        if result.ok:
            self.token = result.value["token"]
        return result

    def logout(self):
        self.token = None

    def current_role(self) -> Optional[str]:
        """Role claim of the stored token, for route gating only (not verified)."""
        if not self.token:
            return None
        try:
            return jwt.get_unverified_claims(self.token).get("role")
        except JWTError:
            return None

    def check_email(self, email: str) -> Result:
        return self._request("GET", "/auth/check-email", params={"email": email})

    # --- catalog ---

    def list_categories(self) -> Result:
        return self._request("GET", "/categories")

    def list_products(self, category_id: Optional[int] = None, search: Optional[str] = None) -> Result:
        params = {}
        if category_id is not None:
            params["categoryId"] = category_id
        if search:
            params["search"] = search
        return self._request("GET", "/products", params=params)

    def get_product(self, product_id: int) -> Result:
        return self._request("GET", f"/products/{product_id}")

    def create_product(self, name: str, price, category_id: int, stock: int = 0,
                       description: Optional[str] = None, image_url: Optional[str] = None) -> Result:
        payload = {"name": name, "price": float(price), "stock": stock, "categoryId": category_id,
                   "description": description, "imageUrl": image_url}
        return self._request("POST", "/products", json=payload)

    def update_product(self, product_id: int, **changes) -> Result:
        """Partial update from snake_case product fields, e.g. ``image_url=None``."""
        payload = {to_camel(key): value for key, value in changes.items()}
        if "price" in payload and payload["price"] is not None:
            payload["price"] = float(payload["price"])
        return self._request("PUT", f"/products/{product_id}", json=payload)

    def delete_product(self, product_id: int) -> Result:
        return self._request("DELETE", f"/products/{product_id}")

    # --- cart ---

    def get_cart(self) -> Result:
        return self._request("GET", "/cart")

    def add_to_cart(self, product_id: int, quantity: int = 1) -> Result:
        return self._request("POST", "/cart/items", json={"productId": product_id, "quantity": quantity})

    def update_cart_item(self, item_id: int, quantity: int) -> Result:
        return self._request("PUT", f"/cart/items/{item_id}", json={"quantity": quantity})

    def remove_cart_item(self, item_id: int) -> Result:
        return self._request("DELETE", f"/cart/items/{item_id}")

    def clear_cart(self) -> Result:
        return self._request("DELETE", "/cart")

    # --- orders ---

    def checkout(self) -> Result:
        return self._request("POST", "/order/checkout")

    def get_orders(self) -> Result:
        return self._request("GET", "/order")

    def get_order(self, order_id: int) -> Result:
        return self._request("GET", f"/order/{order_id}")

    def get_all_orders(self) -> Result:
        return self._request("GET", "/order/all")

    def update_order_status(self, order_id: int, status: str) -> Result:
        return self._request("PUT", f"/order/{order_id}/status", json={"status": status})
