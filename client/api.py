"""MyMixes HTTP client.

Thin synchronous wrapper over the REST API used by the client views. It
keeps the admin bearer token in memory and drops it whenever the server
answers 401.
"""

from typing import Any, Dict, List, Optional, Union
from uuid import UUID
import logging

import httpx

logger = logging.getLogger("mymixes.client")

DEFAULT_BASE_URL = "http://localhost:4000"


class ApiError(Exception):
    """Non-2xx answer or transport failure.

    ``status_code`` is 0 when the server could not be reached.
    """

    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


class MyMixesClient:
    """HTTP client for the MyMixes API.

    Example:
        ```python
        with MyMixesClient("http://localhost:4000") as api:
            api.login("secret")
            recipe = api.create_recipe({...})
        ```
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        http_client: Optional[httpx.Client] = None,
        token: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            base_url=base_url, timeout=httpx.Timeout(timeout)
        )
        self.token = token

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "MyMixesClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, *, auth: bool = False, **kwargs) -> Any:
        headers = {"Accept": "application/json"}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self._http.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"request_failed method={method} path={path} error={e}")
            raise ApiError(0, f"Failed to reach server: {e}") from e

        if response.status_code == 401 and self.token:
            logger.info("auth_token_cleared reason=401")
            self.token = None

        if response.is_error:
            self._raise_for_error(response)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        status_code = response.status_code
        try:
            error = response.json().get("error")
        except ValueError:
            error = None

        if isinstance(error, str):
            message, details = error, None
        elif isinstance(error, list):
            message, details = "Validation failed", error
        else:
            message, details = response.reason_phrase or f"HTTP {status_code}", None

        logger.debug(f"api_error status={status_code} message={message}")
        raise ApiError(status_code, message, details)

    # ------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------

    def fetch_recipes(
        self, query: Optional[str] = None, page: int = 1, size: int = 12
    ) -> Dict[str, Any]:
        """One page of summaries: ``{items, total, page, size}``"""
        params: Dict[str, Any] = {"page": page, "size": size}
        if query:
            params["query"] = query
        return self._request("GET", "/recipes", params=params)

    def fetch_recipe(self, slug: str) -> Dict[str, Any]:
        return self._request("GET", f"/recipes/{slug}")

    def fetch_recipe_by_id(self, recipe_id: int) -> Dict[str, Any]:
        """Full recipe for a QR deep link, which carries only the id.

        Details are served by slug, so the slug is looked up in the listing.
        """
        page = 1
        while True:
            data = self.fetch_recipes(page=page, size=100)
            for item in data["items"]:
                if item["id"] == recipe_id:
                    return self.fetch_recipe(item["slug"])
            if page * data["size"] >= data["total"]:
                raise ApiError(404, "Recipe not found")
            page += 1

    def create_recipe(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/recipes", auth=True, json=data)

    def update_recipe(self, recipe_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/recipes/{recipe_id}", auth=True, json=data)

    def delete_recipe(self, recipe_id: int) -> None:
        self._request("DELETE", f"/recipes/{recipe_id}", auth=True)

    def upload_image(
        self, content: bytes, filename: str = "image.jpg", content_type: str = "image/jpeg"
    ) -> str:
        """Upload a recipe image and return its public URL"""
        data = self._request(
            "POST",
            "/images/upload",
            auth=True,
            files={"image": (filename, content, content_type)},
        )
        return data["imageUrl"]

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    def fetch_reviews(self, recipe_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/recipes/{recipe_id}/reviews")

    def post_review(
        self, recipe_id: int, rating: int, comment: str, name: Optional[str] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"rating": rating, "comment": comment}
        if name:
            body["name"] = name
        return self._request("POST", f"/recipes/{recipe_id}/reviews", auth=True, json=body)

    def post_anonymous_review(
        self, recipe_id: int, token: str, name: str, rating: int, comment: str
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/recipes/{recipe_id}/anonymous-reviews",
            params={"token": token},
            json={"name": name, "rating": rating, "comment": comment},
        )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def login(self, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"password": password})
        self.token = data["token"]
        return data

    def verify_token(self) -> bool:
        """Ask the server whether the stored token is still good"""
        if not self.token:
            return False
        try:
            data = self._request("GET", "/auth/verify", auth=True)
        except ApiError:
            self.token = None
            return False
        return bool(data and data.get("valid"))

    def logout(self) -> None:
        self.token = None

    def is_authenticated(self) -> bool:
        return bool(self.token)

    # ------------------------------------------------------------------
    # QR tokens
    # ------------------------------------------------------------------

    def generate_qr(self, recipe_id: int) -> Dict[str, Any]:
        return self._request("POST", "/qr/generate", auth=True, json={"recipeId": recipe_id})

    def list_qr_tokens(self, recipe_id: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"recipeId": recipe_id} if recipe_id is not None else None
        return self._request("GET", "/qr", auth=True, params=params)

    def qr_counts(self) -> Dict[int, int]:
        data = self._request("GET", "/qr/counts", auth=True)
        # JSON object keys arrive as strings
        return {int(k): v for k, v in data.items()}

    def delete_qr_token(self, token_id: Union[UUID, str]) -> Dict[str, Any]:
        return self._request("DELETE", f"/qr/{token_id}", auth=True)
