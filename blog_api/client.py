"""
Python client for the Blog API.

Authentication state lives in an explicit AuthContext passed to the client,
never in module globals. Its lifecycle:

  write — set(token)       after signup / signin
  read  — headers()        attached to every protected call
  clear — clear()          on signout, or when the API answers 401

Usage:
    auth = AuthContext()
    with httpx.Client(base_url="http://localhost:8000") as http:
        api = BlogClient(http, auth)
        api.signin("ann@example.com", "pw")
        api.create_post("Title", "Body", published=True)
"""
from dataclasses import dataclass
from typing import Any, Optional

import httpx


class BlogApiError(Exception):
    def __init__(self, status_code: int, message: str, details: Optional[str] = None) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details


@dataclass
class AuthContext:
    token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def set(self, token: str) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None

    def headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


class BlogClient:
    def __init__(
        self,
        http: httpx.Client,
        auth: Optional[AuthContext] = None,
        prefix: str = "/api/v1",
    ) -> None:
        self.http = http
        self.auth = auth if auth is not None else AuthContext()
        self.prefix = prefix.rstrip("/")

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = {**self.auth.headers(), **kwargs.pop("headers", {})}
        resp = self.http.request(method, f"{self.prefix}{path}", headers=headers, **kwargs)
        if resp.status_code == 401:
            self.auth.clear()
        if resp.is_error:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            raise BlogApiError(
                resp.status_code,
                body.get("error", resp.reason_phrase),
                body.get("details"),
            )
        return resp.json()

    # ── Accounts ──────────────────────────────────────────────────────────

    def signup(self, email: str, password: str, name: str) -> str:
        data = self._request(
            "POST", "/signup", json={"email": email, "password": password, "name": name}
        )
        self.auth.set(data["token"])
        return data["token"]

    def signin(self, email: str, password: str) -> str:
        data = self._request("POST", "/signin", json={"email": email, "password": password})
        self.auth.set(data["token"])
        return data["token"]

    def signout(self) -> None:
        self.auth.clear()

    def profile(self) -> dict:
        return self._request("GET", "/user/profile")

    def update_profile(self, name: str, email: str) -> dict:
        return self._request("PUT", "/user/update", json={"name": name, "email": email})

    def change_password(self, current_password: str, new_password: str) -> dict:
        return self._request(
            "PUT",
            "/user/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    # ── Posts ─────────────────────────────────────────────────────────────

    def create_post(
        self,
        title: str,
        content: str,
        published: bool = False,
        image_url: Optional[str] = None,
    ) -> dict:
        body = {"title": title, "content": content, "published": published}
        if image_url:
            body["imageUrl"] = image_url
        return self._request("POST", "/blog", json=body)

    def update_post(self, post_id: str, **changes) -> dict:
        body = {}
        for key, value in changes.items():
            body["imageUrl" if key == "image_url" else key] = value
        return self._request("PUT", f"/blog/{post_id}", json=body)

    def delete_post(self, post_id: str) -> dict:
        return self._request("DELETE", f"/blog/{post_id}")

    def get_post(self, post_id: str) -> dict:
        return self._request("GET", f"/blog/{post_id}")

    def list_posts(self, limit: int = 50, offset: int = 0) -> list[dict]:
        return self._request("GET", "/blogs", params={"limit": limit, "offset": offset})

    def recent_posts(self) -> list[dict]:
        return self._request("GET", "/blogs/recent")

    # ── Comments & likes ──────────────────────────────────────────────────

    def add_comment(self, post_id: str, content: str) -> dict:
        return self._request("POST", f"/blog/{post_id}/comment", json={"content": content})

    def list_comments(self, post_id: str) -> list[dict]:
        return self._request("GET", f"/blog/{post_id}/comments")

    def like(self, post_id: str) -> dict:
        return self._request("POST", f"/blog/{post_id}/like")

    def unlike(self, post_id: str) -> dict:
        return self._request("POST", f"/blog/{post_id}/unlike")

    def like_status(self, post_id: str) -> dict:
        return self._request("GET", f"/blog/{post_id}/like")

    # ── Images ────────────────────────────────────────────────────────────

    def upload_image(self, filename: str, data: bytes, content_type: str) -> str:
        result = self._request(
            "POST", "/upload-image", files={"image": (filename, data, content_type)}
        )
        return result["imageUrl"]
