"""
Test doubles for the provider token/profile endpoints.

Usage:
    fake = FakeProvider(token_body={"access_token": "gho_x"}, profile_body={...})
    install_fake_provider(monkeypatch, fake)
    ... exercise routes ...
    assert fake.calls == [...]
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, *, invalid_json: bool = False):
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._body


DEFAULT_PROFILE = {
    "login": "octocat",
    "name": "The Octocat",
    "avatar_url": "https://avatars.example/octocat.png",
    "email": "octocat@example.com",
}


class FakeProvider:
    def __init__(
        self,
        *,
        token_body: Optional[Dict[str, Any]] = None,
        profile_body: Optional[Dict[str, Any]] = None,
        profile_status: int = 200,
        token_response: Optional[FakeResponse] = None,
    ):
        self.token_body = token_body if token_body is not None else {"access_token": "gho_test_token", "token_type": "bearer"}
        self.profile_body = profile_body if profile_body is not None else dict(DEFAULT_PROFILE)
        self.profile_status = profile_status
        self.token_response = token_response
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append(("POST", url, {"json": json, "headers": headers, "timeout": timeout}))
        return self.token_response or FakeResponse(200, self.token_body)

    def get(self, url, headers=None, timeout=None):
        self.calls.append(("GET", url, {"headers": headers, "timeout": timeout}))
        return FakeResponse(self.profile_status, self.profile_body)

    @property
    def methods(self) -> List[str]:
        return [method for method, _url, _kw in self.calls]


def _no_network(*args, **kwargs):
    raise AssertionError("unexpected outbound HTTP call in test")


def install_fake_provider(monkeypatch: pytest.MonkeyPatch, fake: FakeProvider) -> FakeProvider:
    """Route provider calls to `fake` and fail on any other outbound request."""
    from devnotes.identity_access import provider

    monkeypatch.setattr(provider, "http_post", fake.post)
    monkeypatch.setattr(provider, "http_get", fake.get)
    for name in ("get", "post", "put"):
        monkeypatch.setattr(requests, name, _no_network)
    return fake
