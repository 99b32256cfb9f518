"""
Session handling for API consumers.

The backend uses fastapi-users JWT auth: POST /auth/jwt/login with form
fields `username` and `password` returns an `access_token`. A
SessionTokenSource is the callable the API client asks for a token before
every request; it returns None when there is no usable session.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import requests

logger = logging.getLogger(__name__)

TokenSource = Callable[[], Optional[str]]


class SessionTokenSource:
    def __init__(
        self,
        base_url: str,
        email: Optional[str] = None,
        password: Optional[str] = None,
        *,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        self.base_url = base_url
        self.email = email
        self.password = password
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def login(self) -> Optional[str]:
        """Exchange the stored credentials for a bearer token. None if rejected."""
        if not self.email or not self.password:
            return None
        url = f"{self.base_url.rstrip('/')}/auth/jwt/login"
        resp = self.session.post(
            url,
            data={"username": self.email, "password": self.password},
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        if resp.status_code >= 400:
            logger.warning("Login for %s failed (%s)", self.email, resp.status_code)
            self.token = None
            return None
        self.token = resp.json().get("access_token") or None
        return self.token

    def logout(self) -> None:
        self.token = None

    def __call__(self) -> Optional[str]:
        if self.token:
            return self.token
        return self.login()
