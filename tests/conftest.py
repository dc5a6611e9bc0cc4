"""Shared fixtures: canned ``requests.Response`` objects and a fake session.

No test touches the network. The session is a ``MagicMock`` whose ``get`` and
``head`` are configured per test.
"""

from __future__ import annotations

from typing import Callable, Optional
from unittest.mock import MagicMock

import pytest
import requests


def _build_response(
    status_code: int = 200,
    text: str = "",
    content_type: str = "text/html; charset=utf-8",
    reason: Optional[str] = None,
    url: str = "",
) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.headers["Content-Type"] = content_type
    resp.reason = reason or ""
    resp.url = url
    return resp


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    return _build_response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)
