from abc import ABC
from typing import Optional

import httpx
from fastapi.encoders import jsonable_encoder


class BaseHttpRepository(ABC):
    """
    Shared httpx client lifecycle.
    Callers may inject a client (tests pass one built on httpx.MockTransport).
    """

    def __init__(self, client: Optional[httpx.Client] = None, *, timeout: float = 30.0):
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

    def _encode(self, payload: dict) -> dict:
        """
        Ensure outbound JSON never carries:
        - date / datetime
        - Enum members
        - Pydantic models
        """
        return jsonable_encoder(payload)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
