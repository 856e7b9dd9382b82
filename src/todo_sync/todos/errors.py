# todos/errors.py

from __future__ import annotations

"""
Error taxonomy of the remote todo store.

- TransportError: the request never got a response (DNS, refused, timeout).
- StoreError: the remote answered, but not with 200 (or with an unreadable body).
- ContractViolation: the caller did not provide a required identifier.
  Raised before any request is issued.
"""


class TodoStoreError(Exception):
    """Base class for remote todo store failures."""


class TransportError(TodoStoreError):
    pass


class StoreError(TodoStoreError):
    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"Error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ContractViolation(TodoStoreError, ValueError):
    pass
