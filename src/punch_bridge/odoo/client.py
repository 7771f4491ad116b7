from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from ..core.exceptions import BackendError, BackendUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OdooConfig:
    url: str
    database: str
    uid: int
    password: str
    timeout: float = 30.0


class OdooClient:
    """Minimal JSON-RPC client for Odoo's ``object.execute_kw`` service."""

    def __init__(self, config: OdooConfig, *, session: Optional[requests.Session] = None):
        self._config = config
        self._session = session or requests.Session()
        self._ids = itertools.count(1)

    def execute_kw(self, model: str, method: str, args: list, kwargs: Optional[dict] = None) -> Any:
        rpc_args = [self._config.database, self._config.uid, self._config.password, model, method, args]
        if kwargs:
            rpc_args.append(kwargs)

        body = {
            "jsonrpc": "2.0",
            "method": "call",
            "params": {"service": "object", "method": "execute_kw", "args": rpc_args},
            "id": next(self._ids),
        }
        logger.debug("Odoo RPC request %s.%s args=%s kwargs=%s", model, method, args, kwargs)

        try:
            response = self._session.post(
                self._config.url,
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=self._config.timeout,
            )
        except requests.RequestException as e:
            raise BackendUnavailable(f"Odoo unreachable: {e}") from e

        if response.status_code >= 500:
            raise BackendUnavailable(f"Odoo returned HTTP {response.status_code}")
        if response.status_code >= 400:
            raise BackendError(f"Odoo returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise BackendUnavailable("Odoo returned a non-JSON body") from e

        logger.debug("Odoo RPC response %s.%s: %s", model, method, data)
        if data.get("error"):
            error = data["error"]
            message = (error.get("data") or {}).get("message") or error.get("message") or json.dumps(error)
            raise BackendError(f"Odoo {model}.{method} failed: {message}")
        return data.get("result")

    def search_read(
        self,
        model: str,
        domain: list,
        fields: list[str],
        *,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        kwargs: dict = {"fields": fields}
        if order:
            kwargs["order"] = order
        if limit:
            kwargs["limit"] = int(limit)
        return self.execute_kw(model, "search_read", [domain], kwargs) or []

    def create(self, model: str, values: dict) -> int:
        result = self.execute_kw(model, "create", [values])
        if isinstance(result, list):
            result = result[0] if result else None
        if result is None:
            raise BackendError(f"Odoo {model}.create returned no id")
        return int(result)

    def write(self, model: str, ids: list[int], values: dict) -> bool:
        return bool(self.execute_kw(model, "write", [list(ids), values]))
