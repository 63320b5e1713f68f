"""
Request input snapshot consumed by the request-sourced repository operations.
"""

from copy import deepcopy
from typing import Any, Dict, Iterable, Mapping, Optional
from urllib.parse import urlencode

from fastapi import Request, status
from starlette.datastructures import UploadFile

from repokit.exceptions.handler import BusinessException

from .attributes import data_get, data_has, forget


class InputBag:
    """Key-values, uploaded files and location of one request."""

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
        path: str = "/",
        query: Optional[Mapping[str, Any]] = None,
    ):
        self._data: Dict[str, Any] = deepcopy(dict(data or {}))
        self._files: Dict[str, Any] = dict(files or {})
        self.path = path
        self.query: Dict[str, Any] = dict(query or {})

    @classmethod
    async def from_request(cls, request: Request) -> "InputBag":
        """Snapshot query params plus form or JSON body; body keys win."""
        data: Dict[str, Any] = {}
        for key in request.query_params.keys():
            values = request.query_params.getlist(key)
            data[key] = values if len(values) > 1 else values[0]
        files: Dict[str, Any] = {}

        content_type = request.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            body = await request.json()
            if isinstance(body, dict):
                data.update(body)
            elif isinstance(body, list):
                # A top-level list addresses records by index ("0.name")
                data.update({str(index): item for index, item in enumerate(body)})
            elif body is not None:
                raise BusinessException(
                    "The JSON body must be an object or a list.",
                    status_code=status.HTTP_400_BAD_REQUEST,
                    code=400,
                )
        elif content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
            form = await request.form()
            for key in form.keys():
                values = form.getlist(key)
                uploads = [value for value in values if isinstance(value, UploadFile)]
                if uploads:
                    files[key] = uploads if len(uploads) > 1 else uploads[0]
                    continue
                data[key] = values if len(values) > 1 else values[0]

        return cls(
            data=data,
            files=files,
            path=request.url.path,
            query=dict(request.query_params),
        )

    def all(self) -> Dict[str, Any]:
        return deepcopy(self._data)

    def except_(self, keys: Iterable[str]) -> Dict[str, Any]:
        """All input without the given dot paths."""
        return forget(self._data, keys)

    def input(self, key: str, default: Any = None) -> Any:
        return deepcopy(data_get(self._data, key, default))

    def has(self, key: str) -> bool:
        return data_has(self._data, key)

    def file(self, key: str) -> Any:
        return self._files.get(key)

    def replace(self, data: Mapping[str, Any]) -> "InputBag":
        self._data = deepcopy(dict(data))
        return self

    def current_page(self, page_name: str = "page") -> int:
        value = self.query.get(page_name, self.input(page_name, 1))
        try:
            page = int(value)
        except (TypeError, ValueError):
            return 1
        return page if page >= 1 else 1

    def query_without(self, *keys: str) -> Dict[str, Any]:
        return {key: value for key, value in self.query.items() if key not in keys}

    def query_string(self) -> str:
        return urlencode(self.query, doseq=True)

    def __repr__(self) -> str:
        return f"InputBag(path={self.path!r}, keys={sorted(self._data)})"
