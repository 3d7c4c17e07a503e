import logging
import time
from dataclasses import replace
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .config import load_env_config
from .errors import (
    ModelValidationError,
    ParseError,
    TeamCityHTTPError,
    TransportError,
    error_class_for_status,
)
from .resources import BuildTypes, Projects, Server, VcsRoots

T = TypeVar("T", bound=BaseModel)

REST_PREFIX = "/app/rest"
JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"
ENV_OVERRIDES = ("base_url", "username", "password", "token")


class TeamCityClient:
    """
    Shared HTTP client for the TeamCity REST API.
    - Handles auth, base URL and timeouts
    - Sends exactly one request per call; no retries
    - Translates non-2xx responses into typed errors
    - Per-resource operations live on `projects`, `build_types`, `vcs_roots`
      and `server`
    """

    def __init__(
        self,
        base_url: str,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[str] = None,
        timeout_seconds: float = 10.0,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").rstrip("/")

        if not base_url:
            raise ValueError("base_url must be provided.")
        if not token and not (username and password):
            raise ValueError("token or username/password must be provided.")

        self.base_url = base_url
        self.rest_url = f"{base_url}{REST_PREFIX}"
        self.timeout_seconds = timeout_seconds
        self.log = logger or logging.getLogger("teamcity_rest.client")

        headers = {
            "Accept": JSON_CONTENT_TYPE,
            "Content-Type": JSON_CONTENT_TYPE,
        }
        auth: Optional[httpx.Auth] = None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            auth = httpx.BasicAuth(username or "", password or "")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=self.rest_url,
            auth=auth,
            headers=headers,
            timeout=timeout_seconds,
        )

        self.projects = Projects(self)
        self.build_types = BuildTypes(self)
        self.vcs_roots = VcsRoots(self)
        self.server = Server(self)

    @classmethod
    def from_env(cls, **kwargs) -> "TeamCityClient":
        """
        Build a client from TEAMCITY_* environment variables.
        `base_url`, `username`, `password` and `token` passed here take
        precedence over the environment; other kwargs go to the constructor.
        """
        cfg = load_env_config()
        overrides = {k: kwargs.pop(k) for k in ENV_OVERRIDES if k in kwargs}
        if overrides:
            cfg = replace(cfg, **overrides)
        missing = cfg.missing()
        if missing:
            raise ValueError(f"Missing {', '.join(missing)} in environment.")
        return cls(
            cfg.base_url,
            username=cfg.username,
            password=cfg.password,
            token=cfg.token,
            **kwargs,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "TeamCityClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        text: Optional[str] = None,
        accept_text: bool = False,
        resource: Optional[str] = None,
    ) -> Any:
        """
        Core request method.
        - `path` is relative to the REST root ("/projects/id:Foo")
        - `text` sends a text/plain body (TeamCity's single-field updates)
        - Raises the TeamCityHTTPError subclass matching a non-2xx status
        - Raises TransportError on network/timeout errors
        - Raises ParseError if a JSON response isn't valid JSON
        - Returns the parsed JSON dict, or the body text with accept_text=True
        """
        method = method.upper()
        headers: Dict[str, str] = {}
        if text is not None:
            headers["Content-Type"] = TEXT_CONTENT_TYPE
        if accept_text:
            headers["Accept"] = TEXT_CONTENT_TYPE

        start = time.perf_counter()
        try:
            resp = await self.http.request(
                method,
                path,
                params=params,
                json=json,
                content=text.encode("utf-8") if text is not None else None,
                headers=headers or None,
            )
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise TransportError(
                f"Network/timeout error calling {method} {path}: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"HTTPX error calling {method} {path}: {exc}") from exc

        duration_ms = int((time.perf_counter() - start) * 1000)

        # structured-ish log without secrets
        self.log.debug(
            "tc.request",
            extra={
                "resource": resource,
                "method": method,
                "url": str(resp.request.url),
                "status": resp.status_code,
                "duration_ms": duration_ms,
            },
        )

        if resp.status_code < 200 or resp.status_code >= 300:
            raise self._to_http_error(resp, method=method)

        if accept_text:
            return resp.text
        return self._safe_json(resp)

    def _safe_json(self, resp: httpx.Response) -> Dict[str, Any]:
        # Handle empty responses (204 No Content, etc.)
        if not resp.content:
            return {}

        try:
            data = resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise ParseError(
                f"Expected JSON from {resp.request.method} "
                f"{resp.request.url}, got non-JSON body snippet: "
                f"{snippet!r}"
            ) from exc

        if not isinstance(data, dict):
            raise ParseError(
                f"Expected top-level JSON object from "
                f"{resp.request.method} {resp.request.url}, "
                f"got {type(data).__name__}"
            )
        return data

    @staticmethod
    def _error_message(text: str) -> Optional[str]:
        # TeamCity plain-text errors put the useful part on a "Details:" line.
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        for line in lines:
            if line.startswith("Details:"):
                return line[len("Details:") :].strip()
        return lines[0] if lines else None

    def _to_http_error(
        self, resp: httpx.Response, *, method: str
    ) -> TeamCityHTTPError:
        url = str(resp.request.url)
        response_json: Optional[Dict[str, Any]] = None
        response_text: Optional[str] = None
        message = "request failed"

        try:
            parsed = resp.json()
        except ValueError:
            parsed = None

        if isinstance(parsed, dict):
            response_json = parsed
            message = parsed.get("message") or parsed.get("error") or message
        else:
            response_text = (resp.text or "")[:500]
            message = self._error_message(response_text) or message

        error_cls = error_class_for_status(resp.status_code)
        return error_cls(
            status_code=resp.status_code,
            method=method,
            url=url,
            message=message,
            response_json=response_json,
            response_text=response_text,
        )

    async def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        resource: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.request("GET", path, params=params, resource=resource)

    async def post(
        self, path: str, *, json: Dict[str, Any], resource: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.request("POST", path, json=json, resource=resource)

    async def put(
        self, path: str, *, json: Dict[str, Any], resource: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.request("PUT", path, json=json, resource=resource)

    async def delete(self, path: str, *, resource: Optional[str] = None) -> None:
        await self.request("DELETE", path, accept_text=True, resource=resource)

    async def get_text(self, path: str, *, resource: Optional[str] = None) -> str:
        return await self.request("GET", path, accept_text=True, resource=resource)

    async def put_text(
        self, path: str, value: str, *, resource: Optional[str] = None
    ) -> str:
        return await self.request(
            "PUT", path, text=value, accept_text=True, resource=resource
        )

    @staticmethod
    def parse_model(model: Type[T], payload: Dict[str, Any]) -> T:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            raise ModelValidationError(
                f"Response did not match model {model.__name__}: {exc}"
            ) from exc

    async def request_model(
        self, model: Type[T], method: str, path: str, **kwargs: Any
    ) -> T:
        payload = await self.request(method, path, **kwargs)
        return self.parse_model(model, payload)
