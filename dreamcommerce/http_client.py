from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import requests

from .config import Config
from .exceptions import MalformedResult, MethodNotSupported, RequestFailed
from .headers import ParsedHeaders, parse_headers
from .retry import RetryLoop
from .urls import merge_query

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")
BODY_METHODS = ("POST", "PUT")

_HTTP_VERSIONS = {10: "1.0", 11: "1.1", 20: "2"}


@dataclass
class HttpResponse:
    data: Any
    headers: Dict[str, str] = field(default_factory=dict)
    status_line: Optional[str] = None
    status_code: Optional[int] = None
    bare_lines: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"data": self.data, "headers": self.headers}


def header_lines(resp: requests.Response) -> List[str]:
    """Reconstrói as linhas de cabeçalho (status + ``Nome: Valor``) de uma resposta."""
    raw_version = getattr(getattr(resp, "raw", None), "version", None)
    version = _HTTP_VERSIONS.get(raw_version, "1.1")
    status = f"HTTP/{version} {resp.status_code} {resp.reason or ''}".rstrip()
    return [status] + [f"{k}: {v}" for k, v in resp.headers.items()]


class HttpClient:
    """Executor de requisições JSON com repetição guiada por ``Retry-After``.

    Cada chamada tem seu próprio contador de tentativas, iniciado em
    ``retry_limit``. Falhas sem ``Retry-After`` não são repetidas.
    """

    def __init__(
        self,
        cfg: Optional[Config] = None,
        *,
        session: Optional[requests.Session] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.cfg = cfg or Config()
        self.retry_limit = self.cfg.retry_limit
        self.timeout = self.cfg.timeout
        self.sleep = sleep or time.sleep
        self.session = session or requests.Session()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def get(self, url: str, query=None, headers=None) -> HttpResponse:
        return self.perform("GET", url, None, query, headers)

    def post(self, url: str, body=None, query=None, headers=None) -> HttpResponse:
        return self.perform("POST", url, body, query, headers)

    def put(self, url: str, body=None, query=None, headers=None) -> HttpResponse:
        return self.perform("PUT", url, body, query, headers)

    def delete(self, url: str, query=None, headers=None) -> HttpResponse:
        return self.perform("DELETE", url, None, query, headers)

    def perform(
        self,
        method: str,
        url: str,
        body: Optional[Mapping[str, Any]] = None,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HttpResponse:
        """Executa uma operação HTTP completa.

        Levanta ``MethodNotSupported`` antes de qualquer I/O se o método não for
        GET/POST/PUT/DELETE; ``RequestFailed`` ou ``QuotaExceeded`` se a
        requisição não completar; ``MalformedResult`` se o corpo não for JSON.
        """
        method_name = (method or "").upper()
        if method_name not in SUPPORTED_METHODS:
            raise MethodNotSupported(f"Método não suportado: {method!r}")

        target = merge_query(url, query)
        data = dict(body or {}) if method_name in BODY_METHODS else None
        # padrões do Config por requisição; a sessão do chamador não é alterada
        extra_headers = {**self.cfg.headers, **(headers or {})}

        loop = RetryLoop(self.retry_limit, sleep=self.sleep)
        resp, parsed = loop.run(lambda: self._attempt(method_name, target, data, extra_headers))
        return self._process(resp, parsed)

    def _attempt(
        self,
        method: str,
        url: str,
        data: Optional[Dict[str, Any]],
        headers: Optional[Dict[str, str]],
    ) -> Tuple[requests.Response, ParsedHeaders]:
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(
                method, url, data=data, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            failed = getattr(e, "response", None)
            parsed = parse_headers(header_lines(failed)) if failed is not None else None
            raise RequestFailed(
                f"{method} {url}: {e}",
                headers=parsed,
                status_code=failed.status_code if failed is not None else None,
            ) from e

        parsed = parse_headers(header_lines(resp))
        # corpo vazio conta como falha, mesmo com status 2xx
        if resp.status_code >= 400 or not resp.content:
            raise RequestFailed(
                f"{method} {url} falhou", headers=parsed, status_code=resp.status_code
            )
        return resp, parsed

    @staticmethod
    def _process(resp: requests.Response, parsed: ParsedHeaders) -> HttpResponse:
        try:
            payload = json.loads(resp.content)
        except ValueError as e:
            raise MalformedResult(headers=parsed, status_code=resp.status_code) from e
        if not payload:
            raise MalformedResult(headers=parsed, status_code=resp.status_code)

        return HttpResponse(
            data=payload,
            headers=parsed.headers,
            status_line=parsed.status_line,
            status_code=parsed.status_code,
            bare_lines=parsed.bare_lines,
        )
