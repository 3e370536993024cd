from __future__ import annotations

from typing import Optional

from .headers import ParsedHeaders


class HttpException(Exception):
    """Erro base de uma chamada HTTP.

    ``headers`` guarda os cabeçalhos da última resposta recebida (quando houver),
    para diagnóstico.
    """

    default_message = "Falha na requisição HTTP"

    def __init__(
        self,
        message: str = "",
        *,
        headers: Optional[ParsedHeaders] = None,
        status_code: Optional[int] = None,
    ):
        self.headers = headers
        self.status_code = status_code
        super().__init__(message or self.default_message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.status_code is not None:
            msg = f"{msg} (status {self.status_code})"
        return msg


class MethodNotSupported(HttpException):
    default_message = "Método HTTP não suportado"


class RequestFailed(HttpException):
    default_message = "Requisição falhou"


class QuotaExceeded(HttpException):
    default_message = "Limite de tentativas esgotado (Retry-After)"


class MalformedResult(HttpException):
    default_message = "Resposta não é um JSON válido"
