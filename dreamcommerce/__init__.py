"""Cliente HTTP para a API REST da loja.

Mantemos o ``__init__`` leve: os reexports abaixo são resolvidos sob demanda
via ``__getattr__``, então ``import dreamcommerce`` não puxa ``requests``.
"""

__version__ = "0.1.0"

__all__ = [
    "Config",
    "HttpClient",
    "HttpResponse",
    "HttpException",
    "MethodNotSupported",
    "RequestFailed",
    "QuotaExceeded",
    "MalformedResult",
    "main",
]

_LAZY = {
    "Config": "config",
    "HttpClient": "http_client",
    "HttpResponse": "http_client",
    "HttpException": "exceptions",
    "MethodNotSupported": "exceptions",
    "RequestFailed": "exceptions",
    "QuotaExceeded": "exceptions",
    "MalformedResult": "exceptions",
}


def __getattr__(name):
    if name in _LAZY:
        from importlib import import_module

        return getattr(import_module(f".{_LAZY[name]}", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main(argv=None) -> int:
    """Entrypoint programático da linha de comando."""
    from .__main__ import main as _main  # lazy import

    return _main(argv)
