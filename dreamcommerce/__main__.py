from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from .config import Config
from .exceptions import HttpException
from .http_client import SUPPORTED_METHODS, HttpClient

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


def _pairs(items: List[str], sep: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for it in items or []:
        key, found, value = it.partition(sep)
        if not found or not key.strip():
            raise argparse.ArgumentTypeError(f"Esperado 'chave{sep}valor', recebido: {it!r}")
        out[key.strip()] = value.strip()
    return out


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="dreamcommerce", description="Executa uma requisição na API REST e imprime o JSON"
    )
    ap.add_argument("method", type=str.upper, choices=SUPPORTED_METHODS)
    ap.add_argument("url")
    ap.add_argument("-q", "--query", action="append", default=[], help="parâmetro de query k=v")
    ap.add_argument("-d", "--data", action="append", default=[], help="campo do corpo k=v (POST/PUT)")
    ap.add_argument("-H", "--header", action="append", default=[], help="cabeçalho 'Nome: Valor'")
    ap.add_argument("--retry-limit", type=int, default=None, help="padrão: DREAMCOMMERCE_RETRY_LIMIT")
    ap.add_argument("--show-headers", action="store_true", help="imprime também os cabeçalhos")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    cfg = Config.from_env()
    if args.retry_limit is not None:
        cfg.retry_limit = max(0, args.retry_limit)
    setup_logging("DEBUG" if args.verbose else cfg.log_level)

    try:
        query = _pairs(args.query, "=")
        body = _pairs(args.data, "=")
        headers = _pairs(args.header, ":")
    except argparse.ArgumentTypeError as e:
        ap.error(str(e))

    with HttpClient(cfg) as client:
        try:
            resp = client.perform(args.method, args.url, body, query, headers)
        except HttpException as e:
            print(f"Erro: {e}", file=sys.stderr)
            if e.headers is not None and e.headers.headers:
                print(json.dumps(e.headers.headers, indent=2, ensure_ascii=False), file=sys.stderr)
            return 1

    out = resp.as_dict() if args.show_headers else resp.data
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
