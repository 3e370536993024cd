from __future__ import annotations

import math
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, Iterable, List, Optional

_STATUS_RE = re.compile(r"^HTTP/\d(?:\.\d)?\s+(\d{3})")

# maior espera aceita por time.sleep em qualquer plataforma
MAX_RETRY_AFTER = float(min(threading.TIMEOUT_MAX, 2**31 - 1))


@dataclass
class ParsedHeaders:
    """Cabeçalhos de resposta separados em linha de status e pares chave/valor.

    Linhas sem ``:`` não entram no mapeamento: a primeira vira ``status_line``
    e as demais ficam em ``bare_lines``, na ordem recebida.
    """

    status_line: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    bare_lines: List[str] = field(default_factory=list)

    @property
    def status_code(self) -> Optional[int]:
        if not self.status_line:
            return None
        m = _STATUS_RE.match(self.status_line)
        return int(m.group(1)) if m else None

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        # nomes de cabeçalho não diferenciam maiúsculas
        if name in self.headers:
            return self.headers[name]
        lname = name.lower()
        for k, v in self.headers.items():
            if k.lower() == lname:
                return v
        return default

    @property
    def retry_after(self) -> Optional[str]:
        # "0" não pede espera: a falha segue como definitiva
        value = (self.get("Retry-After") or "").strip()
        if not value or value == "0":
            return None
        return value


def parse_headers(lines: Iterable[str]) -> ParsedHeaders:
    out = ParsedHeaders()
    for line in lines:
        key, sep, value = line.partition(":")
        if not sep:
            bare = line.strip()
            if out.status_line is None:
                out.status_line = bare
            else:
                out.bare_lines.append(bare)
            continue
        out.headers[key.strip()] = value.strip()
    return out


def _clamp(seconds: float) -> Optional[float]:
    if math.isnan(seconds) or math.isinf(seconds):
        return None
    return min(max(0.0, seconds), MAX_RETRY_AFTER)


def retry_after_seconds(value: str, *, now: Optional[datetime] = None) -> Optional[float]:
    """Converte um valor de ``Retry-After`` em segundos de espera.

    Aceita inteiro (forma usual), decimal ou data HTTP. O resultado fica entre
    0 e ``MAX_RETRY_AFTER``. Retorna ``None`` se o valor não puder ser
    interpretado ou não for finito.
    """
    text = (value or "").strip()
    if not text:
        return None
    try:
        n = int(text)
    except ValueError:
        pass
    else:
        return float(min(max(0, n), int(MAX_RETRY_AFTER)))
    try:
        return _clamp(float(text))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(text)
    except (TypeError, ValueError, OverflowError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return _clamp((when - now).total_seconds())
