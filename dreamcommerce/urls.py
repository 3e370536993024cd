from __future__ import annotations

from typing import Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def merge_query(url: str, query: Optional[Mapping[str, object]] = None) -> str:
    """Mescla ``query`` na query string já existente em ``url``.

    Em caso de chave repetida, o valor passado pelo chamador prevalece.
    """
    if not query:
        return url

    parts = urlsplit(url)
    if not parts.query:
        sep = "" if url.endswith("?") else "?"
        if parts.fragment:
            base = urlunsplit(parts._replace(fragment=""))
            return f"{base}{sep}{urlencode(query)}#{parts.fragment}"
        return f"{url}{sep}{urlencode(query)}"

    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    params.update(query)
    return urlunsplit(parts._replace(query=urlencode(params)))
