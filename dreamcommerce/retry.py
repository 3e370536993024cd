from __future__ import annotations

import enum
import logging
import time
from typing import Callable, List, Optional, TypeVar

from .exceptions import QuotaExceeded, RequestFailed
from .headers import retry_after_seconds

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_LIMIT = 5


class RetryState:
    """Contador de novas tentativas de uma chamada."""

    def __init__(self, limit: int = DEFAULT_RETRY_LIMIT):
        self.limit = limit
        self.remaining = limit

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    @property
    def used(self) -> int:
        return self.limit - self.remaining

    def consume(self) -> None:
        self.remaining -= 1


class RetryLoop:
    """Executa uma tentativa repetidamente enquanto o servidor pedir ``Retry-After``.

    A tentativa é qualquer callable que retorna o resultado ou levanta
    ``RequestFailed``; só falhas cujos cabeçalhos trazem ``Retry-After`` são
    repetidas. Esgotado o contador, a próxima falha desse tipo vira
    ``QuotaExceeded``. Qualquer outra exceção sobe sem nova tentativa.
    """

    class State(enum.Enum):
        IDLE = "idle"
        ATTEMPTING = "attempting"
        WAITING = "waiting"
        DONE = "done"
        ERROR = "error"

    def __init__(
        self,
        limit: int = DEFAULT_RETRY_LIMIT,
        *,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.counter = RetryState(limit)
        self.sleep = sleep or time.sleep
        self.state = RetryLoop.State.IDLE
        self.attempts = 0
        self.waits: List[float] = []

    def _wait_for(self, exc: RequestFailed) -> Optional[float]:
        if exc.headers is None or exc.headers.retry_after is None:
            return None
        return retry_after_seconds(exc.headers.retry_after)

    def run(self, attempt: Callable[[], T]) -> T:
        while True:
            self.state = RetryLoop.State.ATTEMPTING
            self.attempts += 1
            try:
                result = attempt()
            except RequestFailed as exc:
                delay = self._wait_for(exc)
                if delay is None:
                    self.state = RetryLoop.State.ERROR
                    raise
                if self.counter.exhausted:
                    self.state = RetryLoop.State.ERROR
                    logger.warning(
                        "Desistindo após %d novas tentativas (Retry-After)", self.counter.used
                    )
                    raise QuotaExceeded(
                        headers=exc.headers, status_code=exc.status_code
                    ) from exc
                self.state = RetryLoop.State.WAITING
                self.counter.consume()
                logger.warning(
                    "Servidor pediu espera de %ss (tentativa %d, restam %d)",
                    delay,
                    self.attempts,
                    self.counter.remaining,
                )
                self.sleep(delay)
                self.waits.append(delay)
                continue
            except Exception:
                self.state = RetryLoop.State.ERROR
                raise
            self.state = RetryLoop.State.DONE
            return result
