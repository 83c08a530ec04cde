"""Ожидание готовности: фиксированное число попыток с постоянным интервалом."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from n8n_deploy.exceptions import ReadinessTimeoutError

LOGGER = logging.getLogger(__name__)


class PollPolicy(str, Enum):
    """Что делать, когда попытки исчерпаны."""

    FATAL = "fatal"
    ADVISORY = "advisory"


@dataclass(frozen=True, slots=True)
class PollResult:
    """Итог ожидания: успех и число выполненных проверок."""

    succeeded: bool
    attempts: int


def poll_until(
    predicate: Callable[[], bool],
    *,
    attempts: int,
    interval: float,
    policy: PollPolicy,
    description: str,
    initial_delay: float = 0,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """Вызывает predicate до первого True, но не более attempts раз.

    Между неудачными попытками выполняется sleep(interval); после успешной
    и после последней неудачной попытки пауза не делается. При исчерпании
    попыток FATAL поднимает ReadinessTimeoutError, ADVISORY пишет
    предупреждение и возвращает PollResult(succeeded=False).
    """

    if attempts < 1:
        raise ValueError("attempts must be positive")
    if initial_delay > 0:
        LOGGER.info("Waiting %ss before checking: %s", initial_delay, description)
        sleep(initial_delay)

    for attempt in range(1, attempts + 1):
        if predicate():
            LOGGER.debug("%s succeeded on attempt %s/%s", description, attempt, attempts)
            return PollResult(succeeded=True, attempts=attempt)
        LOGGER.info("Waiting for %s... (attempt %s/%s)", description, attempt, attempts)
        if attempt < attempts:
            sleep(interval)

    if policy is PollPolicy.FATAL:
        raise ReadinessTimeoutError(description, attempts)
    LOGGER.warning("%s timed out after %s attempts", description, attempts)
    return PollResult(succeeded=False, attempts=attempts)
