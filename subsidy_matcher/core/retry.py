"""Retry-Logik für Katalog- und Audit-I/O.

The AI refinement call is deliberately not wrapped here: it is made exactly
once per matching operation and failures degrade to the pre-score ranking.
"""

import logging

import httpx
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from subsidy_matcher.core.logging import get_logger

logger = get_logger("core.retry")

# Decorator für Katalog-Queries
# - Max 3 Versuche
# - Exponential Backoff: 0.5s, 1s ... (max 4s)
# - Retry bei Verbindungsfehlern der Datenbank
db_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception_type((OperationalError, PoolTimeoutError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)

# Decorator für den REST Audit-Log
# - Max 3 Versuche, kurzer Backoff (Audit ist best-effort)
# - Retry bei Timeouts und Verbindungsfehlern
http_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.TransportError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
