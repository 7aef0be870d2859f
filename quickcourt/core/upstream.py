import logging
import time
from typing import Callable, Tuple, Type, TypeVar

from quickcourt.config import settings
from quickcourt.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(
    operation: Callable[[], T],
    description: str,
    retry_on: Tuple[Type[BaseException], ...],
    max_retries: int = None,
    retry_delay: float = None,
) -> T:
    """
    Run ``operation`` retrying with exponential backoff.

    After the last failed attempt an UpstreamError is raised; the caller
    never sees the underlying client exception.
    """
    max_retries = max_retries or settings.UPSTREAM_MAX_RETRIES
    retry_delay = settings.UPSTREAM_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay

    for attempt in range(max_retries):
        try:
            return operation()
        except retry_on as e:
            if attempt == max_retries - 1:
                logger.error(f"{description} failed after {max_retries} attempts: {e}")
                raise UpstreamError(f"{description} failed") from e
            logger.warning(f"Retry {attempt + 1}/{max_retries} for {description}: {e}")
            time.sleep(retry_delay * (2 ** attempt))
