import logging
import time
from functools import wraps

import pika

__all__ = [
    'get_backoff_wait',
    'retry_on_connection_error',
]


def get_backoff_wait(num_failures, min_wait, max_wait):
    """Return the number of seconds to wait after `num_failures` consecutive failures."""

    if num_failures < 1:
        return 0.0
    return min(max_wait, min_wait * 2 ** (num_failures - 1))


def retry_on_connection_error(retries=None, min_wait=0.5, max_wait=30.0, should_stop=None):
    """Return function decorator that executes the function again in case
    of a `pika.exceptions.AMQPConnectionError`.

    :param retries: The maximal number of retries, `None` means "retry forever"
    :param min_wait: The number of seconds to wait before the first retry
    :param max_wait: The maximal number of seconds to wait between retries
    :param should_stop: An optional function without arguments. If it
      returns `True`, the last error is re-raised without further retries.
    """

    def decorator(action):
        """Function decorator that retries `action` in case of a connection error."""

        @wraps(action)
        def f(*args, **kwargs):
            logger = logging.getLogger(__name__)
            num_failures = 0
            while True:
                try:
                    return action(*args, **kwargs)
                except pika.exceptions.AMQPConnectionError as e:
                    num_failures += 1
                    if retries is not None and num_failures > retries:
                        raise
                    if should_stop is not None and should_stop():
                        raise
                    wait_seconds = get_backoff_wait(num_failures, min_wait, max_wait)
                    logger.warning('Connection attempt %i failed (%s), retrying in %.1f seconds.',
                                   num_failures, e, wait_seconds)
                time.sleep(wait_seconds)

        return f

    return decorator
