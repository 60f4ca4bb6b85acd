# storefront/utils/retry.py
import smtplib

import redis
import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential


def _bounded(exceptions, attempts: int, base: float, cap: float):
    # last error is re-raised unchanged, callers map it to their own errors
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=base, min=base, max=cap),
        retry=retry_if_exception_type(exceptions),
    )


def http_retry(attempts: int = 3):
    """Payment gateway calls: only transport errors, never 4xx/5xx answers."""
    return _bounded((requests.ConnectionError, requests.Timeout), attempts, 0.3, 3)


def redis_retry(attempts: int = 3):
    return _bounded(redis.RedisError, attempts, 0.2, 2)


def smtp_retry(attempts: int = 2):
    return _bounded((smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError, TimeoutError), attempts, 0.5, 2)
