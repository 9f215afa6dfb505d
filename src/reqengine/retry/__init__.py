r"""Retry decisions and backoff delays.

Public API:
    - RetryContext: Description of a failed attempt
    - RetryPolicy: Abstract decision function
    - DefaultRetryPolicy: Policy driven by the descriptor's retry limits
    - BackoffRetryPolicy: Configurable backoff, jitter and Retry-After policy
    - NeverRetryPolicy: Policy denying every retry
"""

from __future__ import annotations

__all__ = [
    "BackoffRetryPolicy",
    "ConstantBackoff",
    "DefaultRetryPolicy",
    "ExponentialBackoff",
    "LinearBackoff",
    "NeverRetryPolicy",
    "RetryContext",
    "RetryPolicy",
    "parse_retry_after",
]

from reqengine.retry.backoff import ConstantBackoff, ExponentialBackoff, LinearBackoff
from reqengine.retry.context import RetryContext
from reqengine.retry.policy import (
    BackoffRetryPolicy,
    DefaultRetryPolicy,
    NeverRetryPolicy,
    RetryPolicy,
)
from reqengine.retry.retry_after import parse_retry_after
