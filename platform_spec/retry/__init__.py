"""Retry policy, error classification, and the retry driver."""

from platform_spec.retry.classifier import (
    ErrorClassifier,
    always_retry,
    is_non_retryable,
    is_retryable,
    never_retry,
)
from platform_spec.retry.executor import retry
from platform_spec.retry.policy import RetryPolicy, Strategy

__all__ = [
    "ErrorClassifier",
    "RetryPolicy",
    "Strategy",
    "always_retry",
    "is_non_retryable",
    "is_retryable",
    "never_retry",
    "retry",
]
