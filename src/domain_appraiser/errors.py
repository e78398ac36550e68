"""Error taxonomy for the appraisal engine.

Every error carries a stable ``code`` and a templated ``user_message`` that
only ever mentions the domain. Upstream text (URLs, JSON bodies, tracebacks)
stays in the exception args for logging and never reaches the message.
"""

import re
from typing import List, Optional, Tuple


class AppraisalError(Exception):
    """Base class for all appraisal errors."""

    code = 'TECHNICAL_ERROR'
    template = 'We could not value {domain} right now. Please try again later.'
    retryable = False

    def __init__(self, detail: str = '', domain: Optional[str] = None):
        super().__init__(detail or self.code)
        self.detail = detail
        self.domain = domain

    @property
    def user_message(self) -> str:
        return self.template.format(domain=self.domain or 'this domain')


class TransportError(AppraisalError):
    """Network failure talking to the inference provider."""

    code = 'UPSTREAM_UNAVAILABLE'
    template = 'The valuation service is unreachable for {domain}. Please try again later.'
    retryable = True


class RemoteTimeoutError(TransportError):
    code = 'UPSTREAM_TIMEOUT'
    template = 'The valuation for {domain} took too long. Please try again.'


class RateLimitError(AppraisalError):
    code = 'RATE_LIMITED'
    template = 'Too many valuation requests. Please wait a moment before valuing {domain} again.'
    retryable = True


class BillingError(AppraisalError):
    code = 'INSUFFICIENT_CREDIT'
    template = 'Valuations are temporarily unavailable. Please try again later.'


class UnprocessableDomainError(AppraisalError):
    code = 'UNPROCESSABLE_DOMAIN'
    template = '{domain} could not be processed by the valuation model.'


class RemoteServiceError(AppraisalError):
    """Provider answered with an error we cannot recover from."""


class ValidationError(AppraisalError):
    """Provider response had no usable market value."""

    code = 'INVALID_RESPONSE'


class ConfigurationError(AppraisalError):
    code = 'CONFIGURATION_ERROR'
    template = 'The appraisal service is not configured correctly.'


class CacheError(AppraisalError):
    code = 'CACHE_ERROR'


class InvalidRequestError(AppraisalError):
    code = 'INVALID_REQUEST'
    template = 'The request is invalid: {domain}'

    @property
    def user_message(self) -> str:
        return self.template.format(domain=self.detail)


class ValuationUnavailableError(AppraisalError):
    """Raised instead of returning a degraded estimate when surfacing is on.

    The local estimate that would have been returned is kept on ``fallback``.
    """

    def __init__(self, code: str, message: str, domain: Optional[str] = None, fallback=None):
        super().__init__(code, domain=domain)
        self.code = code
        self.message = message
        self.fallback = fallback

    @property
    def user_message(self) -> str:
        return self.message


RATE_LIMIT_PATTERNS = ['rate limit', 'ratelimit', 'too many requests', 'throttl', '429', 'quota exceeded']
TIMEOUT_PATTERNS = ['timeout', 'timed out', 'deadline exceeded']
BILLING_PATTERNS = ['insufficient credit', 'billing', 'payment required', '402', 'out of credit']
UNPROCESSABLE_PATTERNS = ['unprocessable', '422', 'invalid domain']

_SIGNATURES = [
    (BillingError, BILLING_PATTERNS),
    (RateLimitError, RATE_LIMIT_PATTERNS),
    (RemoteTimeoutError, TIMEOUT_PATTERNS),
    (UnprocessableDomainError, UNPROCESSABLE_PATTERNS),
]


def matches_any(text: str, patterns: List[str]) -> bool:
    """Case-insensitive substring match; bare status codes must stand alone."""
    text = text.lower()
    for pattern in patterns:
        if pattern.isdigit():
            if re.search(r'\b' + pattern + r'\b', text):
                return True
        elif pattern in text:
            return True
    return False


def _classify(exc: BaseException) -> type:
    if isinstance(exc, AppraisalError):
        return type(exc)
    text = str(exc)
    for error_class, patterns in _SIGNATURES:
        if matches_any(text, patterns):
            return error_class
    if isinstance(exc, TimeoutError):
        return RemoteTimeoutError
    return AppraisalError


def is_retryable(exc: BaseException) -> bool:
    """Retry only rate-limit, throttle, timeout and network failures."""
    if isinstance(exc, AppraisalError):
        return exc.retryable
    return _classify(exc).retryable


# Categories a caller is allowed to see; everything else is a technical error
_USER_FACING = (
    BillingError,
    RateLimitError,
    RemoteTimeoutError,
    UnprocessableDomainError,
    ConfigurationError,
)


def describe_error(exc: BaseException, domain: Optional[str] = None) -> Tuple[str, str]:
    """Map any exception to a stable (code, user message) pair."""
    if isinstance(exc, (ValuationUnavailableError, InvalidRequestError)):
        return exc.code, exc.user_message
    error_class = _classify(exc)
    if error_class not in _USER_FACING:
        error_class = AppraisalError
    return error_class.code, error_class.template.format(domain=domain or 'this domain')
