"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RuleEngineFault(DomainException):
    """Affordability metrics could not be calculated"""

    pass


class RiskProviderUnavailable(DomainException):
    """Risk model is unreachable, unconfigured, or failed mid-call"""

    cause = "provider_error"

    def __init__(self, message: str, cause: str | None = None):
        super().__init__(message)
        if cause is not None:
            self.cause = cause


class RiskQuotaExceeded(RiskProviderUnavailable):
    """Risk model rejected the call for capacity or billing reasons"""

    cause = "quota_exceeded"


class MalformedRiskResponse(RiskProviderUnavailable):
    """Risk model replied with something other than the expected JSON schema"""

    cause = "malformed_response"
