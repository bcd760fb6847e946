"""
Circuit breaker exceptions.
"""


class CircuitOpenError(Exception):
    """
    Raised by the gating check when a provider's circuit rejects the call.

    No network I/O has happened when this is raised.

    Attributes:
        provider: Provider name
        retry_in_seconds: Time until the next half-open trial is allowed
            (0 when a half-open trial is already in flight)
    """

    def __init__(self, provider: str, retry_in_seconds: float):
        self.provider = provider
        self.retry_in_seconds = max(0.0, retry_in_seconds)
        if self.retry_in_seconds > 0:
            message = (
                f"Circuit breaker is open for {provider}. "
                f"Retry in {self.retry_in_seconds:.0f}s"
            )
        else:
            message = f"Circuit breaker is half-open for {provider}, trial call in flight"
        super().__init__(message)
