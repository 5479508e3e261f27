class AppError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class UpstreamUnavailableError(AppError):
    """The data provider could not be reached or answered with an error."""

    def __init__(self, source: str, ticker: str, reason: str = ""):
        self.source = source
        self.ticker = ticker
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"{source} unavailable for {ticker}{detail}", code="UPSTREAM_UNAVAILABLE"
        )


class UpstreamMalformedError(AppError):
    """The data provider answered, but not in the shape we expect."""

    def __init__(self, source: str, ticker: str, reason: str):
        self.source = source
        self.ticker = ticker
        super().__init__(reason, code="UPSTREAM_MALFORMED")
