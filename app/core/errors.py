class NewsScraperError(Exception):
    def __init__(self, message: str = "An unexpected error occurred") -> None:
        self.message = message
        super().__init__(message)

class FetchError(NewsScraperError):
    pass

class ExtractionError(NewsScraperError):
    pass

class QueryError(NewsScraperError):
    pass

class ScrapeFailedError(NewsScraperError):
    # cause is the fetch/extraction error the client gets to see
    def __init__(self, message: str, cause: Exception) -> None:
        super().__init__(message)
        self.cause = cause
