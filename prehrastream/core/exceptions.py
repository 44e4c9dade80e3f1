# Base exception for every pipeline error
class PrehraStreamError(Exception):
    pass


# External identifier does not have the tt + 7-8 digits shape
class InvalidIdentifier(PrehraStreamError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Invalid identifier: {identifier!r}")


# No title found for the identifier in any locale
class MetadataNotFound(PrehraStreamError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"No metadata for {identifier}")


# HTTP request failed, timed out or returned a non-200 status
class FetchFailure(PrehraStreamError):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Fetch failed for {url}: {reason}")


# Expected markup or embedded structure is missing or malformed
class ParseFailure(PrehraStreamError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
