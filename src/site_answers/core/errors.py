from __future__ import annotations


class SiteAnswersError(RuntimeError):
    pass


class IndexNotReadyError(SiteAnswersError):
    def __init__(self, message: str = "Index not ready. Run ingest first.") -> None:
        super().__init__(message)


class SnapshotFormatError(SiteAnswersError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not parse snapshot {path}: {reason}")
        self.path = path
        self.reason = reason


class IngestError(SiteAnswersError):
    pass


class FetchError(SiteAnswersError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
