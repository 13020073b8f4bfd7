from __future__ import annotations


class WikiApiError(Exception):
    pass


class MissingEndpointError(WikiApiError, ValueError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "No api_url given and no endpoint_resolver produced one"
        )


class ApiError(WikiApiError):
    def __init__(self, code: str, info: str | None = None) -> None:
        self.code = code
        self.info = info
        text = f"{code}: {info}" if info else code
        super().__init__(text)


class ResponseDecodeError(WikiApiError):
    pass


class TransientError(WikiApiError):
    pass


class RequestTimeoutError(TransientError):
    pass


class ConnectionFailedError(TransientError):
    pass


class HttpError(TransientError):
    def __init__(self, status_code: int, url: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.url = url
        text = message or f"Unexpected HTTP status {status_code} for URL: {url}"
        super().__init__(text)
