from typing import Any


class AnalysisError(Exception):
    """Base for failures surfaced by the AI request pipelines."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message}


class RateLimited(AnalysisError):
    status_code = 429

    def __init__(self, retry_after_seconds: int, message: str):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message, "retryAfterSeconds": self.retry_after_seconds}


class InvalidInput(AnalysisError):
    status_code = 400

    def __init__(self, details: list[dict[str, Any]] | str):
        super().__init__("Invalid request data")
        self.details = details

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message, "details": self.details}


class ProviderError(AnalysisError):
    def __init__(
        self,
        message: str,
        status: int | None = None,
        retryable: bool = False,
        retry_after_seconds: int | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.retryable = retryable
        self.retry_after_seconds = retry_after_seconds

    @property
    def is_rate_limit(self) -> bool:
        return self.status == 429

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return 429 if self.is_rate_limit else 500

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message, "retryable": self.retryable}
        if self.is_rate_limit:
            body["retryAfterSeconds"] = self.retry_after_seconds or 60
        return body


class UnparseableResponse(AnalysisError):
    def __init__(self, raw_text: str, error: str, kind: str):
        super().__init__(f"AI response could not be parsed ({kind}): {error}")
        self.raw_text = raw_text
        self.error = error
        self.kind = kind


class EmptyModelOutput(UnparseableResponse):
    def __init__(self):
        super().__init__(
            raw_text="",
            error="No text content found in model response",
            kind="empty_output",
        )


class FollowUpExists(AnalysisError):
    status_code = 409

    def __init__(self):
        super().__init__("This entry already has a follow-up question.")
