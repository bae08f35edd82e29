class KaamKarError(Exception):
    """Base class for errors that carry a user-facing message."""

    code = "ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreError(KaamKarError):
    code = "STORE_ERROR"


class ReadError(StoreError):
    code = "READ_ERROR"


class WriteError(StoreError):
    code = "WRITE_ERROR"


class IndexRequiredError(StoreError):
    """The store needs a composite index for this filter + order combination.

    Surfaced to the user as-is because the remediation is actionable: declare
    the index behind ``link`` and repeat the request.
    """

    code = "INDEX_REQUIRED"

    def __init__(self, collection: str, fields: tuple[str, ...], link: str) -> None:
        super().__init__(f"This query on '{collection}' requires a composite index on ({', '.join(fields)}).")
        self.collection = collection
        self.fields = fields
        self.link = link


class DocumentNotFoundError(StoreError):
    code = "NOT_FOUND"

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"document not found: {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


class DocumentExistsError(StoreError):
    code = "ALREADY_EXISTS"

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"document already exists: {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


class ValidationError(KaamKarError, ValueError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str = "body") -> None:
        super().__init__(message)
        self.field = field


class AiError(KaamKarError):
    code = "AI_ERROR"
    kind = "generic"
    status_code = 500


class AiConfigError(AiError):
    kind = "config"
    status_code = 500

    def __init__(self, message: str = "Gemini API key is missing or invalid. Set GEMINI_API_KEY in the server environment.") -> None:
        super().__init__(message)


class AiModelNotFoundError(AiError):
    kind = "model_not_found"
    status_code = 502

    def __init__(self, message: str = "None of the configured Gemini models is available. Update GEMINI_MODELS or check the API version.") -> None:
        super().__init__(message)


class AiQuotaError(AiError):
    kind = "quota"
    status_code = 429

    def __init__(self, message: str = "Gemini API quota exceeded or rate limited. Try again later or check your usage limits.") -> None:
        super().__init__(message)


class AiNetworkError(AiError):
    kind = "network"
    status_code = 502

    def __init__(self, message: str = "Network error connecting to the Gemini API. Check the server's internet connection.") -> None:
        super().__init__(message)


class AiGenericError(AiError):
    kind = "generic"
    status_code = 500

    def __init__(self, message: str = "The AI assistant failed to process the request.") -> None:
        super().__init__(message)


AI_ERRORS_BY_KIND: dict[str, type[AiError]] = {
    cls.kind: cls for cls in (AiConfigError, AiModelNotFoundError, AiQuotaError, AiNetworkError, AiGenericError)
}
