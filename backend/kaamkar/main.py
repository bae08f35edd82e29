import logging

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .errors import AiError, DocumentNotFoundError, IndexRequiredError, StoreError, ValidationError
from .routers import admin, assistant, auth, dashboard, finance, goals, gym, notes, planner, todos
from .schemas import ApiErrorDetail, ApiErrorPayload, ApiErrorResponse, AssistantErrorResponse, HealthResponse

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("kaamkar")

app = FastAPI(
    title="KaamKar API",
    version="0.1.0",
    description="Notes, todos, planner, finance, goals and gym tracking with an AI assistant.",
)


def build_error_response(
    details: list[ApiErrorDetail],
    message: str = "Invalid request payload",
    code: str = "VALIDATION_ERROR",
    status_code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
    link: str | None = None,
) -> JSONResponse:
    payload = ApiErrorResponse(error=ApiErrorPayload(code=code, message=message, details=details, link=link))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details: list[ApiErrorDetail] = []
    for err in exc.errors():
        loc = ".".join(str(item) for item in err.get("loc", []) if item != "body")
        details.append(ApiErrorDetail(field=loc or "body", message=err.get("msg", "validation error")))
    return build_error_response(details)


@app.exception_handler(ValueError)
async def value_error_exception_handler(request: Request, exc: ValueError) -> JSONResponse:
    field = exc.field if isinstance(exc, ValidationError) else "body"
    return build_error_response([ApiErrorDetail(field=field, message=str(exc))])


@app.exception_handler(IndexRequiredError)
async def index_required_exception_handler(request: Request, exc: IndexRequiredError) -> JSONResponse:
    details = [
        ApiErrorDetail(field="collection", message=exc.collection),
        ApiErrorDetail(field="fields", message=",".join(exc.fields)),
    ]
    return build_error_response(
        details,
        message=exc.message,
        code=exc.code,
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        link=exc.link,
    )


@app.exception_handler(DocumentNotFoundError)
async def not_found_exception_handler(request: Request, exc: DocumentNotFoundError) -> JSONResponse:
    return build_error_response([], message=exc.message, code=exc.code, status_code=status.HTTP_404_NOT_FOUND)


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
    return build_error_response([], message=exc.message, code=exc.code, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


@app.exception_handler(AiError)
async def ai_exception_handler(request: Request, exc: AiError) -> JSONResponse:
    payload = AssistantErrorResponse(error=exc.message, kind=exc.kind)
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump())


api = APIRouter(prefix="/api/v1")


@api.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok")


for module in (auth, notes, todos, planner, finance, goals, gym, assistant, dashboard, admin):
    api.include_router(module.router)

app.include_router(api)
logger.info("KaamKar API ready (storage=%s)", settings.storage_backend)
