import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wagerproof.api.router import api_router
from wagerproof.config import get_settings
from wagerproof.core.errors import InvalidInputError, InvalidTransitionError, ValidationError

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.include_router(api_router)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(_request: Request, exc: InvalidInputError) -> JSONResponse:
    logger.warning("rejected prediction input: %s", exc)
    return JSONResponse(status_code=400, content={"error": "invalid_input", "detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("rejected personality: %s", ", ".join(exc.fields))
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "detail": str(exc), "fields": exc.to_list()},
    )


@app.exception_handler(InvalidTransitionError)
async def transition_handler(_request: Request, exc: InvalidTransitionError) -> JSONResponse:
    logger.warning("rejected pick transition: %s", exc)
    return JSONResponse(status_code=409, content={"error": "invalid_transition", "detail": str(exc)})


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "environment": settings.app_env}
