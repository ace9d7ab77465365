# Run from project root: uvicorn app.main:app --reload

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.routes import router
from app.core.config import KNOWLEDGE_CACHE_TTL_SECONDS
from app.core.errors import AppError
from app.core.knowledge_cache import KnowledgeCache

logging.basicConfig(level=logging.INFO)


def create_app(cache: KnowledgeCache | None = None) -> FastAPI:
    """Build the API. The knowledge cache lives as long as the app does."""
    application = FastAPI(title="Courses Guide Backend")
    if cache is None:
        cache = KnowledgeCache(KNOWLEDGE_CACHE_TTL_SECONDS)
    application.state.knowledge_cache = cache
    application.include_router(router)

    @application.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": f"Function Error: {exc.message}"},
        )

    return application


app = create_app()


if __name__ == "__main__":
    print("Courses Guide backend booting...")
