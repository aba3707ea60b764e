from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.backend.routers import prompt
from src.generation.category_prompt import get_category_prompt_service
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    service = get_category_prompt_service()
    logger.info(f"🚀 Category prompt service ready (model={service.analyzer.model})")
    yield


def create_app() -> FastAPI:
    """FastAPI 앱 생성"""
    app = FastAPI(
        title="Category Prompt API",
        description="채팅 메시지 → 카테고리 기반 이미지 프롬프트 변환",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(prompt.router)

    @app.get("/")
    def read_root():
        return {"service": "category-prompt", "docs": "/docs"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
