from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from typing import Optional

from .api.recipes import router as recipes_router
from .core.config import Settings, get_settings
from .services.generation_client import GenerationClient
from .services.orchestrator import RecipeOrchestrator
from .services.repository import RecipeRepository


def create_app(
    settings: Optional[Settings] = None,
    generation_client: Optional[GenerationClient] = None,
) -> FastAPI:
    settings = settings or get_settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    app = FastAPI(title="chef-helper", version="0.1.0", description="AI recipe generation from ingredients")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    repository = RecipeRepository()
    app.state.repository = repository
    app.state.orchestrator = RecipeOrchestrator(
        repository,
        client=generation_client or GenerationClient(settings),
        settings=settings,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Validation error", "errors": [e["msg"] for e in exc.errors()]},
        )

    app.include_router(recipes_router)

    @app.get("/api/health")
    async def health_check():
        return {
            "status": "ok",
            "message": "chef-helper API is running",
            "generation_configured": bool(settings.hf_access_token),
        }

    return app


app = create_app()
