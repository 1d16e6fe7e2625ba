"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutrition_estimator.app_logging import configure_logging
from nutrition_estimator.containers import AppContainer
from nutrition_estimator.domain.detection import DetectionPayload
from nutrition_estimator.errors import ConfigurationError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error("Request failed on configuration: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/nutrition")
    async def nutrition(payload: DetectionPayload, request: Request) -> dict[str, object]:
        """Estimate per-item and total macros for a detection payload."""
        state_container: AppContainer = request.app.state.container
        estimate = await state_container.meal_estimator.estimate(payload)
        logger.info(
            "Estimated meal: items=%s kcal=%.1f",
            len(estimate.items),
            estimate.total.kcal,
        )
        return estimate.to_dict()

    return app
