"""
FastAPI server for SlideSmith.

Wires the presentation and health routers, CORS and rate limiting, and
releases the shared HTTP client, in-flight runs and database pool on
shutdown.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from slidesmith.configs.config import config
from slidesmith.configs.db import dispose_engine
from slidesmith.configs.logging_config import setup_logging
from slidesmith.core.rate_limit import add_rate_limiting
from slidesmith.core.run_manager import run_manager
from slidesmith.routes.dependencies import close_edge_client
from slidesmith.routes.health_routes import router as health_router
from slidesmith.routes.presentation_routes import router as presentation_router

app = FastAPI(title="SlideSmith API")


@app.on_event("startup")
async def startup_event() -> None:
    setup_logging(
        config.log_level,
        config.log_file,
        enable_file_logging=config.log_file is not None,
        component="api",
    )
    logger.info(f"SlideSmith API using edge functions at {config.edge_functions_url}")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await run_manager.shutdown()
    await close_edge_client()
    await dispose_engine()
    logger.info("SlideSmith API stopped")


add_rate_limiting(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(presentation_router)
app.include_router(health_router)


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "SlideSmith Backend API"}


if __name__ == "__main__":
    import uvicorn

    # uvicorn handles SIGINT/SIGTERM and runs the shutdown hook
    uvicorn.run(app, host="0.0.0.0", port=config.port)
