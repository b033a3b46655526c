from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cube_api.config import Settings, settings as default_settings
from cube_api.dependencies import Runtime
from cube_api.routers import assistant, blocks, canvas, deployment, devices, health, simulation, sketches
from cube_api.domain.errors import NotFoundError, ValidationError, ConflictError
from cube_api.application.event_handlers import register_event_handlers


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Cube API",
        description="Sketch editing, simulation and deployment for RuBEk Cube IoT workflows",
        version=settings.VERSION,
    )
    app.state.settings = settings
    app.state.runtime = Runtime(settings)

    # Register domain event handlers on startup
    @app.on_event("startup")
    async def startup_event():
        register_event_handlers(app.state.runtime.publisher)

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.runtime.shutdown()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Allows all origins
        allow_credentials=True,
        allow_methods=["*"],  # Allows all methods
        allow_headers=["*"],  # Allows all headers
    )

    # Domain error handlers
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConflictError)
    async def conflict_error_handler(request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    # Include routers
    app.include_router(health.router, tags=["Health"])  # Health check endpoints first
    app.include_router(blocks.router, tags=["Blocks"])
    app.include_router(sketches.router, tags=["Sketches"])
    app.include_router(canvas.router, tags=["Canvas"])
    app.include_router(devices.router, tags=["Devices"])
    app.include_router(simulation.router, tags=["Simulation"])
    app.include_router(deployment.router, tags=["Deployment"])
    app.include_router(assistant.router, tags=["Assistant"])

    @app.get("/")
    async def root():
        return {"message": "Welcome to Cube API. See /docs for API documentation"}

    return app


app = create_app()
