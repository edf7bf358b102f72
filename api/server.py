from __future__ import annotations

from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app_logging.activity_logger import ActivityLogger
from config.settings import settings
from engine.errors import IssueTemplatesError
from persistence.database import init_db
from resolvers.handler import build_resolver
from services.container import Services

logger = ActivityLogger("server")


class ResolverCall(BaseModel):
    """Body of POST /resolvers/{function_key}. `context` carries user + authToken."""

    payload: Optional[Any] = None
    context: dict[str, Any] = Field(default_factory=dict)


def create_app(services: Optional[Services] = None, init_storage: bool = True) -> FastAPI:
    app = FastAPI(title="Issue Templates", version="1.0.0")
    resolver = build_resolver(services)

    if init_storage:
        @app.on_event("startup")
        def startup():
            init_db()
            logger.info("server_started", resolver_count=len(resolver.keys()))

    @app.exception_handler(IssueTemplatesError)
    def handle_issue_templates_error(request: Request, exc: IssueTemplatesError):
        return JSONResponse(
            status_code=exc.http_status,
            content={"success": False, "error": exc.to_dict()},
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/resolvers")
    def list_resolvers():
        return {"functions": resolver.keys()}

    @app.post("/resolvers/{function_key}")
    def invoke_resolver(function_key: str, call: ResolverCall):
        return resolver.invoke(function_key, call.payload, call.context)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "api.server:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=False,
    )
