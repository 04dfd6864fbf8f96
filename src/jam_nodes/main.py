import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .core.registry import NodeRegistry
from .core.services import NodeServices
from .core.types import NodeCategory
from .models import HealthResponse, RunWorkflowRequest
from .nodes import create_default_registry
from .services import InMemoryCache, InMemoryEmailDrafts, InMemoryStorage, WebhookNotificationService
from .workflow.runner import WorkflowRunner

load_dotenv()

logger = logging.getLogger(__name__)


def _default_services(settings: Settings, http_client: httpx.AsyncClient) -> NodeServices:
    notifications = None
    if settings.notification_webhook_url:
        notifications = WebhookNotificationService(settings.notification_webhook_url, http_client)
    return NodeServices(
        notifications=notifications,
        storage=InMemoryStorage(),
        cache=InMemoryCache(),
        email_drafts=InMemoryEmailDrafts(),
        http=http_client,
    )


def create_app(registry: Optional[NodeRegistry] = None, services: Optional[NodeServices] = None) -> FastAPI:
    """Build the catalog/run API around ``registry`` (built-in nodes by default)."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    node_registry = registry or create_default_registry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http_client = httpx.AsyncClient(timeout=30.0, headers={"User-Agent": settings.http_user_agent})
        app.state.runner = WorkflowRunner(node_registry, services or _default_services(settings, http_client))
        logger.info("Serving %d node types", node_registry.size)
        try:
            yield
        finally:
            await http_client.aclose()

    app = FastAPI(
        title="jam-nodes API",
        description="Catalog of workflow node types and a sequential workflow runner",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.registry = node_registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok", node_types=node_registry.size)

    # --- Node catalog (metadata only, never executors) ---

    @app.get("/api/nodes")
    def list_nodes(category: Optional[NodeCategory] = None):
        if category is None:
            metadata = node_registry.get_all_metadata()
        else:
            metadata = node_registry.get_metadata_by_category(category)
        return [m.model_dump(by_alias=True) for m in metadata]

    @app.get("/api/nodes/{node_type}")
    def get_node(node_type: str):
        metadata = node_registry.get_metadata(node_type)
        if metadata is None:
            raise HTTPException(status_code=404, detail=f"Unknown node type: {node_type}")
        return metadata.model_dump(by_alias=True)

    # --- Workflow runs ---

    @app.post("/api/workflows/run")
    async def run_workflow(body: RunWorkflowRequest, request: Request):
        runner: WorkflowRunner = request.app.state.runner
        report = await runner.run(
            body.workflow,
            approved=body.approved,
            campaign_id=body.campaign_id,
        )
        return report.to_dict()

    return app


app = create_app()
