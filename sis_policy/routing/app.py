"""
HTTP adapter for the policy dispatchers.

Exposes one ``POST /policies/{resource_type}`` endpoint per resource type.
The raw request body is handed to the dispatcher untouched so malformed
JSON is reported the same way as through any other entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import PolicyConfig
from ..database import (
    close_shared_client,
    get_shared_mongo_client,
    verify_shared_client,
)
from ..dispatch import PolicyDispatcher
from ..engine import AccessDecisionEngine
from ..policies.table import ResourceType
from ..repositories.base import RelationshipLookup
from ..repositories.mongo import MongoRelationshipLookup

logger = logging.getLogger(__name__)


def create_app(
    lookup: RelationshipLookup,
    config: PolicyConfig | None = None,
    lifespan: Callable[[FastAPI], Any] | None = None,
) -> FastAPI:
    """
    Build the policy API.

    Args:
        lookup: Relationship lookup backing every decision
        config: Policy configuration (defaults to environment values)
        lifespan: Optional FastAPI lifespan context

    Returns:
        FastAPI application
    """
    config = config or PolicyConfig()
    config.validate()

    engine = AccessDecisionEngine(lookup, config)
    dispatchers = {
        rt.value: PolicyDispatcher(rt, engine.for_resource(rt)) for rt in ResourceType
    }

    app = FastAPI(title="SIS Access Policy", version="0.1.0", lifespan=lifespan)
    app.state.lookup = lookup
    app.state.config = config
    app.state.dispatchers = dispatchers

    @app.post("/policies/{resource_type}")
    async def evaluate_policy(resource_type: str, request: Request) -> JSONResponse:
        dispatcher = request.app.state.dispatchers.get(resource_type)
        if dispatcher is None:
            logger.warning(f"Policy request for unknown resource type '{resource_type}'")
            return JSONResponse(
                status_code=404,
                content={
                    "success": False,
                    "error": f"Unknown resource type: {resource_type}",
                    "validResourceTypes": sorted(dispatchers),
                },
            )

        response = await dispatcher.handle(await request.body())
        return JSONResponse(status_code=response.status_code, content=response.body)

    logger.info(f"Policy API ready for resource types: {', '.join(sorted(dispatchers))}")
    return app


def create_mongo_app(config: PolicyConfig | None = None) -> FastAPI:
    """
    Build the policy API over the shared MongoDB client.

    The client is pinged on startup and closed on shutdown.

    Raises:
        ConfigurationError: If mongo_uri or db_name is missing
    """
    config = config or PolicyConfig()
    config.validate(require_database=True)

    client = get_shared_mongo_client(config.mongo_uri)
    lookup = MongoRelationshipLookup(client[config.db_name], config=config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not await verify_shared_client():
            logger.warning("MongoDB is not reachable; policy lookups will fail until it is")
        yield
        close_shared_client()

    return create_app(lookup, config, lifespan=lifespan)
