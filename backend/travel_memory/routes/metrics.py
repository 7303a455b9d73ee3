"""
TravelMemory Backend — Prometheus Metrics Route
================================================

What:  GET /metrics in the Prometheus text exposition format.
How:   prometheus_client's default registry already carries the process,
       platform and GC collectors, so nothing has to be registered at startup.
       The registry can be swapped per app (see main.create_app) which keeps
       tests isolated from each other.
"""

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest

router = APIRouter(tags=["Metrics"])


def get_registry(request: Request) -> CollectorRegistry:
    return getattr(request.app.state, "metrics_registry", REGISTRY)


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    response_class=Response,
    responses={200: {"content": {CONTENT_TYPE_LATEST: {}}}},
)
async def metrics(request: Request) -> Response:
    """Render every collector in the registry; content-type comes from prometheus_client."""
    return Response(
        content=generate_latest(get_registry(request)),
        media_type=CONTENT_TYPE_LATEST,
    )
