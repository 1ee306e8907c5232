import asyncio
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from space_together.app.services.event_bus import IEventBus
from space_together.app.use_cases.tenants import TenantContext
from space_together.depends import get_event_bus, get_tenant
from space_together.domain.entities import GLOBAL_TOPIC, ChangeEvent, ChangeVerb

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])

KEEP_ALIVE_SECONDS = 15

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class ConnectedClientsResponse(BaseModel):
    connected_clients: int


def connected_event(topic: str) -> ChangeEvent:
    return ChangeEvent(
        topic=topic,
        entity_kind="system",
        entity_id="stream",
        verb=ChangeVerb.connected,
        payload={"message": "Connected to real-time event stream"},
    )


async def event_stream(request: Request, bus: IEventBus, topic: str):
    """Yield SSE frames for one subscriber until the client goes away"""
    subscription = bus.subscribe(topic)
    try:
        yield connected_event(topic).to_sse()
        while not await request.is_disconnected():
            try:
                event = await asyncio.wait_for(subscription.get(), timeout=KEEP_ALIVE_SECONDS)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield event.to_sse()
    finally:
        bus.unsubscribe(subscription)


@router.get("/stream")
async def stream_events(request: Request, bus: IEventBus = Depends(get_event_bus)):
    """
    Real-time change events for users, schools, catalogue entities and join
    requests, as Server-Sent Events. The first frame is a `connected` event.
    """
    return StreamingResponse(
        event_stream(request, bus, GLOBAL_TOPIC),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/school/stream")
async def stream_school_events(
    request: Request,
    tenant: TenantContext = Depends(get_tenant),
    bus: IEventBus = Depends(get_event_bus),
):
    """
    Real-time change events of the school named by the School-Token header.

    Raises:
        - 401 Unauthorized: TENANT_REQUIRED, INVALID_SCHOOL_TOKEN
        - 400 Bad Request: BAD_TENANT_ID
    """
    return StreamingResponse(
        event_stream(request, bus, tenant.database_name),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/stream/clients/count", response_model=ConnectedClientsResponse)
async def connected_clients_count(bus: IEventBus = Depends(get_event_bus)):
    return ConnectedClientsResponse(connected_clients=bus.subscriber_count())
