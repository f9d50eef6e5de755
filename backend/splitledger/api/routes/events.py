"""
Server-sent events stream of group changes.
"""
import json
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from splitledger.core.config import settings
from splitledger.db.session import get_db
from splitledger.models.user import User
from splitledger.api.dependencies import get_current_user, check_group_access
from splitledger.services.event_service import GroupEventBus, event_bus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups/{group_id}", tags=["events"])


async def stream_group_events(request: Request, bus: GroupEventBus, group_id: int, keepalive: float):
    """Yield SSE frames until the client disconnects."""
    async with bus.subscribe(group_id) as subscription:
        yield f"event: ready\ndata: {json.dumps({'group_id': group_id})}\n\n"
        while not await request.is_disconnected():
            event = await subscription.get(timeout=keepalive)
            if event is None:
                yield ": keep-alive\n\n"
                continue
            yield f"event: {event['type']}\ndata: {json.dumps(event)}\n\n"
    logger.debug("Event stream for group %s closed", group_id)


@router.get("/events")
async def group_events(
    group_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Subscribe to live expense, payment and participant changes of a group."""
    check_group_access(group_id, current_user.id, db)
    return StreamingResponse(
        stream_group_events(request, event_bus, group_id, settings.EVENT_KEEPALIVE_SECONDS),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
    )
