from typing import Any

from fastapi.encoders import jsonable_encoder

from space_together.app.services.event_bus import IEventBus
from space_together.domain.entities import ChangeVerb


def publish_change(
    bus: IEventBus,
    topic: str,
    entity_kind: str,
    entity_id: str,
    verb: ChangeVerb,
    payload: Any = None,
) -> None:
    """Publish a change after the use case succeeded; payload goes out in wire form"""
    bus.publish(topic, entity_kind, entity_id, verb, jsonable_encoder(payload))
