from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from .result_formatter import DisplayField, order_fields

PLACEHOLDER_IMAGE = "https://via.placeholder.com/150"
FEED_EMPTY_MESSAGE = "Detailed results pending..."
DETAIL_EMPTY_MESSAGE = "No detailed results available."


@dataclass
class EventCard:
    event_id: Any
    title: str
    date_label: str
    fields: List[DisplayField] = field(default_factory=list)
    empty_message: Optional[str] = None
    athlete_id: Any = None
    athlete_name: Optional[str] = None
    athlete_image: Optional[str] = None

    def as_dict(self) -> Dict:
        return {
            "event_id": self.event_id,
            "title": self.title,
            "date_label": self.date_label,
            "fields": [{"label": f.label, "value": f.value} for f in self.fields],
            "empty_message": self.empty_message,
            "athlete_id": self.athlete_id,
            "athlete_name": self.athlete_name,
            "athlete_image": self.athlete_image,
        }


def format_event_date(start_time: Optional[str]) -> str:
    if not start_time:
        return ""
    try:
        parsed = datetime.fromisoformat(str(start_time).replace("Z", "+00:00"))
    except ValueError:
        return str(start_time)
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def _build_card(event: Dict, empty_message: str) -> EventCard:
    result = event.get("result")
    has_result = isinstance(result, Mapping)
    return EventCard(
        event_id=event.get("id"),
        title=event.get("title") or "",
        date_label=format_event_date(event.get("start_time")),
        fields=order_fields(result) if has_result else [],
        empty_message=None if has_result else empty_message,
    )


def build_detail_card(event: Dict) -> EventCard:
    return _build_card(event, DETAIL_EMPTY_MESSAGE)


def build_feed_card(item: Dict) -> EventCard:
    """Feed card: the event plus a header naming the athlete it belongs to."""
    card = _build_card(item, FEED_EMPTY_MESSAGE)
    athlete = item.get("entities") or {}
    card.athlete_id = item.get("entity_id")
    card.athlete_name = athlete.get("name")
    card.athlete_image = athlete.get("image_url") or PLACEHOLDER_IMAGE
    return card
