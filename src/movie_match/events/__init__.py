from movie_match.events.bus import RoomEventBus, RoomSubscription
from movie_match.events.types import FiltersChanged, MatchCreated, RoomEvent

__all__ = [
    "FiltersChanged",
    "MatchCreated",
    "RoomEvent",
    "RoomEventBus",
    "RoomSubscription",
]
