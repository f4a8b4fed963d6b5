"""Domain exceptions raised by the service layer.

The API maps each kind to an HTTP status in :mod:`movie_match.api.app`;
the CLI lets them surface as process errors.
"""


class MovieMatchError(Exception):
    """Base class for all domain errors."""


class RoomNotFoundError(MovieMatchError):
    def __init__(self, room_id: str) -> None:
        super().__init__(f"Room {room_id!r} not found")
        self.room_id = room_id


class MovieNotFoundError(MovieMatchError):
    def __init__(self, movie_id: str) -> None:
        super().__init__(f"Movie {movie_id!r} not found")
        self.movie_id = movie_id


class RoomFullError(MovieMatchError):
    def __init__(self, room_id: str) -> None:
        super().__init__(f"Room {room_id!r} already has two participants")
        self.room_id = room_id


class NotRoomMemberError(MovieMatchError):
    def __init__(self, room_id: str, participant_id: str) -> None:
        super().__init__(f"Participant {participant_id!r} is not in room {room_id!r}")
        self.room_id = room_id
        self.participant_id = participant_id


class RoomCodeAllocationError(MovieMatchError):
    """No unused room code could be generated within the allowed attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Could not allocate a unique room code after {attempts} attempts")
        self.attempts = attempts
