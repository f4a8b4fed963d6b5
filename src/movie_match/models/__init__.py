from movie_match.models.base import Base
from movie_match.models.match import Match
from movie_match.models.movie import Movie
from movie_match.models.room import Room
from movie_match.models.room_movie import RoomMovie
from movie_match.models.swipe import Swipe

__all__ = [
    "Base",
    "Match",
    "Movie",
    "Room",
    "RoomMovie",
    "Swipe",
]
