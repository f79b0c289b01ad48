from __future__ import annotations
from enum import StrEnum

class MediaGenre(StrEnum):
    anime = "anime"
    movie = "movie"
    cartoon = "cartoon"
