from enum import Enum


class Bucket(str, Enum):
    ALL = "all"
    PENDING = "pending"
    UPCOMING = "upcoming"
    PAST = "past"
