from enum import Enum


class VariationType(str, Enum):
    UP = "up"
    DOWN = "down"
