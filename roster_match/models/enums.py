from enum import Enum


class League(str, Enum):
    NBA = "NBA"
    NHL = "NHL"
    MLB = "MLB"
