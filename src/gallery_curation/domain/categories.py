"""Canonical scene taxonomy."""

from enum import StrEnum


class Category(StrEnum):
    """Closed set of scene categories a photo can be stored with."""

    PREPARATION = "preparation"
    CEREMONY = "ceremony"
    PORTRAITS = "portraits"
    COUPLE = "couple"
    GROUP = "group"
    FAMILY = "family"
    CHILDREN = "children"
    PETS = "pets"
    RECEPTION = "reception"
    PARTY = "party"
    FOOD = "food"
    DECOR = "decor"
    DETAILS = "details"
    OUTDOOR = "outdoor"
    ARCHITECTURE = "architecture"
    PRODUCT = "product"
    SPORTS = "sports"
    OTHER = "other"


HIGHLIGHTS_KEY = "_highlights"
