"""Normalization of free-text category guesses into the canonical taxonomy."""

import unicodedata

from gallery_curation.domain.categories import HIGHLIGHTS_KEY, Category

_LEADING_ARTICLES = ("the ", "a ", "an ", "el ", "la ", "los ", "las ")

_ALIASES: dict[str, Category] = {
    # preparation
    "prep": Category.PREPARATION,
    "preparations": Category.PREPARATION,
    "getting ready": Category.PREPARATION,
    "getting-ready": Category.PREPARATION,
    "makeup": Category.PREPARATION,
    "hair and makeup": Category.PREPARATION,
    "preparativos": Category.PREPARATION,
    "preparativo": Category.PREPARATION,
    # ceremony
    "ceremonies": Category.CEREMONY,
    "vows": Category.CEREMONY,
    "wedding ceremony": Category.CEREMONY,
    "ceremonia": Category.CEREMONY,
    # portraits
    "portrait": Category.PORTRAITS,
    "headshot": Category.PORTRAITS,
    "headshots": Category.PORTRAITS,
    "retrato": Category.PORTRAITS,
    "retratos": Category.PORTRAITS,
    # couple
    "couples": Category.COUPLE,
    "bride and groom": Category.COUPLE,
    "newlyweds": Category.COUPLE,
    "pareja": Category.COUPLE,
    "novios": Category.COUPLE,
    # group
    "groups": Category.GROUP,
    "group photo": Category.GROUP,
    "guests": Category.GROUP,
    "friends": Category.GROUP,
    "grupo": Category.GROUP,
    "grupos": Category.GROUP,
    "invitados": Category.GROUP,
    # family
    "families": Category.FAMILY,
    "familia": Category.FAMILY,
    "familias": Category.FAMILY,
    # children
    "child": Category.CHILDREN,
    "kids": Category.CHILDREN,
    "kid": Category.CHILDREN,
    "baby": Category.CHILDREN,
    "babies": Category.CHILDREN,
    "ninos": Category.CHILDREN,
    "nino": Category.CHILDREN,
    "ninas": Category.CHILDREN,
    # pets
    "pet": Category.PETS,
    "dog": Category.PETS,
    "dogs": Category.PETS,
    "cat": Category.PETS,
    "cats": Category.PETS,
    "animals": Category.PETS,
    "mascota": Category.PETS,
    "mascotas": Category.PETS,
    # reception
    "receptions": Category.RECEPTION,
    "banquet": Category.RECEPTION,
    "dinner": Category.RECEPTION,
    "speeches": Category.RECEPTION,
    "toast": Category.RECEPTION,
    "recepcion": Category.RECEPTION,
    "banquete": Category.RECEPTION,
    # party
    "parties": Category.PARTY,
    "celebration": Category.PARTY,
    "celebrations": Category.PARTY,
    "dance": Category.PARTY,
    "dancing": Category.PARTY,
    "dance floor": Category.PARTY,
    "first dance": Category.PARTY,
    "fiesta": Category.PARTY,
    "baile": Category.PARTY,
    "celebracion": Category.PARTY,
    # food
    "cake": Category.FOOD,
    "drinks": Category.FOOD,
    "catering": Category.FOOD,
    "comida": Category.FOOD,
    "pastel": Category.FOOD,
    # decor
    "decoration": Category.DECOR,
    "decorations": Category.DECOR,
    "flowers": Category.DECOR,
    "florals": Category.DECOR,
    "table setting": Category.DECOR,
    "decoracion": Category.DECOR,
    # details
    "detail": Category.DETAILS,
    "rings": Category.DETAILS,
    "ring": Category.DETAILS,
    "accessories": Category.DETAILS,
    "dress": Category.DETAILS,
    "shoes": Category.DETAILS,
    "bouquet": Category.DETAILS,
    "detalles": Category.DETAILS,
    "detalle": Category.DETAILS,
    "anillos": Category.DETAILS,
    # outdoor
    "outdoors": Category.OUTDOOR,
    "landscape": Category.OUTDOOR,
    "landscapes": Category.OUTDOOR,
    "nature": Category.OUTDOOR,
    "beach": Category.OUTDOOR,
    "garden": Category.OUTDOOR,
    "field": Category.OUTDOOR,
    "park": Category.OUTDOOR,
    "exterior": Category.OUTDOOR,
    "paisaje": Category.OUTDOOR,
    "playa": Category.OUTDOOR,
    "jardin": Category.OUTDOOR,
    # architecture
    "venue": Category.ARCHITECTURE,
    "church": Category.ARCHITECTURE,
    "building": Category.ARCHITECTURE,
    "buildings": Category.ARCHITECTURE,
    "interior": Category.ARCHITECTURE,
    "arquitectura": Category.ARCHITECTURE,
    "iglesia": Category.ARCHITECTURE,
    "salon": Category.ARCHITECTURE,
    # product
    "products": Category.PRODUCT,
    "still life": Category.PRODUCT,
    "producto": Category.PRODUCT,
    "productos": Category.PRODUCT,
    # sports
    "sport": Category.SPORTS,
    "game": Category.SPORTS,
    "match": Category.SPORTS,
    "deporte": Category.SPORTS,
    "deportes": Category.SPORTS,
    # other
    "misc": Category.OTHER,
    "miscellaneous": Category.OTHER,
    "otro": Category.OTHER,
    "otros": Category.OTHER,
}

CATEGORY_LABELS: dict[str, str] = {
    HIGHLIGHTS_KEY: "Highlights",
    Category.PREPARATION: "Getting Ready",
    Category.CEREMONY: "Ceremony",
    Category.PORTRAITS: "Portraits",
    Category.COUPLE: "Couple",
    Category.GROUP: "Groups",
    Category.FAMILY: "Family",
    Category.CHILDREN: "Children",
    Category.PETS: "Pets",
    Category.RECEPTION: "Reception",
    Category.PARTY: "Party",
    Category.FOOD: "Food & Drinks",
    Category.DECOR: "Decor",
    Category.DETAILS: "Details",
    Category.OUTDOOR: "Outdoors",
    Category.ARCHITECTURE: "Venue",
    Category.PRODUCT: "Products",
    Category.SPORTS: "Sports",
    Category.OTHER: "Other Moments",
}


def normalize_category(raw: object) -> Category:
    """Map a loose category guess to a canonical ``Category``.

    Never raises; anything unrecognised becomes ``Category.OTHER``.
    """
    if not isinstance(raw, str):
        return Category.OTHER
    cleaned = _clean(raw)
    if not cleaned:
        return Category.OTHER
    for article in _LEADING_ARTICLES:
        if cleaned.startswith(article):
            cleaned = cleaned[len(article) :].strip()
            break
    try:
        return Category(cleaned)
    except ValueError:
        pass
    alias = _ALIASES.get(cleaned) or _ALIASES.get(cleaned.replace("_", " "))
    return alias or Category.OTHER


def category_label(key: str) -> str:
    """Static display label for an album key."""
    return CATEGORY_LABELS.get(key, key.replace("_", " ").strip().title())


def _clean(raw: str) -> str:
    decomposed = unicodedata.normalize("NFKD", raw.strip().lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.split())
