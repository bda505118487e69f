PARTNER = "partner"
STORE_MANAGER = "store-manager"
EMPLOYEE = "employee"
ROLES = (EMPLOYEE, STORE_MANAGER, PARTNER)

FLOOR = "floor"
BACK = "back"
LOCATIONS = (FLOOR, BACK)

KIND_PRODUCT = "product"
KIND_CONTAINER = "container"
INVENTORY_KINDS = (KIND_PRODUCT, KIND_CONTAINER)

SINGLE_CARD = "singleCard"
PRODUCT_TYPES = (
    SINGLE_CARD,
    "boosterPack",
    "collectorBooster",
    "deck",
    "deckBox",
    "dice",
    "sleeves",
    "playmat",
    "binder",
    "other",
)

CONTAINER_TYPES = ("display-case", "bulk-box", "bulk-bin")

CARD_CONDITIONS = (
    "mint",
    "near-mint",
    "lightly-played",
    "moderately-played",
    "heavily-played",
    "damaged",
)
CARD_FINISHES = ("non-foil", "foil", "etched", "holo", "reverse-holo")

US_STATES = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL", "GA", "HI", "ID", "IL", "IN", "IA",
    "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ", "NM",
    "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA",
    "WV", "WI", "WY",
)
