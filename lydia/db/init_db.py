import structlog

from lydia.db.json_db import JsonDatabase

logger = structlog.get_logger()

SEED_PRODUCTS = [
    {
        "id": "p1",
        "name": "Blush Evening Dress",
        "category": "dresses",
        "size": "M",
        "color": "pink",
        "occasion": "evening",
        "price": 2799,
        "image": "images/eveningdress.jpg",
        "description": "A flowing blush dress with gentle pleats and a flattering waist.",
    },
    {
        "id": "p2",
        "name": "Classic Black Dress",
        "category": "dresses",
        "size": "S",
        "color": "black",
        "occasion": "evening",
        "price": 3499,
        "image": "images/red.jpg",
        "description": "Timeless black dress with refined neckline and tailored fit.",
    },
    {
        "id": "p3",
        "name": "White Silk Blouse",
        "category": "tops",
        "size": "L",
        "color": "white",
        "occasion": "work",
        "price": 1299,
        "image": "images/white.jpg",
        "description": "Soft silk blend blouse with subtle sheen and buttoned cuffs.",
    },
    {
        "id": "p4",
        "name": "Lavender Peplum Top",
        "category": "tops",
        "size": "M",
        "color": "lavender",
        "occasion": "casual",
        "price": 999,
        "image": "images/pink.jpg",
        "description": "Playful peplum silhouette with soft stretch fabric.",
    },
    {
        "id": "p5",
        "name": "Gold Festive Kurta Set",
        "category": "ethnic",
        "size": "XL",
        "color": "gold",
        "occasion": "festive",
        "price": 2999,
        "image": "images/or.jpg",
        "description": "Straight-cut kurta set with gold accents for festive evenings.",
    },
    {
        "id": "p7",
        "name": "Blush Sheen Scarf",
        "category": "accessories",
        "size": "NA",
        "color": "pink",
        "occasion": "casual",
        "price": 599,
        "image": "images/pink.jpg",
        "description": "Lightweight scarf with soft finish and elegant drape.",
    },
]


def seed_products(db: JsonDatabase) -> tuple[bool, int]:
    """Seed the boutique catalog if it is empty. Returns (seeded, product_count)."""
    document = db.read()
    if document.get("products"):
        return False, len(document["products"])

    document["products"] = [dict(product) for product in SEED_PRODUCTS]
    db.write(document)
    logger.info("catalog_seeded", count=len(SEED_PRODUCTS))
    return True, len(SEED_PRODUCTS)
