from typing import Any, Dict, Optional


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_image_dto(row: Any) -> Dict:
    return {
        "id": getattr(row, "id", None),
        "url": getattr(row, "url", None),
        "alt": getattr(row, "alt", None),
        "position": getattr(row, "position", 0),
        "laptop_id": getattr(row, "laptop_id", None),
    }


def to_laptop_dto(row: Any, *, image_limit: Optional[int] = None) -> Dict:
    images = sorted(getattr(row, "images", None) or [], key=lambda img: img.position)
    if image_limit is not None:
        images = images[:image_limit]
    return {
        "id": getattr(row, "id", None),
        "title": getattr(row, "title", None),
        "description": getattr(row, "description", None),
        "specs": list(getattr(row, "specs", None) or []),
        "price": float(getattr(row, "price", 0) or 0),
        "original_price": float(getattr(row, "original_price", 0) or 0),
        "discount": getattr(row, "discount", None),
        "video_url": getattr(row, "video_url", None),
        "published": bool(getattr(row, "published", False)),
        "date_published": _iso(getattr(row, "date_published", None)),
        "images": [to_image_dto(img) for img in images],
    }


def to_order_dto(row: Any) -> Dict:
    return {
        "id": getattr(row, "id", None),
        "username": getattr(row, "username", None),
        "laptop_choice": getattr(row, "laptop_choice", None),
        "phone_number": getattr(row, "phone_number", None),
        "email": getattr(row, "email", None),
        "product_link": getattr(row, "product_link", None),
        "status": getattr(row, "status", None),
        "notes": getattr(row, "notes", None),
        "created_at": _iso(getattr(row, "created_at", None)),
        "updated_at": _iso(getattr(row, "updated_at", None)),
    }
