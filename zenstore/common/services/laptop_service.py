"""Admin-side laptop management: form validation, CRUD and image handling."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from werkzeug.datastructures import FileStorage

from ..db.session import get_session
from ..errors import InvalidInput, NotFound, ValidationFailed
from ..models.laptop import Laptop
from ..utils.dto import to_laptop_dto
from ..utils.validators import is_valid_url
from .catalog_service import CatalogService
from .image_positions import ImagePositionManager
from .logging import log_event
from .pricing import calculate_price_from_usd, original_price_for, original_price_from_discount, round_to_nearest


MAX_IMAGE_BYTES = 4 * 1024 * 1024


def _file_size(upload: FileStorage) -> int:
    stream = upload.stream
    pos = stream.tell()
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(pos)
    return size


def real_files(files: Optional[Sequence[FileStorage]]) -> List[FileStorage]:
    """Drop the empty parts browsers send for an untouched file input."""
    return [f for f in (files or []) if f is not None and f.filename and _file_size(f) > 0]


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "on", "yes"}
    return bool(value)


def _parse_number(raw: Any) -> Optional[float]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


@dataclass
class LaptopForm:
    title: str
    description: str
    specs: List[str]
    price: float
    original_price: float
    discount: Optional[str] = None
    video_url: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)

    @classmethod
    def parse(
        cls,
        data: Mapping[str, Any],
        files: Sequence[FileStorage] = (),
        *,
        require_images: bool,
    ) -> "LaptopForm":
        """Validate submitted fields; raises ValidationFailed with per-field errors.

        ``price`` may be left blank when ``base_price_usd`` is given: the sale
        price is then the calculated MNT total rounded to the nearest 100 and
        the original price is that times 1.1. A blank ``original_price`` is
        otherwise derived from the discount label.
        """
        errors: Dict[str, List[str]] = {}

        title = str(data.get("title") or "").strip()
        if len(title) < 3:
            errors.setdefault("title", []).append("Title must be at least 3 characters long")

        description = str(data.get("description") or "").strip()
        if len(description) < 10:
            errors.setdefault("description", []).append("Description must be at least 10 characters long")

        specs = [s.strip() for s in str(data.get("specs") or "").split(",") if s.strip()]
        discount = str(data.get("discount") or "").strip() or None

        price = _parse_number(data.get("price"))
        original_price = _parse_number(data.get("original_price", data.get("originalPrice")))
        base_usd = data.get("base_price_usd")
        if price is None and base_usd not in (None, ""):
            try:
                calc = calculate_price_from_usd(base_usd)
            except InvalidInput as exc:
                errors.setdefault("base_price_usd", []).append(str(exc))
            else:
                price = float(round_to_nearest(calc.final_price_mnt))
                if original_price is None:
                    original_price = float(original_price_for(price))
        if price is None or price <= 0:
            errors.setdefault("price", []).append("Price must be a positive number")
        elif original_price is None:
            original_price = original_price_from_discount(price, discount)
        if original_price is None or original_price <= 0:
            errors.setdefault("original_price", []).append("Original price must be a positive number")

        video_url = str(data.get("video_url", data.get("videoUrl")) or "").strip() or None
        if video_url and not is_valid_url(video_url):
            errors.setdefault("video_url", []).append("Please enter a valid URL")

        image_urls = [u.strip() for u in str(data.get("image_urls") or "").splitlines() if u.strip()]
        bad_urls = [u for u in image_urls if not is_valid_url(u)]
        if bad_urls:
            errors.setdefault("image_urls", []).append(f"Invalid image URL: {bad_urls[0]}")

        if any(_file_size(f) >= MAX_IMAGE_BYTES for f in files):
            errors.setdefault("images", []).append("Each image must be less than 4MB.")
        if require_images and not files and not image_urls:
            errors.setdefault("images", []).append("At least one image (file upload or URL) is required.")

        if errors:
            raise ValidationFailed(errors)
        return cls(
            title=title,
            description=description,
            specs=specs,
            price=price,
            original_price=original_price,
            discount=discount,
            video_url=video_url,
            image_urls=image_urls,
        )


class LaptopService:
    """Laptop CRUD for the admin console."""

    def __init__(
        self,
        storage,
        *,
        session_factory=get_session,
        positions: Optional[ImagePositionManager] = None,
        catalog: Optional[CatalogService] = None,
        content_generator=None,
    ):
        self._session_factory = session_factory
        self._storage = storage
        self._positions = positions or ImagePositionManager(session_factory)
        self._catalog = catalog
        self._content_generator = content_generator

    def _invalidate(self, laptop_id: Optional[int] = None) -> None:
        if self._catalog is not None:
            self._catalog.invalidate_cache(laptop_id)

    def _store(self, laptop_id: int, files: Sequence[FileStorage], *, stamp: bool) -> List[str]:
        urls = []
        for upload in files:
            name = f"{int(time.time() * 1000)}-{upload.filename}" if stamp else upload.filename
            urls.append(self._storage.put(f"laptops/{laptop_id}/{name}", upload))
        return urls

    def create_laptop(self, data: Mapping[str, Any], files: Optional[Sequence[FileStorage]] = None) -> Dict:
        files = real_files(files)
        form = LaptopForm.parse(data, files, require_images=True)
        with self._session_factory() as session:
            laptop = Laptop(
                title=form.title,
                description=form.description,
                specs=form.specs,
                price=form.price,
                original_price=form.original_price,
                discount=form.discount,
                video_url=form.video_url,
                published=_truthy(data.get("published")),
            )
            session.add(laptop)
            session.flush()
            urls = self._store(laptop.id, files, stamp=False) + form.image_urls
            self._positions.append_in(
                session,
                laptop.id,
                [(url, f"{form.title} - Image {n + 1}") for n, url in enumerate(urls)],
            )
            session.flush()
            session.refresh(laptop)
            result = to_laptop_dto(laptop)
        self._invalidate()
        log_event("info", "laptop.created", laptop_id=result["id"], images=len(result["images"]))
        return result

    def update_laptop(self, laptop_id: int, data: Mapping[str, Any], new_files: Optional[Sequence[FileStorage]] = None) -> Dict:
        new_files = real_files(new_files)
        form = LaptopForm.parse(data, new_files, require_images=False)
        with self._session_factory() as session:
            laptop = ImagePositionManager.lock_laptop(session, laptop_id)
            laptop.title = form.title
            laptop.description = form.description
            laptop.specs = form.specs
            laptop.price = form.price
            laptop.original_price = form.original_price
            laptop.discount = form.discount
            laptop.video_url = form.video_url

            urls = self._store(laptop_id, new_files, stamp=True) + form.image_urls
            if urls:
                start = ImagePositionManager.next_position_in(session, laptop_id)
                self._positions.append_in(
                    session,
                    laptop_id,
                    [(url, f"{form.title} - Image {start + n + 1}") for n, url in enumerate(urls)],
                )
            session.flush()
            session.refresh(laptop)
            result = to_laptop_dto(laptop)
        self._invalidate(laptop_id)
        log_event("info", "laptop.updated", laptop_id=laptop_id, new_images=len(urls))
        return result

    def delete_laptop(self, laptop_id: int) -> None:
        with self._session_factory() as session:
            laptop = session.get(Laptop, laptop_id)
            if laptop is None:
                raise NotFound(f"laptop {laptop_id} not found")
            # images go with it through the relationship cascade
            session.delete(laptop)
        self._invalidate(laptop_id)
        log_event("info", "laptop.deleted", laptop_id=laptop_id)

    def toggle_published(self, laptop_id: int) -> bool:
        with self._session_factory() as session:
            laptop = session.get(Laptop, laptop_id)
            if laptop is None:
                raise NotFound(f"laptop {laptop_id} not found")
            if not laptop.published and not laptop.images:
                raise InvalidInput("a laptop needs at least one image before it can be published")
            laptop.published = not laptop.published
            state = bool(laptop.published)
        self._invalidate(laptop_id)
        log_event("info", "laptop.published" if state else "laptop.unpublished", laptop_id=laptop_id)
        return state

    def move_image(self, laptop_id: int, image_id: int, direction: str, expected_order: Optional[Sequence[int]] = None) -> List[Dict]:
        result = self._positions.reorder(laptop_id, image_id, direction, expected_order=expected_order)
        self._invalidate(laptop_id)
        return result

    def delete_image(self, image_id: int, laptop_id: Optional[int] = None) -> bool:
        deleted = self._positions.delete(image_id, laptop_id=laptop_id)
        if deleted:
            self._invalidate(laptop_id)
        return deleted

    def generate_content(self, title: str) -> Dict:
        if self._content_generator is None:
            raise InvalidInput("content generation is not configured")
        return self._content_generator.generate(title)
