"""Display order of a laptop's images.

Each image carries an integer ``position``; a laptop's images are shown in
ascending position order. Positions are unique within one laptop but are not
kept contiguous: deleting an image leaves a gap and the next upload still
gets ``max(position) + 1``.

Reordering swaps the positions of two neighbours. The current order is read
again inside the same transaction as the swap (with the laptop row locked
where the backend supports ``SELECT ... FOR UPDATE``), so two admins moving
images at the same time cannot leave duplicate positions behind.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..db.session import get_session
from ..errors import InvalidInput, NotFound, StaleOrder, TransactionFailed
from ..models.image import Image
from ..models.laptop import Laptop
from ..utils.dto import to_image_dto
from ..utils.validators import ensure_positive_int
from .logging import log_event


UP = "up"
DOWN = "down"
DIRECTIONS = (UP, DOWN)


def _parse_order(expected_order) -> List[int]:
    if not isinstance(expected_order, (list, tuple)):
        raise InvalidInput("order must be a list of image ids")
    ids: List[int] = []
    for value in expected_order:
        if isinstance(value, bool):
            raise InvalidInput(f"invalid image id in order: {value!r}")
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            raise InvalidInput(f"invalid image id in order: {value!r}") from None
    return ids


class ImagePositionManager:
    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    # Helpers usable inside a caller's transaction ---------------------------

    @staticmethod
    def lock_laptop(session, laptop_id: int) -> Laptop:
        laptop = (
            session.query(Laptop)
            .filter(Laptop.id == laptop_id)
            .with_for_update()
            .first()
        )
        if laptop is None:
            raise NotFound(f"laptop {laptop_id} not found")
        return laptop

    @staticmethod
    def ordered_images(session, laptop_id: int) -> List[Image]:
        return (
            session.query(Image)
            .filter(Image.laptop_id == laptop_id)
            .order_by(Image.position.asc(), Image.id.asc())
            .all()
        )

    @staticmethod
    def next_position_in(session, laptop_id: int) -> int:
        current = (
            session.query(func.max(Image.position))
            .filter(Image.laptop_id == laptop_id)
            .scalar()
        )
        return 0 if current is None else ensure_positive_int(current, "position") + 1

    def append_in(self, session, laptop_id: int, uploads: Iterable[Tuple[str, Optional[str]]]) -> List[Image]:
        start = self.next_position_in(session, laptop_id)
        rows: List[Image] = []
        for offset, (url, alt) in enumerate(uploads):
            image = Image(url=url, alt=alt, position=start + offset, laptop_id=laptop_id)
            session.add(image)
            rows.append(image)
        session.flush()
        return rows

    # Public operations ------------------------------------------------------

    def list_images(self, laptop_id: int) -> List[Dict]:
        with self._session_factory() as session:
            return [to_image_dto(img) for img in self.ordered_images(session, laptop_id)]

    def next_position(self, laptop_id: int) -> int:
        with self._session_factory() as session:
            return self.next_position_in(session, laptop_id)

    def append(self, laptop_id: int, uploads: Sequence[Tuple[str, Optional[str]]]) -> List[Dict]:
        """Add images after the current last one, in the order given."""
        try:
            with self._session_factory() as session:
                self.lock_laptop(session, laptop_id)
                rows = self.append_in(session, laptop_id, uploads)
                result = [to_image_dto(r) for r in rows]
        except SQLAlchemyError as exc:
            raise TransactionFailed(f"failed to add images to laptop {laptop_id}") from exc
        log_event("info", "image.appended", laptop_id=laptop_id, positions=[r["position"] for r in result])
        return result

    def reorder(
        self,
        laptop_id: int,
        image_id: int,
        direction: str,
        expected_order: Optional[Sequence[int]] = None,
    ) -> List[Dict]:
        """Move an image one step up or down; returns the resulting order.

        Moving the first image up or the last one down changes nothing.
        ``expected_order`` is the id order the caller was looking at; when it
        no longer matches the database, ``StaleOrder`` is raised instead.
        """
        if direction not in DIRECTIONS:
            raise InvalidInput(f"direction must be one of {DIRECTIONS}, got {direction!r}")
        expected = None if expected_order is None else _parse_order(expected_order)
        swapped = False
        try:
            with self._session_factory() as session:
                self.lock_laptop(session, laptop_id)
                images = self.ordered_images(session, laptop_id)
                ids = [img.id for img in images]
                if expected is not None and expected != ids:
                    raise StaleOrder(expected, ids)
                if image_id not in ids:
                    raise NotFound(f"image {image_id} does not belong to laptop {laptop_id}")

                index = ids.index(image_id)
                neighbour = index - 1 if direction == UP else index + 1
                if 0 <= neighbour < len(images):
                    current, other = images[index], images[neighbour]
                    current.position, other.position = other.position, current.position
                    session.flush()
                    images[index], images[neighbour] = other, current
                    swapped = True
                result = [to_image_dto(img) for img in images]
        except SQLAlchemyError as exc:
            raise TransactionFailed(f"failed to reorder image {image_id}") from exc
        if swapped:
            log_event("info", "image.reordered", laptop_id=laptop_id, image_id=image_id, direction=direction)
        return result

    def delete(self, image_id: int, laptop_id: Optional[int] = None) -> bool:
        """Remove an image; remaining positions are left untouched.

        Unknown ids are ignored and ``False`` is returned.
        """
        try:
            with self._session_factory() as session:
                image = session.get(Image, image_id)
                if image is None:
                    log_event("warning", "image.delete_missing", image_id=image_id)
                    return False
                if laptop_id is not None and image.laptop_id != laptop_id:
                    raise NotFound(f"image {image_id} does not belong to laptop {laptop_id}")
                owner = image.laptop_id
                session.delete(image)
        except SQLAlchemyError as exc:
            raise TransactionFailed(f"failed to delete image {image_id}") from exc
        log_event("info", "image.deleted", image_id=image_id, laptop_id=owner)
        return True
