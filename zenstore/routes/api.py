"""JSON API for the storefront and the admin console."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request, session

from ..common.config import refresh_non_sensitive, requires_restart, settings_path, write_settings
from ..common.errors import InvalidInput, NotFound, StaleOrder, TransactionFailed, ValidationFailed
from ..common.services.logging import log_event
from ..common.services.pricing import calculate_price_from_usd
from ..services import MailNotConfigured


api_bp = Blueprint("zenstore_api", __name__, url_prefix="/api")

ADMIN_SESSION_KEY = "zenstore_admin"


def _components() -> Dict[str, Any]:
    return current_app.extensions["zenstore_components"]


def _config():
    return current_app.config["ZENSTORE_CONFIG"]


def _ensure_admin() -> bool:
    return bool(session.get(ADMIN_SESSION_KEY))


def _unauthorized():
    return jsonify({"error": "Admin login required."}), 401


def _error_response(exc: Exception) -> Tuple[Any, int]:
    if isinstance(exc, ValidationFailed):
        return jsonify({"error": exc.message, "errors": exc.errors}), 400
    if isinstance(exc, NotFound):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, StaleOrder):
        return jsonify({"error": "Image order changed, reload and try again.", "order": exc.actual}), 409
    if isinstance(exc, TransactionFailed):
        return jsonify({"error": str(exc)}), 500
    return jsonify({"error": str(exc)}), 400


# Auth -----------------------------------------------------------------------


@api_bp.post("/auth/login")
def login():
    payload = request.get_json(silent=True) or {}
    username = str(payload.get("username") or "").strip()
    password = str(payload.get("password") or "").strip()
    if not username or not password:
        return jsonify({"error": "Username and password are required"}), 400

    cfg = _config()
    if username != cfg.admin_username or password != cfg.admin_password:
        session.pop(ADMIN_SESSION_KEY, None)
        log_event("warning", "admin.login_failed", username=username)
        return jsonify({"error": "Invalid credentials"}), 401

    session[ADMIN_SESSION_KEY] = True
    session.permanent = True
    return jsonify({"success": True})


@api_bp.post("/auth/logout")
def logout():
    session.pop(ADMIN_SESSION_KEY, None)
    return jsonify({"success": True})


# Storefront -------------------------------------------------------------------


@api_bp.get("/laptops")
def list_laptops():
    page = request.args.get("page", 1, type=int)
    page_size = request.args.get("page_size", 12, type=int)
    return jsonify(_components()["catalog"].list_published(page=page, page_size=page_size))


@api_bp.get("/laptops/<int:laptop_id>")
def get_laptop(laptop_id: int):
    catalog = _components()["catalog"]
    laptop = catalog.get_laptop(laptop_id)
    if not laptop:
        return jsonify({"error": f"Product with ID {laptop_id} not found."}), 404
    return jsonify({"laptop": laptop, "related": catalog.related(laptop_id)})


@api_bp.get("/search")
def search():
    query = request.args.get("q", "")
    limit = request.args.get("limit", 10, type=int)
    return jsonify({"items": _components()["catalog"].search(query, limit=limit)})


@api_bp.post("/price")
def calculate_price():
    payload = request.get_json(silent=True) or {}
    try:
        calc = calculate_price_from_usd(payload.get("base_price"))
    except InvalidInput as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(calc.to_dict())


@api_bp.post("/interest-form")
def interest_form():
    payload = request.get_json(silent=True) or {}
    orders = _components()["orders"]
    try:
        order = orders.create_interest_order(
            username=payload.get("username"),
            laptop_choice=payload.get("laptopChoice") or payload.get("laptop_choice"),
            phone_number=payload.get("phoneNumber") or payload.get("phone_number"),
            email=payload.get("email"),
            product_link=payload.get("productLink") or payload.get("product_link"),
        )
    except InvalidInput as exc:
        return jsonify({"message": str(exc)}), 400
    except Exception:
        current_app.logger.exception("Error saving order to database")
        return jsonify({"message": "Error saving order"}), 500

    try:
        _components()["mailer"].send_interest_confirmation(order)
    except MailNotConfigured:
        current_app.logger.error("Email delivery is not configured")
        return jsonify({"message": "Email configuration error"}), 500
    except Exception:
        current_app.logger.exception(f"Error sending email to {order['email']}")
        return jsonify({"message": "Error sending email"}), 500

    return jsonify({"message": "Success", "order_id": order["id"]})


# Admin ----------------------------------------------------------------------


@api_bp.post("/chat")
def generate_content():
    if not _ensure_admin():
        return _unauthorized()
    payload = request.get_json(silent=True) or {}
    title = str(payload.get("productTitle") or "").strip()
    if not title:
        return jsonify({"error": "Product title is required"}), 400
    try:
        content = _components()["laptops"].generate_content(title)
    except InvalidInput as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(content)


@api_bp.get("/admin/laptops")
def admin_list_laptops():
    if not _ensure_admin():
        return _unauthorized()
    return jsonify({"laptops": _components()["catalog"].list_admin()})


@api_bp.get("/admin/laptops/<int:laptop_id>")
def admin_get_laptop(laptop_id: int):
    if not _ensure_admin():
        return _unauthorized()
    laptop = _components()["catalog"].get_laptop(laptop_id, published_only=False)
    if not laptop:
        return jsonify({"error": f"laptop {laptop_id} not found"}), 404
    return jsonify({"laptop": laptop})


@api_bp.post("/admin/laptops")
def admin_create_laptop():
    if not _ensure_admin():
        return _unauthorized()
    try:
        laptop = _components()["laptops"].create_laptop(request.form, request.files.getlist("images"))
    except (InvalidInput, NotFound, TransactionFailed, ValueError) as exc:
        return _error_response(exc)
    return jsonify({"status": "ok", "message": "Laptop added successfully!", "laptop": laptop}), 201


@api_bp.put("/admin/laptops/<int:laptop_id>")
@api_bp.post("/admin/laptops/<int:laptop_id>")
def admin_update_laptop(laptop_id: int):
    if not _ensure_admin():
        return _unauthorized()
    try:
        laptop = _components()["laptops"].update_laptop(laptop_id, request.form, request.files.getlist("newImages"))
    except (InvalidInput, NotFound, TransactionFailed, ValueError) as exc:
        return _error_response(exc)
    return jsonify({"status": "ok", "message": "Laptop updated successfully!", "laptop": laptop})


@api_bp.delete("/admin/laptops/<int:laptop_id>")
def admin_delete_laptop(laptop_id: int):
    if not _ensure_admin():
        return _unauthorized()
    try:
        _components()["laptops"].delete_laptop(laptop_id)
    except NotFound as exc:
        return _error_response(exc)
    return jsonify({"status": "ok"})


@api_bp.post("/admin/laptops/<int:laptop_id>/publish")
def admin_toggle_published(laptop_id: int):
    if not _ensure_admin():
        return _unauthorized()
    try:
        published = _components()["laptops"].toggle_published(laptop_id)
    except (InvalidInput, NotFound) as exc:
        return _error_response(exc)
    return jsonify({"status": "ok", "published": published})


@api_bp.post("/admin/laptops/<int:laptop_id>/images/<int:image_id>/move")
def admin_move_image(laptop_id: int, image_id: int):
    if not _ensure_admin():
        return _unauthorized()
    payload = request.get_json(silent=True) or {}
    direction = str(payload.get("direction") or "").strip().lower()
    expected = payload.get("order")
    try:
        images = _components()["laptops"].move_image(laptop_id, image_id, direction, expected_order=expected)
    except (InvalidInput, NotFound, StaleOrder, TransactionFailed) as exc:
        return _error_response(exc)
    return jsonify({"status": "ok", "images": images})


@api_bp.delete("/admin/images/<int:image_id>")
def admin_delete_image(image_id: int):
    if not _ensure_admin():
        return _unauthorized()
    laptop_id = request.args.get("laptop_id", type=int)
    try:
        deleted = _components()["laptops"].delete_image(image_id, laptop_id=laptop_id)
    except (NotFound, TransactionFailed) as exc:
        return _error_response(exc)
    return jsonify({"status": "ok", "deleted": deleted})


@api_bp.get("/admin/orders")
def admin_list_orders():
    if not _ensure_admin():
        return _unauthorized()
    status = request.args.get("status") or None
    return jsonify({"orders": _components()["orders"].list_orders(status=status)})


@api_bp.put("/admin/orders/<int:order_id>")
def admin_update_order(order_id: int):
    if not _ensure_admin():
        return _unauthorized()
    payload = request.get_json(silent=True) or {}
    try:
        order = _components()["orders"].update_order(
            order_id,
            status=payload.get("status"),
            notes=payload.get("notes"),
        )
    except (InvalidInput, NotFound) as exc:
        return _error_response(exc)
    return jsonify({"success": True, "order": order})


@api_bp.get("/admin/stats")
def admin_stats():
    if not _ensure_admin():
        return _unauthorized()
    return jsonify(_components()["catalog"].stats())


@api_bp.get("/admin/settings")
def admin_get_settings():
    if not _ensure_admin():
        return _unauthorized()
    return jsonify(current_app.config["ZENSTORE_APP_CONFIG"].hot_settings())


@api_bp.put("/admin/settings")
def admin_update_settings():
    if not _ensure_admin():
        return _unauthorized()
    payload = request.get_json(silent=True) or {}
    try:
        updated = refresh_non_sensitive(payload, current_app.config["ZENSTORE_APP_CONFIG"])
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    write_settings(updated.hot_settings(), settings_path(_config().data_dir))
    current_app.config["ZENSTORE_APP_CONFIG"] = updated
    log_event("info", "settings.updated", keys=sorted(payload))
    return jsonify({
        "status": "ok",
        "settings": updated.hot_settings(),
        "requires_restart": requires_restart(payload),
    })
