"""Admin console pages."""

from __future__ import annotations

from flask import (
    Blueprint,
    abort,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from ..common.models.order import ORDER_STATUSES
from .api import ADMIN_SESSION_KEY


admin_bp = Blueprint("zenstore_admin", __name__, url_prefix="/admin")

PUBLIC_ENDPOINTS = {
    "zenstore_admin.login_form",
    "zenstore_admin.login_submit",
}


def _components() -> dict:
    return current_app.extensions["zenstore_components"]


def _config():
    return current_app.config["ZENSTORE_CONFIG"]


def _is_authenticated() -> bool:
    return bool(session.get(ADMIN_SESSION_KEY))


@admin_bp.before_request
def guard_private_routes():
    if not request.endpoint or not request.endpoint.startswith("zenstore_admin."):
        return None
    if request.endpoint in PUBLIC_ENDPOINTS:
        # logged-in admins have no business on the login page
        if _is_authenticated() and request.method == "GET":
            return redirect(url_for("zenstore_admin.dashboard"))
        return None
    if not _is_authenticated():
        return redirect(url_for("zenstore_admin.login_form"))
    return None


@admin_bp.get("/login")
def login_form():
    return render_template("admin/login.html")


@admin_bp.post("/login")
def login_submit():
    username = request.form.get("username", "").strip()
    password = request.form.get("password", "").strip()
    cfg = _config()
    if username and username == cfg.admin_username and password == cfg.admin_password:
        session[ADMIN_SESSION_KEY] = True
        session.permanent = True
        return redirect(url_for("zenstore_admin.dashboard"))
    session.pop(ADMIN_SESSION_KEY, None)
    return render_template(
        "admin/login.html",
        error_message="Invalid username or password.",
    ), 401


@admin_bp.get("/logout")
def logout():
    session.pop(ADMIN_SESSION_KEY, None)
    return redirect(url_for("zenstore_admin.login_form"))


@admin_bp.get("/")
def dashboard():
    catalog = _components()["catalog"]
    return render_template("admin/dashboard.html", stats=catalog.stats())


@admin_bp.get("/laptops")
def laptops_page():
    laptops = _components()["catalog"].list_admin()
    return render_template("admin/laptops.html", laptops=laptops)


@admin_bp.get("/add-laptop")
def add_laptop_page():
    return render_template("admin/laptop_form.html", laptop=None)


@admin_bp.get("/laptops/<int:laptop_id>/edit")
def edit_laptop_page(laptop_id: int):
    laptop = _components()["catalog"].get_laptop(laptop_id, published_only=False)
    if not laptop:
        abort(404)
    return render_template("admin/laptop_form.html", laptop=laptop)


@admin_bp.get("/orders")
def orders_page():
    orders = _components()["orders"].list_orders()
    return render_template("admin/orders.html", orders=orders, statuses=ORDER_STATUSES)


@admin_bp.get("/settings")
def settings_page():
    return render_template("admin/settings.html", settings=current_app.config["ZENSTORE_APP_CONFIG"].hot_settings())


@admin_bp.post("/change-password")
def change_password():
    payload = request.get_json(silent=True) or {}
    current_password = str(payload.get("current_password") or "").strip()
    new_password = str(payload.get("new_password") or "").strip()
    confirm_password = str(payload.get("confirm_password") or "").strip()

    if not current_password or not new_password or not confirm_password:
        return jsonify({"status": "error", "message": "Please fill in every field."}), 400

    config = _config()
    if current_password != config.admin_password:
        return jsonify({"status": "error", "message": "Current password is incorrect."}), 401
    if new_password != confirm_password:
        return jsonify({"status": "error", "message": "New passwords do not match."}), 400
    if len(new_password) < 6:
        return jsonify({"status": "error", "message": "New password must be at least 6 characters."}), 400

    try:
        config.save_admin_password(new_password)
    except OSError as exc:
        return jsonify({"status": "error", "message": f"Failed to save password: {exc}"}), 500
    return jsonify({"status": "ok", "message": "Password changed."})
