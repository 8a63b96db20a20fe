"""Storefront pages."""

from __future__ import annotations

from flask import Blueprint, abort, current_app, render_template, request

from ..common.utils.formatting import commafy, first_sentence
from ..common.utils.media import youtube_embed_url


user_bp = Blueprint("zenstore_user", __name__)


def _components() -> dict:
    return current_app.extensions["zenstore_components"]


@user_bp.app_template_filter("commafy")
def _commafy_filter(value):
    return commafy(value)


@user_bp.app_template_filter("first_sentence")
def _first_sentence_filter(value):
    return first_sentence(value or "")


@user_bp.get("/")
def home():
    result = _components()["catalog"].list_published(page=1, page_size=8)
    return render_template("user/index.html", laptops=result["items"])


@user_bp.get("/products")
def products():
    page = request.args.get("page", 1, type=int)
    query = request.args.get("q", "").strip()
    catalog = _components()["catalog"]
    if query:
        return render_template("user/products.html", laptops=catalog.search(query, limit=24), pagination=None, query=query)
    result = catalog.list_published(page=page, page_size=12)
    return render_template("user/products.html", laptops=result["items"], pagination=result["pagination"], query="")


@user_bp.get("/products/<int:laptop_id>")
def product_detail(laptop_id: int):
    catalog = _components()["catalog"]
    laptop = catalog.get_laptop(laptop_id)
    if not laptop:
        abort(404)
    return render_template(
        "user/product.html",
        laptop=laptop,
        related=catalog.related(laptop_id),
        video_embed=youtube_embed_url(laptop.get("video_url")),
        product_url=current_app.config["ZENSTORE_APP_CONFIG"].get_product_url(laptop_id),
    )


@user_bp.get("/about")
def about():
    return render_template("user/about.html")
