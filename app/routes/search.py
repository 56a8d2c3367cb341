from flask import Blueprint, request
from app.errors import ValidationError
from app.services import catalog, search
from app.utils import ok
from app.version import API_PREFIX

search_bp = Blueprint("search", __name__, url_prefix=API_PREFIX)


def _float_arg(name, default=None):
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number", fields=[name])


@search_bp.route("/search", methods=["GET"])
def search_catalog():
    result = search.search(
        request.args.get("q"),
        type=request.args.get("type", "all"),
        lat=_float_arg("lat"),
        lng=_float_arg("lng"),
        radius=_float_arg("radius", 10),
        category=request.args.get("category"),
        min_price=_float_arg("minPrice"),
        max_price=_float_arg("maxPrice"),
        brand=request.args.get("brand"),
        sort_by=request.args.get("sortBy", "relevance"),
        page=request.args.get("page", 1, type=int),
        limit=request.args.get("limit", 20, type=int),
    )
    return ok(result, message="Search results")


@search_bp.route("/search/suggestions", methods=["GET"])
def search_suggestions():
    return ok(message="Suggestions", suggestions=search.suggestions(request.args.get("q")))


@search_bp.route("/search/trending", methods=["GET"])
def trending_searches():
    return ok(message="Trending searches", trending=search.trending())


@search_bp.route("/vendors/search", methods=["GET"])
def nearby_vendors():
    vendors = search.nearby_vendors(
        _float_arg("lat"),
        _float_arg("lng"),
        radius=_float_arg("radius", 10),
        category=request.args.get("category"),
        q=request.args.get("q"),
        limit=min(request.args.get("limit", 20, type=int), 100),
    )
    return ok(message="Nearby vendors", vendors=vendors)


@search_bp.route("/vendors/<slug>", methods=["GET"])
def store_page(slug):
    return ok(catalog.store_page(slug), message="Store fetched")
