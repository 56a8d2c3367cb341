"""Product and vendor search with optional geo filtering.

Distances are great-circle kilometres (Haversine, R = 6371). Results are
cached briefly, keyed by every parameter.
"""
import json
import logging
import math

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from extensions import cache
from models import db
from models.analytics import TrendingSearch
from models.product import Product
from models.vendor import VendorProfile
from app.errors import ValidationError
from app.utils.clock import utcnow
from app.utils.db import transactional

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
MIN_QUERY_LENGTH = 2
MAX_RADIUS_KM = 100
SEARCH_TYPES = ("all", "products", "vendors")
PRODUCT_SORTS = ("relevance", "price_asc", "price_desc", "popularity", "newest", "distance", "rating")


def haversine_km(lat1, lng1, lat2, lng2) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def validate_location(lat, lng, radius):
    if lat is None or lng is None:
        return None
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValidationError("Invalid coordinates", fields=["lat", "lng"])
    if radius is not None and not 0 < radius <= MAX_RADIUS_KM:
        raise ValidationError(f"radius must be between 0 and {MAX_RADIUS_KM} km", fields=["radius"])
    return lat, lng


def _like(q):
    return f"%{q}%"


def _relevance(product: Product, q: str) -> int:
    q = q.lower()
    name = (product.name or "").lower()
    score = 0
    if name == q:
        score += 10
    elif name.startswith(q):
        score += 6
    elif q in name:
        score += 4
    if q in (product.brand or "").lower():
        score += 2
    if q in (product.tags or "").lower():
        score += 2
    if q in (product.description or "").lower():
        score += 1
    return score


def _vendor_locations(vendor_ids):
    profiles = VendorProfile.query.filter(VendorProfile.user_id.in_(vendor_ids)).all() if vendor_ids else []
    return {p.user_id: p for p in profiles}


def _distance(profile, origin):
    if origin is None or profile is None or profile.latitude is None or profile.longitude is None:
        return None
    return round(haversine_km(origin[0], origin[1], profile.latitude, profile.longitude), 2)


def _search_products(q, origin, radius, category, min_price, max_price, brand, sort_by):
    query = Product.query.filter(Product.is_active.is_(True)).filter(Product.quantity > 0)
    if q:
        query = query.filter(or_(
            Product.name.ilike(_like(q)),
            Product.description.ilike(_like(q)),
            Product.brand.ilike(_like(q)),
            Product.tags.ilike(_like(q)),
        ))
    if category:
        query = query.filter(Product.category == category)
    if brand:
        query = query.filter(Product.brand.ilike(brand))
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    products = query.all()

    vendors = _vendor_locations({p.vendor_id for p in products})
    results = []
    for product in products:
        profile = vendors.get(product.vendor_id)
        if profile is None or not profile.is_active:
            continue
        distance = _distance(profile, origin)
        if origin is not None and (distance is None or distance > radius):
            continue
        item = product.to_dict()
        item["vendor"] = {"id": profile.id, "storeName": profile.store_name, "storeSlug": profile.store_slug}
        item["distance"] = distance
        results.append((product, item))

    if sort_by == "price_asc":
        results.sort(key=lambda r: (float(r[0].price), r[0].id))
    elif sort_by == "price_desc":
        results.sort(key=lambda r: (-float(r[0].price), r[0].id))
    elif sort_by in ("popularity", "rating"):
        results.sort(key=lambda r: (-(r[0].order_count or 0), r[0].id))
    elif sort_by == "newest":
        results.sort(key=lambda r: (r[0].created_at, r[0].id), reverse=True)
    elif sort_by == "distance" and origin is not None:
        results.sort(key=lambda r: (r[1]["distance"], r[0].id))
    else:
        results.sort(key=lambda r: (-_relevance(r[0], q or ""), r[0].id))
    return [item for _, item in results]


def _search_vendors(q, origin, radius):
    query = VendorProfile.query.filter(VendorProfile.is_active.is_(True))
    if q:
        query = query.filter(or_(
            VendorProfile.store_name.ilike(_like(q)),
            VendorProfile.description.ilike(_like(q)),
            VendorProfile.city.ilike(_like(q)),
        ))
    results = []
    for profile in query.all():
        distance = _distance(profile, origin)
        if origin is not None and (distance is None or distance > radius):
            continue
        item = profile.to_dict()
        item["distance"] = distance
        results.append(item)
    if origin is not None:
        results.sort(key=lambda v: (v["distance"], v["id"]))
    else:
        results.sort(key=lambda v: (v["storeName"].lower(), v["id"]))
    return results


def _page(items, page, limit):
    start = (page - 1) * limit
    return items[start:start + limit]


def _bump_trending(q):
    term = q.strip().lower()[:100]
    try:
        with transactional("Failed to record trending search"):
            row = TrendingSearch.query.filter_by(term=term).first()
            if row is None:
                db.session.add(TrendingSearch(term=term, search_count=1, last_searched=utcnow()))
            else:
                row.search_count = TrendingSearch.search_count + 1
                row.last_searched = utcnow()
    except IntegrityError:
        with transactional("Failed to record trending search"):
            TrendingSearch.query.filter_by(term=term).update(
                {"search_count": TrendingSearch.search_count + 1, "last_searched": utcnow()},
                synchronize_session=False,
            )


def search(q, type="all", lat=None, lng=None, radius=10, category=None, min_price=None,
           max_price=None, brand=None, sort_by="relevance", page=1, limit=20) -> dict:
    q = (q or "").strip()
    if len(q) < MIN_QUERY_LENGTH:
        raise ValidationError(f"Search query must be at least {MIN_QUERY_LENGTH} characters", fields=["q"])
    type = type or "all"
    if type not in SEARCH_TYPES:
        raise ValidationError("type must be one of all, products, vendors", fields=["type"])
    sort_by = sort_by or "relevance"
    if sort_by not in PRODUCT_SORTS:
        raise ValidationError("Unknown sort order", fields=["sortBy"])
    radius = radius or 10
    origin = validate_location(lat, lng, radius)
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or 20), 1), 100)

    _bump_trending(q)

    params = {
        "q": q.lower(), "type": type, "lat": lat, "lng": lng, "radius": radius,
        "category": category, "minPrice": min_price, "maxPrice": max_price,
        "brand": brand, "sortBy": sort_by, "page": page, "limit": limit,
    }
    key = "search:" + json.dumps(params, sort_keys=True)
    cached = cache.get(key)
    if cached is not None:
        return cached

    result = {"query": q, "products": [], "vendors": [], "totals": {"products": 0, "vendors": 0}}
    if type in ("all", "products"):
        products = _search_products(q, origin, radius, category, min_price, max_price, brand, sort_by)
        result["products"] = _page(products, page, limit)
        result["totals"]["products"] = len(products)
    if type in ("all", "vendors"):
        vendors = _search_vendors(q, origin, radius)
        result["vendors"] = _page(vendors, page, limit)
        result["totals"]["vendors"] = len(vendors)
    result["pagination"] = {"page": page, "limit": limit}

    cache.set(key, result, timeout=current_app.config.get("SEARCH_CACHE_TTL", 300))
    return result


def nearby_vendors(lat, lng, radius=10, category=None, q=None, limit=20):
    if lat is None or lng is None:
        raise ValidationError("lat and lng are required", fields=["lat", "lng"])
    origin = validate_location(lat, lng, radius)
    vendors = _search_vendors(q, origin, radius)
    if category:
        stocked = {
            vid for (vid,) in db.session.query(Product.vendor_id)
            .filter(Product.category == category, Product.is_active.is_(True))
            .distinct()
        }
        vendors = [v for v in vendors if v["userId"] in stocked]
    return vendors[:limit]


def suggestions(prefix, limit=10):
    prefix = (prefix or "").strip().lower()
    if len(prefix) < MIN_QUERY_LENGTH:
        return []
    popular = (
        TrendingSearch.query.filter(TrendingSearch.term.ilike(f"{prefix}%"))
        .order_by(TrendingSearch.search_count.desc())
        .limit(limit)
        .all()
    )
    seen = [t.term for t in popular]
    if len(seen) < limit:
        names = (
            db.session.query(Product.name)
            .filter(Product.is_active.is_(True), Product.name.ilike(f"{prefix}%"))
            .distinct()
            .limit(limit)
            .all()
        )
        for (name,) in names:
            if name.lower() not in seen:
                seen.append(name.lower())
    return seen[:limit]


def trending(limit=10):
    rows = TrendingSearch.query.order_by(TrendingSearch.search_count.desc()).limit(limit).all()
    return [{"query": r.term, "count": r.search_count} for r in rows]
