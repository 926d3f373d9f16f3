"""
Contractor search filters

Each entry in FILTER_REGISTRY turns the search parameters into an optional
SQLAlchemy clause over WorkerProfile. Values inside one filter are ORed,
active filters are ANDed together.

Stored formats the filters normalize to:
- gender: Title Case ("Male", "Female")
- services: category names ("Support Worker", "Home and Yard Maintenance")
- languages: Title Case JSON arrays (["English", "Mandarin"])
- date_of_birth: ISO date string, age: integer fallback
"""

import math
import re
from datetime import date
from typing import Callable, Mapping, Optional

from sqlalchemy import String, and_, cast, or_
from sqlalchemy.sql.elements import ColumnElement

from ...models import VerificationRequirement, WorkerAdditionalInfo, WorkerProfile, WorkerService
from ...shared.validators import to_title_case
from ..compliance.service_requirements import SERVICE_SLUGS
from .schemas import ContractorSearchParams

EARTH_RADIUS_KM = 6371
KM_PER_DEGREE = 111.32
DEFAULT_RADIUS_KM = 500
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20

SORT_FIELDS = {
    "createdAt": WorkerProfile.created_at,
    "firstName": WorkerProfile.first_name,
    "lastName": WorkerProfile.last_name,
    "city": WorkerProfile.city,
    "state": WorkerProfile.state,
}

# Frontend kebab-case values to stored category names
SERVICE_NAME_MAP = {slug: name for name, slug in SERVICE_SLUGS.items()}

THERAPEUTIC_CATEGORY_ID = "therapeutic-supports"

AGE_RANGE_PATTERN = re.compile(r"^(\d+)-(\d+)$")
# "60+" arrives as "60 " when the plus is not percent-encoded
OPEN_AGE_PATTERN = re.compile(r"^(\d+)\+?$")
MAX_AGE = 120


def _json_contains_any(column, values: list[str]) -> ColumnElement:
    """Match a JSON string array holding any of the values"""
    return or_(*[cast(column, String).contains(f'"{value}"', autoescape=True) for value in values])


def parse_age_range(value: Optional[str]) -> Optional[tuple[int, int]]:
    value = (value or "").strip()
    if not value or value == "all":
        return None
    open_match = OPEN_AGE_PATTERN.match(value)
    if open_match:
        return int(open_match.group(1)), MAX_AGE
    match = AGE_RANGE_PATTERN.match(value)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def gender_filter(params: ContractorSearchParams) -> Optional[ColumnElement]:
    if not params.gender or params.gender == "all":
        return None
    return WorkerProfile.gender == to_title_case(params.gender)


def age_filter(params: ContractorSearchParams, today: Optional[date] = None) -> Optional[ColumnElement]:
    """Birth-year range when a date of birth is stored, otherwise the age column"""
    age_range = parse_age_range(params.age)
    if age_range is None:
        return None
    min_age, max_age = age_range
    current_year = (today or date.today()).year
    earliest = f"{current_year - max_age}-01-01"
    latest = f"{current_year - min_age}-12-31"

    has_dob = and_(WorkerProfile.date_of_birth.isnot(None), WorkerProfile.date_of_birth != "")
    no_dob = or_(WorkerProfile.date_of_birth.is_(None), WorkerProfile.date_of_birth == "")
    return or_(
        and_(has_dob, WorkerProfile.date_of_birth >= earliest, WorkerProfile.date_of_birth <= latest),
        and_(no_dob, WorkerProfile.age >= min_age, WorkerProfile.age <= max_age),
    )


def services_filter(params: ContractorSearchParams) -> Optional[ColumnElement]:
    if not params.typeOfSupport or params.typeOfSupport == "all":
        return None
    category_name = SERVICE_NAME_MAP.get(params.typeOfSupport, params.typeOfSupport)
    return WorkerProfile.services.any(WorkerService.category_name == category_name)


def languages_filter(params: ContractorSearchParams) -> Optional[ColumnElement]:
    """Additional-info languages first, profile languages as fallback"""
    if not params.languages:
        return None
    languages = [to_title_case(lang) for lang in params.languages]
    return or_(
        WorkerProfile.additional_info.has(_json_contains_any(WorkerAdditionalInfo.languages, languages)),
        _json_contains_any(WorkerProfile.languages, languages),
    )


def text_search_filter(params: ContractorSearchParams) -> Optional[ColumnElement]:
    if not params.search:
        return None
    # % and _ in the search text match literally
    return or_(
        WorkerProfile.first_name.icontains(params.search, autoescape=True),
        WorkerProfile.last_name.icontains(params.search, autoescape=True),
        WorkerProfile.mobile.contains(params.search, autoescape=True),
    )


def therapeutic_subcategories_filter(params: ContractorSearchParams) -> Optional[ColumnElement]:
    if not params.therapeuticSubcategories:
        return None
    return WorkerProfile.services.any(
        and_(
            WorkerService.category_id == THERAPEUTIC_CATEGORY_ID,
            WorkerService.subcategory_id.in_(params.therapeuticSubcategories),
        )
    )


def document_categories_filter(params: ContractorSearchParams) -> Optional[ColumnElement]:
    if not params.documentCategories:
        return None
    return WorkerProfile.requirements.any(
        VerificationRequirement.document_category.in_(params.documentCategories)
    )


def document_statuses_filter(params: ContractorSearchParams) -> Optional[ColumnElement]:
    if not params.documentStatuses:
        return None
    return WorkerProfile.requirements.any(VerificationRequirement.status.in_(params.documentStatuses))


def requirement_types_filter(params: ContractorSearchParams) -> Optional[ColumnElement]:
    if not params.requirementTypes:
        return None
    return WorkerProfile.requirements.any(
        VerificationRequirement.requirement_type.in_(params.requirementTypes)
    )


# Location is not a filter of its own: it only feeds the distance search
FILTER_REGISTRY: dict[str, Callable[[ContractorSearchParams], Optional[ColumnElement]]] = {
    "gender": gender_filter,
    "age": age_filter,
    "services": services_filter,
    "languages": languages_filter,
    "textSearch": text_search_filter,
    "therapeuticSubcategories": therapeutic_subcategories_filter,
    "documentCategories": document_categories_filter,
    "documentStatuses": document_statuses_filter,
    "requirementTypes": requirement_types_filter,
}


def build_filter_clauses(params: ContractorSearchParams) -> list[ColumnElement]:
    """Every active filter clause; the caller ANDs them"""
    clauses = []
    for build in FILTER_REGISTRY.values():
        clause = build(params)
        if clause is not None:
            clauses.append(clause)
    return clauses


def build_order_by(sort_by: str, sort_order: str):
    column = SORT_FIELDS.get(sort_by, WorkerProfile.created_at)
    return column.asc() if sort_order == "asc" else column.desc()


def _split_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _int_param(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        return default


def parse_filter_params(query: Mapping[str, str]) -> ContractorSearchParams:
    """Build search parameters from raw query-string values"""
    page = max(1, _int_param(query.get("page"), 1))
    page_size = min(MAX_PAGE_SIZE, max(1, _int_param(query.get("pageSize"), DEFAULT_PAGE_SIZE)))
    sort_order = query.get("sortOrder") or "desc"

    return ContractorSearchParams(
        page=page,
        pageSize=page_size,
        search=query.get("search") or None,
        sortBy=query.get("sortBy") or "createdAt",
        sortOrder="asc" if sort_order == "asc" else "desc",
        location=query.get("location") or None,
        typeOfSupport=query.get("typeOfSupport") or None,
        gender=query.get("gender") or None,
        age=query.get("age") or None,
        within=query.get("within") or "none",
        languages=_split_list(query.get("languages")),
        therapeuticSubcategories=_split_list(query.get("therapeuticSubcategories")),
        documentCategories=_split_list(query.get("documentCategories")),
        documentStatuses=_split_list(query.get("documentStatuses")),
        requirementTypes=_split_list(query.get("requirementTypes")),
    )


def get_applied_filters(params: ContractorSearchParams) -> dict:
    """The filters that actually narrowed the search, echoed back to the caller"""
    applied = {}
    if params.search:
        applied["search"] = params.search
    if params.location:
        applied["location"] = params.location
    for key in ("typeOfSupport", "gender", "age"):
        value = getattr(params, key)
        if value and value != "all":
            applied[key] = value
    if params.within and params.within != "none":
        applied["within"] = params.within
    for key in ("languages", "therapeuticSubcategories", "documentCategories", "documentStatuses",
                "requirementTypes"):
        values = getattr(params, key)
        if values:
            applied[key] = values
    return applied


# ============================================================================
# GEOSPATIAL
# ============================================================================


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in km"""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def get_bounding_box(lat: float, lng: float, radius_km: float) -> dict:
    lat_delta = radius_km / KM_PER_DEGREE
    lng_delta = radius_km / (KM_PER_DEGREE * math.cos(math.radians(lat)))
    return {
        "minLat": lat - lat_delta,
        "maxLat": lat + lat_delta,
        "minLng": lng - lng_delta,
        "maxLng": lng + lng_delta,
    }


def radius_km(within: Optional[str]) -> int:
    """Search radius for a `within` value; "none" or garbage means the default"""
    if not within or within == "none":
        return DEFAULT_RADIUS_KM
    try:
        return int(within)
    except ValueError:
        return DEFAULT_RADIUS_KM


def build_pagination(total: int, page: int, page_size: int) -> dict:
    total_pages = math.ceil(total / page_size) if page_size else 0
    return {
        "total": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }
