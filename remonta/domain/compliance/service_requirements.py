"""
Service-specific qualification documents.

Maps a service (category name plus optional subcategory id) to the training
and qualification documents a worker uploads for it, and defines the
"at-least-one-of" qualification groups.
"""

import re
from typing import Optional

# Therapeutic subcategories registered with AHPRA
AHPRA_SUBCATEGORIES = [
    "occupational-therapist",
    "orthoptist",
    "physiotherapist",
    "podiatrist",
    "psychologist",
]

HIGH_INTENSITY_CATEGORY = "support worker (high intensity)"

SERVICE_SLUGS = {
    "Support Worker": "support-worker",
    "Support Worker (High Intensity)": "support-worker-high-intensity",
    "Therapeutic Supports": "therapeutic-supports",
    "Cleaning Services": "cleaning-services",
    "Home and Yard Maintenance": "home-yard-maintenance",
    "Nursing Services": "nursing-services",
    "Personal Trainer": "personal-trainer",
    "Home Modifications": "home-modifications",
    "Fitness and Rehabilitation": "fitness-and-rehabilitation",
}

# Any one of these satisfies the qualification for the service
QUALIFICATION_GROUPS = {
    "Support Worker": [
        {"type": "cert3-aged-care", "name": "Certificate 3 Aged Care"},
        {"type": "cert3-disabilities", "name": "Certificate 3 in Disabilities"},
        {"type": "cert3-individual-support", "name": "Certificate 3 Individual Support"},
        {"type": "cert3-individual-support-aged-care", "name": "Certificate 3 Individual Support (Aged Care)"},
        {"type": "cert3-individual-support-disability", "name": "Certificate 3 Individual Support (Disability)"},
        {"type": "cert3-home-community-care", "name": "Certificate 3 in Home and Community Care"},
        {"type": "cert4-aged-care", "name": "Certificate 4 Aged Care"},
        {"type": "cert4-disabilities", "name": "Certificate 4 in Disabilities"},
    ],
}
QUALIFICATION_GROUPS["Support Worker (High Intensity)"] = QUALIFICATION_GROUPS["Support Worker"]


def _requirement(type_: str, name: str, description: str, category: str, required: bool) -> dict:
    return {
        "type": type_,
        "name": name,
        "description": description,
        "category": category,
        "required": required,
    }


def _qualification_certificate(required: bool, name: str = "Highest Relevant Qualification Certificate",
                               description: str = "Your highest qualification relevant to this service") -> dict:
    return _requirement("qualification-certificate", name, description, "QUALIFICATION", required)


AHPRA = _requirement(
    "ahpra-registration", "AHPRA Registration", "Current AHPRA registration certificate", "QUALIFICATION", True
)


def service_slug(service_title: str) -> str:
    """'Home and Yard Maintenance' -> 'home-yard-maintenance'"""
    title = (service_title or "").strip()
    if title in SERVICE_SLUGS:
        return SERVICE_SLUGS[title]
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    return re.sub(r"[\s-]+", "-", slug).strip("-")


def is_high_intensity(service_name: str, subcategory_id: Optional[str] = None) -> bool:
    normalized = (service_name or "").lower().strip()
    if normalized == HIGH_INTENSITY_CATEGORY:
        return True
    return normalized == "support worker" and "high-intensity" in (subcategory_id or "").lower()


def get_service_document_requirements(service_name: str, subcategory_id: Optional[str] = None) -> list[dict]:
    """Training and qualification documents for a service/subcategory"""
    normalized = (service_name or "").lower().strip()
    subcategory = (subcategory_id or "").lower().strip() or None

    if is_high_intensity(service_name, subcategory):
        return [
            _qualification_certificate(True, description="Your highest qualification relevant to support work"),
            _requirement("manual-handling-training", "Manual Handling Training",
                         "Certificate for manual handling training", "TRAINING", False),
            _requirement("medication-training", "Medication Training",
                         "Certificate for medication administration training", "TRAINING", False),
            _requirement("behaviour-support-training", "Behaviour Support Training",
                         "Certificate for behaviour support training", "TRAINING", False),
        ]

    if normalized == "support worker":
        return [
            _qualification_certificate(
                False,
                description="Your highest qualification relevant to support work "
                "(e.g., Certificate III in Individual Support)",
            )
        ]

    if normalized in ("cleaning services", "home and yard maintenance"):
        return [_qualification_certificate(False, description="Your highest qualification relevant to this service (if any)")]

    if normalized == "nursing services":
        return [
            dict(AHPRA),
            _qualification_certificate(True, "Nursing Qualification Certificate", "Your nursing degree or diploma"),
        ]

    if normalized == "personal trainer":
        return [
            _requirement("professional-association-membership", "Professional Association Membership",
                         "Fitness Australia or equivalent membership certificate", "QUALIFICATION", True),
            _qualification_certificate(True, "Fitness Qualification Certificate",
                                       "Certificate III/IV in Fitness or equivalent"),
        ]

    if normalized == "therapeutic supports" and subcategory:
        if subcategory in AHPRA_SUBCATEGORIES:
            first = dict(AHPRA)
        else:
            first = _requirement("professional-association-membership", "Professional Association Membership",
                                 "Relevant professional association membership certificate", "QUALIFICATION", True)
        return [
            first,
            _qualification_certificate(
                True, description="Your qualification in this therapeutic field (e.g., degree, diploma)"
            ),
        ]

    return []


def get_qualification_group(service_name: str, subcategory_id: Optional[str] = None) -> Optional[dict]:
    """
    The at-least-one-of qualification group for a service.

    The group is enforced only when the service requires its qualification
    certificate; otherwise it is listed for information.
    """
    key = "Support Worker (High Intensity)" if is_high_intensity(service_name, subcategory_id) else (
        (service_name or "").strip()
    )
    options = QUALIFICATION_GROUPS.get(key)
    if not options:
        return None

    requirements = get_service_document_requirements(service_name, subcategory_id)
    enforced = any(r["type"] == "qualification-certificate" and r["required"] for r in requirements)
    return {"satisfies": "qualification-certificate", "options": list(options), "enforced": enforced}


def service_requirement_type(service_title: str, requirement_type: str) -> str:
    """Stored requirement_type for a service document: '<service-slug>:<requirement>'"""
    return f"{service_slug(service_title)}:{requirement_type}"
