"""
Compliance document types.

Upload configuration per document type, legacy alias resolution and the
buckets the admin compliance view groups documents into.
"""

from typing import Optional

IDENTITY_FOLDER = "identity-documents"
DEFAULT_FOLDER = "compliance-documents"

# Document categories stored on VerificationRequirement.document_category
PRIMARY = "PRIMARY"
SECONDARY = "SECONDARY"
WORKING_RIGHTS = "WORKING_RIGHTS"
SERVICE_QUALIFICATION = "SERVICE_QUALIFICATION"


def _config(name: str, category: Optional[str], is_required: bool, folder: str) -> dict:
    return {"name": name, "category": category, "isRequired": is_required, "folder": folder}


DOCUMENT_CONFIGS: dict[str, dict] = {
    # Identity
    "identity-passport": _config("Passport", PRIMARY, True, IDENTITY_FOLDER),
    "identity-birth-certificate": _config("Birth Certificate", PRIMARY, True, IDENTITY_FOLDER),
    "identity-drivers-license": _config("Driver's License", SECONDARY, True, IDENTITY_FOLDER),
    "identity-medicare-card": _config("Medicare Card", SECONDARY, True, IDENTITY_FOLDER),
    "identity-utility-bill": _config("Utility Bill", SECONDARY, True, IDENTITY_FOLDER),
    "identity-bank-statement": _config("Bank Statement", SECONDARY, True, IDENTITY_FOLDER),
    "identity-working-rights": _config("Proof of Working Rights", WORKING_RIGHTS, True, IDENTITY_FOLDER),
    "driver-license-vehicle": _config("Driver's License (Vehicle Access)", SECONDARY, False, IDENTITY_FOLDER),
    # Screening checks
    "police-check": _config("National Police Check", None, True, "police-check"),
    "working-with-children": _config("Working with Children Check", None, True, "working-with-children"),
    "ndis-worker-screening": _config("NDIS Worker Screening Check", None, True, "screening-check"),
    "worker-screening-check": _config("NDIS Worker Screening Check", None, True, "screening-check"),
    # Training
    "infection-control": _config("Infection Control Training", None, False, "infection-control"),
    "ndis-worker-orientation": _config(
        'NDIS Worker Orientation Module - "Quality, Safety and You"', None, False, "ndis-training"
    ),
    "ndis-induction-module": _config("New Worker NDIS Induction Module", None, False, "ndis-training"),
    "effective-communication": _config("Supporting Effective Communication", None, False, "ndis-training"),
    "safe-enjoyable-meals": _config("Supporting Safe and Enjoyable Meals", None, False, "ndis-training"),
    # Other
    "certificate": _config("Certificate", None, False, "certificates"),
    "other-requirement": _config("Other Document", None, False, "other-requirements"),
}

# Catalog document id -> upload types that also satisfy it
DOCUMENT_ALIASES: dict[str, list[str]] = {
    "ndis-screening-check": ["worker-screening-check", "ndis-worker-screening"],
    "right-to-work": ["identity-working-rights"],
    "infection-control-training": ["infection-control"],
}

ALIAS_TYPES = frozenset(t for types in DOCUMENT_ALIASES.values() for t in types)

# Admin compliance view buckets
ESSENTIAL_CHECK_TYPES = [
    "police-check",
    "worker-screening-check",
    "ndis-screening-check",
    "working-with-children",
    "right-to-work",
]
MODULE_TYPES = [
    "ndis-training",
    "ndis-induction-module",
    "ndis-worker-orientation",
    "effective-communication",
    "safe-enjoyable-meals",
    "infection-control",
    "first-aid-cpr",
    "manual-handling",
    "medication-training",
    "behaviour-support",
]
INSURANCE_TYPES = ["car-insurance", "public-liability-10m", "professional-indemnity"]
CONTRACT_TYPES = [
    "code-of-conduct",
    "code-of-conduct-part1",
    "code-of-conduct-part2",
    "contract-of-agreement",
]
DOCUMENT_BUCKETS = ["essentialChecks", "modules", "certifications", "identity", "insurances", "contracts"]


def get_document_config(document_type: str, document_name: Optional[str] = None) -> dict:
    """Upload configuration for a type; unknown types get a generic optional config"""
    config = DOCUMENT_CONFIGS.get(document_type)
    if config:
        return dict(config)
    return _config(document_name or document_type, None, False, DEFAULT_FOLDER)


def accepted_types(document_id: str) -> set[str]:
    """The document id plus every legacy upload type that satisfies it"""
    return {document_id, *DOCUMENT_ALIASES.get(document_id, [])}


def categorize_document(requirement_type: str, document_category: Optional[str]) -> str:
    """Bucket a worker document for the admin compliance view"""
    if document_category in (PRIMARY, SECONDARY):
        return "identity"

    # Service documents are stored as "<service>:<requirement>"
    if ":" in requirement_type:
        doc_type = requirement_type.split(":", 1)[1]
        return "insurances" if doc_type in INSURANCE_TYPES else "certifications"

    if requirement_type in ESSENTIAL_CHECK_TYPES:
        return "essentialChecks"
    if requirement_type in MODULE_TYPES:
        return "modules"
    if requirement_type in INSURANCE_TYPES:
        return "insurances"
    if requirement_type in CONTRACT_TYPES:
        return "contracts"
    return "certifications"
