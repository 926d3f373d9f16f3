"""
Static service catalog: documents, reusable document sets and categories.

Document lists may contain "$ref:<set name>" entries that expand to the
named set in DOCUMENT_SETS (recursively).
"""

DOCUMENTS = [
    # Identity & business
    {
        "id": "identity-points-100",
        "name": "100 Points of Identity",
        "category": "IDENTITY",
        "description": "At least one primary and one secondary identity document",
        "hasExpiration": False,
    },
    {
        "id": "abn-contractor",
        "name": "ABN (Contractor)",
        "category": "BUSINESS",
        "description": "Australian Business Number for invoicing as a contractor",
        "hasExpiration": False,
    },
    # Screening & compliance
    {
        "id": "police-check",
        "name": "National Police Check",
        "category": "COMPLIANCE",
        "description": "Police check issued within the last 3 years",
        "hasExpiration": True,
    },
    {
        "id": "ndis-screening-check",
        "name": "NDIS Worker Screening Check",
        "category": "COMPLIANCE",
        "description": "NDIS Worker Screening clearance",
        "hasExpiration": True,
    },
    {
        "id": "working-with-children",
        "name": "Working With Children Check",
        "category": "COMPLIANCE",
        "description": "State-issued Working With Children clearance",
        "hasExpiration": True,
    },
    {
        "id": "right-to-work",
        "name": "Right to Work in Australia",
        "category": "COMPLIANCE",
        "description": "Citizenship, residency or visa showing work rights",
        "hasExpiration": True,
    },
    # Training
    {
        "id": "ndis-worker-orientation",
        "name": "NDIS Worker Orientation Module",
        "category": "TRAINING",
        "description": "'Quality, Safety and You' orientation certificate",
        "hasExpiration": False,
    },
    {
        "id": "infection-control-training",
        "name": "Infection Control Training",
        "category": "TRAINING",
        "description": "COVID-19 / infection prevention and control certificate",
        "hasExpiration": False,
    },
    # Qualifications
    {
        "id": "first-aid-cpr",
        "name": "First Aid & CPR",
        "category": "QUALIFICATION",
        "description": "HLTAID011 First Aid and HLTAID009 CPR",
        "hasExpiration": True,
    },
    {
        "id": "cert3-aged-care",
        "name": "Certificate 3 Aged Care",
        "category": "QUALIFICATION",
        "description": "Aged care qualification",
        "hasExpiration": False,
    },
    {
        "id": "cert3-disabilities",
        "name": "Certificate 3 in Disabilities",
        "category": "QUALIFICATION",
        "description": "Disabilities support qualification",
        "hasExpiration": False,
    },
    {
        "id": "cert3-individual-support",
        "name": "Certificate 3 Individual Support",
        "category": "QUALIFICATION",
        "description": "Individual support qualification",
        "hasExpiration": False,
    },
    {
        "id": "cert3-individual-support-aged-care",
        "name": "Certificate 3 Individual Support (Aged Care)",
        "category": "QUALIFICATION",
        "description": "Individual support specialising in aged care",
        "hasExpiration": False,
    },
    {
        "id": "cert3-individual-support-disability",
        "name": "Certificate 3 Individual Support (Disability)",
        "category": "QUALIFICATION",
        "description": "Individual support specialising in disability",
        "hasExpiration": False,
    },
    {
        "id": "cert3-home-community-care",
        "name": "Certificate 3 in Home and Community Care",
        "category": "QUALIFICATION",
        "description": "Home and community care qualification",
        "hasExpiration": False,
    },
    {
        "id": "cert4-aged-care",
        "name": "Certificate 4 Aged Care",
        "category": "QUALIFICATION",
        "description": "Advanced aged care qualification",
        "hasExpiration": False,
    },
    {
        "id": "cert4-disabilities",
        "name": "Certificate 4 in Disabilities",
        "category": "QUALIFICATION",
        "description": "Advanced disabilities support qualification",
        "hasExpiration": False,
    },
    {
        "id": "ahpra-registration",
        "name": "AHPRA Registration",
        "category": "QUALIFICATION",
        "description": "Current AHPRA registration certificate",
        "hasExpiration": True,
    },
    {
        "id": "professional-association-membership",
        "name": "Professional Association Membership",
        "category": "QUALIFICATION",
        "description": "Relevant professional association membership certificate",
        "hasExpiration": True,
    },
    # Insurance
    {
        "id": "public-liability-10m",
        "name": "Public Liability Insurance ($10M)",
        "category": "INSURANCE",
        "description": "Certificate of currency for at least $10 million cover",
        "hasExpiration": True,
    },
    {
        "id": "professional-indemnity",
        "name": "Professional Indemnity Insurance",
        "category": "INSURANCE",
        "description": "Certificate of currency for professional indemnity cover",
        "hasExpiration": True,
    },
    {
        "id": "car-insurance",
        "name": "Comprehensive Car Insurance",
        "category": "INSURANCE",
        "description": "Required when transporting participants in your own vehicle",
        "hasExpiration": True,
    },
    # Transport
    {
        "id": "drivers-licence",
        "name": "Driver's Licence",
        "category": "TRANSPORT",
        "description": "Current Australian driver's licence",
        "hasExpiration": True,
    },
]

DOCUMENT_SETS = {
    "core-compliance": [
        "identity-points-100",
        "abn-contractor",
        "police-check",
        "ndis-screening-check",
        "right-to-work",
    ],
    "ndis-training": ["ndis-worker-orientation", "infection-control-training"],
    "care-compliance": ["$ref:core-compliance", "working-with-children", "$ref:ndis-training"],
    "support-worker-qualifications": [
        "cert3-aged-care",
        "cert3-disabilities",
        "cert3-individual-support",
        "cert3-individual-support-aged-care",
        "cert3-individual-support-disability",
        "cert3-home-community-care",
        "cert4-aged-care",
        "cert4-disabilities",
    ],
    "vehicle": ["drivers-licence", "car-insurance"],
}

_AHPRA = {"required": ["ahpra-registration"]}
_ASSOCIATION = {"required": ["professional-association-membership"]}

CATEGORIES = [
    {
        "id": "support-worker",
        "name": "Support Worker",
        "requiresQualification": False,
        "documents": {
            "required": ["$ref:care-compliance"],
            "optional": ["$ref:support-worker-qualifications", "first-aid-cpr"],
            "conditional": [
                {"condition": "hasVehicle", "requiredIf": True, "documents": "$ref:vehicle"},
            ],
        },
        "subcategories": [
            {"id": "personal-care", "name": "Personal Care"},
            {"id": "community-access", "name": "Community Access"},
            {"id": "daily-living", "name": "Assistance with Daily Living"},
            {"id": "social-support", "name": "Social and Community Participation"},
            {"id": "transport-assistance", "name": "Transport Assistance"},
        ],
    },
    {
        "id": "support-worker-high-intensity",
        "name": "Support Worker (High Intensity)",
        "requiresQualification": True,
        "documents": {
            "required": ["$ref:care-compliance"],
            "optional": ["$ref:support-worker-qualifications", "first-aid-cpr"],
            "conditional": [
                {"condition": "hasVehicle", "requiredIf": True, "documents": "$ref:vehicle"},
            ],
        },
        "subcategories": [
            {"id": "high-intensity-bowel-care", "name": "Complex Bowel Care"},
            {"id": "high-intensity-enteral-feeding", "name": "Enteral Feeding"},
            {"id": "high-intensity-tracheostomy", "name": "Tracheostomy Care"},
            {"id": "high-intensity-catheter", "name": "Urinary Catheter Management"},
            {"id": "high-intensity-seizure", "name": "Epilepsy and Seizure Management"},
        ],
    },
    {
        "id": "therapeutic-supports",
        "name": "Therapeutic Supports",
        "requiresQualification": True,
        "sharedDocuments": {
            "required": ["$ref:core-compliance", "working-with-children", "professional-indemnity"],
        },
        "subcategories": [
            {"id": "occupational-therapist", "name": "Occupational Therapist",
             "requiresRegistration": True, "additionalDocuments": _AHPRA},
            {"id": "physiotherapist", "name": "Physiotherapist",
             "requiresRegistration": True, "additionalDocuments": _AHPRA},
            {"id": "psychologist", "name": "Psychologist",
             "requiresRegistration": True, "additionalDocuments": _AHPRA},
            {"id": "podiatrist", "name": "Podiatrist",
             "requiresRegistration": True, "additionalDocuments": _AHPRA},
            {"id": "orthoptist", "name": "Orthoptist",
             "requiresRegistration": True, "additionalDocuments": _AHPRA},
            {"id": "speech-pathologist", "name": "Speech Pathologist",
             "additionalDocuments": _ASSOCIATION},
            {"id": "dietitian", "name": "Dietitian", "additionalDocuments": _ASSOCIATION},
            {"id": "exercise-physiologist", "name": "Exercise Physiologist",
             "additionalDocuments": _ASSOCIATION},
            {"id": "behaviour-support-practitioner", "name": "Behaviour Support Practitioner",
             "additionalDocuments": _ASSOCIATION},
            {"id": "counsellor", "name": "Counsellor", "additionalDocuments": _ASSOCIATION},
        ],
    },
    {
        "id": "nursing-services",
        "name": "Nursing Services",
        "requiresQualification": True,
        "documents": {
            "required": ["$ref:care-compliance", "ahpra-registration"],
            "optional": ["professional-indemnity", "first-aid-cpr"],
        },
        "subcategories": [
            {"id": "registered-nurse", "name": "Registered Nurse", "requiresRegistration": True},
            {"id": "enrolled-nurse", "name": "Enrolled Nurse", "requiresRegistration": True},
        ],
    },
    {
        "id": "cleaning-services",
        "name": "Cleaning Services",
        "requiresQualification": False,
        "documents": {
            "required": ["$ref:core-compliance"],
            "optional": ["public-liability-10m"],
        },
        "subcategories": [
            {"id": "domestic-cleaning", "name": "Domestic Cleaning"},
            {"id": "deep-cleaning", "name": "Deep Cleaning"},
            {"id": "laundry", "name": "Laundry and Ironing"},
        ],
    },
    {
        "id": "home-yard-maintenance",
        "name": "Home and Yard Maintenance",
        "requiresQualification": False,
        "documents": {
            "required": ["$ref:core-compliance", "public-liability-10m"],
            "optional": [],
            "conditional": [
                {"condition": "hasVehicle", "requiredIf": True, "documents": ["car-insurance"]},
            ],
        },
        "subcategories": [
            {"id": "gardening", "name": "Gardening"},
            {"id": "lawn-mowing", "name": "Lawn Mowing"},
            {"id": "handyman", "name": "Handyman"},
            {"id": "gutter-cleaning", "name": "Gutter Cleaning"},
        ],
    },
    {
        "id": "personal-trainer",
        "name": "Personal Trainer",
        "requiresQualification": True,
        "documents": {
            "required": ["$ref:core-compliance", "professional-association-membership"],
            "optional": ["first-aid-cpr", "public-liability-10m"],
        },
        "subcategories": [],
    },
]


def expand_document_refs(docs, document_sets=None) -> list[str]:
    """
    Expand "$ref:<set>" entries into document ids.

    Nested references are followed; unknown sets expand to nothing.
    Duplicates are dropped, first occurrence wins.
    """
    document_sets = DOCUMENT_SETS if document_sets is None else document_sets
    if isinstance(docs, str):
        docs = [docs]

    expanded: list[str] = []
    for doc in docs:
        if doc.startswith("$ref:"):
            ref_docs = document_sets.get(doc[len("$ref:"):])
            if ref_docs:
                expanded.extend(expand_document_refs(ref_docs, document_sets))
        else:
            expanded.append(doc)

    seen = set()
    return [d for d in expanded if not (d in seen or seen.add(d))]
