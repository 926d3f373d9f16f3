from remonta.domain.compliance.service_requirements import (
    get_qualification_group,
    get_service_document_requirements,
    is_high_intensity,
    service_requirement_type,
    service_slug,
)


def types_of(requirements):
    return [(r["type"], r["required"]) for r in requirements]


def test_service_slugs():
    assert service_slug("Home and Yard Maintenance") == "home-yard-maintenance"
    assert service_slug(" Support Worker (High Intensity) ") == "support-worker-high-intensity"
    assert service_slug("Pet Care & Walking") == "pet-care-walking"
    assert service_requirement_type("Nursing Services", "ahpra-registration") == "nursing-services:ahpra-registration"


def test_high_intensity_detection():
    assert is_high_intensity("Support Worker (High Intensity)")
    assert is_high_intensity("support worker", "high-intensity-catheter")
    assert not is_high_intensity("Support Worker", "personal-care")


def test_support_worker_qualification_is_optional():
    assert types_of(get_service_document_requirements("Support Worker", "personal-care")) == [
        ("qualification-certificate", False)
    ]
    group = get_qualification_group("Support Worker")
    assert group["satisfies"] == "qualification-certificate"
    assert group["enforced"] is False
    assert len(group["options"]) == 8


def test_high_intensity_requires_qualification():
    requirements = get_service_document_requirements("Support Worker (High Intensity)")
    assert types_of(requirements)[0] == ("qualification-certificate", True)
    assert {r["type"] for r in requirements if not r["required"]} == {
        "manual-handling-training",
        "medication-training",
        "behaviour-support-training",
    }
    assert get_qualification_group("Support Worker", "high-intensity-seizure")["enforced"] is True


def test_nursing_and_personal_trainer():
    assert types_of(get_service_document_requirements("Nursing Services")) == [
        ("ahpra-registration", True),
        ("qualification-certificate", True),
    ]
    assert types_of(get_service_document_requirements("Personal Trainer")) == [
        ("professional-association-membership", True),
        ("qualification-certificate", True),
    ]
    assert get_qualification_group("Nursing Services") is None


def test_therapeutic_supports_by_subcategory():
    assert types_of(get_service_document_requirements("Therapeutic Supports", "psychologist"))[0] == (
        "ahpra-registration",
        True,
    )
    assert types_of(get_service_document_requirements("Therapeutic Supports", "dietitian"))[0] == (
        "professional-association-membership",
        True,
    )
    assert get_service_document_requirements("Therapeutic Supports") == []


def test_unknown_service_has_no_requirements():
    assert get_service_document_requirements("Dog Walking") == []
    assert get_service_document_requirements("") == []
