"""Catalog of intake form fields: allowlists, limits, enums and labels.

Both the mutation engine (validation) and delivery (document labels) read
this catalog, so it is the single definition of what a submission may hold.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class FieldKind(str, Enum):
    """Value shape and extra format rule for one field."""

    TEXT = "text"
    EMAIL = "email"
    URL = "url"
    STORAGE_REF = "storage_ref"
    CHOICE = "choice"
    MULTI_CHOICE = "multi_choice"
    STORAGE_REFS = "storage_refs"


@dataclass(frozen=True)
class FieldSpec:
    """Validation rules for one named submission field."""

    name: str
    kind: FieldKind = FieldKind.TEXT
    max_length: int | None = None
    choices: frozenset[str] = frozenset()
    max_items: int = 20
    admin_only: bool = False

    @property
    def is_array(self) -> bool:
        return self.kind in (FieldKind.MULTI_CHOICE, FieldKind.STORAGE_REFS)


DELIVERY_DATE_CHOICES = frozenset({"ASAP", "2–4 weeks", "1–2 months", "3+ months"})
DECISION_MAKER_CHOICES = frozenset({"Me / myself", "My boss / the boss", "Other"})
BUDGET_CHOICES = frozenset(
    {
        "Low / lowest possible cost",
        "Mid-range / balanced price–quality",
        "High / premium",
        "Premium / full brand investment",
    }
)
COLOR_CHOICES = frozenset(
    {
        "Warm neutrals",
        "Cool neutrals",
        "Deep & moody",
        "Bold & saturated",
        "Pastels",
        "Monochrome",
        "Metallic",
        "Nature-inspired",
        "No preference",
    }
)
AESTHETIC_CHOICES = frozenset(
    {
        "Luxury & refined",
        "Organic & artisan",
        "Minimal & functional",
        "Bold & graphic",
        "Playful & illustrative",
        "Editorial & intellectual",
        "Tech-forward",
        "Nostalgic & heritage",
    }
)
DELIVERABLE_CHOICES = frozenset(
    {
        "Primary logo",
        "Logo variations",
        "Color & typography",
        "Brand guidelines",
        "Stationery",
        "Social media",
        "Website design",
        "Packaging",
    }
)
STATUS_CHOICES = frozenset({"pending", "approved", "rejected"})
PROJECT_STATUS_CHOICES = frozenset({"not-started", "in-progress", "done", "abandoned", ""})

_SPECS: tuple[FieldSpec, ...] = (
    FieldSpec("client-name", max_length=120),
    FieldSpec("brand-name", max_length=120),
    FieldSpec("email", FieldKind.EMAIL, max_length=254),
    FieldSpec("client-website", FieldKind.URL, max_length=300),
    FieldSpec("delivery-date", FieldKind.CHOICE, choices=DELIVERY_DATE_CHOICES),
    FieldSpec("q1-business-description", max_length=2000),
    FieldSpec("q2-problem-transformation", max_length=2000),
    FieldSpec("q3-ideal-customer", max_length=2000),
    FieldSpec("q3b-customer-desire", max_length=2000),
    FieldSpec("q4-competitors", max_length=2000),
    FieldSpec("q5-brand-personality", max_length=2000),
    FieldSpec("q6-positioning", max_length=300),
    FieldSpec("q-launch-context", max_length=2000),
    FieldSpec("q7-decision-maker", FieldKind.CHOICE, choices=DECISION_MAKER_CHOICES),
    FieldSpec("q7-decision-maker-other", max_length=300),
    FieldSpec("q8-brands-admired", max_length=2000),
    FieldSpec("q9-color", FieldKind.MULTI_CHOICE, choices=COLOR_CHOICES),
    FieldSpec("q10-colors-to-avoid", max_length=300),
    FieldSpec("q11-aesthetic", FieldKind.MULTI_CHOICE, choices=AESTHETIC_CHOICES),
    FieldSpec("q11-aesthetic-description", max_length=1000),
    FieldSpec("q12-existing-assets", max_length=300),
    FieldSpec("q13-deliverables", FieldKind.MULTI_CHOICE, choices=DELIVERABLE_CHOICES),
    FieldSpec("q14-budget", FieldKind.CHOICE, choices=BUDGET_CHOICES),
    FieldSpec("q15-inspiration-refs", FieldKind.STORAGE_REFS, max_length=500, max_items=10),
    FieldSpec("q16-anything-else", max_length=3000),
    FieldSpec("brand-logo-ref", FieldKind.STORAGE_REF, max_length=200),
    FieldSpec("status", FieldKind.CHOICE, choices=STATUS_CHOICES, admin_only=True),
    FieldSpec(
        "project-status",
        FieldKind.CHOICE,
        choices=PROJECT_STATUS_CHOICES,
        admin_only=True,
    ),
    FieldSpec("agreed-delivery-date", max_length=100, admin_only=True),
)

FIELD_SPECS: Mapping[str, FieldSpec] = MappingProxyType({spec.name: spec for spec in _SPECS})
CLIENT_FIELDS: tuple[str, ...] = tuple(spec.name for spec in _SPECS if not spec.admin_only)
ADMIN_FIELDS: tuple[str, ...] = tuple(spec.name for spec in _SPECS)

# Keys that steer request handling and are never persisted.
CONTROL_FIELDS = frozenset(
    {
        "__editToken",
        "editToken",
        "__submissionAction",
        "__overrideSubmissionId",
        "overrideId",
        "adminAuth",
        "historyEntry",
        "__requestOrigin",
        "__editedBy",
        "editedBy",
        "__lang",
        "lang",
        "cf-turnstile-response",
    }
)
HONEYPOT_FIELD = "website"
CAPTCHA_TOKEN_FIELD = "cf-turnstile-response"
# Set by the server from edge geo headers; clients cannot supply it.
COUNTRY_FIELD = "client-country"
SUPPORTED_LANGUAGES = frozenset({"en", "fr", "ar"})
DEFAULT_LANGUAGE = "en"

# Record keys omitted from generated documents.
DOCUMENT_SKIP_FIELDS = frozenset(
    {
        "id",
        "created_at",
        "updated_at",
        "history",
        "status",
        "project-status",
        "agreed-delivery-date",
        "edit_token",
        "edit_token_expires_at",
    }
)

FIELD_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "client-name": "Client Name",
        "brand-name": "Brand / Business",
        "email": "Client Email",
        "client-website": "Client Website",
        "delivery-date": "Delivery Date",
        "q1-business-description": "Q1 Business Description",
        "q2-problem-transformation": "Q2 Problem + Transformation",
        "q3-ideal-customer": "Q3 Ideal Customer",
        "q3b-customer-desire": "Q3b Customer Desire",
        "q4-competitors": "Q4 Competitors",
        "q5-brand-personality": "Q5 Brand Personality",
        "q6-positioning": "Q6 Positioning Statement",
        "q-launch-context": "Launch Context",
        "q7-decision-maker": "Q7 Decision Maker",
        "q7-decision-maker-other": "Q7 Decision Maker (Other)",
        "q8-brands-admired": "Q8 Admired Brands",
        "q9-color": "Q9 Color Directions",
        "q10-colors-to-avoid": "Q10 Colors To Avoid",
        "q11-aesthetic": "Q11 Aesthetic Direction",
        "q11-aesthetic-description": "Q11 Additional Aesthetic Notes",
        "q12-existing-assets": "Q12 Existing Assets To Keep",
        "q13-deliverables": "Q13 Needed Deliverables",
        "q14-budget": "Q14 Budget Approach",
        "q15-inspiration-refs": "Q15 Inspiration References",
        "q16-anything-else": "Q16 Anything Else",
        "brand-logo-ref": "Brand Logo",
        "client-country": "Client Country",
    }
)


def field_label(name: str) -> str:
    """Return the display label for ``name``, prettifying unknown keys."""
    label = FIELD_LABELS.get(name)
    if label is not None:
        return label
    return name.replace("-", " ").replace("_", " ").title()
