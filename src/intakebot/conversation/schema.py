"""Requirement field schemas per problem category.

Schemas are read-only at runtime. Field order is priority order: the first
missing required field is the one the next question targets.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

ProblemType = Literal[
    "web_development", "analytics", "marketing", "website_analytics", "general"
]
FieldType = Literal["string", "number", "array", "object", "boolean"]

DEFAULT_PROBLEM_TYPE: ProblemType = "general"


class RequirementField(BaseModel):
    """One requirement the conversation tries to capture."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    required: bool
    type: FieldType
    description: str


def _field(
    key: str, label: str, type_: FieldType, description: str, *, required: bool = True
) -> RequirementField:
    return RequirementField(
        key=key, label=label, required=required, type=type_, description=description
    )


REQUIREMENTS_SCHEMA: dict[str, tuple[RequirementField, ...]] = {
    "web_development": (
        _field(
            "projectType",
            "Project Type",
            "string",
            "e-commerce, business site, portfolio, web app, etc.",
        ),
        _field("platform", "Platform/CMS", "string", "WordPress, Shopify, custom build, etc."),
        _field("hosting", "Hosting", "string", "client provides, we provide, or specific host"),
        _field("domain", "Domain Status", "string", "existing domain, need to purchase, or TBD"),
        _field(
            "features",
            "Key Features",
            "array",
            "specific features with implementation details",
        ),
        _field(
            "integrations",
            "Third-party Integrations",
            "array",
            "payment processors, CRMs, email tools, analytics",
            required=False,
        ),
        _field(
            "designStyle",
            "Design Style",
            "string",
            "modern, classic, minimalist, professional, etc.",
        ),
        _field(
            "designReferences",
            "Reference Sites",
            "array",
            "URLs of sites they like for inspiration",
            required=False,
        ),
        _field(
            "contentStatus",
            "Content Readiness",
            "string",
            "have content ready, need copywriting help, or TBD",
        ),
        _field(
            "existingSite",
            "Existing Site",
            "string",
            "URL if exists, migration needed, or greenfield",
        ),
        _field(
            "accessNeeded",
            "Access Requirements",
            "array",
            "hosting credentials, domain registrar, etc.",
        ),
        _field("timeline", "Desired Timeline", "string", "launch date or duration in weeks/months"),
        _field("budget", "Budget Range", "object", "min and max budget or fixed amount"),
    ),
    "marketing": (
        _field(
            "serviceType",
            "Marketing Service",
            "string",
            "SEO, content creation, social media, email marketing, ads",
        ),
        _field("currentState", "Current Marketing", "string", "what they currently do or have"),
        _field(
            "goals",
            "Marketing Goals",
            "array",
            "increase traffic, generate leads, brand awareness, etc.",
        ),
        _field("targetAudience", "Target Audience", "string", "who they are trying to reach"),
        _field(
            "websiteUrl", "Website URL", "string", "their website if applicable", required=False
        ),
        _field(
            "competitorUrls",
            "Competitors",
            "array",
            "competitor websites for analysis",
            required=False,
        ),
        _field("timeline", "Timeline", "string", "campaign duration or ongoing"),
        _field("budget", "Budget", "object", "monthly or project budget"),
    ),
    "analytics": (
        _field(
            "analysisType",
            "Analysis Type",
            "string",
            "revenue analysis, customer insights, forecasting, etc.",
        ),
        _field(
            "dataSource",
            "Data Source",
            "string",
            "QuickBooks, Excel, Shopify, custom database, etc.",
        ),
        _field(
            "dataAccess",
            "Data Access Method",
            "string",
            "API access, file export, screen share, etc.",
        ),
        _field(
            "analysisGoals", "Specific Questions", "array", "what questions they want answered"
        ),
        _field(
            "timeframe", "Historical Timeframe", "string", "how much historical data to analyze"
        ),
        _field(
            "deliverableFormat",
            "Deliverable Format",
            "string",
            "dashboard, report, presentation, etc.",
        ),
        _field("timeline", "Timeline", "string", "one-time or recurring analysis"),
        _field("budget", "Budget", "object", "project or monthly budget"),
    ),
    "website_analytics": (
        _field("websiteUrl", "Website URL", "string", "the website to analyze"),
        _field(
            "analyticsAccess",
            "Analytics Tool Access",
            "string",
            "Google Analytics, Ahrefs, or other tool access",
        ),
        _field(
            "concerns",
            "Performance Concerns",
            "array",
            "slow loading, high bounce rate, low conversions, etc.",
        ),
        _field(
            "currentMetrics",
            "Current Metrics",
            "object",
            "traffic, bounce rate, conversion rate if known",
            required=False,
        ),
        _field(
            "goals",
            "Optimization Goals",
            "array",
            "improve speed, reduce bounce, increase conversions",
        ),
        _field("siteAccess", "Website Access", "string", "CMS access, FTP, or read-only"),
        _field("timeline", "Timeline", "string", "urgency and duration"),
        _field("budget", "Budget", "object", "budget range for optimization"),
    ),
    "general": (
        _field(
            "projectSummary",
            "Project Summary",
            "string",
            "what they want built or solved, in their words",
        ),
        _field("goals", "Goals", "array", "outcomes that would make the project a success"),
        _field(
            "constraints",
            "Constraints",
            "array",
            "technical, legal or organisational limits",
            required=False,
        ),
        _field("timeline", "Timeline", "string", "deadline or expected duration"),
        _field("budget", "Budget", "object", "min and max budget or fixed amount"),
    ),
}


def known_problem_types() -> list[str]:
    return list(REQUIREMENTS_SCHEMA)


def get_all_fields(problem_type: str) -> list[RequirementField]:
    """All fields for a category; an unknown category has none."""
    return list(REQUIREMENTS_SCHEMA.get(problem_type, ()))


def get_required_fields(problem_type: str) -> list[RequirementField]:
    return [f for f in get_all_fields(problem_type) if f.required]


def get_field(problem_type: str, key: str) -> RequirementField | None:
    for f in get_all_fields(problem_type):
        if f.key == key:
            return f
    return None
