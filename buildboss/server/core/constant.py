"""
Application Constants.

Static values shared by the API layer: project naming, URL prefixes, the
marketplace dictionaries (job categories, work categories, voivodeships) and
the catalogue of subscription plans seeded by the plans administration panel.
"""

from typing import Any, Dict, List

PROJECT_NAME = "BuildBoss"
API_V1_STR = "/api/v1"

# Job offer categories with their Polish display labels
JOB_CATEGORIES: Dict[str, str] = {
    "CONSTRUCTION_WORKER": "Pracownik budowlany",
    "ELECTRICIAN": "Elektryk",
    "PLUMBER": "Hydraulik",
    "PAINTER": "Malarz",
    "CARPENTER": "Stolarz",
    "MASON": "Murarz",
    "ROOFER": "Dekarz",
    "TILER": "Glazurnik",
    "WELDER": "Spawacz",
    "OPERATOR": "Operator maszyn",
    "FOREMAN": "Brygadzista",
    "ENGINEER": "Inżynier budowy",
    "ARCHITECT": "Architekt",
    "OTHER": "Inne",
}

# Work request (client commission) categories
WORK_CATEGORIES: Dict[str, str] = {
    "CONSTRUCTION": "Budowa",
    "RENOVATION": "Remont",
    "REPAIR": "Naprawa",
    "INSTALLATION": "Instalacja",
    "MAINTENANCE": "Konserwacja",
    "DEMOLITION": "Rozbiórka",
    "LANDSCAPING": "Ogrodnictwo",
    "CLEANING": "Sprzątanie",
    "PAINTING": "Malowanie",
    "ELECTRICAL": "Elektryka",
    "PLUMBING": "Hydraulika",
    "ROOFING": "Dekarstwo",
    "FLOORING": "Podłogi",
    "WINDOWS_DOORS": "Okna i drzwi",
    "OTHER": "Inne",
}

VOIVODESHIPS: List[str] = [
    "dolnośląskie",
    "kujawsko-pomorskie",
    "lubelskie",
    "lubuskie",
    "łódzkie",
    "małopolskie",
    "mazowieckie",
    "opolskie",
    "podkarpackie",
    "podlaskie",
    "pomorskie",
    "śląskie",
    "świętokrzyskie",
    "warmińsko-mazurskie",
    "wielkopolskie",
    "zachodniopomorskie",
]

# Sentinel used by plan limits for "no limit"
UNLIMITED = -1

FREE_PLAN_NAME = "free"
PREMIUM_PLAN_NAMES = ("pro", "enterprise")

# Default plan catalogue; prices are in the smallest currency unit (grosze)
DEFAULT_PLANS: List[Dict[str, Any]] = [
    {
        "name": "free",
        "display_name": "Plan Darmowy",
        "description": "Podstawowe funkcje dla małych firm",
        "price": 0,
        "currency": "PLN",
        "max_companies": 1,
        "max_projects": 3,
        "max_workers": 5,
        "max_job_offers": 1,
        "max_work_requests": 2,
        "max_storage_gb": 0.5,
        "has_advanced_reports": False,
        "has_api_access": False,
        "has_priority_support": False,
        "has_custom_branding": False,
        "has_team_management": False,
    },
    {
        "name": "basic",
        "display_name": "Plan Podstawowy",
        "description": "Dla rozwijających się firm budowlanych",
        "price": 2900,
        "currency": "PLN",
        "max_companies": 3,
        "max_projects": 10,
        "max_workers": 15,
        "max_job_offers": 5,
        "max_work_requests": 10,
        "max_storage_gb": 2.0,
        "has_advanced_reports": False,
        "has_api_access": False,
        "has_priority_support": False,
        "has_custom_branding": False,
        "has_team_management": True,
    },
    {
        "name": "pro",
        "display_name": "Plan Profesjonalny",
        "description": "Zaawansowane funkcje dla średnich firm",
        "price": 7900,
        "currency": "PLN",
        "max_companies": 10,
        "max_projects": 50,
        "max_workers": 50,
        "max_job_offers": 20,
        "max_work_requests": 50,
        "max_storage_gb": 10.0,
        "has_advanced_reports": True,
        "has_api_access": True,
        "has_priority_support": True,
        "has_custom_branding": False,
        "has_team_management": True,
    },
    {
        "name": "enterprise",
        "display_name": "Plan Enterprise",
        "description": "Pełna funkcjonalność bez limitów",
        "price": 19900,
        "currency": "PLN",
        "max_companies": UNLIMITED,
        "max_projects": UNLIMITED,
        "max_workers": UNLIMITED,
        "max_job_offers": UNLIMITED,
        "max_work_requests": UNLIMITED,
        "max_storage_gb": 100.0,
        "has_advanced_reports": True,
        "has_api_access": True,
        "has_priority_support": True,
        "has_custom_branding": True,
        "has_team_management": True,
    },
]
