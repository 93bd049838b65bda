"""Country display names for the edge-provided ISO 3166-1 alpha-2 code."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

COUNTRY_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "AE": "United Arab Emirates",
        "AF": "Afghanistan",
        "AO": "Angola",
        "AR": "Argentina",
        "AT": "Austria",
        "AU": "Australia",
        "AZ": "Azerbaijan",
        "BD": "Bangladesh",
        "BE": "Belgium",
        "BG": "Bulgaria",
        "BO": "Bolivia",
        "BR": "Brazil",
        "BY": "Belarus",
        "CA": "Canada",
        "CD": "DR Congo",
        "CH": "Switzerland",
        "CI": "Cote d'Ivoire",
        "CL": "Chile",
        "CM": "Cameroon",
        "CN": "China",
        "CO": "Colombia",
        "CZ": "Czech Republic",
        "DE": "Germany",
        "DK": "Denmark",
        "DO": "Dominican Republic",
        "DZ": "Algeria",
        "EC": "Ecuador",
        "EG": "Egypt",
        "ES": "Spain",
        "ET": "Ethiopia",
        "FI": "Finland",
        "FR": "France",
        "GB": "United Kingdom",
        "GH": "Ghana",
        "GR": "Greece",
        "GT": "Guatemala",
        "HK": "Hong Kong",
        "HN": "Honduras",
        "HR": "Croatia",
        "HU": "Hungary",
        "ID": "Indonesia",
        "IE": "Ireland",
        "IL": "Israel",
        "IN": "India",
        "IQ": "Iraq",
        "IT": "Italy",
        "JO": "Jordan",
        "JP": "Japan",
        "KE": "Kenya",
        "KH": "Cambodia",
        "KR": "South Korea",
        "KW": "Kuwait",
        "KZ": "Kazakhstan",
        "LB": "Lebanon",
        "LK": "Sri Lanka",
        "LY": "Libya",
        "MA": "Morocco",
        "MX": "Mexico",
        "MY": "Malaysia",
        "MZ": "Mozambique",
        "NG": "Nigeria",
        "NL": "Netherlands",
        "NO": "Norway",
        "NP": "Nepal",
        "NZ": "New Zealand",
        "OM": "Oman",
        "PE": "Peru",
        "PH": "Philippines",
        "PK": "Pakistan",
        "PL": "Poland",
        "PS": "Palestine",
        "PT": "Portugal",
        "QA": "Qatar",
        "RO": "Romania",
        "RS": "Serbia",
        "RU": "Russia",
        "SA": "Saudi Arabia",
        "SD": "Sudan",
        "SE": "Sweden",
        "SG": "Singapore",
        "SN": "Senegal",
        "SY": "Syria",
        "TH": "Thailand",
        "TN": "Tunisia",
        "TR": "Turkey",
        "TW": "Taiwan",
        "TZ": "Tanzania",
        "UA": "Ukraine",
        "UG": "Uganda",
        "US": "United States",
        "UY": "Uruguay",
        "UZ": "Uzbekistan",
        "VE": "Venezuela",
        "VN": "Vietnam",
        "YE": "Yemen",
        "ZA": "South Africa",
        "ZM": "Zambia",
        "ZW": "Zimbabwe",
    }
)


def country_display(code: str) -> str:
    """Return ``"France (FR)"`` for known codes, the bare code otherwise.

    Only the first two characters are used; blank input yields ``""``.
    """
    normalized = code.strip().upper()[:2]
    if normalized == "":
        return ""
    name = COUNTRY_NAMES.get(normalized)
    return f"{name} ({normalized})" if name else normalized
