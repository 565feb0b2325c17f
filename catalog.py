"""
Category catalog for the movie spinner.

Regions map to the country names accepted when checking a suggested movie's
``country`` field. A country can sit in more than one region (Turkey, Russia,
Georgia, Mexico, ...).
"""
import random
from typing import Dict, List, Optional

REGION_COUNTRIES: Dict[str, List[str]] = {
    "North America": [
        "United States", "USA", "Canada", "Mexico", "Greenland", "Bermuda",
        "Saint Pierre and Miquelon",
    ],
    "Europe": [
        "Albania", "Andorra", "Armenia", "Austria", "Azerbaijan", "Belarus", "Belgium",
        "Bosnia and Herzegovina", "Bulgaria", "Croatia", "Cyprus", "Czech Republic",
        "Denmark", "Estonia", "Finland", "France", "Georgia", "Germany", "Greece",
        "Hungary", "Iceland", "Ireland", "Italy", "Kazakhstan", "Kosovo", "Latvia",
        "Liechtenstein", "Lithuania", "Luxembourg", "Malta", "Moldova", "Monaco",
        "Montenegro", "Netherlands", "North Macedonia", "Norway", "Poland", "Portugal",
        "Romania", "Russia", "San Marino", "Serbia", "Slovakia", "Slovenia", "Spain",
        "Sweden", "Switzerland", "Turkey", "Ukraine", "United Kingdom", "UK",
        "Vatican City",
    ],
    "Asia": [
        "Afghanistan", "Armenia", "Azerbaijan", "Bahrain", "Bangladesh", "Bhutan",
        "Brunei", "Cambodia", "China", "Cyprus", "East Timor", "Timor-Leste", "Georgia",
        "India", "Indonesia", "Iran", "Iraq", "Israel", "Japan", "Jordan", "Kazakhstan",
        "Kuwait", "Kyrgyzstan", "Laos", "Lebanon", "Malaysia", "Maldives", "Mongolia",
        "Myanmar", "Burma", "Nepal", "North Korea", "Oman", "Pakistan", "Palestine",
        "Philippines", "Qatar", "Russia", "Saudi Arabia", "Singapore", "South Korea",
        "Sri Lanka", "Syria", "Taiwan", "Tajikistan", "Thailand", "Turkey",
        "Turkmenistan", "United Arab Emirates", "Uzbekistan", "Vietnam", "Yemen",
    ],
    "Latin America": [
        "Mexico", "Belize", "Costa Rica", "El Salvador", "Guatemala", "Honduras",
        "Nicaragua", "Panama", "Cuba", "Dominican Republic", "Haiti", "Jamaica",
        "Puerto Rico", "Argentina", "Bolivia", "Brazil", "Chile", "Colombia", "Ecuador",
        "Guyana", "Paraguay", "Peru", "Suriname", "Uruguay", "Venezuela",
        "Trinidad and Tobago", "Barbados", "Bahamas", "Grenada", "St. Lucia",
        "Antigua and Barbuda", "St. Kitts and Nevis", "Dominica",
        "St. Vincent and the Grenadines",
    ],
    "Africa": [
        "Algeria", "Angola", "Benin", "Botswana", "Burkina Faso", "Burundi", "Cabo Verde",
        "Cameroon", "Central African Republic", "Chad", "Comoros",
        "Democratic Republic of the Congo", "Republic of the Congo", "Djibouti", "Egypt",
        "Equatorial Guinea", "Eritrea", "Eswatini", "Ethiopia", "Gabon", "Gambia",
        "Ghana", "Guinea", "Guinea-Bissau", "Ivory Coast", "Kenya", "Lesotho", "Liberia",
        "Libya", "Madagascar", "Malawi", "Mali", "Mauritania", "Mauritius", "Morocco",
        "Mozambique", "Namibia", "Niger", "Nigeria", "Rwanda", "Sao Tome and Principe",
        "Senegal", "Seychelles", "Sierra Leone", "Somalia", "South Africa",
        "South Sudan", "Sudan", "Tanzania", "Togo", "Tunisia", "Uganda", "Zambia",
        "Zimbabwe",
    ],
    "Oceania": [
        "Australia", "New Zealand", "Fiji", "Papua New Guinea", "Samoa",
        "Solomon Islands", "Tonga", "Vanuatu", "Micronesia", "Palau",
        "Marshall Islands", "Kiribati", "Nauru", "Tuvalu",
    ],
}

BUDGET_RANGES: Dict[str, str] = {
    "Micro-budget": "< $100k",
    "Indie": "$100k - $10M",
    "Studio": "$10M - $50M",
    "Blockbuster": "> $50M",
}

GENRES: List[str] = [
    "Drama", "Comedy", "Horror", "Action", "Sci-Fi", "Romance", "Thriller",
    "Animation", "Documentary",
]

DECADES: List[str] = ["1950s", "1960s", "1970s", "1980s", "1990s", "2000s", "2010s", "2020s"]

CATEGORY_CHOICES: Dict[str, List[str]] = {
    "region": list(REGION_COUNTRIES),
    "genre": GENRES,
    "decade": DECADES,
    "budget": list(BUDGET_RANGES),
}


class UnknownCategoryError(ValueError):
    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Unknown {field}: {value}")


def fill_selections(selections: Optional[Dict[str, Optional[str]]] = None, rng=random) -> Dict[str, str]:
    """Return a complete region/genre/decade/budget selection.

    Missing or empty values get a uniform random pick from their list;
    supplied values must belong to it or ``UnknownCategoryError`` is raised.
    """
    selections = selections or {}
    filled = {}
    for field, choices in CATEGORY_CHOICES.items():
        value = selections.get(field)
        if not value:
            value = rng.choice(choices)
        elif value not in choices:
            raise UnknownCategoryError(field, value)
        filled[field] = value
    return filled


def country_matches_region(country: Optional[str], region: str) -> bool:
    # Substring containment, so "Georgia" in "Atlanta, Georgia, USA" counts too.
    if not country:
        return False
    return any(name in country for name in REGION_COUNTRIES[region])
