"""
AFCON 2025 participating teams (API-Football team IDs).
"""
from typing import Dict, Optional

AFCON_TEAMS: Dict[int, str] = {
    1532: "Algeria",
    1529: "Angola",
    1516: "Benin",
    1520: "Botswana",
    1502: "Burkina Faso",
    1530: "Cameroon",
    1524: "Comoros",
    1508: "Congo DR",
    32: "Egypt",
    1521: "Equatorial Guinea",
    1503: "Gabon",
    1501: "Ivory Coast",
    1500: "Mali",
    31: "Morocco",
    1512: "Mozambique",
    19: "Nigeria",
    13: "Senegal",
    1531: "South Africa",
    1510: "Sudan",
    1489: "Tanzania",
    28: "Tunisia",
    1519: "Uganda",
    1507: "Zambia",
    1522: "Zimbabwe",
}


def get_team_name(team_id: int) -> Optional[str]:
    return AFCON_TEAMS.get(team_id)
