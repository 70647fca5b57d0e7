"""
Administrative-area lookup for Swedish municipalities (kommun) and counties (län).

Municipality centroids are not tracked: a 4-digit municipality code resolves
to the representative point of its county, found through the first two
digits of the code.
"""

import logging
import re
from typing import Dict, List, Mapping, Optional, Tuple

from .models import Coordinate, ResolvedArea

logger = logging.getLogger(__name__)

MUNICIPALITY_CODE_PATTERN = re.compile(r"[0-9]{4}\Z")
REGION_CODE_PATTERN = re.compile(r"[A-Za-z]{1,2}\Z")

# County code -> (name, latitude, longitude) of the county seat
COUNTY_CENTROIDS: Mapping[str, Tuple[str, float, float]] = {
    "AB": ("Stockholms län", 59.3293, 18.0686),
    "C": ("Uppsala län", 59.8586, 17.6389),
    "D": ("Södermanlands län", 58.7530, 17.0079),
    "E": ("Östergötlands län", 58.4108, 15.6214),
    "F": ("Jönköpings län", 57.7826, 14.1618),
    "G": ("Kronobergs län", 56.8777, 14.8091),
    "H": ("Kalmar län", 56.6634, 16.3568),
    "I": ("Gotlands län", 57.6348, 18.2948),
    "K": ("Blekinge län", 56.1612, 15.5869),
    "M": ("Skåne län", 55.6050, 13.0038),
    "N": ("Hallands län", 56.6745, 12.8578),
    "O": ("Västra Götalands län", 57.7089, 11.9746),
    "S": ("Värmlands län", 59.3793, 13.5036),
    "T": ("Örebro län", 59.2753, 15.2134),
    "U": ("Västmanlands län", 59.6099, 16.5448),
    "W": ("Dalarnas län", 60.6065, 15.6355),
    "X": ("Gävleborgs län", 60.6749, 17.1413),
    "Y": ("Västernorrlands län", 62.6323, 17.9379),
    "Z": ("Jämtlands län", 63.1792, 14.6357),
    "AC": ("Västerbottens län", 63.8258, 20.2630),
    "BD": ("Norrbottens län", 65.5848, 22.1547),
}

# Municipality code prefix (first 2 digits) -> county code
MUNICIPALITY_PREFIX_TO_COUNTY: Mapping[str, str] = {
    "01": "AB",  # Stockholm
    "03": "C",  # Uppsala
    "04": "D",  # Södermanland
    "05": "E",  # Östergötland
    "06": "F",  # Jönköping
    "07": "G",  # Kronoberg
    "08": "H",  # Kalmar
    "09": "I",  # Gotland
    "10": "K",  # Blekinge
    "12": "M",  # Skåne
    "13": "N",  # Halland
    "14": "O",  # Västra Götaland
    "17": "S",  # Värmland
    "18": "T",  # Örebro
    "19": "U",  # Västmanland
    "20": "W",  # Dalarna
    "21": "X",  # Gävleborg
    "22": "Y",  # Västernorrland
    "23": "Z",  # Jämtland
    "24": "AC",  # Västerbotten
    "25": "BD",  # Norrbotten
}


class AdminAreaResolver:
    """Map municipality and county codes to a representative coordinate."""

    def __init__(
        self,
        regions: Optional[Mapping[str, Tuple[str, float, float]]] = None,
        municipality_prefixes: Optional[Mapping[str, str]] = None,
    ):
        self._regions: Dict[str, Tuple[str, float, float]] = {
            code.upper(): entry
            for code, entry in (regions if regions is not None else COUNTY_CENTROIDS).items()
        }
        self._prefixes: Dict[str, str] = dict(
            municipality_prefixes
            if municipality_prefixes is not None
            else MUNICIPALITY_PREFIX_TO_COUNTY
        )

    @staticmethod
    def is_valid_code(code: str) -> bool:
        """True when the code has a municipality or county shape."""
        return bool(
            MUNICIPALITY_CODE_PATTERN.match(code) or REGION_CODE_PATTERN.match(code)
        )

    def resolve(self, code: str) -> Optional[ResolvedArea]:
        """
        Resolve an administrative-area code to a coordinate.

        Args:
            code: 4-digit municipality code (e.g. '0180') or 1-2 letter county
                  code (e.g. 'AB', case-insensitive)

        Returns:
            ResolvedArea, or None when the code has neither shape or is unknown.
            Malformed codes are never matched approximately.
        """
        code = code.strip()
        if MUNICIPALITY_CODE_PATTERN.match(code):
            return self._resolve_municipality(code)
        if REGION_CODE_PATTERN.match(code):
            return self._resolve_region(code.upper())

        logger.debug(f"Rejected malformed administrative code {code!r}")
        return None

    def _resolve_region(self, region_code: str) -> Optional[ResolvedArea]:
        entry = self._regions.get(region_code)
        if entry is None:
            return None
        name, latitude, longitude = entry
        return ResolvedArea(
            coordinate=Coordinate(latitude, longitude),
            name=name,
            kind="region",
            code=region_code,
            region_code=region_code,
        )

    def _resolve_municipality(self, code: str) -> Optional[ResolvedArea]:
        region_code = self.region_for_municipality(code)
        if region_code is None:
            return None
        region = self._resolve_region(region_code)
        if region is None:
            return None
        return ResolvedArea(
            coordinate=region.coordinate,
            name=f"{region.name} (kommun {code})",
            kind="municipality",
            code=code,
            region_code=region_code,
        )

    def region_for_municipality(self, code: str) -> Optional[str]:
        """County code enclosing a municipality, from its 2-digit prefix."""
        if not MUNICIPALITY_CODE_PATTERN.match(code):
            return None
        return self._prefixes.get(code[:2])

    def list_regions(self) -> List[Dict]:
        return [
            {"code": code, "name": name, "latitude": lat, "longitude": lon}
            for code, (name, lat, lon) in self._regions.items()
        ]
