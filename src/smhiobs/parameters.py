"""
Observation parameter tables and periods for the SMHI networks.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .exceptions import SMHIValidationError

NETWORKS = ("meteorological", "hydrological")

# Observation periods served by the metobs/hydroobs APIs
PERIODS = ("latest-hour", "latest-day", "latest-months", "corrected-archive")
ARCHIVE_PERIOD = "corrected-archive"
DEFAULT_PERIOD = "latest-hour"


@dataclass(frozen=True)
class ParameterDefinition:
    """A logical parameter name bound to an upstream parameter code."""

    name: str
    code: int
    unit: str
    description: str = ""


# Meteorological observation parameters (SMHI parameter id -> definition)
MET_OBS_PARAMS: Mapping[int, ParameterDefinition] = MappingProxyType(
    {
        1: ParameterDefinition("temperature", 1, "°C", "Lufttemperatur momentanvärde"),
        3: ParameterDefinition("wind_direction", 3, "°", "Vindriktning momentanvärde"),
        4: ParameterDefinition("wind_speed", 4, "m/s", "Vindhastighet momentanvärde"),
        5: ParameterDefinition("precipitation", 5, "mm", "Nederbördsmängd"),
        6: ParameterDefinition(
            "humidity", 6, "%", "Relativ luftfuktighet momentanvärde"
        ),
        9: ParameterDefinition(
            "pressure", 9, "hPa", "Lufttryck reducerat havsytans nivå"
        ),
        21: ParameterDefinition("wind_gust", 21, "m/s", "Byvind"),
    }
)

# Hydrological observation parameters
HYDRO_OBS_PARAMS: Mapping[int, ParameterDefinition] = MappingProxyType(
    {
        1: ParameterDefinition("water_level", 1, "m", "Vattenstånd"),
        2: ParameterDefinition("water_flow", 2, "m³/s", "Vattenföring"),
    }
)


class ParameterTable:
    """
    Lookup of logical parameter names per network.

    The tables are injected so tests and callers can substitute their own
    mappings; by default the SMHI tables above are used.
    """

    def __init__(
        self,
        meteorological: Optional[Mapping[int, ParameterDefinition]] = None,
        hydrological: Optional[Mapping[int, ParameterDefinition]] = None,
    ):
        self._tables: Dict[str, Mapping[int, ParameterDefinition]] = {
            "meteorological": meteorological
            if meteorological is not None
            else MET_OBS_PARAMS,
            "hydrological": hydrological
            if hydrological is not None
            else HYDRO_OBS_PARAMS,
        }

    def _table(self, network: str) -> Mapping[int, ParameterDefinition]:
        try:
            return self._tables[network]
        except KeyError:
            raise SMHIValidationError(
                f"Unknown network '{network}'. Available: {list(NETWORKS)}",
                field="network",
            ) from None

    def lookup(self, network: str, name: str) -> Optional[ParameterDefinition]:
        """Return the definition for a logical name, or None when unmapped."""
        for definition in self._table(network).values():
            if definition.name == name:
                return definition
        return None

    def names(self, network: str) -> List[str]:
        return [definition.name for definition in self._table(network).values()]

    def describe(self, network: str) -> List[Dict]:
        """Parameter metadata for a network, ordered by upstream code."""
        table = self._table(network)
        return [
            {
                "id": code,
                "name": table[code].name,
                "description": table[code].description,
                "unit": table[code].unit,
            }
            for code in sorted(table)
        ]


def validate_period(period: str) -> str:
    """Ensure a period name is one SMHI serves."""
    if period not in PERIODS:
        raise SMHIValidationError(
            f"Unsupported period '{period}'. Available: {list(PERIODS)}",
            field="period",
        )
    return period
