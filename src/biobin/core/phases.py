import math
from typing import Optional

INACTIVE = "Inactive"
PSYCHROPHILIC = "Psychrophilic Phase"
MESOPHILIC = "Mesophilic Phase"
THERMOPHILIC = "Thermophilic Phase"
OVERHEATING = "Overheating Warning!"


def compost_phase(temperature: Optional[float]) -> str:
    """Composting phase implied by a pile temperature in degrees Celsius."""
    if temperature is None or math.isnan(temperature):
        return INACTIVE
    if temperature < 10:
        return PSYCHROPHILIC
    if temperature < 45:
        return MESOPHILIC
    if temperature <= 70:
        return THERMOPHILIC
    return OVERHEATING
