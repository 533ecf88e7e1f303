# embedvault/utilities/vector_validation.py
import math
from typing import Iterable, List, Sequence, Tuple

def validate_vector(vector: Sequence[float]) -> Tuple[bool, str]:
    """Check that a vector is non-empty and holds only finite numbers."""
    if len(vector) == 0:
        return False, "Vector is empty"

    for i, val in enumerate(vector):
        # Type check
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            return False, f"vector[{i}] = {val!r} (type: {type(val).__name__})"

        # NaN/Inf check
        if math.isnan(val) or math.isinf(val):
            return False, f"vector[{i}] = {val} (NaN or Inf)"

    return True, "Valid"

def parse_vector(tokens: Iterable[str]) -> List[float]:
    """
    Parse vector components given as strings.

    Accepts separate tokens ("1", "0.5") as well as comma-separated
    groups ("1,0.5,0"); both forms may be mixed.

    Raises:
        ValueError: if a component is not a number, or the result is invalid
    """
    values = []
    for token in tokens:
        for part in token.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                values.append(float(part))
            except ValueError:
                raise ValueError(f"Invalid number: {part}") from None

    is_valid, message = validate_vector(values)
    if not is_valid:
        raise ValueError(message)
    return values
