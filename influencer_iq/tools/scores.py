# influencer_iq/tools/scores.py
import math
from typing import Any, Optional

SCORE_MIN = 0.0
SCORE_MAX = 10.0


def validate_score(value: Any) -> Optional[float]:
    """
    Coerce a model/user supplied score into [0, 10].
    None, booleans, NaN and anything non-numeric become None ("unknown"), never 0.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(num):
        return None
    return max(SCORE_MIN, min(SCORE_MAX, num))
