# neuroscreen/utils/geometry.py

import math
import sys

import numpy as np

# Returned by slope() for a zero-run segment instead of raising.
VERTICAL_SLOPE = sys.float_info.max


# -----------------------------------------------------------
# POINT ACCESS
# -----------------------------------------------------------

def _field(p, name):
    if isinstance(p, dict):
        return p.get(name)
    return getattr(p, name, None)


def to_vec(p):
    """
    Return a landmark as np.array([x, y, z]) or None.

    Accepts LandmarkPoint-like objects and {"x", "y", "z"} dicts.
    Missing z defaults to 0. Missing or non-finite x/y yields None,
    which every primitive below treats as a dropped landmark.
    """
    if p is None:
        return None

    x = _field(p, "x")
    y = _field(p, "y")
    if x is None or y is None:
        return None

    z = _field(p, "z")
    try:
        v = np.array([x, y, 0.0 if z is None else z], float)
    except (TypeError, ValueError):
        return None

    if not np.all(np.isfinite(v)):
        return None
    return v


def is_valid(p) -> bool:
    return to_vec(p) is not None


def visibility(p, default=None):
    v = _field(p, "visibility") if p is not None else None
    if v is None and isinstance(p, dict):
        v = p.get("vis")
    return default if v is None else float(v)


# -----------------------------------------------------------
# PRIMITIVES
# -----------------------------------------------------------

def distance(a, b) -> float:
    """3D Euclidean distance; 0 when either point is missing."""
    va, vb = to_vec(a), to_vec(b)
    if va is None or vb is None:
        return 0.0
    return float(np.linalg.norm(va - vb))


def asymmetry_ratio(left: float, right: float) -> float:
    """
    1 - smaller/larger of two bilateral measurements.
    0 = perfectly symmetric, towards 1 = maximally asymmetric.
    """
    left, right = abs(float(left)), abs(float(right))
    hi = max(left, right)
    if hi == 0 or not math.isfinite(hi):
        return 0.0
    return 1.0 - min(left, right) / hi


def angle(p1, p2, p3) -> float:
    """
    Planar angle p1-p2-p3 at vertex p2, in degrees within [0, 180].
    """
    a, b, c = to_vec(p1), to_vec(p2), to_vec(p3)
    if a is None or b is None or c is None:
        return 0.0

    radians = math.atan2(c[1] - b[1], c[0] - b[0]) - math.atan2(a[1] - b[1], a[0] - b[0])
    deg = abs(math.degrees(radians))

    if deg > 180.0:
        deg = 360.0 - deg
    return float(deg)


def slope(p1, p2) -> float:
    """Rise over run; VERTICAL_SLOPE when the run is zero."""
    a, b = to_vec(p1), to_vec(p2)
    if a is None or b is None:
        return 0.0

    run = b[0] - a[0]
    if run == 0:
        return VERTICAL_SLOPE
    return float((b[1] - a[1]) / run)


def normalize(value: float, max_value: float) -> float:
    """
    Map |value| onto [0, 1] against a clinically chosen ceiling.
    """
    if max_value <= 0 or value is None or math.isnan(value):
        return 0.0
    return min(abs(value) / max_value, 1.0)


# -----------------------------------------------------------
# HELPERS
# -----------------------------------------------------------

def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    if value is None or math.isnan(value):
        return lo
    return max(lo, min(hi, value))


def midpoint(a, b):
    """Midpoint as a {"x", "y", "z"} dict, or None when a side is missing."""
    va, vb = to_vec(a), to_vec(b)
    if va is None or vb is None:
        return None
    m = (va + vb) / 2.0
    return {"x": float(m[0]), "y": float(m[1]), "z": float(m[2])}


def deviation_from_vertical(origin, point, reach: float = 0.1) -> float:
    """
    Angle in degrees between segment origin->point and the vertical axis
    through origin, folded to [0, 90] so that a point straight above or
    straight below origin both read as 0.
    """
    o, p = to_vec(origin), to_vec(point)
    if o is None or p is None:
        return 0.0
    if np.allclose(o[:2], p[:2]):
        return 0.0

    up = {"x": float(o[0]), "y": float(o[1]) - reach, "z": float(o[2])}
    deg = angle(up, origin, point)
    return float(min(deg, 180.0 - deg))
