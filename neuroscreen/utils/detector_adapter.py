from datetime import datetime, timezone

from neuroscreen.models.landmark_model import LandmarkFrame, LandmarkPoint


def _point(p):
    if p is None:
        return None

    if isinstance(p, dict):
        x, y = p.get("x"), p.get("y")
        z = p.get("z")
        vis = p.get("visibility", p.get("vis"))
    else:
        x, y = getattr(p, "x", None), getattr(p, "y", None)
        z = getattr(p, "z", None)
        vis = getattr(p, "visibility", None)

    if x is None or y is None:
        return None

    return LandmarkPoint(
        x=float(x),
        y=float(y),
        z=None if z is None else float(z),
        visibility=None if vis is None else float(vis),
    )


def frame_from_detector(result) -> LandmarkFrame:
    """
    Convert one detector cycle into a LandmarkFrame.

    Accepts a MediaPipe NormalizedLandmarkList (anything with .landmark), a
    plain list of landmark objects, or a list of {"x","y","z","vis"} dicts.
    A missing result yields an empty frame, which analyzers report as
    insufficient.
    """
    if result is None:
        points = []
    elif hasattr(result, "landmark"):
        points = result.landmark
    else:
        points = result

    return LandmarkFrame(
        landmarks=[_point(p) for p in points],
        timestamp=datetime.now(timezone.utc),
    )
