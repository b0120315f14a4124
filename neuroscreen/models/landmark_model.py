from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class LandmarkPoint(BaseModel):
    # Normalized image-plane coordinates
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None


class LandmarkFrame(BaseModel):
    """
    One detector cycle: 468 face-mesh points or 33 pose points.
    None entries are landmarks the detector dropped this cycle.
    """
    landmarks: List[Optional[LandmarkPoint]] = Field(default_factory=list)
    timestamp: Optional[datetime] = None

    def __len__(self):
        return len(self.landmarks)
