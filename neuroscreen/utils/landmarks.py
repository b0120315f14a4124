from neuroscreen.utils.geometry import to_vec

FACE_LANDMARK_COUNT = 468
POSE_LANDMARK_COUNT = 33


class FaceLandmarkMap:
    """
    MediaPipe Face Mesh indices used for bilateral comparison.
    "left" / "right" are the subject's sides.
    """

    # Axial points defining the facial midline
    FOREHEAD_MID = 151
    NOSE_TIP = 4
    CHIN_BOTTOM = 199

    # Frontal-pose check
    NOSE_BRIDGE = 1
    FACE_LEFT_EDGE = 234
    FACE_RIGHT_EDGE = 454

    left = {
        "eye_outer": 33,
        "eye_inner": 133,
        "eye_top": 159,
        "eye_bottom": 145,
        "upper_lid": 158,
        "lower_lid": 153,
        "mouth_corner": 61,
        "upper_lip": 84,
        "lower_lip": 17,
        "brow_outer": 70,
        "brow_inner": 107,
    }

    right = {
        "eye_outer": 263,
        "eye_inner": 362,
        "eye_top": 386,
        "eye_bottom": 374,
        "upper_lid": 385,
        "lower_lid": 380,
        "mouth_corner": 291,
        "upper_lip": 314,
        "lower_lip": 18,
        "brow_outer": 300,
        "brow_inner": 336,
    }

    def __init__(self, landmarks):
        self.landmarks = landmarks

    def point(self, idx):
        """Landmark at idx, or None when out of range / dropped."""
        if idx < 0 or idx >= len(self.landmarks):
            return None
        return self.landmarks[idx]

    def pair(self, key: str):
        return self.point(self.left[key]), self.point(self.right[key])


class PoseLandmarkMap:
    """
    MediaPipe Pose (33 points) indices.
    """

    NOSE = 0

    left = {
        "eye": 2,
        "ear": 7,
        "shoulder": 11,
        "elbow": 13,
        "wrist": 15,
        "hip": 23,
    }

    right = {
        "eye": 5,
        "ear": 8,
        "shoulder": 12,
        "elbow": 14,
        "wrist": 16,
        "hip": 24,
    }

    # Landmarks whose visibility drives confidence
    KEY_POINTS = [11, 12, 23, 24, 7, 8, 0]

    def __init__(self, landmarks):
        self.landmarks = landmarks

    def point(self, idx):
        if idx < 0 or idx >= len(self.landmarks):
            return None
        return self.landmarks[idx]

    def pair(self, key: str):
        return self.point(self.left[key]), self.point(self.right[key])

    def nose(self):
        return self.point(self.NOSE)

    def shoulders_pair(self):
        return self.pair("shoulder")

    def hips_pair(self):
        return self.pair("hip")

    def both_present(self, key: str) -> bool:
        a, b = self.pair(key)
        return to_vec(a) is not None and to_vec(b) is not None
