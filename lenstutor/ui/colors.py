"""Theme colors and color utilities for the UI."""


class HomeColors:
    """Light theme palette for the panels around the diagram."""

    BG_TOP = "#e0f7fa"
    BG_BOTTOM = "#80deea"

    PRIMARY = "#00838f"
    PRIMARY_LIGHT = "#4fb3bf"
    PRIMARY_DARK = "#005662"

    TEXT_PRIMARY = "#1a3a3a"
    TEXT_SECONDARY = "#4a6572"
    TEXT_MUTED = "#78909c"

    ERROR = "#b22222"
    SUCCESS = "#1f8b4c"

    CARD_BG = "rgba(255, 255, 255, 0.85)"


class DiagramColors:
    """Stroke colors used on the ray-diagram canvas."""

    GRID = "#f0f2f5"
    AXIS = "#424955"
    LENS = "#38598b"
    OBJECT = "#101820"
    FOCAL_POINT = "#111111"
    SNAP_TRUE = "#2f6f3e"
    SNAP_DISTRACTOR = "#9ca3af"
    LEARNER_RAY = "#b22222"
    IDEAL_RAY = "#1f8b4c"
    PENDING_ORIGIN = "#ff8a65"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    try:
        a = a.strip()
        b = b.strip()
        if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
            return a
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
        r = int(ar + (br - ar) * t)
        g = int(ag + (bg - ag) * t)
        bl = int(ab + (bb - ab) * t)
        return f"#{r:02X}{g:02X}{bl:02X}"
    except (TypeError, ValueError):
        return a
