"""Feature detectors grouped by probing technique.

Importing this package registers every detector in DETECTORS, keyed by
FeatureName, in the order the technique modules are imported.
"""

from glyphanatomy.core.detectors._registry import DETECTORS, Detector, DetectorOutput, detector
from glyphanatomy.core.detectors.cavities import (
    get_counter,
    get_eye,
    has_aperture,
    has_bowl,
    has_link,
    has_loop,
    has_neck,
)
from glyphanatomy.core.detectors.convergence import has_apex, has_vertex
from glyphanatomy.core.detectors.marks import get_tittle
from glyphanatomy.core.detectors.stems import (
    has_bar,
    has_bracket,
    has_cross_stroke,
    has_foot,
    has_serif,
    has_stem,
)
from glyphanatomy.core.detectors.strokes import (
    has_arc,
    has_arm,
    has_beak,
    has_hook,
    has_leg,
    has_shoulder,
    has_spine,
    has_tail,
)
from glyphanatomy.core.detectors.terminals import get_terminal, has_finial
from glyphanatomy.core.detectors.wedges import has_crotch, has_ear, has_spur

__all__: list[str] = [
    "DETECTORS",
    "Detector",
    "DetectorOutput",
    "detector",
    # Banding
    "has_bar",
    "has_bracket",
    "has_cross_stroke",
    "has_foot",
    "has_serif",
    "has_stem",
    # Cavities
    "get_counter",
    "get_eye",
    "has_aperture",
    "has_bowl",
    "has_link",
    "has_loop",
    "has_neck",
    # Convergence
    "has_apex",
    "has_vertex",
    # Wedges
    "has_crotch",
    "has_ear",
    "has_spur",
    # Marks and stroke ends
    "get_terminal",
    "get_tittle",
    "has_finial",
    # Directional strokes
    "has_arc",
    "has_arm",
    "has_beak",
    "has_hook",
    "has_leg",
    "has_shoulder",
    "has_spine",
    "has_tail",
]
