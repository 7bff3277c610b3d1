"""
PGO — Profile-guided hot-function selection.
"""

from cscript.pgo.profile import ProfileSample, parse_profile_counts, read_profile_counts
from cscript.pgo.hotset import HotSet, select_hot_set
from cscript.pgo.loop import (
    PROFILE_FILENAME,
    INSTRUMENTED_FILENAME,
    PGOResult,
    PGOLoop,
    create_pgo_loop,
)

__all__ = [
    "ProfileSample",
    "parse_profile_counts",
    "read_profile_counts",
    "HotSet",
    "select_hot_set",
    "PROFILE_FILENAME",
    "INSTRUMENTED_FILENAME",
    "PGOResult",
    "PGOLoop",
    "create_pgo_loop",
]
