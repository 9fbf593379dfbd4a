"""Build-time limits, encoder defaults and the option set shared by encoder and decoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

# Functionality switches.
SUPPORT_HDR = True
HAS_ENCODER = True
SUPPORT_ANIMATION = True
CHECK_FOR_BROKENFILES = True

# Largest image buffer (in bytes) a decoder will attempt to allocate:
# one frame of 1000 megapixels at 5 bytes per pixel.
MAX_IMAGE_BUFFER_SIZE = 1000 * 1000000 * 5

# Refuse to decode files that claim more frames than this.
MAX_FRAMES = 50000

# Speed / size trade-off level of the coder.
LARGE_BINARY = 1

# Encoding parameter defaults.
TREE_LEARN_REPEATS = 2
DEFAULT_MAX_PALETTE_SIZE = 512
SPLIT_THRESHOLD_UNIT = 5461
CONTEXT_TREE_SPLIT_THRESHOLD = SPLIT_THRESHOLD_UNIT * 8 * 8
CONTEXT_TREE_COUNT_DIV = 30
CONTEXT_TREE_MIN_SUBTREE_SIZE = 50

# Bitstream-defining parameters: changing these breaks compatibility.
NB_NOLEARN_ZOOMS = 12
FAST_BUT_WORSE_COMPRESSION = True
CONTEXT_TREE_MIN_COUNT = 1
CONTEXT_TREE_MAX_COUNT = 512

# Width of the range coder used for both input and output.
RAC_BITS = 24
# Number of scales used by the bit-chance model (1 means a single simple chance).
BIT_CHANCE_SCALES = 1 if FAST_BUT_WORSE_COMPRESSION else 6

NUM_PREDICTOR_PLANES = 5


class Encoding(IntEnum):
    """Pixel traversal method of a FLIF stream."""

    NON_INTERLACED = 1
    INTERLACED = 2


def _default_predictors() -> list[int]:
    # -2: heuristically pick a fixed predictor on every plane
    return [-2] * NUM_PREDICTOR_PLANES


@dataclass
class FlifOptions:
    """Every tunable used when encoding or decoding a FLIF image."""

    # encoder
    learn_repeats: int = -1
    acb: int = -1
    frame_delay: list[int] = field(default_factory=lambda: [100])
    palette_size: int = -1
    lookback: int = 1
    divisor: int = CONTEXT_TREE_COUNT_DIV
    min_size: int = CONTEXT_TREE_MIN_SUBTREE_SIZE
    split_threshold: int = CONTEXT_TREE_SPLIT_THRESHOLD
    ycocg: bool = True
    subtract_green: bool = True
    plc: bool = True
    frs: bool = True
    alpha_zero_special: bool = True
    loss: int = 0
    adaptive: bool = False
    predictor: list[int] = field(default_factory=_default_predictors)
    chroma_subsampling: bool = False
    # shared
    method: Encoding | None = None
    invisible_predictor: int = 2
    alpha: int = 19
    cutoff: int = 2
    crc_check: int = -1
    metadata: bool = True
    color_profile: bool = True
    # 100 = everything, positive: partial decode, negative: only rough data
    quality: int = 100
    scale: int = 1
    resize_width: int = 0
    resize_height: int = 0
    fit: bool = False
    overwrite: bool = False
    just_add_loss: bool = False
    show_breakpoints: int = 0
    no_full_decode: bool = False
    keep_palette: bool = False


def default_options() -> FlifOptions:
    """Return a fresh option set holding the default values."""
    return FlifOptions()