"""Command-line option parsing, help and banner text for the flif tool."""

from __future__ import annotations

import getopt
import os
import re
from dataclasses import dataclass, field
from enum import IntEnum

from .options import (
    CONTEXT_TREE_COUNT_DIV,
    CONTEXT_TREE_MIN_SUBTREE_SIZE,
    CONTEXT_TREE_SPLIT_THRESHOLD,
    DEFAULT_MAX_PALETTE_SIZE,
    FAST_BUT_WORSE_COMPRESSION,
    HAS_ENCODER,
    NUM_PREDICTOR_PLANES,
    SPLIT_THRESHOLD_UNIT,
    SUPPORT_HDR,
    TREE_LEARN_REPEATS,
    Encoding,
    FlifOptions,
    default_options,
)


class Mode(IntEnum):
    """What the tool is asked to do."""

    ENCODE = 0
    DECODE = 1
    TRANSCODE = 2


class OptionError(ValueError):
    """An option was given a value that makes no sense."""


@dataclass
class ParsedCommand:
    """Outcome of parsing a command line."""

    mode: Mode | None
    options: FlifOptions
    files: list[str] = field(default_factory=list)
    verbosity: int = 1
    show_help: bool = False
    invalid_option: str | None = None
    last_is_output: bool = True
    notes: list[tuple[int, str]] = field(default_factory=list)


_PROGRAM_MODES = {
    "cflif": Mode.ENCODE,
    "dflif": Mode.DECODE,
    "deflif": Mode.DECODE,
    "decflif": Mode.DECODE,
}

_SHORT_OPTIONS = "hdvcmiVq:s:r:f:obk"
_ENCODER_SHORT_OPTIONS = "etINnF:KP:ABYWCL:SR:D:M:T:X:Z:Q:UG:H:E:J"

_LONG_OPTIONS = {
    "help": "h",
    "decode": "d",
    "verbose": "v",
    "no-crc": "c",
    "no-metadata": "m",
    "no-color-profile": "p",
    "quality=": "q",
    "scale=": "s",
    "resize=": "r",
    "fit=": "f",
    "identify": "i",
    "version": "V",
    "overwrite": "o",
    "breakpoints": "b",
    "keep-palette": "k",
}

_ENCODER_LONG_OPTIONS = {
    "encode": "e",
    "transcode": "t",
    "interlace": "I",
    "no-interlace": "N",
    "frame-delay=": "F",
    "keep-invisible-rgb": "K",
    "max-palette-size=": "P",
    "force-color-buckets": "A",
    "no-color-buckets": "B",
    "no-ycocg": "Y",
    "no-channel-compact": "C",
    "max-frame-lookback=": "L",
    "no-frame-shape": "S",
    "maniac-repeats=": "R",
    "maniac-divisor=": "D",
    "maniac-min-size=": "M",
    "maniac-threshold=": "T",
    "chance-cutoff=": "X",
    "chance-alpha=": "Z",
    "lossy=": "Q",
    "adaptive": "U",
    "guess=": "G",
    "invisible-guess=": "H",
    "effort=": "E",
    "chroma-subsample": "J",
    "no-subtract-green": "W",
}

_PREDICTOR_CODES = {
    **dict.fromkeys("?GgHh", -2),  # pick heuristically
    **dict.fromkeys("0Aa", 0),  # average
    **dict.fromkeys("1Mm", 1),  # median of average and gradients
    **dict.fromkeys("2Nn", 2),  # median of neighbours
    **dict.fromkeys("3Xx", -1),  # auto/mixed
}
_PREDICTOR_SEPARATORS = " ,+"

_ATOI = re.compile(r"\s*([+-]?\d+)")
_SCAN_INT = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_STRTOL = re.compile(r"\s*[+-]?\d+")


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _scan_int(text: str, pos: int) -> tuple[int, int] | None:
    """Read an integer the way a %i conversion does; return (value, end)."""
    match = _SCAN_INT.match(text, pos)
    if not match:
        return None
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return (-value if sign == "-" else value), match.end()


_ENCODE_HELP = [
    (1, "Encode options: (-e, --encode)"),
    (1, "   -E, --effort=N              0=fast/poor compression, 100=slowest/best? (default: -E60)"),
    (1, "   -I, --interlace             interlacing (default, except for tiny images)"),
    (1, "   -N, --no-interlace          force no interlacing"),
    (1, "   -Q, --lossy=N               lossy compression; default: -Q100 (lossless)"),
    (1, "   -K, --keep-invisible-rgb    store original RGB values behind A=0"),
    (1, "   -F, --frame-delay=N[,N,..]  delay between animation frames in ms; default: -F100"),
    (2, "Advanced encode options: (mostly useful for flifcrushing)"),
    (2, f"   -P, --max-palette-size=N    max size for Palette(_Alpha); default: -P{DEFAULT_MAX_PALETTE_SIZE}"),
    (2, "   -A, --force-color-buckets   force Color_Buckets transform"),
    (2, "   -B, --no-color-buckets      disable Color_Buckets transform"),
    (2, "   -C, --no-channel-compact    disable Channel_Compact transform"),
    (2, "   -Y, --no-ycocg              disable YCoCg transform; use G(R-G)(B-G)"),
    (2, "   -W, --no-subtract-green     disable YCoCg and SubtractGreen transform; use GRB"),
    (2, "   -S, --no-frame-shape        disable Frame_Shape transform"),
    (2, "   -L, --max-frame-lookback=N  max nb of frames for Frame_Lookback; default: -L1"),
    (2, f"   -R, --maniac-repeats=N      MANIAC learning iterations; default: -R{TREE_LEARN_REPEATS}"),
    (3, "   -T, --maniac-threshold=N    MANIAC tree growth split threshold, in bits saved; "
        f"default: -T{CONTEXT_TREE_SPLIT_THRESHOLD // SPLIT_THRESHOLD_UNIT}"),
    (3, f"   -D, --maniac-divisor=N      MANIAC inner node count divisor; default: -D{CONTEXT_TREE_COUNT_DIV}"),
    (3, f"   -M, --maniac-min-size=N     MANIAC post-pruning threshold; default: -M{CONTEXT_TREE_MIN_SUBTREE_SIZE}"),
    (3, "   -X, --chance-cutoff=N       minimum chance (N/4096); default: -X2"),
    (3, "   -Z, --chance-alpha=N        chance decay factor; default: -Z19"),
    (3, "   -U, --adaptive              adaptive lossy, second input image is saliency map"),
    (3, "   -G, --guess=N[N..]          pixel predictor for each plane (Y,Co,Cg,Alpha,Lookback)"),
    (3, "                               ?=pick heuristically, 0=avg, 1=median_grad, 2=median_nb, X=mixed"),
    (3, "   -H, --invisible-guess=N     predictor for invisible pixels (only if -K is not used)"),
    (3, "   -J, --chroma-subsample      write an incomplete 4:2:0 chroma subsampled FLIF file (lossy!)"),
]

_DECODE_HELP = [
    (1, "Decode options: (-d, --decode)"),
    (1, "   -i, --identify             do not decode, just identify the input FLIF file"),
    (1, "   -q, --quality=N            lossy decode quality percentage; default -q100"),
    (1, "   -s, --scale=N              lossy downscaled image at scale 1:N (2,4,8,16,32); default -s1"),
    (1, "   -r, --resize=WxH           lossy downscaled image to fit inside WxH (but typically smaller)"),
    (1, "   -f, --fit=WxH              lossy downscaled image to exactly WxH"),
    (2, "   -b, --breakpoints          report breakpoints (truncation offsets) for truncations at scales 1:8, 1:4, 1:2"),
]


def help_text(mode: Mode | None, verbosity: int) -> str:
    """Return the usage text shown at the given verbosity.

    Encode options are left out in decode mode and decode options in encode mode.
    """
    lines: list[tuple[int, str]] = [(1, "Usage:")]
    if HAS_ENCODER:
        lines.append((1, "   flif [-e] [encode options] <input image(s)> <output.flif>"))
    lines.append((1, "   flif [-d] [decode options] <input.flif> <output.pnm | output.pam | output.png>"))
    if HAS_ENCODER:
        lines.append((2, "   flif [-t] [decode options] [encode options] <input.flif> <output.flif>"))
    lines += [
        (1, "Supported input/output image formats: PNG, PNM (PPM,PGM,PBM), PAM"),
        (1, "General Options:"),
        (1, "   -h, --help                  show help (use -hvv for advanced options)"),
        (1, "   -v, --verbose               increase verbosity (multiple -v for more output)"),
        (2, "   -c, --no-crc                don't verify the CRC (or don't add a CRC)"),
        (2, "   -m, --no-metadata           strip Exif/XMP metadata (default is to keep it)"),
        (2, "   -p, --no-color-profile      strip ICC color profile (default is to keep it)"),
        (2, "   -o, --overwrite             overwrite existing files"),
        (2, "   -k, --keep-palette          use input PNG palette / write palette PNG if possible"),
    ]
    if HAS_ENCODER and mode != Mode.DECODE:
        lines += _ENCODE_HELP
    if mode != Mode.ENCODE:
        lines += _DECODE_HELP
    return "".join(f"{text}\n" for level, text in lines if level <= verbosity)


def banner_text(verbosity: int) -> str:
    """Return the start-up banner shown at the given verbosity."""
    pieces: list[tuple[int, str]] = [
        (3, "  ____ _(_)____\n"),
        (3, " (___ | | | ___)   "),
        (2, "FLIF (Free Lossless Image Format) 0.3 [28 April 2017]\n"),
        (3, "  (__ | |_| __)\n"),
        (3, "    (_|___|_)\n"),
        (3, "\n"),
    ]
    if not HAS_ENCODER:
        pieces.append((2, "Non-default compile-option: DECODER ONLY\n"))
    if not SUPPORT_HDR:
        pieces.append((2, "Non-default compile-option: 8-BIT ONLY\n"))
    if not FAST_BUT_WORSE_COMPRESSION:
        pieces.append((2, "Non-default compile-option: SLOWER, BETTER COMPRESSION "
                          "(CANNOT ENCODE/DECODE NORMAL FLIF FILES!)\n"))
    return "".join(text for level, text in pieces if level <= verbosity)


def parse_predictors(text: str) -> list[int]:
    """Return the predictor codes listed in text, one per plane, in plane order."""
    predictors: list[int] = []
    for char in text:
        if char in _PREDICTOR_SEPARATORS:
            continue
        if char not in _PREDICTOR_CODES:
            raise OptionError(
                "Not a sensible value for option -G\n"
                "Valid values are: 0 (avg), 1 (median avg/gradients), 2 (median neighbors), "
                "X (auto/mixed), ? (heuristically pick 0-2)"
            )
        if len(predictors) >= NUM_PREDICTOR_PLANES:
            raise OptionError("Error while parsing option -G: too many planes specified")
        predictors.append(_PREDICTOR_CODES[char])
    return predictors


def parse_frame_delay(text: str) -> list[int]:
    """Return the frame delays (ms) listed in text; a zero or non-number ends the list."""
    delays: list[int] = []
    pos = 0
    while True:
        match = _STRTOL.match(text, pos)
        delay = int(match.group()) if match else 0
        if delay == 0:
            break
        pos = match.end()
        if text[pos:pos + 1] in (",", "+", " ") and pos < len(text):
            pos += 1
        delays.append(delay)
        if delay < 0 or delay > 60000:
            raise OptionError(f"Not a sensible number for option -F: {delay}")
    return delays or [100]


def parse_size(text: str, option: str) -> tuple[int, int]:
    """Parse WxH (or W, or xH) for option -r or -f; return (width, height).

    For -r a missing height is taken to equal the width.
    """
    width = height = 0
    first = _scan_int(text, 0)
    if first is not None:
        width, pos = first
        if text[pos:pos + 1] == "x":
            second = _scan_int(text, pos + 1)
            if second is not None:
                height = second[0]
    elif text.startswith("x") and (second := _scan_int(text, 1)) is not None:
        height = second[0]
    else:
        raise OptionError(f"Not a sensible value for option -{option} (expected WxH)")
    if option == "r" and not height:
        height = width
    return width, height


def apply_effort(options: FlifOptions, effort: int) -> str:
    """Set encoder parameters for an effort level 0-100; return a summary of them."""
    if effort < 0 or effort > 100:
        raise OptionError("Not a sensible number for option -E (try something between 0 and 100)")
    if effort < 10:
        options.learn_repeats = 0
    elif effort <= 50:
        options.learn_repeats = 1
        options.split_threshold = SPLIT_THRESHOLD_UNIT * 8 * 5
    elif effort <= 70:
        options.learn_repeats = 2
        options.split_threshold = SPLIT_THRESHOLD_UNIT * 8 * 8
    elif effort <= 90:
        options.learn_repeats = 3
        options.split_threshold = SPLIT_THRESHOLD_UNIT * 8 * 10
    else:
        options.learn_repeats = 4
        options.split_threshold = SPLIT_THRESHOLD_UNIT * 8 * 12
    if effort < 15:
        options.predictor = [0] * NUM_PREDICTOR_PLANES
    elif effort < 30:
        options.predictor[1] = 0
        options.predictor[2] = 0
    if effort < 5:
        options.acb = 0
    if effort < 8:
        options.palette_size = 0
    if effort < 25:
        options.plc = False
    if effort < 30:
        options.lookback = 0
    if effort < 5:
        options.frs = False
    guess = " -G0" if effort < 15 else (" -G?00" if effort < 30 else "")
    return (
        f"Encode effort: {effort}, corresponds to parameters -R{options.learn_repeats} "
        f"-T{options.split_threshold // SPLIT_THRESHOLD_UNIT}{guess}"
        f"{' -B' if effort < 5 else ''}{' -P0' if effort < 8 else ''}{' -C' if effort < 25 else ''}"
    )


def _ranged(value: str, low: int, high: int, message: str) -> int:
    number = _atoi(value)
    if number < low or number > high:
        raise OptionError(message)
    return number


def _apply_option(command: ParsedCommand, code: str, value: str) -> None:
    options = command.options
    if code == "d":
        command.mode = Mode.DECODE
    elif code == "v":
        command.verbosity += 1
    elif code == "V":
        command.verbosity += 3
    elif code == "c":
        options.crc_check = 0
    elif code == "m":
        options.metadata = False
    elif code == "p":
        options.color_profile = False
    elif code == "o":
        options.overwrite = True
    elif code == "q":
        options.quality = _ranged(value, 0, 100, "Not a sensible number for option -q")
    elif code == "s":
        options.scale = _ranged(value, 1, 128, "Not a sensible number for option -s")
    elif code in ("r", "f"):
        options.resize_width, options.resize_height = parse_size(value, code)
        if code == "f":
            options.fit = True
    elif code == "i":
        options.scale = -1
    elif code == "b":
        options.show_breakpoints = 8
        command.mode = Mode.DECODE
    elif code == "k":
        options.keep_palette = True
    elif code == "h":
        command.show_help = True
    else:
        _apply_encoder_option(command, code, value)


def _apply_encoder_option(command: ParsedCommand, code: str, value: str) -> None:
    options = command.options
    if code == "e":
        command.mode = Mode.ENCODE
    elif code == "t":
        command.mode = Mode.TRANSCODE
    elif code == "I":
        options.method = Encoding.INTERLACED
    elif code in ("n", "N"):
        options.method = Encoding.NON_INTERLACED
    elif code == "A":
        options.acb = 1
    elif code == "B":
        options.acb = 0
    elif code == "P":
        options.palette_size = _ranged(value, -32000, 32000, "Not a sensible number for option -P")
        if options.palette_size > 512:
            command.notes.append((1, "Warning: palette size above 512 implies that simple FLIF "
                                     "decoders (8-bit only) cannot decode this file."))
        if options.palette_size == 0:
            command.notes.append((5, "Palette disabled"))
    elif code == "R":
        options.learn_repeats = _ranged(value, 0, 20, "Not a sensible number for option -R")
    elif code == "F":
        options.frame_delay = parse_frame_delay(value)
    elif code == "L":
        options.lookback = _ranged(value, -1, 256, "Not a sensible number for option -L")
    elif code == "D":
        options.divisor = _ranged(value, 1, 0xFFFFFFF, "Not a sensible number for option -D")
    elif code == "M":
        options.min_size = _atoi(value)
        if options.min_size < 0:
            raise OptionError("Not a sensible number for option -M")
    elif code == "T":
        threshold = _ranged(value, 4, 100000, "Not a sensible number for option -T")
        options.split_threshold = threshold * SPLIT_THRESHOLD_UNIT
    elif code == "Y":
        options.ycocg = False
    elif code == "W":
        options.ycocg = False
        options.subtract_green = False
    elif code == "C":
        options.plc = False
    elif code == "S":
        options.frs = False
    elif code == "K":
        options.alpha_zero_special = False
    elif code == "X":
        options.cutoff = _ranged(value, 1, 128, "Not a sensible number for option -X "
                                                "(try something between 1 and 128)")
    elif code == "Z":
        options.alpha = _ranged(value, 2, 128, "Not a sensible number for option -Z "
                                               "(try something between 2 and 128)")
    elif code == "Q":
        options.loss = 100 - _atoi(value)
        # quality cannot go above 100 (lossless), but may go far below 0
        if options.loss < 0:
            raise OptionError("Not a sensible number for option -Q (try something between 0 and 100)")
    elif code == "U":
        options.adaptive = True
    elif code == "G":
        listed = parse_predictors(value)
        fill = listed[0] if listed else options.predictor[0]
        options.predictor = listed + [fill] * (NUM_PREDICTOR_PLANES - len(listed))
    elif code == "H":
        options.invisible_predictor = _ranged(
            value, 0, 2,
            "Not a sensible value for option -H\n"
            "Valid values are: 0 (avg), 1 (median avg/gradients), 2 (median neighbors)",
        )
    elif code == "J":
        options.chroma_subsampling = True
    elif code == "E":
        command.notes.append((3, apply_effort(options, _atoi(value))))


def parse_args(argv: list[str], program: str | None = None) -> ParsedCommand:
    """Parse the arguments that follow the program name.

    The program name selects a default mode (cflif encodes; dflif, deflif and
    decflif decode). An unknown option ends parsing with show_help set and
    invalid_option holding the complaint. Nonsensical values raise OptionError.
    """
    mode = _PROGRAM_MODES.get(os.path.basename(program)) if program else None
    if not HAS_ENCODER:
        mode = Mode.DECODE
    command = ParsedCommand(mode=mode, options=default_options())

    short = _SHORT_OPTIONS + (_ENCODER_SHORT_OPTIONS if HAS_ENCODER else "")
    long_map = dict(_LONG_OPTIONS)
    if HAS_ENCODER:
        long_map.update(_ENCODER_LONG_OPTIONS)
    by_name = {name.rstrip("="): code for name, code in long_map.items()}

    try:
        pairs, files = getopt.gnu_getopt(list(argv), short, list(long_map))
    except getopt.GetoptError as error:
        command.show_help = True
        command.invalid_option = str(error)
        return command

    for opt, value in pairs:
        code = by_name[opt[2:]] if opt.startswith("--") else opt[1]
        _apply_option(command, code, value)

    command.files = files
    options = command.options
    command.last_is_output = options.scale != -1
    if options.show_breakpoints and len(files) == 1:
        command.last_is_output = False
        options.no_full_decode = True
        options.scale = 2
    return command