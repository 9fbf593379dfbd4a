"""Decisions the flif tool makes before encoding or decoding.

These cover file checks, transform choice, default parameters, animation frame
names and the final choice between encoding, decoding and transcoding.
"""

from __future__ import annotations

from .arguments import Mode, OptionError
from .options import DEFAULT_MAX_PALETTE_SIZE, TREE_LEARN_REPEATS, Encoding, FlifOptions

_COMPATIBLE_EXTENSIONS = frozenset(
    {".png", ".pnm", ".ppm", ".pgm", ".pbm", ".pam", ".rggb", "null:"}
)
_METADATA_EXTENSIONS = frozenset({".icc", ".xmp", ".exif"})
_FLIF_EXTENSIONS = frozenset({".flif", ".flf"})
_FLIF_SIGNATURES = (b"FLIF", b"!<ar")  # an ar archive might hold a FLIF file

# Images with fewer pixels (over all frames) are not interlaced, and
# images with more get automatic color buckets.
_SMALL_IMAGE_PIXELS = 10000

_MODE_NAMES = {Mode.ENCODE: "encode", Mode.DECODE: "decode", Mode.TRANSCODE: "transcode"}


def file_exists(path: str) -> bool:
    """True if path can be opened for reading."""
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def file_is_flif(path: str) -> bool:
    """True if the file starts with the FLIF signature or looks like an ar archive."""
    try:
        with open(path, "rb") as handle:
            head = handle.readline(4)
    except OSError:
        return False
    return bool(head) and head in _FLIF_SIGNATURES


def _matches(ext: str | None, choices: frozenset[str]) -> bool:
    return ext is not None and ext.lower() in choices


def is_compatible_extension(ext: str | None) -> bool:
    """True for extensions of the plain image formats the tool reads and writes."""
    return _matches(ext, _COMPATIBLE_EXTENSIONS)


def is_metadata_extension(ext: str | None) -> bool:
    """True for extensions of metadata-only output files (ICC, XMP, Exif)."""
    return _matches(ext, _METADATA_EXTENSIONS)


def is_flif_extension(ext: str | None) -> bool:
    """True for .flif and .flf, in any case."""
    return _matches(ext, _FLIF_EXTENSIONS)


def file_extension(path: str) -> str | None:
    """Return the extension of the last path component, dot included, or None."""
    name_start = path.rfind("/")
    dot = path.rfind(".", max(name_start, 0))
    return path[dot:] if dot >= 0 else None


def choose_palette_size(options: FlifOptions, nb_pixels: int, nb_frames: int) -> int:
    """Resolve an unset palette size from the image size; store and return it."""
    if options.palette_size == -1:
        options.palette_size = min(DEFAULT_MAX_PALETTE_SIZE, nb_pixels * nb_frames // 3)
    return options.palette_size


def choose_transforms(
    options: FlifOptions, nb_pixels: int, nb_frames: int, depth: int
) -> list[str]:
    """Return the names of the transforms to try, in order.

    An unset palette size is resolved on the way (see choose_palette_size).
    """
    transforms: list[str] = []
    if nb_pixels > 2:  # nothing to gain on 1- or 2-pixel images
        # compacting channels would magnify the loss of lossy encoding
        if options.plc and (depth > 8 or not options.loss):
            transforms.append("Channel_Compact")
        if options.ycocg:
            transforms.append("YCoCg")
        transforms += ["PermutePlanes", "Bounds"]
    palette_size = choose_palette_size(options, nb_pixels, nb_frames)
    if not options.loss:
        # palettes and color buckets only suit lossless encoding
        if palette_size != 0:
            transforms += ["Palette_Alpha", "Palette"]
        if options.acb == -1:
            if nb_pixels * nb_frames > _SMALL_IMAGE_PIXELS:
                transforms.append("Color_Buckets")
        elif options.acb:
            transforms.append("Color_Buckets")
    if nb_frames > 1:
        transforms.append("Duplicate_Frame")
        if not options.loss:
            if options.frs:
                transforms.append("Frame_Shape")
            if options.lookback:
                transforms.append("Frame_Lookback")
    return transforms


def choose_encoding(options: FlifOptions, nb_pixels: int, nb_frames: int) -> Encoding:
    """Resolve an unset encoding method (small images are not interlaced)."""
    if options.method is None:
        if nb_pixels * nb_frames < _SMALL_IMAGE_PIXELS:
            options.method = Encoding.NON_INTERLACED
        else:
            options.method = Encoding.INTERLACED
    return options.method


def choose_learn_repeats(options: FlifOptions) -> int:
    """Resolve an unset number of MANIAC learning repeats; store and return it."""
    if options.learn_repeats < 0:
        options.learn_repeats = max(TREE_LEARN_REPEATS, 0)
    return options.learn_repeats


def assign_frame_delays(delays: list[int], nb_frames: int) -> list[int]:
    """Give each frame its delay; frames beyond the list repeat the last delay."""
    if not delays:
        raise ValueError("at least one frame delay is needed")
    last = len(delays) - 1
    return [delays[min(frame, last)] for frame in range(nb_frames)]


def animation_frame_names(output: str, count: int) -> list[str]:
    """Return the file name for each frame of an animation written to output.

    A name holding '%' is used as a printf-style pattern for the frame number;
    otherwise a zero-padded frame number is put before the extension. Output
    '-' (standard output) is used for every frame.
    """
    if output == "-":
        return [output] * count
    dot = output.rfind(".")
    if dot < 0:
        raise ValueError(f"Problem saving animation to {output}")
    if "%" in output:
        limit = len(output) + 100 - 1
        try:
            return [(output % frame)[:limit] for frame in range(count)]
        except (TypeError, ValueError) as error:
            raise ValueError(f"Problem saving animation to {output}") from error
    stem, ext = output[:dot], output[dot:]
    if count < 1000:
        width = 3
    elif count < 10000:
        width = 4
    elif count < 100000:
        width = 5
    else:
        width = 8
    return [f"{stem}-{frame:0{width}d}{ext}" for frame in range(count)]


def resolve_mode(
    mode: Mode | None, options: FlifOptions, files: list[str]
) -> tuple[Mode, list[tuple[int, str]]]:
    """Settle what to do with the given files and check them.

    Returns the mode and the messages to show, as (verbosity level, text)
    pairs; level 0 messages are always shown. The options are adjusted for
    the chosen mode: just_add_loss, keep_palette and (for adaptive encoding)
    the sign of loss. Missing input raises FileNotFoundError, an existing
    output without overwrite raises FileExistsError and a bad argument count
    raises OptionError.
    """
    if not files:
        raise OptionError("No input file given.")
    last_is_output = options.scale != -1 and not (
        options.show_breakpoints and len(files) == 1
    )
    if len(files) == 1 and last_is_output:
        raise OptionError("Output file missing.")

    notes: list[tuple[int, str]] = []
    if options.scale == -1:
        mode = Mode.DECODE
    if mode is None:
        mode = Mode.ENCODE

    source = files[0]
    if file_exists(source):
        ext = file_extension(source)
        if mode == Mode.ENCODE and file_is_flif(source):
            if len(files) > 1 and is_flif_extension(file_extension(files[1])):
                notes.append((3, "Input and output file are both FLIF file, adding implicit -t"))
                mode = Mode.TRANSCODE
            else:
                notes.append((3, "Input file is a FLIF file, adding implicit -d"))
                mode = Mode.DECODE
        if mode == Mode.ENCODE:
            out_ext = file_extension(files[-1])
            if out_ext and not options.loss and not is_flif_extension(out_ext):
                notes.append((0, 'Warning: expected file name extension ".flif" for output file.'))
            elif options.loss and is_compatible_extension(out_ext):
                notes.append((2, "Not doing actual lossy encoding to FLIF, just applying loss."))
                options.just_add_loss = True
            if not is_compatible_extension(ext):
                notes.append((0, 'Warning: expected ".png", ".pnm" or ".pam" file name extension '
                                 "for input file, trying anyway..."))
        elif not is_flif_extension(ext):
            notes.append((0, 'Warning: expected file name extension ".flif" for input file, '
                             "trying anyway..."))
    elif source == "-":
        notes.append((4, f"Taking input from standard input. Mode: {_MODE_NAMES[mode]}"))
    elif "%" not in source:
        raise FileNotFoundError(f"Error: input file does not exist: {source}")

    if last_is_output and file_exists(files[-1]) and not options.overwrite:
        raise FileExistsError(
            f"Error: output file already exists: {files[-1]}\n"
            "Use --overwrite to force overwrite."
        )
    if mode != Mode.ENCODE and len(files) > 2 and options.scale != -1:
        raise OptionError("Too many arguments.")

    if options.chroma_subsampling:
        notes.append((1, "Warning: chroma subsampling produces a truncated FLIF file. "
                         "Image will not be lossless!"))
    if options.loss > 0:
        options.keep_palette = False  # loss is never added to indexed colors
    if options.adaptive:
        options.loss = -options.loss  # negative loss asks for adaptive lossy encoding
    return mode, notes