# flifkit

Building blocks for a tool that encodes and decodes FLIF (Free Lossless
Image Format) files: its settings, its command-line parsing, the decisions
it takes before any pixel is touched, and small byte streams over files and
memory. The package uses only the standard library and supports Python 3.10
and later.

## Modules

### `flifkit.options`

- `FlifOptions` – a dataclass holding every encoder and decoder setting
  (learning repeats, palette size, predictors, frame delays, quality,
  scale, resize, overwrite and so on).
- `default_options()` – a fresh `FlifOptions` with the standard defaults.
- `Encoding` – `NON_INTERLACED` or `INTERLACED`; `FlifOptions.method` is
  `None` until one is chosen.
- Module constants such as `DEFAULT_MAX_PALETTE_SIZE`, `TREE_LEARN_REPEATS`,
  `CONTEXT_TREE_SPLIT_THRESHOLD`, `MAX_FRAMES` and `MAX_IMAGE_BUFFER_SIZE`.

### `flifkit.fileio`

Three byte streams sharing `getc`, `gets`, `putc`, `seek` and `tell`;
`getc` returns `EOS` (-1) at the end of the data.

- `FileIO(stream, name)` wraps an open binary file object and closes it on
  `close()` or when used as a context manager.
- `BlobReader(data)` reads from a fixed block of bytes; `putc` raises
  `io.UnsupportedOperation`.
- `BlobIO()` is a growable in-memory buffer. Seeking past the end and
  writing fills the gap with zero bytes; `release()` returns the contents
  and empties the buffer.

### `flifkit.arguments`

- `parse_args(argv, program=None)` turns the arguments after the program
  name into a `ParsedCommand` (mode, options, file names, verbosity, help
  request and messages as `(level, text)` pairs). The program name `cflif`
  selects encoding; `dflif`, `deflif` and `decflif` select decoding. An
  unknown option sets `show_help` and `invalid_option`; a nonsensical value
  raises `OptionError`.
- `Mode` – `ENCODE`, `DECODE` or `TRANSCODE`.
- Helpers for single options: `parse_predictors` (`-G`),
  `parse_frame_delay` (`-F`), `parse_size` (`-r`, `-f`) and `apply_effort`
  (`-E`), which also returns a summary of the parameters it set.
- `help_text(mode, verbosity)` and `banner_text(verbosity)` return the
  usage and banner texts for a verbosity level.

### `flifkit.planning`

- File checks: `file_exists`, `file_is_flif`, `file_extension`,
  `is_compatible_extension`, `is_metadata_extension`, `is_flif_extension`.
- Encoder choices: `choose_transforms`, `choose_encoding`,
  `choose_palette_size`, `choose_learn_repeats`; each stores what it
  resolves back into the options.
- Animations: `assign_frame_delays` and `animation_frame_names`.
- `resolve_mode(mode, options, files)` settles encode, decode or transcode
  from the options and file names and returns the mode with the messages to
  show. It raises `FileNotFoundError` for a missing input,
  `FileExistsError` for an existing output without `overwrite`, and
  `OptionError` for a wrong number of files.

## Examples

```python
from flifkit.options import default_options

options = default_options()
print(options.quality, options.scale)   # 100 1
```

```python
from flifkit.fileio import BlobIO, BlobReader

out = BlobIO()
out.puts("FLIF")
data = out.release()            # b"FLIF"

reader = BlobReader(data)
print(chr(reader.getc()))       # F
```

```python
from flifkit.arguments import OptionError, parse_args

try:
    command = parse_args(["-d", "-q", "50", "in.flif", "out.png"], "flif")
    print(command.mode, command.options.quality, command.files)
except OptionError as error:
    print(error)
```

```python
from flifkit.options import default_options
from flifkit.planning import choose_transforms

print(choose_transforms(default_options(), nb_pixels=100 * 100, nb_frames=1, depth=8))
# ['Channel_Compact', 'YCoCg', 'PermutePlanes', 'Bounds', 'Palette_Alpha', 'Palette']
```

## What this package does not do

It holds no image codec: it does not read or write the FLIF bitstream, and
it does not load or save PNG, PNM or PAM images. Nor does it install a
command: `parse_args` and `resolve_mode` tell a caller what to do, but
nothing in the package carries it out.

## Running the tests

Install the `test` extra and run `pytest` from the project root.