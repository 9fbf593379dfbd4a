import dataclasses

from flifkit.options import (
    CONTEXT_TREE_COUNT_DIV,
    CONTEXT_TREE_MIN_SUBTREE_SIZE,
    CONTEXT_TREE_SPLIT_THRESHOLD,
    SPLIT_THRESHOLD_UNIT,
    Encoding,
    FlifOptions,
    default_options,
)


def test_encoding_values_are_fixed_by_format():
    assert Encoding.NON_INTERLACED == 1
    assert Encoding.INTERLACED == 2
    assert Encoding(2) is Encoding.INTERLACED


def test_default_encoder_values():
    opts = default_options()
    assert opts.learn_repeats == -1
    assert opts.acb == -1
    assert opts.frame_delay == [100]
    assert opts.palette_size == -1
    assert opts.lookback == 1
    assert opts.divisor == CONTEXT_TREE_COUNT_DIV
    assert opts.min_size == CONTEXT_TREE_MIN_SUBTREE_SIZE
    assert opts.split_threshold == CONTEXT_TREE_SPLIT_THRESHOLD
    assert opts.predictor == [-2, -2, -2, -2, -2]
    assert opts.loss == 0
    assert opts.ycocg and opts.subtract_green and opts.plc and opts.frs
    assert opts.alpha_zero_special
    assert not opts.adaptive and not opts.chroma_subsampling


def test_default_shared_values():
    opts = default_options()
    assert opts.method is None
    assert opts.invisible_predictor == 2
    assert opts.alpha == 19
    assert opts.cutoff == 2
    assert opts.crc_check == -1
    assert opts.metadata and opts.color_profile
    assert opts.quality == 100
    assert opts.scale == 1
    assert (opts.resize_width, opts.resize_height) == (0, 0)
    assert not opts.fit and not opts.overwrite and not opts.keep_palette
    assert opts.show_breakpoints == 0


def test_default_options_are_independent():
    first = default_options()
    second = default_options()
    first.frame_delay.append(40)
    first.predictor[0] = 1
    assert second.frame_delay == [100]
    assert second.predictor[0] == -2


def test_default_options_equal_fresh_dataclass():
    assert default_options() == FlifOptions()


def test_replace_keeps_other_fields():
    opts = dataclasses.replace(default_options(), method=Encoding.INTERLACED)
    assert opts.method is Encoding.INTERLACED
    assert opts.alpha == default_options().alpha


def test_default_split_threshold_in_bits_saved():
    opts = default_options()
    assert opts.split_threshold == 5461 * 8 * 8
    assert opts.split_threshold // SPLIT_THRESHOLD_UNIT == 64