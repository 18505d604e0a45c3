# -*- coding: utf-8 -*-
"""
Caption 文字處理測試
"""
import pytest

from tagmeister.utils.parsing import (
    COMMA_JOIN,
    STRIP_FINAL_PERIOD,
    compose,
    normalize_punctuation,
    process_caption,
    strip_final_period,
    strip_trailing_comma,
)


class TestNormalizePunctuation:

    def test_sentences_become_comma_joined(self):
        assert normalize_punctuation("A cat. A dog. A bird.") == "A cat, A dog, A bird"

    def test_empty(self):
        assert normalize_punctuation("") == ""

    def test_no_period_is_only_trimmed(self):
        assert normalize_punctuation("  red, round, shiny  ") == "red, round, shiny"

    def test_segment_order_is_kept(self):
        assert normalize_punctuation("Z. Y. X") == "Z, Y, X"

    @pytest.mark.parametrize("raw, expected", [
        ("A cat.", "A cat"),
        ("A cat. A dog.  ", "A cat, A dog"),
        ("A cat...", "A cat"),
        ("...", ""),
    ])
    def test_final_periods_leave_no_trailing_comma(self, raw, expected):
        assert normalize_punctuation(raw) == expected


class TestStripTrailingComma:

    @pytest.mark.parametrize("text, expected", [
        ("A cat,", "A cat"),
        ("A cat", "A cat"),
        ("A cat , ", "A cat"),
        ("", ""),
    ])
    def test_strip(self, text, expected):
        assert strip_trailing_comma(text) == expected

    def test_only_one_comma_removed(self):
        assert strip_trailing_comma("A cat,,") == "A cat,"

    def test_idempotent_on_clean_text(self):
        once = strip_trailing_comma("A cat,")
        assert strip_trailing_comma(once) == once


class TestCompose:

    def test_prefix(self):
        assert compose("A cat", "best quality,", "") == "best quality, A cat"

    def test_suffix(self):
        assert compose("A cat", "", "4k, ") == "A cat, 4k"

    @pytest.mark.parametrize("prefix", ["masterpiece", "masterpiece,", "masterpiece, ", "masterpiece ,"])
    def test_prefix_joint_variants(self, prefix):
        assert compose("A cat", prefix, "") == "masterpiece, A cat"

    @pytest.mark.parametrize("suffix", ["4k", ",4k", ", 4k", " ,4k"])
    def test_suffix_joint_variants(self, suffix):
        assert compose("A cat", "", suffix) == "A cat, 4k"

    def test_prefix_then_suffix(self):
        assert compose("A cat", "best,", ", 4k") == "best, A cat, 4k"

    def test_blank_prefix_and_suffix_leave_text_unchanged(self):
        assert compose("A cat", "   ", "  ") == "A cat"

    def test_repeated_strip_is_stable(self):
        assert compose("A cat", "best,,", ",, 4k") == "best, A cat, 4k"


class TestProcessCaption:

    def test_cloud_mode(self):
        assert process_caption("A cat. On a mat.", COMMA_JOIN, "photo", "") == "photo, A cat, On a mat"

    def test_local_mode_strips_only_final_period(self):
        assert process_caption("A cat. On a mat.", STRIP_FINAL_PERIOD) == "A cat. On a mat"

    def test_local_mode_removes_trailing_comma(self):
        assert process_caption("cat, mat,", STRIP_FINAL_PERIOD, "", "4k") == "cat, mat, 4k"

    def test_strip_final_period(self):
        assert strip_final_period(" done.. ") == "done."
