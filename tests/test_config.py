"""
Tests for separator decoding, option building and JSON config loading.
"""

import json

import pytest

from delimswap.config import build_options, decode_separator, is_single_grapheme, load_config


class TestDecodeSeparator:
    """Shell-typed separators become real strings."""

    @pytest.mark.parametrize(
        "raw, expected",
        [("tab", "\t"), ("TAB", "\t"), ("comma", ","), ("pipe", "|"), ("semicolon", ";"), ("space", " ")],
    )
    def test_aliases(self, raw, expected):
        assert decode_separator(raw) == expected

    def test_backslash_escapes(self):
        assert decode_separator("\\t") == "\t"
        assert decode_separator("\\x1f") == "\x1f"
        assert decode_separator("\\u00a6") == "¦"

    def test_plain_values_pass_through(self):
        assert decode_separator(";") == ";"
        assert decode_separator("||") == "||"
        assert decode_separator("é") == "é"

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="must not be empty"):
            decode_separator("")

    def test_trailing_backslash_is_literal(self):
        assert decode_separator("\\") == "\\"
        assert decode_separator("\\t\\") == "\t\\"
        assert build_options(";", "\\").new_sep == "\\"


class TestSingleGrapheme:
    def test_simple_characters(self):
        assert is_single_grapheme(",")
        assert is_single_grapheme("\t")
        assert is_single_grapheme("ü")

    def test_combining_sequence_is_one(self):
        assert is_single_grapheme("e\u0301")

    def test_flag_and_zwj_emoji(self):
        assert is_single_grapheme("\U0001F1EB\U0001F1F7")
        assert is_single_grapheme("\U0001F468\u200d\U0001F469\u200d\U0001F467")

    def test_multiple_characters(self):
        assert not is_single_grapheme("ab")
        assert not is_single_grapheme("||")
        assert not is_single_grapheme("")
        assert not is_single_grapheme("\u0301")


class TestBuildOptions:
    def test_decodes_both_sides(self):
        opts = build_options("tab", "comma", check=True)
        assert opts.original_sep == "\t"
        assert opts.new_sep == ","
        assert opts.check is True
        assert opts.encoding == "utf-8"

    def test_multi_char_original_allowed(self):
        assert build_options("||", ",").original_sep == "||"

    def test_multi_char_new_rejected(self):
        with pytest.raises(ValueError, match="single character"):
            build_options(";", "::")

    def test_same_separator_rejected(self):
        with pytest.raises(ValueError, match="same"):
            build_options("comma", ",")

    def test_unknown_encoding_rejected(self):
        with pytest.raises(ValueError, match="Unknown encoding"):
            build_options(";", ",", encoding="no-such-codec")


class TestLoadConfig:
    def test_valid_config(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"encoding": "latin-1", "check": True, "workers": 3, "include": ["*.dat"]}))

        cfg = load_config(path)

        assert cfg == {"encoding": "latin-1", "check": True, "workers": 3, "include": ["*.dat"]}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.json")

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"threads": 2}))
        with pytest.raises(ValueError, match="Unknown config key 'threads'"):
            load_config(path)

    def test_wrong_types(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"workers": True}))
        with pytest.raises(ValueError, match="wrong type"):
            load_config(path)

        path.write_text(json.dumps({"workers": 0}))
        with pytest.raises(ValueError, match=">= 1"):
            load_config(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="must be an object"):
            load_config(path)
