from __future__ import annotations

import unittest

from backend.app.widget_tokenizer import (
    ArraySyntaxError,
    auto_complete_arrays,
    detect_pending_state,
    normalize_array_syntax,
    parse_array,
    parse_float_prefix,
    parse_int_prefix,
    parse_number_prefix,
    tokenize,
    try_parse_array,
)


class WidgetTokenizerTests(unittest.TestCase):
    def test_splits_on_whitespace_and_strips_quotes(self) -> None:
        tokens = tokenize('text-input    id     "Long label text" placeholder')
        self.assertEqual(tokens, ["text-input", "id", "Long label text", "placeholder"])

    def test_array_span_is_one_raw_token(self) -> None:
        tokens = tokenize('select location [Chicago "New York"] "New York"')
        self.assertEqual(tokens, ["select", "location", '[Chicago "New York"]', "New York"])

    def test_newline_separates_tokens(self) -> None:
        self.assertEqual(tokenize("form config\n  text-input a"), ["form", "config", "text-input", "a"])

    def test_unterminated_spans_do_not_raise(self) -> None:
        self.assertEqual(tokenize('text-input id "Label with'), ["text-input", "id", "Label with"])
        self.assertEqual(tokenize("select id [unclosed"), ["select", "id", "unclosed"])

    def test_empty_line_has_no_tokens(self) -> None:
        self.assertEqual(tokenize("   "), [])


class ArrayNormalizerTests(unittest.TestCase):
    def test_variants_normalize_identically(self) -> None:
        variants = ['["a","b","c"]', '["a", "b", "c"]', "[a,b,c]", "['a','b','c']", "[a b c]"]
        for variant in variants:
            with self.subTest(variant=variant):
                self.assertEqual(normalize_array_syntax(variant), "[a b c]")
                self.assertEqual(parse_array(variant), ["a", "b", "c"])

    def test_items_with_spaces_are_quoted(self) -> None:
        self.assertEqual(normalize_array_syntax('[home, "New York", office]'), '[home "New York" office]')

    def test_normalization_is_idempotent(self) -> None:
        for token in ['[home "New York" office]', "[a b c]", "[]", '["San Francisco"]']:
            with self.subTest(token=token):
                once = normalize_array_syntax(token)
                self.assertEqual(normalize_array_syntax(once), once)
        self.assertEqual(normalize_array_syntax('[home "New York" office]'), '[home "New York" office]')

    def test_items_with_apostrophes_survive_renormalization(self) -> None:
        once = normalize_array_syntax('["Don\'t", "Yes"]')
        self.assertEqual(once, '["Don\'t" Yes]')
        self.assertEqual(normalize_array_syntax(once), once)
        self.assertEqual(parse_array('["Don\'t", "Yes"]'), ["Don't", "Yes"])

    def test_empty_array(self) -> None:
        self.assertEqual(normalize_array_syntax("[   ]"), "[]")
        self.assertEqual(parse_array("[]"), [])

    def test_non_array_token_is_left_alone(self) -> None:
        self.assertEqual(normalize_array_syntax("plain"), "plain")


class ArrayParserTests(unittest.TestCase):
    def test_keeps_quoted_items_with_spaces(self) -> None:
        self.assertEqual(
            parse_array('[Chicago "New York" "San Francisco"]'),
            ["Chicago", "New York", "San Francisco"],
        )

    def test_unicode_items(self) -> None:
        self.assertEqual(parse_array("[英文 中文 日本語]"), ["英文", "中文", "日本語"])

    def test_rejects_unbracketed_token(self) -> None:
        with self.assertRaises(ArraySyntaxError):
            parse_array("[unclosed")
        with self.assertRaises(ArraySyntaxError):
            parse_array("answer")

    def test_try_parse_array_returns_none_on_bad_token(self) -> None:
        self.assertIsNone(try_parse_array("answer"))
        self.assertEqual(try_parse_array("[x y]"), ["x", "y"])


class NumberPrefixTests(unittest.TestCase):
    def test_float_prefix(self) -> None:
        self.assertEqual(parse_float_prefix("22.5"), 22.5)
        self.assertEqual(parse_float_prefix("-3"), -3.0)
        self.assertEqual(parse_float_prefix("12px"), 12.0)
        self.assertEqual(parse_float_prefix(".5"), 0.5)
        self.assertIsNone(parse_float_prefix("one"))
        self.assertIsNone(parse_float_prefix(""))

    def test_number_prefix_keeps_whole_values_as_int(self) -> None:
        self.assertEqual(parse_number_prefix("32"), 32)
        self.assertIsInstance(parse_number_prefix("32"), int)
        self.assertIsInstance(parse_number_prefix("1.0"), int)
        self.assertEqual(parse_number_prefix("0.25"), 0.25)
        self.assertIsNone(parse_number_prefix("n/a"))

    def test_int_prefix(self) -> None:
        self.assertEqual(parse_int_prefix("10"), 10)
        self.assertEqual(parse_int_prefix("10.5"), 10)
        self.assertEqual(parse_int_prefix(" 70 "), 70)
        self.assertIsNone(parse_int_prefix("ten"))


class PendingStateTests(unittest.TestCase):
    def test_balanced_input(self) -> None:
        pending = detect_pending_state('button-group env [dev "staging area" prod]')
        self.assertFalse(pending.unclosed_bracket)
        self.assertFalse(pending.unclosed_quote)

    def test_open_bracket(self) -> None:
        pending = detect_pending_state("button-group env [dev staging")
        self.assertTrue(pending.unclosed_bracket)
        self.assertFalse(pending.unclosed_quote)

    def test_open_quote_of_either_kind(self) -> None:
        self.assertTrue(detect_pending_state('text-input id "Label with').unclosed_quote)
        self.assertTrue(detect_pending_state("select id ['a','b").unclosed_quote)

    def test_brackets_inside_quotes_are_ignored(self) -> None:
        pending = detect_pending_state('text-input id "[not an array"')
        self.assertFalse(pending.unclosed_bracket)
        self.assertFalse(pending.unclosed_quote)

    def test_extra_closing_bracket_is_not_pending(self) -> None:
        self.assertFalse(detect_pending_state("select id [a]]").unclosed_bracket)


class AutoCompleteTests(unittest.TestCase):
    def test_closes_bracket(self) -> None:
        self.assertEqual(auto_complete_arrays("select env [dev prod"), "select env [dev prod]")

    def test_closes_quote_before_bracket(self) -> None:
        self.assertEqual(auto_complete_arrays('select loc [home "New Yo'), 'select loc [home "New Yo"]')
        self.assertEqual(auto_complete_arrays("select loc ['a','b"), "select loc ['a','b']")

    def test_complete_text_is_unchanged(self) -> None:
        self.assertEqual(auto_complete_arrays("select env [dev prod]"), "select env [dev prod]")


if __name__ == "__main__":
    unittest.main()
