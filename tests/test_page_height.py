"""Tests for the text-wrap height heuristic."""

from invoice_engine.domain.models.invoice import LineItem
from invoice_engine.domain.models.layout import LayoutBudgets
from invoice_engine.domain.services.page_height import PageHeightEstimator


class TestEstimateLines:

    def setup_method(self):
        self.est = PageHeightEstimator(LayoutBudgets())

    def test_empty_text_is_one_line(self):
        assert self.est.estimate_lines("", 180, 8) == 1
        assert self.est.estimate_lines(None, 180, 8) == 1

    def test_short_text_is_one_line(self):
        assert self.est.estimate_lines("Laptop", 180, 8) == 1

    def test_wraps_long_text(self):
        # 172pt usable, "word " costs 20pt at 8pt font: 8 words per line
        assert self.est.estimate_lines(" ".join(["word"] * 17), 180, 8) == 3

    def test_br_and_newlines_break_lines(self):
        assert self.est.estimate_lines("a<br>b<BR/>c", 180, 8) == 3
        assert self.est.estimate_lines("a\r\nb\nc", 180, 8) == 3

    def test_overlong_word_takes_one_line(self):
        assert self.est.estimate_lines("x" * 200, 180, 8) == 1

    def test_monotone_in_text_length(self):
        text = ""
        previous = 1
        for i in range(60):
            text += f" w{i}"
            lines = self.est.estimate_lines(text, 120, 8)
            assert lines >= previous
            previous = lines

    def test_monotone_in_column_width(self):
        text = " ".join(["invoice"] * 30)
        counts = [self.est.estimate_lines(text, width, 8) for width in (60, 100, 180, 300, 555)]
        assert counts == sorted(counts, reverse=True)

    def test_min_column_width_applies(self):
        assert self.est.estimate_lines("ab cd", 0, 8) == self.est.estimate_lines("ab cd", 28, 8)


class TestHeights:

    def setup_method(self):
        self.est = PageHeightEstimator(LayoutBudgets())

    def test_row_height(self):
        assert self.est.row_height("Laptop", 180, 8) == 18.0

    def test_block_height_of_empty_text(self):
        assert self.est.block_height("   ", 555, 8) == 0.0

    def test_item_row_with_description(self):
        plain = self.est.item_row_height(LineItem(name="Laptop"))
        detailed = self.est.item_row_height(LineItem(name="Laptop", description="Core i7, 16GB"))
        assert plain == 18.0
        assert detailed == plain + 8.0

    def test_paragraph_and_list_tags_break_lines(self):
        assert self.est.estimate_lines("<p>Terms</p><p>Delivery</p>", 180, 8) == 3
        assert self.est.estimate_lines("<ul><li>One</li><li>Two</li></ul>", 180, 8) == 3
