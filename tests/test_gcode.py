"""Tests for G-code tokenizer, parser and sample library."""
import pytest
from digimill.gcode.tokenizer import TokenKind, tokenize_line
from digimill.gcode.parser import (
    GCodeParser,
    MotionType,
    format_number,
    get_command_string,
    get_param,
    parse,
)
from digimill.gcode.library import (
    circle_gcode,
    helix_gcode,
    raster_gcode,
    sample_program,
    square_pocket_gcode,
)
from digimill.validation.engine import validate


class TestTokenizer:
    def test_words_and_columns(self):
        tokens = tokenize_line("G1 X10.5 Y-3")
        assert [t.kind for t in tokens] == [TokenKind.WORD] * 3
        assert [t.text for t in tokens] == ["G1", "X10.5", "Y-3"]
        assert [t.column for t in tokens] == [0, 3, 9]

    def test_lowercase_letters_are_upper_cased(self):
        tokens = tokenize_line("g1 x5")
        assert [t.text for t in tokens] == ["G1", "X5"]
        assert tokens[1].raw == "x5"

    def test_no_spaces_between_words(self):
        tokens = tokenize_line("G0X10Y5")
        assert [t.text for t in tokens] == ["G0", "X10", "Y5"]

    def test_whitespace_between_letter_and_number(self):
        tokens = tokenize_line("X 10")
        assert len(tokens) == 1
        assert tokens[0].text == "X10"
        assert tokens[0].raw == "X 10"

    def test_decimal_forms(self):
        assert tokenize_line("X.5")[0].text == "X.5"
        assert tokenize_line("X5.")[0].text == "X5."
        assert tokenize_line("X+2")[0].text == "X+2"

    def test_line_number(self):
        tokens = tokenize_line("N10 G0")
        assert tokens[0].kind == TokenKind.LINE_NUMBER
        assert tokens[0].text == "10"
        assert tokens[0].raw == "N10"
        assert tokens[1].text == "G0"
        assert tokens[1].column == 4

    def test_n_without_digits_is_word(self):
        tokens = tokenize_line("N-5")
        assert tokens[0].kind == TokenKind.WORD
        assert tokens[0].text == "N-5"

    def test_bare_letter_is_unknown(self):
        tokens = tokenize_line("G")
        assert tokens[0].kind == TokenKind.UNKNOWN
        assert tokens[0].text == "G"

    def test_block_delete_only_at_column_zero(self):
        assert tokenize_line("/G0 X1")[0].text == "/"
        tokens = tokenize_line("G0 / X1")
        assert tokens[1].kind == TokenKind.UNKNOWN
        assert tokens[1].column == 3

    def test_semicolon_comment_stops_line(self):
        tokens = tokenize_line("G0 ; comment here X5 ")
        assert len(tokens) == 2
        assert tokens[1].kind == TokenKind.COMMENT
        assert tokens[1].text == "comment here X5"
        assert tokens[1].raw == "; comment here X5 "

    def test_paren_comment(self):
        tokens = tokenize_line("(tool change) M6")
        assert tokens[0].kind == TokenKind.COMMENT
        assert tokens[0].text == "tool change"
        assert tokens[1].text == "M6"
        assert tokens[1].column == 14

    def test_unterminated_paren_comment(self):
        tokens = tokenize_line("G0 (unterminated X5")
        assert len(tokens) == 2
        assert tokens[1].text == "unterminated X5"

    def test_program_delimiter(self):
        tokens = tokenize_line("%")
        assert tokens[0].kind == TokenKind.UNKNOWN
        assert tokens[0].text == "%"

    def test_unknown_character(self):
        tokens = tokenize_line("G1 X10 #")
        assert tokens[-1].kind == TokenKind.UNKNOWN
        assert tokens[-1].column == 7

    def test_column_offset(self):
        assert tokenize_line("G1", column_offset=4)[0].column == 4

    def test_empty_line(self):
        assert tokenize_line("") == []


class TestGCodeParser:
    def setup_method(self):
        self.parser = GCodeParser()

    def test_parse_g1_move(self):
        instructions, errors = self.parser.parse_line("G1 X10.5 Y20.0 F1200", 1)
        assert errors == []
        assert len(instructions) == 1
        ins = instructions[0]
        assert get_command_string(ins) == "G1"
        assert get_param(ins, "X") == 10.5
        assert get_param(ins, "Y") == 20.0
        assert get_param(ins, "F") == 1200.0
        assert get_param(ins, "Z") is None
        assert ins.motion_type is MotionType.LINEAR

    def test_empty_document(self):
        result = parse("")
        assert result.line_count == 1
        assert len(result.instructions) == 1
        assert result.instructions[0].command is None
        assert result.errors == []

    def test_blank_lines_keep_alignment(self):
        result = parse("G1 X1\n\nG0 Y2")
        assert result.line_count == 3
        assert [i.source_line for i in result.instructions] == [1, 2, 3]
        assert result.instructions[1].is_empty

    def test_multiple_commands_split(self):
        result = parse("G0 X1 G1 Y2")
        first, second = result.instructions
        assert first.source_line == second.source_line == 1
        assert get_command_string(first) == "G0"
        assert [w.letter for w in first.parameters] == ["X"]
        assert get_command_string(second) == "G1"
        assert [w.letter for w in second.parameters] == ["Y"]

    def test_first_command_absorbs_leading_parameters(self):
        result = parse("X5 G0 Y3 G1 Z2")
        first, second = result.instructions
        assert get_command_string(first) == "G0"
        assert [w.letter for w in first.parameters] == ["X", "Y"]
        assert [w.letter for w in second.parameters] == ["Z"]

    def test_duplicate_letter_last_wins(self):
        ins = parse("G1 X1 X2").instructions[0]
        assert len(ins.parameters) == 2
        assert get_param(ins, "X") == 2.0
        assert get_param(ins, "x") == 2.0

    def test_fractional_command_truncated(self):
        ins = parse("G59.1").instructions[0]
        assert ins.command.value == pytest.approx(59.1)
        assert get_command_string(ins) == "G59"

    def test_unexpected_character_reports_original_column(self):
        result = parse("  G1 X5 $")
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.line == 1
        assert error.column == 8
        assert error.end_column == 9
        assert error.message == "Unexpected character: '$'"
        assert get_param(result.instructions[0], "X") == 5.0

    def test_overflowing_number_is_parse_error(self):
        huge = "G" + "9" * 400
        result = parse(huge + " X1")
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.message.startswith("Invalid number in word")
        assert error.column == 0
        assert error.end_column == len(huge)
        ins = result.instructions[0]
        assert get_command_string(ins) is None
        assert get_param(ins, "X") == 1.0

    def test_block_delete(self):
        assert parse("/G1 X5").instructions[0].block_delete is True
        assert parse("  /G1 X5").instructions[0].block_delete is True
        assert parse("G1 X5").instructions[0].block_delete is False

    def test_comment_attached(self):
        ins = parse("G1 X10 ; move").instructions[0]
        assert ins.comment == "move"
        assert parse("; only a comment").instructions[0].command is None

    def test_line_numbers_are_dropped(self):
        result = parse("N10 G1 X5")
        assert result.errors == []
        ins = result.instructions[0]
        assert get_command_string(ins) == "G1"
        assert [w.letter for w in ins.parameters] == ["X"]

    def test_program_delimiters(self):
        result = parse("%\nG0 X1\n%")
        assert result.errors == []
        assert len(result.instructions) == 3

    def test_crlf_line_endings(self):
        result = parse("G1 X1\r\nG0 Y2\r\n")
        assert result.line_count == 3
        assert result.errors == []
        assert result.instructions[0].raw == "G1 X1"

    def test_parse_line_stamps_line_number(self):
        instructions, _ = self.parser.parse_line("G0 X1 M3 S100", 5)
        assert [i.source_line for i in instructions] == [5, 5]
        assert get_command_string(instructions[1]) == "M3"
        assert instructions[1].motion_type is None

    def test_source_lines_within_range(self):
        result = parse(sample_program())
        for ins in result.instructions:
            assert 1 <= ins.source_line <= result.line_count

    def test_format_number(self):
        assert format_number(500.0) == "500"
        assert format_number(-2.5) == "-2.5"


class TestGCodeLibrary:
    @pytest.mark.parametrize(
        "program",
        [sample_program(), square_pocket_gcode(), circle_gcode(), helix_gcode(), raster_gcode()],
    )
    def test_library_programs_are_clean(self, program):
        result = parse(program)
        assert result.errors == []
        validation = validate(result.instructions)
        assert validation.error_count == 0
        assert validation.warning_count == 0

    def test_square_pocket_passes(self):
        gcode = square_pocket_gcode(depth_mm=3.0, step_down_mm=1.0)
        assert gcode.count("; Pass") == 3
        assert "G1 Z-3.000" in gcode

    def test_circle_direction(self):
        assert "G2 " in circle_gcode(clockwise=True)
        assert "G3 " in circle_gcode(clockwise=False)
