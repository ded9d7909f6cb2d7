"""Tests for the validation engine and its rules."""
import pytest
from digimill.config import DEFAULT_PROFILE, AxesLimits, AxisLimits, Units
from digimill.gcode.parser import parse
from digimill.validation import RULES, RuleKind, Severity, validate
from digimill.validation.engine import merge_parse_errors
from digimill.validation.rules import advance_state, create_initial_state


def _validate(text, profile=DEFAULT_PROFILE):
    return validate(parse(text).instructions, profile)


def _rule_ids(result):
    return [d.rule_id for d in result.diagnostics]


class TestValidationRules:
    def test_out_of_bounds_x(self):
        result = _validate("G0 X500")
        assert _rule_ids(result) == ["out-of-bounds-x"]
        diag = result.diagnostics[0]
        assert diag.severity is Severity.ERROR
        assert diag.line == 1
        assert diag.message == "X position 500 is out of bounds [0, 200]"
        assert diag.column == 0
        assert diag.end_column == len("G0 X500")
        assert result.is_valid is False

    def test_out_of_bounds_every_axis(self):
        result = _validate("G0 X-1 Y300 Z200")
        assert _rule_ids(result) == ["out-of-bounds-x", "out-of-bounds-y", "out-of-bounds-z"]

    def test_out_of_bounds_incremental(self):
        result = _validate("G91\nG0 X150\nG0 X100")
        assert _rule_ids(result) == ["out-of-bounds-x"]
        assert result.diagnostics[0].line == 3
        assert "250" in result.diagnostics[0].message

    def test_out_of_bounds_uses_custom_profile(self):
        profile = DEFAULT_PROFILE.with_updates(
            axes=AxesLimits(x=AxisLimits(-10.0, 10.0))
        )
        assert _validate("G0 X-5", profile).is_valid
        assert _rule_ids(_validate("G0 X11", profile)) == ["out-of-bounds-x"]

    def test_unsupported_g_command(self):
        result = _validate("G4 P1")
        assert _rule_ids(result) == ["unsupported-command"]
        assert result.diagnostics[0].message == "Unsupported command: G4"

    def test_unsupported_m_command(self):
        assert _rule_ids(_validate("M98")) == ["unsupported-command"]

    def test_empty_support_set_allows_everything(self):
        profile = DEFAULT_PROFILE.with_updates(supported_g_codes=[], supported_m_codes=[])
        assert _validate("G4 P1\nM98", profile).diagnostics == ()

    def test_zero_padded_support_set(self):
        profile = DEFAULT_PROFILE.with_updates(supported_g_codes=["G00", "G01"])
        assert _validate("G0 X1\nG1 X2 F100", profile).diagnostics == ()
        assert _rule_ids(_validate("G2 X1 Y1 I1 F100", profile)) == ["unsupported-command"]

    def test_missing_feed_rate(self):
        result = _validate("G1 X10")
        assert _rule_ids(result) == ["missing-feed-rate"]
        assert result.diagnostics[0].severity is Severity.WARNING
        assert result.is_valid is True

    def test_previous_feed_rate_satisfies(self):
        assert _validate("G1 X10 F100\nG1 X20").diagnostics == ()
        assert _validate("F100\nG2 X10 Y0 I5").diagnostics == ()

    def test_rapid_needs_no_feed_rate(self):
        assert _validate("G0 X10").diagnostics == ()

    def test_feed_rate_exceeded(self):
        result = _validate("G1 X10 F6000")
        assert _rule_ids(result) == ["feed-rate-exceeded"]
        assert result.diagnostics[0].message == "Feed rate F6000 exceeds maximum 5000 mm/min"

    @pytest.mark.parametrize("feed", ["0", "-5"])
    def test_invalid_feed_rate(self, feed):
        result = _validate(f"G1 X10 F{feed}")
        assert _rule_ids(result) == ["invalid-feed-rate"]
        assert result.error_count == 1

    def test_spindle_speed_exceeded(self):
        result = _validate("M3 S30000")
        assert _rule_ids(result) == ["spindle-speed-exceeded"]
        assert result.diagnostics[0].severity is Severity.WARNING
        assert _validate("M4 S24000").diagnostics == ()
        assert _validate("M5 S30000").diagnostics == ()

    def test_arc_missing_params(self):
        result = _validate("G2 X10 Y0 F100")
        assert _rule_ids(result) == ["arc-missing-params"]
        assert result.is_valid is False

    @pytest.mark.parametrize("arc", ["G2 X10 Y0 I5 F100", "G3 X10 Y0 J5 F100", "G2 X10 Y0 R5 F100"])
    def test_arc_with_params(self, arc):
        assert _validate(arc).diagnostics == ()

    def test_rule_registry_is_closed(self):
        assert set(RULES) == set(RuleKind)


class TestValidationEngine:
    def test_sorted_by_line_then_severity(self):
        result = _validate("G1 X10 F100\nG2 X10 Y0 F6000\nG0 X500")
        assert [(d.line, d.rule_id) for d in result.diagnostics] == [
            (2, "arc-missing-params"),
            (2, "feed-rate-exceeded"),
            (3, "out-of-bounds-x"),
        ]
        assert result.error_count == 2
        assert result.warning_count == 1
        assert result.info_count == 0

    def test_warnings_only_is_valid(self):
        result = _validate("G1 X10\nM3 S99999")
        assert result.warning_count == 2
        assert result.is_valid is True

    def test_blank_and_comment_lines_skipped(self):
        assert _validate("\n; just a comment\n(another)\n").diagnostics == ()

    def test_idempotent(self):
        instructions = parse("G0 X500\nG1 X10\nG2 X1 Y1").instructions
        assert validate(instructions) == validate(instructions)

    def test_split_line_keeps_source_line(self):
        result = _validate("G21\nG0 X1 G4 P1")
        assert [(d.line, d.rule_id) for d in result.diagnostics] == [(2, "unsupported-command")]

    def test_merge_parse_errors(self):
        parsed = parse("G1 X10 F100 #\nG0 X500")
        result = merge_parse_errors(validate(parsed.instructions), parsed.errors)
        assert _rule_ids(result) == ["parse-error", "out-of-bounds-x"]
        parse_diag = result.diagnostics[0]
        assert parse_diag.column == 12
        assert parse_diag.end_column == 13
        assert result.error_count == 2

    def test_for_line(self):
        result = _validate("G0 X500\nG1 X10")
        assert [d.rule_id for d in result.for_line(2)] == ["missing-feed-rate"]
        assert str(result.for_line(1)[0]).startswith("Line 1: error:")


class TestValidationState:
    def setup_method(self):
        self.state = create_initial_state(DEFAULT_PROFILE)

    def _advance(self, line):
        for instruction in parse(line).instructions:
            advance_state(self.state, instruction)

    def test_initial_state(self):
        assert self.state.position == (0.0, 0.0, 0.0)
        assert self.state.feed_rate == 0.0
        assert self.state.absolute_mode is True
        assert self.state.units is Units.MM

    def test_modes_and_units(self):
        self._advance("G91")
        assert self.state.absolute_mode is False
        self._advance("G20")
        assert self.state.units is Units.INCH
        self._advance("G21 G90")
        assert self.state.units is Units.MM
        assert self.state.absolute_mode is True

    def test_position_tracking(self):
        self._advance("G0 X10 Y5")
        self._advance("G91")
        self._advance("G1 X2 Z-1 F300")
        assert self.state.position == (12.0, 5.0, -1.0)
        assert self.state.feed_rate == 300.0

    def test_non_motion_command_keeps_position(self):
        self._advance("G28 X50")
        assert self.state.position == (0.0, 0.0, 0.0)
