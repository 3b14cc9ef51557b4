"""Tests for extraction phase definitions and transition validation."""

from promoscope.engine.phases import TERMINAL_PHASES, VALID_TRANSITIONS, Phase


class TestPhaseDefinitions:
    def test_all_phases_exist(self):
        expected = {
            "INIT", "NAVIGATE", "SETTLE", "SCROLL", "EXTRACT", "CAPTURE", "COMPLETE", "FAIL",
        }
        assert {p.value for p in Phase} == expected

    def test_terminal_phases_have_no_transitions(self):
        assert TERMINAL_PHASES == {Phase.COMPLETE, Phase.FAIL}
        for phase in TERMINAL_PHASES:
            assert VALID_TRANSITIONS[phase] == set()

    def test_every_phase_has_transition_entry(self):
        for phase in Phase:
            assert phase in VALID_TRANSITIONS

    def test_every_non_terminal_phase_can_fail(self):
        for phase in Phase:
            if phase not in TERMINAL_PHASES:
                assert Phase.FAIL in VALID_TRANSITIONS[phase]

    def test_scroll_is_optional(self):
        assert VALID_TRANSITIONS[Phase.SETTLE] == {Phase.SCROLL, Phase.EXTRACT, Phase.FAIL}
        assert VALID_TRANSITIONS[Phase.SCROLL] == {Phase.EXTRACT, Phase.FAIL}

    def test_capture_follows_extract(self):
        assert VALID_TRANSITIONS[Phase.EXTRACT] == {Phase.CAPTURE, Phase.FAIL}
        assert VALID_TRANSITIONS[Phase.CAPTURE] == {Phase.COMPLETE, Phase.FAIL}
