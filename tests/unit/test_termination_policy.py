import pytest

from agents.termination_policy import TerminationPolicy, decide
from agents.types import SignalSet
from config.settings import Settings
from services.clock import SessionClock


class StubClock:
    def __init__(self, remaining):
        self._remaining = remaining

    def remaining(self):
        return self._remaining


RICH = dict(mentions_technology=True, mentions_metric=True)
POLICY = TerminationPolicy()


def test_defaults_match_settings():
    policy = TerminationPolicy.from_settings(Settings(_env_file=None))
    assert policy == POLICY
    assert (policy.wrapup_margin_seconds, policy.turn_cap, policy.quality_min_turns) == (180, 10, 6)


@pytest.mark.parametrize("count", [10, 11, 25])
def test_turn_cap_finalizes_regardless_of_content(count):
    decision = POLICY.decide(SignalSet(respondent_turn_count=count), StubClock(600))
    assert decision.is_terminal
    assert decision.reason == "turn_cap_reached"


def test_time_rule_wins_over_everything():
    decision = POLICY.decide(SignalSet(respondent_turn_count=10, **RICH), StubClock(100))
    assert decision.reason == "time_exceeded"


def test_time_rule_fires_at_exactly_the_margin(fake_clock):
    clock = SessionClock(900, now=fake_clock)
    fake_clock.advance(719)
    assert not POLICY.decide(SignalSet(respondent_turn_count=1), clock).is_terminal
    fake_clock.advance(1)
    decision = POLICY.decide(SignalSet(respondent_turn_count=1), clock)
    assert decision.reason == "time_exceeded"


def test_early_exit_needs_six_turns():
    assert POLICY.decide(SignalSet(respondent_turn_count=5, **RICH), StubClock(600)).action == "continue"
    decision = POLICY.decide(SignalSet(respondent_turn_count=6, **RICH), StubClock(600))
    assert decision.reason == "quality_sufficient"


@pytest.mark.parametrize(
    "flags",
    [
        dict(mentions_technology=True),
        dict(mentions_metric=True),
        dict(mentions_team=True, mentions_business_impact=True, mentions_timeframe=True),
    ],
)
def test_early_exit_needs_technology_and_metric(flags):
    decision = POLICY.decide(SignalSet(respondent_turn_count=7, **flags), StubClock(600))
    assert decision.action == "continue"
    assert decision.reason is None


def test_custom_thresholds():
    policy = TerminationPolicy(wrapup_margin_seconds=30, turn_cap=4, quality_min_turns=2)
    assert policy.decide(SignalSet(respondent_turn_count=2, **RICH), StubClock(31)).reason == "quality_sufficient"
    assert policy.decide(SignalSet(respondent_turn_count=4), StubClock(31)).reason == "turn_cap_reached"
    assert policy.decide(SignalSet(respondent_turn_count=1), StubClock(30)).reason == "time_exceeded"


def test_module_level_decide_uses_settings():
    assert decide(SignalSet(respondent_turn_count=10), StubClock(600)).reason == "turn_cap_reached"
