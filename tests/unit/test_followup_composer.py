from datetime import datetime, timezone

import pytest

from agents.followup_composer import FollowUpComposer, pick_target, render_transcript
from agents.signal_extractor import extract
from agents.types import ConversationTurn, SignalSet
from llm_gateway import LlmGatewayError

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
REACT_TEMPLATE = "What specific React features did you implement and how many users does it serve?"
TEAM_TEMPLATE = "How big was the team and what was your specific role in the project?"


def _transcript(*replies):
    turns = [ConversationTurn(speaker="interviewer", text="Tell me about a project.", produced_at=T0)]
    for reply in replies:
        turns.append(ConversationTurn(speaker="respondent", text=reply, produced_at=T0))
    return turns


def _compose(composer, *replies):
    transcript = _transcript(*replies)
    return composer.draft(transcript, extract(transcript))


def test_fallback_is_deterministic_when_generation_always_fails(scripted_generator):
    composer = FollowUpComposer(scripted_generator(error=LlmGatewayError("down")))
    react_input = _transcript("I built a react dashboard")
    team_input = _transcript("I was in a team of 5")
    react = [composer.compose(react_input, extract(react_input)) for _ in range(3)]
    team = [composer.compose(team_input, extract(team_input)) for _ in range(3)]
    assert react == [REACT_TEMPLATE] * 3
    assert team == [TEAM_TEMPLATE] * 3


def test_fallback_uses_latest_respondent_message():
    draft = _compose(FollowUpComposer(None), "I built a react dashboard", "I was in a team of 5")
    assert draft.text == TEAM_TEMPLATE
    assert draft.source == "fallback"
    assert draft.route == "team"
    assert draft.failure == "no_generator"


def test_generated_reply_is_used_and_trimmed(scripted_generator):
    long_reply = " ".join(["word"] * 80) + "?"
    generator = scripted_generator(reply=f'"{long_reply}"')
    draft = _compose(FollowUpComposer(generator, max_words=50), "I built a react dashboard")
    assert draft.source == "generated"
    assert len(draft.text.split()) == 50
    assert not draft.text.startswith('"')


def test_generated_reply_passes_through(scripted_generator):
    generator = scripted_generator(reply="How many people used the dashboard each day?")
    draft = _compose(FollowUpComposer(generator), "I built a react dashboard")
    assert draft.text == "How many people used the dashboard each day?"
    assert draft.target == "metrics"
    prompt, constraints = generator.prompts[0]
    assert "RESPONDENT: I built a react dashboard" in prompt
    assert "measurable results" in prompt
    assert constraints.max_words == 50
    assert constraints.system


@pytest.mark.parametrize("reply", ["", "   ", "Why?", None, 42])
def test_short_or_malformed_replies_fall_back(scripted_generator, reply):
    draft = _compose(FollowUpComposer(scripted_generator(reply=reply)), "I built a react dashboard")
    assert draft.source == "fallback"
    assert draft.text == REACT_TEMPLATE


def test_slow_generation_falls_back_within_ceiling(scripted_generator):
    generator = scripted_generator(reply="How many users did it serve at peak?", delay_s=1.0)
    composer = FollowUpComposer(generator, timeout_s=0.05)
    draft = _compose(composer, "I was in a team of 5")
    assert draft.source == "fallback"
    assert draft.failure == "GenerationTimeout"
    assert draft.text == TEAM_TEMPLATE


def test_unexpected_generator_error_is_absorbed(scripted_generator):
    composer = FollowUpComposer(scripted_generator(error=ValueError("boom")))
    assert _compose(composer, "nothing notable").text


def test_target_priority():
    assert pick_target(SignalSet()) == "metrics"
    assert pick_target(SignalSet(mentions_metric=True)) == "team"
    assert pick_target(SignalSet(mentions_metric=True, mentions_team=True)) == "technology"
    assert (
        pick_target(SignalSet(mentions_metric=True, mentions_team=True, mentions_technology=True))
        == "business_impact"
    )
    assert (
        pick_target(
            SignalSet(
                mentions_metric=True,
                mentions_team=True,
                mentions_technology=True,
                mentions_business_impact=True,
            )
        )
        == "depth"
    )


def test_prompt_keeps_transcript_tail_and_resume_excerpt(scripted_generator):
    generator = scripted_generator(reply="What was the measurable outcome of that work?")
    composer = FollowUpComposer(generator, transcript_chars=200, prior_context_chars=20)
    transcript = _transcript("x" * 10_000, "final answer about python")
    composer.draft(transcript, extract(transcript), prior_context="Senior backend engineer at Acme Corp")
    prompt = generator.prompts[0][0]
    assert "[earlier conversation omitted]" in prompt
    assert "RESPONDENT: final answer about python" in prompt
    assert "Resume excerpt:\nSenior backend engin\n" in prompt
    assert "Acme" not in prompt
    assert "x" * 300 not in prompt


def test_render_transcript_labels_speakers():
    text = render_transcript(_transcript("hello there"), 1000)
    assert text == "INTERVIEWER: Tell me about a project.\nRESPONDENT: hello there"
