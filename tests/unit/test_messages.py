import pytest

from agents.messages import (
    CLOSINGS,
    GENERIC_FOLLOWUP,
    GENERIC_OPENER,
    closing,
    fallback_followup,
    opener,
    trim_words,
)


@pytest.mark.parametrize("prior", [None, "", "   \n"])
def test_generic_opener_without_resume(prior):
    assert opener(prior) == GENERIC_OPENER


def test_personalized_opener_names_two_technologies_and_role():
    message = opener("Senior engineer. Skills: Docker, Python, React, AWS")
    assert message.startswith("Hi! I've reviewed your resume")
    assert "I see you work with React and Python. " in message
    assert "As a senior developer, let's dive into" in message
    assert "Docker" not in message


def test_personalized_opener_without_known_terms():
    message = opener("Accountant turned product manager")
    assert "I see you work with" not in message
    assert "Let's dive into a specific project" in message
    assert message != GENERIC_OPENER


def test_full_stack_role_label():
    assert "As a full-stack developer" in opener("Full Stack developer with Node.js")


def test_closings_are_distinct_per_reason():
    assert set(CLOSINGS) == {"quality_sufficient", "turn_cap_reached", "time_exceeded"}
    assert len(set(CLOSINGS.values())) == 3
    assert "excellent material" in closing("quality_sufficient")


@pytest.mark.parametrize(
    "reply, route",
    [
        ("I built a react dashboard", "frontend"),
        ("Mostly backend work on a REST API", "backend"),
        ("I tuned our Postgres database", "database"),
        ("I was on a team of 5", "team"),
        ("We collaborated with design", "team"),
        ("I optimized the checkout flow", "improvement"),
        ("It was a side project", "project"),
        ("I like cats", "generic"),
    ],
)
def test_fallback_routes(reply, route):
    assert fallback_followup(reply)[0] == route


def test_fallback_route_priority_follows_order():
    route, message = fallback_followup("A react frontend backed by an API and a team of 4")
    assert route == "frontend"
    assert "React" in message


@pytest.mark.parametrize("reply", [None, "", "rapid prototyping"])
def test_fallback_never_empty(reply):
    route, message = fallback_followup(reply)
    assert route == "generic"
    assert message == GENERIC_FOLLOWUP


def test_trim_words():
    assert trim_words("  one   two three ", 5) == "one two three"
    assert trim_words("a b c d e f", 3) == "a b c..."
