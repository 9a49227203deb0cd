"""
Test conversation-ending detection.
"""

import pytest

from mentor_desk.agents.mentor import is_conversation_ending


@pytest.mark.parametrize(
    "message",
    [
        "Thanks!",
        "thank you",
        "Sounds good.",
        "ok",
        "Perfect, Dr. Smith!",
        "Thanks professor",
        "See you",
        "I'm really excited to get started",
        "Sounds good, I'm looking forward to it",
        "Can't wait to start the next module",
    ],
)
def test_endings_are_detected(message):
    assert is_conversation_ending(message) is True


@pytest.mark.parametrize(
    "message",
    [
        "",
        "   ",
        "Thanks! But what is a neural ODE?",
        "ok?",
        "Can you explain how physics-informed neural networks enforce boundary conditions",
        "I watched the lecture on neural operators and I'm confused about the Fourier layer",
    ],
)
def test_real_messages_are_not_endings(message):
    assert is_conversation_ending(message) is False


def test_long_messages_skip_short_patterns():
    message = "thanks " * 9
    assert is_conversation_ending(message.strip()) is False


def test_excitement_needs_short_message():
    long_message = (
        "I'm excited to get started but first I want to go through every lesson of topic three "
        "and take careful notes on each derivation"
    )
    assert is_conversation_ending(long_message) is False
