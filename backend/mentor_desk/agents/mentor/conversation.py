"""Detection of conversation-ending student messages.

A short acknowledgement ("Thanks!", "Sounds good") or a brief note of
anticipation ("Can't wait to get started") closes the exchange. No draft is
generated for these; the message is still stored.
"""

import re

SHORT_MESSAGE_WORDS = 8
EXCITEMENT_MESSAGE_WORDS = 15

_ACK = r"(sure|ok|okay|got it|will do|sounds good|perfect|great|thanks|thank you)"
_MENTOR_NAME = r"(dr\.?\s*\w+|prof(essor)?\.?\s*\w*|mentor)"

SHORT_PATTERNS = [
    re.compile(
        r"^(sure|ok|okay|got it|will do|sounds good|perfect|great|thanks|thank you|bye|see you|talk later)[\s,!.]*$",
        re.IGNORECASE,
    ),
    re.compile(rf"^{_ACK}[\s,!.]*{_MENTOR_NAME}[\s,!.]*$", re.IGNORECASE),
    re.compile(r"^thanks[\s,!.]*$", re.IGNORECASE),
    re.compile(r"^thank you[\s,!.]*$", re.IGNORECASE),
]

EXCITEMENT_PATTERNS = [
    re.compile(
        r"^(sounds good|sure|ok|okay|perfect|great).*?(i('m| am) (really )?(excited|looking forward)|excited to|looking forward)",
        re.IGNORECASE,
    ),
    re.compile(r"^(i('m| am) (really )?(excited|looking forward)|excited to|looking forward)", re.IGNORECASE),
    re.compile(r"(excited|looking forward).*?(get started|begin|start|learn|dive in)", re.IGNORECASE),
    re.compile(r"can't wait to (get started|begin|start|learn)", re.IGNORECASE),
]


def is_conversation_ending(message: str) -> bool:
    """
    True when the message closes the exchange and needs no reply.

    Any question mark means the student is still asking something.
    """
    normalized = message.strip().lower()
    if not normalized or "?" in normalized:
        return False

    word_count = len(normalized.split())

    if word_count <= SHORT_MESSAGE_WORDS:
        if any(pattern.search(normalized) for pattern in SHORT_PATTERNS):
            return True

    if word_count <= EXCITEMENT_MESSAGE_WORDS:
        if any(pattern.search(normalized) for pattern in EXCITEMENT_PATTERNS):
            return True

    return False
