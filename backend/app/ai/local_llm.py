from __future__ import annotations

_SUGGESTIONS: dict[str, str] = {
    "Anxious": "Try a slow breathing round: inhale for four, hold for two, exhale for six.",
    "Fearful": "Name one thing that feels safe right now and stay with it for a minute.",
    "Angry": "Step away for ten minutes and move your body before deciding anything.",
    "Frustrated": "Break the task in front of you into the smallest next step.",
    "Sad": "Reach out to someone you trust, even with a short message.",
    "Lonely": "Plan one small moment of connection today, a call or a walk with someone.",
    "Confused": "Write down the question you are stuck on; it often shrinks on paper.",
    "Disgusted": "Give yourself distance from what bothered you and reset with something familiar.",
}
_DEFAULT_SUGGESTION = "Keep noting what lifts your day and make room for one more of those moments."


def generate_local_advice(dominant_emotion: str | None, average_rating: float | None) -> str:
    """Return a deterministic advice blurb used when no LLM is configured."""

    if dominant_emotion is None:
        return "Log how you feel over the next few days and advice will follow."

    opening = f"You have mostly been feeling {dominant_emotion.lower()} lately."
    if average_rating is not None and average_rating < 5:
        opening += " It sounds like the days have been heavy."
    suggestion = _SUGGESTIONS.get(dominant_emotion, _DEFAULT_SUGGESTION)
    return f"{opening} {suggestion} Small steps still count."
