"""Prompt builders for the generative model."""


def build_reminder_prompt(context: str, text: str, max_length: int) -> str:
    return (
        f"{context.rstrip()}\n\n"
        f"Current message: {text}.\n\n"
        "Generate a subtle reminder related to the previous context, if appropriate, "
        f"and within {max_length} characters. "
        "If no reminder is needed, return an empty string."
    )


def build_suggestion_prompt(text: str, max_length: int, count: int = 3) -> str:
    return (
        f"Generate {count} short suggested replies (max {max_length} characters each) "
        f'for this chat message: "{text}"'
    )


def build_refinement_prompt(transcript: str, text: str) -> str:
    return (
        f"Here's the conversation so far:\n{transcript}\n\n"
        f"Current message: {text}\n\n"
        "Suggest a more polite and comprehensive rephrasing of the current message."
    )
