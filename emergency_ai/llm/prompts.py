"""Prompt template for emergency guidance. English only."""

FOLLOW_UP_MARKER = "Follow-up scenarios:"

SYSTEM_SCOPE = "You are an AI assistant specialized in military emergency protocols."

# Formatting directives appended after the situation
FORMAT_DIRECTIVES = f"""Format your response in a clear, step-by-step manner using markdown formatting with:
- Clear headings for different sections
- Bullet points for steps or key points
- Important information highlighted

After your main response, suggest 3-4 relevant follow-up scenarios that might occur.
Put them last, under a line reading exactly "{FOLLOW_UP_MARKER}", one scenario per line, each starting with "- ".
Do not use the phrase "{FOLLOW_UP_MARKER}" anywhere else in your response."""


def build_prompt(category: str, message: str) -> str:
    """
    Build the single instruction string sent to the model.
    Caller guarantees a non-empty message and a selected category.
    """
    return (
        f"{SYSTEM_SCOPE}\n"
        f"Current emergency category: {category}.\n\n"
        f"Provide clear, concise, and actionable guidance for the following situation: {message}\n\n"
        f"{FORMAT_DIRECTIVES}"
    )
