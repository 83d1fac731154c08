"""Prompt templates for conversation summaries and free-form prompts."""

from __future__ import annotations

from collections.abc import Sequence

SUMMARY_SYSTEM_INTRO = "You are a helpful assistant that summarizes Discord conversations. "

FORMATTED_SUMMARY_INSTRUCTIONS = (
    "Create a well-structured summary with the following format: "
    "1) A clear summary of the main topics being discussed, "
    "2) Each user's opinion or take on the main topics, presented one after another. "
    "If several topics are discussed by different users, summarize what each person discussed. "
    "If an opinion/take cannot be detected for some users, they can be ignored. "
    "Use formatting like bold text, bullet points, and emojis to highlight key elements, "
    "but keep it minimal to ensure readability. "
    "The output should follow this structure:\n"
    "<summary_of_main_topics>\n\n"
    "<user_1_opinion>\n\n"
    "<user_2_opinion>\n\n"
    "<user_3_opinion>"
)

CONCISE_SUMMARY_INSTRUCTIONS = (
    "Create a concise summary that captures the main points and important details."
)


PROMPT_SYSTEM_PROMPT = (
    "You are a helpful assistant answering questions from a Discord server. "
    "Answer clearly and concisely, using Discord markdown where it helps readability."
)

_USER_PROMPTS: dict[tuple[bool, str], str] = {
    (False, "english"): "Please summarize the following conversation",
    (False, "spanish"): "Por favor, resume la siguiente conversación",
    (True, "english"): (
        "Please create a structured summary of the following conversation, clearly showing "
        "the main topics and each user's opinion or perspective on those topics"
    ),
    (True, "spanish"): (
        "Por favor, crea un resumen estructurado de la siguiente conversación, mostrando "
        "claramente los temas principales y la opinión o perspectiva de cada usuario sobre "
        "esos temas"
    ),
}


def normalize_language(language: str) -> str:
    # Anything that is not Spanish gets English
    return "spanish" if language.lower() == "spanish" else "english"


def generate_system_prompt(formatted: bool, language: str = "english") -> str:
    """Build the system prompt for a summary.

    Args:
        formatted: Produce a topics-and-perspectives summary instead of a concise one.
        language: ``"english"`` or ``"spanish"``.

    Returns:
        The system prompt text.
    """
    prompt = SUMMARY_SYSTEM_INTRO
    if normalize_language(language) == "spanish":
        prompt += "Provide the summary in Spanish. "
    else:
        prompt += "Provide the summary in English. "

    if formatted:
        prompt += FORMATTED_SUMMARY_INSTRUCTIONS
    else:
        prompt += CONCISE_SUMMARY_INSTRUCTIONS
    return prompt


def generate_user_prompt(
    formatted: bool,
    language: str = "english",
    custom_prompt: str | None = None,
    messages: Sequence[str] = (),
) -> str:
    """Build the user prompt carrying the conversation.

    Args:
        formatted: Ask for a topics-and-perspectives summary.
        language: ``"english"`` or ``"spanish"``.
        custom_prompt: Extra instructions from the user, already sanitized.
        messages: Conversation lines, oldest first.

    Returns:
        The user prompt text.
    """
    prompt = _USER_PROMPTS[(formatted, normalize_language(language))]

    if custom_prompt:
        prompt += f". {custom_prompt}"

    if messages:
        prompt += ":\n\n" + "\n".join(messages)
    return prompt
