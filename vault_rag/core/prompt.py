"""
Prompt assembly for grounded vault Q&A.

Builds the system instruction (vault name, optional vault details and
members, retrieved context, grounding rules) and the bounded history
window forwarded to the model.

Dependencies: vault_rag.models
System role: Prompt construction
"""

from collections.abc import Sequence

from vault_rag.models.chat import GenerationMessage

ASSISTANT_NAME = "VaultBot"

GROUNDING_RULES = """Rules:
1. Answer only from the supplied context, vault details, and member list. Do not invent facts that are not in them.
2. If the context does not contain enough information to answer, say so plainly, then share whatever related context you do have.
3. Cite sources with [Source N] notation matching the numbered sources below whenever you use their content.
4. When several sources discuss the same topic, synthesize them into one cohesive answer instead of summarizing each separately.
5. When the user asks what a specific person wrote, added, or said, use only sources and annotations attributed to that author ("by <name>").
6. Infer intent through typos and vague references ("memebers" means "members").
7. Use markdown formatting (bullet points, bold, headers) for readability."""


def build_system_prompt(
    vault_name: str,
    context_text: str,
    members_text: str | None = None,
    vault_info_text: str | None = None,
) -> str:
    """
    Build the system prompt with context chunks and vault metadata injected.

    Args:
        vault_name: Display name of the vault
        context_text: Output of format_context
        members_text: Optional newline-separated member list
        vault_info_text: Optional vault description block

    Returns:
        str: System instruction
    """
    vault_section = f"\n\nVault Details:\n{vault_info_text}\n" if vault_info_text else ""
    members_section = f"\n\nVault Members:\n{members_text}\n" if members_text else ""

    return (
        f"You are {ASSISTANT_NAME}, a research assistant for a collaborative research vault.\n"
        f'You are currently helping inside the vault "{vault_name}".'
        f"{vault_section}{members_section}\n\n"
        f"{GROUNDING_RULES}\n\n"
        "Context from vault (retrieved via similarity search):\n"
        "---\n"
        f"{context_text}\n"
        "---"
    )


def build_history(
    history: Sequence[GenerationMessage],
    max_messages: int = 6,
) -> list[GenerationMessage]:
    """Keep only the most recent max_messages turns, oldest first."""
    if max_messages <= 0:
        return []
    return list(history[-max_messages:])
