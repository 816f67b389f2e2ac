"""Prompt templates shared by all generation backends."""

# System prompt for single-line commit messages
SYSTEM_PROMPT = """You are a commit message generator. Your ONLY job is to generate a conventional commit message.

RULES:
1. Write in present tense
2. Be concise and direct
3. Output ONLY the commit message without any explanations, quotes, or markdown
4. Follow the format: <type>(<optional scope>): <commit message>
5. Keep the message under 72 characters
6. Focus on what changed, not how it changed

EXAMPLE OUTPUT: feat(auth): add user authentication system"""

# System prompt for title + body generation
DETAILED_SYSTEM_PROMPT = """You are a commit message generator that generates both a concise title and a detailed body.

RULES FOR TITLE:
1. Write in present tense
2. Be concise and direct
3. Follow the format: <type>(<optional scope>): <commit message>
4. Keep the title under 72 characters
5. Focus on what changed, not how it changed

RULES FOR BODY:
1. Write in present tense
2. Provide 2-4 bullet points that explain the changes in depth
3. Each bullet point should be concise but informative
4. Focus on the WHY and WHAT of the changes
5. Reference specific files or functionality when relevant

OUTPUT FORMAT:
Title: <type>(<optional scope>): <commit message>

Body:
• First detailed point about the changes
• Second detailed point about the changes
• Third detailed point about the changes (if applicable)

EXAMPLE OUTPUT:
Title: feat(auth): add user authentication system

Body:
• Add JWT token generation and validation middleware
• Implement login/logout endpoints with secure password hashing
• Create user model with role-based access control"""

USER_PROMPT_TEMPLATE = """Generate a concise git commit message written in present tense for the following code diff with the given specifications below:

The output response must be in format:
<type>(<optional scope>): <commit message>

Choose a type from the type-to-description JSON below that best describes the git diff:
{commit_types}
{context}Focus on being accurate and concise.
Commit message must be a maximum of 72 characters.
Exclude anything unnecessary such as translation.
Your entire response will be passed directly into git commit.
Code diff:
```diff
{diff}
```"""

DETAILED_USER_PROMPT_TEMPLATE = """Generate a commit message with detailed body for the following code diff:

Follow the exact format specified. Include both a concise title and detailed bullet points in the body.

Choose a type from the type-to-description JSON below that best describes the git diff:
{commit_types}
{context}Focus on being accurate and comprehensive.
Code diff:
```diff
{diff}
```"""

MERGE_PROMPT_HEADER = "Merge the following commit message summaries into a single, coherent commit message:\n\n"
MERGE_PROMPT_FOOTER = "\nGenerate a single commit message that captures the essence of all changes."

DETAILED_MERGE_PROMPT_HEADER = (
    "Merge the following detailed commit summaries into a single, coherent "
    "commit message with title and body:\n\n"
)
DETAILED_MERGE_PROMPT_FOOTER = (
    "\nGenerate a single commit message with title and body that captures "
    "the essence of all changes."
)


def _context_block(extra_context: str) -> str:
    if not extra_context:
        return ""
    return f"\nAdditional context: {extra_context}\n"


def build_user_prompt(diff: str, commit_types: str, extra_context: str = "") -> str:
    """Build the user prompt for a single-line commit message."""
    return USER_PROMPT_TEMPLATE.format(
        commit_types=commit_types,
        context=_context_block(extra_context),
        diff=diff,
    )


def build_detailed_user_prompt(diff: str, commit_types: str, extra_context: str = "") -> str:
    """Build the user prompt for a title + body commit message."""
    return DETAILED_USER_PROMPT_TEMPLATE.format(
        commit_types=commit_types,
        context=_context_block(extra_context),
        diff=diff,
    )


def build_merge_prompt(summaries: list[str], files: list[str]) -> str:
    """Build the prompt asking a backend to merge per-chunk summaries.

    Args:
        summaries: One generated message per successful chunk, in chunk order.
        files: Union of the files affected by those chunks.
    """
    parts = [MERGE_PROMPT_HEADER]
    parts.extend(f"Summary {i}: {summary}\n" for i, summary in enumerate(summaries, start=1))
    if files:
        parts.append(f"\nFiles affected: {', '.join(files)}\n")
    parts.append(MERGE_PROMPT_FOOTER)
    return "".join(parts)


def build_detailed_merge_prompt(summaries: list[str], files: list[str]) -> str:
    """Build the merge prompt for title + body generation."""
    parts = [DETAILED_MERGE_PROMPT_HEADER]
    parts.extend(f"Summary {i}:\n{summary}\n" for i, summary in enumerate(summaries, start=1))
    if files:
        parts.append(f"\nFiles affected: {', '.join(files)}\n")
    parts.append(DETAILED_MERGE_PROMPT_FOOTER)
    return "".join(parts)
