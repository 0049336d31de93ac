"""Prompt template for repository analysis.

The reply format is a plain-text contract with the parser: three section
markers, in this order, each on its own line. Changing a marker here changes
what `gitfolio.llm.parser` looks for.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gitfolio.models.repository import EnhancedRepository

SUMMARY_MARKER = "SUMMARY:"
BULLET_POINTS_MARKER = "BULLET_POINTS:"
KEYWORDS_MARKER = "KEYWORDS:"

SECTION_MARKERS = (SUMMARY_MARKER, BULLET_POINTS_MARKER, KEYWORDS_MARKER)

NO_DESCRIPTION = "No description provided"
NO_LANGUAGES = "Unknown"
NO_TOPICS = "None"
NO_COMMITS = "No recent commits available"

REPOSITORY_PROMPT_TEMPLATE = """
You are an expert developer and technical writer helping to create a professional portfolio.

Please analyze this GitHub repository and generate:
1. A concise project summary (2-3 lines)
2. 2-3 resume bullet points in STAR format (Situation, Task, Action, Result)
3. 5 relevant technical keywords

Repository Information:
- Name: {name}
- Description: {description}
- Languages: {languages}
- Topics/Tags: {topics}
- Stars: {stars}
- Forks: {forks}

Recent Commit Messages:
{commits}

Please format your response exactly as follows:
{summary_marker}
[Your 2-3 line summary here]

{bullet_marker}
- [First STAR format bullet point]
- [Second STAR format bullet point]
- [Optional third bullet point]

{keywords_marker}
keyword1, keyword2, keyword3, keyword4, keyword5
"""


def format_commit_messages(messages: list[str]) -> str:
    """Render commit messages as a bulleted block, or the placeholder."""
    lines = [f"- {message.strip()}" for message in messages if message and message.strip()]
    return "\n".join(lines) if lines else NO_COMMITS


def build_repository_prompt(repo: "EnhancedRepository") -> str:
    """Build the analysis prompt for one enriched repository.

    Pure and deterministic: the same repository always yields the same text.

    Args:
        repo: Enriched repository

    Returns:
        Prompt text containing the three section markers
    """
    languages = ", ".join(repo.languages) if repo.languages else NO_LANGUAGES
    topics = ", ".join(repo.topics) if repo.topics else NO_TOPICS

    return REPOSITORY_PROMPT_TEMPLATE.format(
        name=repo.name,
        description=repo.description or NO_DESCRIPTION,
        languages=languages,
        topics=topics,
        stars=repo.stargazers_count,
        forks=repo.forks_count,
        commits=format_commit_messages(repo.commit_messages),
        summary_marker=SUMMARY_MARKER,
        bullet_marker=BULLET_POINTS_MARKER,
        keywords_marker=KEYWORDS_MARKER,
    )
