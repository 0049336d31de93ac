"""Text-generation integration for repository analysis.

- client: Gemini REST and LiteLLM-backed generation client
- prompts: Analysis prompt template and builder
- parser: Reply parser for the SUMMARY / BULLET_POINTS / KEYWORDS format
"""

from gitfolio.llm.client import AnalysisClient, AnalysisReply, FailureKind, create_client
from gitfolio.llm.parser import parse_analysis_response
from gitfolio.llm.prompts import build_repository_prompt

__all__ = [
    "AnalysisClient",
    "AnalysisReply",
    "FailureKind",
    "create_client",
    "parse_analysis_response",
    "build_repository_prompt",
]
