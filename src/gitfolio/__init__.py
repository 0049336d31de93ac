"""GitFolio - Resume-ready portfolio generation from GitHub repositories.

GitFolio lists a GitHub account's public repositories, enriches them with
language breakdowns and recent commit messages, and asks a text-generation
model for a short summary, resume bullet points and technical keywords
for each one.

Core principles:
- Partial results: a failure in one repository never aborts the batch
- Ordered output: results line up one-to-one with the input repositories
- Polite clients: requests to the generation service are throttled
- CI/CD Compatibility: No interactive prompts, meaningful exit codes
"""

__version__ = "0.1.0"
__author__ = "GitFolio Contributors"
