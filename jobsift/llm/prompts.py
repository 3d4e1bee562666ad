"""
Prompt templates for the tagging step.
"""

from __future__ import annotations


TAG_SYSTEM = """You tag job postings. Given a job posting, provide tags.

Output JSON with these fields:
- coop: "Yes" | "No" | "Maybe" (is the posting an internship or co-op position)
- tech: software technologies mentioned in the posting, comma separated
- languages: programming languages mentioned in the posting, comma separated
- skills: skills mentioned in the posting, comma separated

Use an empty string for a field with nothing to report. Only include what's explicitly mentioned."""


def build_tag_prompt(description: str, max_chars: int = 6000) -> str:
    """Build the tagging prompt for one posting description."""
    return f"""Job Posting: {description[:max_chars]}

Respond with JSON only."""
