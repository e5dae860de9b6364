"""Prompt templates sent to the analysis workflow.

The templates ask for the heading layout the extractor reads best. The
workflow is free to drift from it; the extractor copes either way.
"""

import json
from datetime import datetime
from typing import Optional

from langchain_core.prompts import PromptTemplate

from .models.posts import PostCollection


ANALYSIS_TEMPLATE = """Please analyze this aspect of the social media data: "{question}"

Provide your response in the following format:

### Metrics
- Engagement Rate: [average engagement rate]%
- Likes: [average likes]
- Shares: [average shares]
- Comments: [average comments]
- Views: [average views]
- Primary Age Group: [most engaged age groups]
- Gender Split: [split between male/female/other]

### Format Insights
- [one bullet per post format and how it performs]

### Direct Answer
- Expected Likes: [number]
- Expected Shares: [number]
- Expected Comments: [number]
- Expected Views: [number]

### Explanation
[Clear analysis of the data and the factors affecting engagement]

### Suggestions
- Optimal Posting Time: [specific time recommendation]
- Hashtags: [list of recommended hashtags]
- Content Quality: [specific content recommendations]
- Target Audience: [audience targeting suggestions]

Please keep the headings exactly as written."""

INITIAL_QUESTION = (
    "Provide a comprehensive analysis of the social media performance data "
    "shown in the dashboard."
)

analysis_prompt = PromptTemplate.from_template(ANALYSIS_TEMPLATE)


def build_analysis_prompt(question: Optional[str] = None) -> str:
    """Render the analysis prompt for a user question."""
    return analysis_prompt.format(question=(question or INITIAL_QUESTION).strip())


def build_request_payload(
    question: Optional[str],
    collection: Optional[PostCollection] = None,
    history: Optional[list[dict]] = None,
) -> str:
    """JSON message for the workflow: prompt, dashboard aggregates and chat history."""
    message = {
        "data": collection.summary() if collection else {},
        "message": build_analysis_prompt(question),
        "history": history or [],
        "timestamp": datetime.now().isoformat(),
    }
    return json.dumps(message)
