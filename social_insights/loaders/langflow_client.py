"""Langflow API client for asking the analysis workflow about post data."""

import logging
from typing import Any, Optional

import httpx

from ..config import DEFAULT_ERROR_SENTINEL
from ..exceptions import LangflowError
from ..models.posts import PostCollection
from ..prompts import build_request_payload

logger = logging.getLogger(__name__)


def extract_reply_text(data: Any) -> Optional[str]:
    """Pull the reply text out of a flow run response.

    Accepts the flat ``{"result": "..."}`` shape and Langflow's nested
    ``outputs[0].outputs[0].results.message.text`` shape.
    """
    if not isinstance(data, dict):
        return None
    result = data.get("result")
    if isinstance(result, str):
        return result
    try:
        message = data["outputs"][0]["outputs"][0]["results"]["message"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(message, dict):
        text = message.get("text") or message.get("data", {}).get("text")
        return text if isinstance(text, str) else None
    return None


class LangflowClient:
    """Run a Langflow flow and return its chat reply."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: str = "https://api.langflow.astra.datastax.com",
        langflow_id: str = "",
        flow_id: str = "",
        timeout: float = 60.0,
        error_sentinel: str = DEFAULT_ERROR_SENTINEL,
        tweaks: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not flow_id:
            raise ValueError(
                "Langflow flow ID required. Set LANGFLOW_FLOW_ID environment variable "
                "or pass flow_id parameter."
            )
        self.base_url = base_url.rstrip("/")
        self.langflow_id = langflow_id
        self.flow_id = flow_id
        self.timeout = timeout
        self.error_sentinel = error_sentinel
        self.tweaks = tweaks or {}
        self._transport = transport

        self.headers = {"Content-Type": "application/json"}
        if access_token:
            self.headers["Authorization"] = f"Bearer {access_token}"
        else:
            logger.warning("No Langflow access token configured; requests may be rejected")

    @classmethod
    def from_settings(cls, settings) -> "LangflowClient":
        return cls(
            access_token=settings.langflow_access_token,
            base_url=settings.langflow_base_url,
            langflow_id=settings.langflow_id,
            flow_id=settings.langflow_flow_id,
            timeout=settings.langflow_timeout,
            error_sentinel=settings.error_sentinel,
        )

    @property
    def run_url(self) -> str:
        if self.langflow_id:
            return f"{self.base_url}/lf/{self.langflow_id}/api/v1/run/{self.flow_id}"
        return f"{self.base_url}/api/v1/run/{self.flow_id}"

    async def run_flow(
        self,
        message: str,
        input_type: str = "chat",
        output_type: str = "chat",
    ) -> dict:
        """POST one message to the flow and return the decoded JSON body."""
        payload = {
            "input_value": message,
            "input_type": input_type,
            "output_type": output_type,
            "tweaks": self.tweaks,
        }
        logger.debug("Running flow %s", self.flow_id)

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.run_url,
                    headers=self.headers,
                    json=payload,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            raise LangflowError(f"Request to Langflow failed: {e}") from e

        if response.is_error:
            raise LangflowError(
                f"Langflow returned {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
                retryable=response.status_code >= 500,
            )

        try:
            return response.json()
        except ValueError as e:
            raise LangflowError(f"Langflow returned invalid JSON: {e}", retryable=False) from e

    async def ask(
        self,
        question: Optional[str],
        collection: Optional[PostCollection] = None,
        history: Optional[list[dict]] = None,
    ) -> str:
        """Ask about the data; returns the reply or the error sentinel. Never raises."""
        message = build_request_payload(question, collection, history)
        try:
            data = await self.run_flow(message)
        except LangflowError as e:
            logger.error("Langflow call failed: %s", e)
            return self.error_sentinel

        text = extract_reply_text(data)
        if not text:
            logger.error("Langflow response carried no reply text")
            return self.error_sentinel
        return text


class MockLangflowClient:
    """Mock client that returns a canned answer for use without API access."""

    SAMPLE_REPLY = """### Metrics
- **Engagement Rate:** 4.50%
- **Likes:** approximately 1,245
- **Shares:** 312
- **Comments:** 87
- **Views:** 12,480
- **Primary Age Group:** 18-24 and 25-34 year-olds
- **Gender Split:** 58% female, 40% male, 2% other

### Format Insights
- Reels get 35% more engagement than photos
- Carousels earn the most shares per post
- Stories have the lowest reach

### Direct Answer
- Expected Likes: 1,400
- Expected Shares: 350
- Expected Comments: around 95
- Expected Views: 14.2k

### Explanation
- Short-form video dominates engagement across all age groups.
- Weekend posts outperform weekday posts by a wide margin.

### Suggestions
- **Optimal Posting Time:** Saturdays between 6pm and 8pm
- **Hashtags:** #SummerVibes #ContentCreator #ReelsDaily
- **Content Quality:** Lead with a hook in the first two seconds of every reel
- **Target Audience:** Students and young professionals aged 18-34
"""

    def __init__(self, reply: Optional[str] = None):
        self.reply = reply if reply is not None else self.SAMPLE_REPLY
        self.questions: list[str] = []

    async def ask(
        self,
        question: Optional[str],
        collection: Optional[PostCollection] = None,
        history: Optional[list[dict]] = None,
    ) -> str:
        """Record the question and return the canned reply."""
        self.questions.append(question or "")
        return self.reply
