"""FastAPI web API serving dashboard aggregates and parsed AI insights."""

import logging
import os
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..extractors.insight_extractor import InsightExtractor
from ..models.insights import InsightRecord
from ..models.posts import PostCollection
from ..utils.formatting import format_response

logger = logging.getLogger(__name__)

MAX_HISTORY = 10


class ExtractRequest(BaseModel):
    text: str = Field(default="", description="Raw AI answer to parse")


class AskRequest(BaseModel):
    question: Optional[str] = Field(
        default=None,
        description="Question about the data; omitted for the initial overview"
    )


class DataUpload(BaseModel):
    csv: str = Field(description="CSV text with one post per row")


class InsightExchange(BaseModel):
    """One question, the raw answer and what was parsed out of it."""
    question: Optional[str] = None
    response: str
    insights: InsightRecord
    created_at: datetime = Field(default_factory=datetime.now)


class DashboardState:
    """Web API state: loaded posts and recent exchanges."""

    def __init__(self, collection: Optional[PostCollection] = None):
        self.collection = collection
        self.history: list[InsightExchange] = []
        self.last_updated: Optional[datetime] = None

    def record(self, exchange: InsightExchange):
        self.history.append(exchange)
        # Keep last runs only
        if len(self.history) > MAX_HISTORY:
            self.history = self.history[-MAX_HISTORY:]
        self.last_updated = exchange.created_at

    def chat_history(self) -> list[dict]:
        """Prior turns in the role/content shape the workflow expects."""
        turns = []
        for exchange in self.history:
            if exchange.question:
                turns.append({"role": "user", "content": exchange.question})
            turns.append({"role": "assistant", "content": exchange.response})
        return turns


def _exchange_payload(exchange: InsightExchange, trace=None) -> dict:
    payload = {
        "question": exchange.question,
        "insights": exchange.insights.to_display_dict(),
        "formatted": format_response(exchange.response),
        "createdAt": exchange.created_at.isoformat(),
    }
    if trace is not None:
        payload["strategies"] = trace.strategies
        payload["sections"] = trace.sections
    return payload


def create_app(
    client=None,
    extractor: Optional[InsightExtractor] = None,
    collection: Optional[PostCollection] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``client`` is anything with an async ``ask(question, collection, history)``
    returning the answer text (LangflowClient or MockLangflowClient).
    """
    app = FastAPI(
        title="Social Insights",
        description="Social media performance data and AI-generated insights",
        version="1.0.0",
    )
    state = DashboardState(collection)
    extractor = extractor or InsightExtractor()
    app.state.dashboard = state

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "has_data": state.collection is not None,
            "can_ask": client is not None,
            "last_updated": state.last_updated.isoformat() if state.last_updated else None,
        }

    @app.get("/api/dashboard")
    async def get_dashboard():
        """Aggregates over the loaded posts."""
        if state.collection is None:
            raise HTTPException(status_code=404, detail="No post data loaded")
        return {"status": "ok", "summary": state.collection.summary()}

    @app.post("/api/data")
    async def upload_data(upload: DataUpload):
        """Replace the loaded posts with uploaded CSV text."""
        from ..loaders.file_loader import FileLoader

        collection = FileLoader().load_from_text(upload.csv)
        if collection.total_posts == 0:
            raise HTTPException(status_code=400, detail="No posts found in uploaded CSV")
        state.collection = collection
        return {"status": "ok", "total_posts": collection.total_posts}

    @app.post("/api/extract")
    async def extract(request: ExtractRequest):
        """Parse an AI answer without calling the workflow."""
        record, trace = extractor.extract_with_trace(request.text)
        exchange = InsightExchange(response=request.text, insights=record)
        return _exchange_payload(exchange, trace)

    @app.post("/api/insights")
    async def ask(request: AskRequest):
        """Ask the workflow about the loaded data and parse its answer."""
        if client is None:
            raise HTTPException(status_code=503, detail="No analysis workflow configured")

        response = await client.ask(request.question, state.collection, state.chat_history())
        record, trace = extractor.extract_with_trace(response)
        exchange = InsightExchange(question=request.question, response=response, insights=record)
        state.record(exchange)
        logger.info("Answered question; %d fields populated", len(record.populated_fields))
        return _exchange_payload(exchange, trace)

    @app.get("/api/insights/latest")
    async def latest():
        """Most recent parsed answer."""
        if not state.history:
            raise HTTPException(status_code=404, detail="No insights yet")
        return _exchange_payload(state.history[-1])

    @app.get("/api/insights/history")
    async def history():
        """Recent parsed answers, oldest first."""
        return {"status": "ok", "results": [_exchange_payload(e) for e in state.history]}

    return app


def run_server(app: FastAPI, host: str = "127.0.0.1", port: int = 8000):
    """Run the API server."""
    import uvicorn

    host = os.getenv("WEB_HOST", host)
    port = int(os.getenv("WEB_PORT", port))

    uvicorn.run(app, host=host, port=port)
