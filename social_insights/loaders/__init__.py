"""Loaders for post data and for AI answers from the analysis workflow."""

from .file_loader import FileLoader
from .langflow_client import LangflowClient, MockLangflowClient, extract_reply_text

__all__ = ["FileLoader", "LangflowClient", "MockLangflowClient", "extract_reply_text"]
