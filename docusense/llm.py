"""
Hosted language-model client.

One chat model is built per application in ``init_app`` and shared by every
request; handlers reach it through the module-level ``llm`` extension.
"""

import logging

from flask import current_app
from langchain_core.messages import HumanMessage, SystemMessage

logger = logging.getLogger(__name__)

ELLIPSIS = "..."


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


class LanguageModel:
    """Flask extension wrapping a LangChain chat model."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions["llm"] = self._build(app.config)

    @staticmethod
    def _build(config):
        if not config.get("OPENAI_API_KEY"):
            logger.warning("OPENAI_API_KEY is not set; AI features are unavailable")
            return None

        from langchain_openai import ChatOpenAI

        logger.info(f"Initializing chat model {config['LLM_MODEL']}")
        return ChatOpenAI(
            model=config["LLM_MODEL"],
            api_key=config["OPENAI_API_KEY"],
            base_url=config.get("OPENAI_BASE_URL"),
            temperature=config["LLM_TEMPERATURE"],
            timeout=config.get("LLM_TIMEOUT"),
            max_retries=config.get("LLM_MAX_RETRIES", 0),
        )

    @property
    def chat(self):
        model = current_app.extensions.get("llm")
        if model is None:
            raise RuntimeError("Language model is not configured (OPENAI_API_KEY)")
        return model

    def complete(self, system_prompt: str, content: str, max_tokens: int) -> str:
        """Send one system + user exchange and return the reply text."""
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=content),
        ]
        response = self.chat.invoke(messages, max_tokens=max_tokens)
        return response.content.strip()
