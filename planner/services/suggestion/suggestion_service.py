"""Task field suggestions with LangChain"""
import logging
from datetime import date
from typing import Sequence

from langchain_openai import ChatOpenAI

from .models import TaskSuggestion
from .prompts import prompt_template

logger = logging.getLogger(__name__)


class SuggestionService:
    """Asks the LLM for a structured pre-fill of a task typed as free text"""

    def __init__(self, model: str = "gpt-4o"):
        llm = ChatOpenAI(model=model, temperature=0)
        self._chain = prompt_template | llm.with_structured_output(TaskSuggestion)

    async def suggest(
        self,
        text: str,
        categories: Sequence[str],
        sections: Sequence[str],
        today: date,
    ) -> TaskSuggestion:
        """
        Guess category, priority, due date, section, notes and link for ``text``.

        Args:
            text: What the user typed
            categories: Names of the user's categories
            sections: Names of the user's sections
            today: The date the user is planning

        Returns:
            The model's suggestion; callers treat it as a pre-fill only
        """
        result: TaskSuggestion = await self._chain.ainvoke({
            "text": text,
            "today": today.isoformat(),
            "categories": "\n".join(f"- {name}" for name in categories) or "(none)",
            "sections": "\n".join(f"- {name}" for name in sections) or "(none)",
        })
        logger.info(f"Suggested fields for '{text[:40]}': category={result.category}, section={result.section}")
        return result
