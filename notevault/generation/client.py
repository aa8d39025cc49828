"""Text generation over notes through a PydanticAI agent.

The generator only consumes notes; it never touches the vault. Any
PydanticAI model can be injected, which is how tests run without network
access.
"""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from notevault.config import Settings
from notevault.generation import prompts
from notevault.log import logger
from notevault.vault.models import Note


class GenerationError(Exception):
    """Raised when the language model call fails."""

    pass


def build_model(settings: Settings) -> Model:
    """Create the OpenAI chat model described by settings."""
    return OpenAIChatModel(
        settings.openai_model,
        provider=OpenAIProvider(api_key=settings.openai_api_key),
    )


@dataclass
class TextGenerator:
    """Generates prose from notes with a single-turn agent run per request."""

    model: Model
    max_tokens: int = 2000
    temperature: float = 0.7
    _agent: Agent = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._agent = Agent(self.model, output_type=str)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TextGenerator":
        """Build a generator backed by the configured OpenAI model."""
        return cls(
            model=build_model(settings),
            max_tokens=settings.openai_max_tokens,
            temperature=settings.openai_temperature,
        )

    async def _generate(
        self,
        prompt: str,
        fallback: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Run the agent on a prompt.

        Args:
            prompt: Full user prompt
            fallback: Returned when the model replies with no text
            max_tokens: Override for the configured token budget
            temperature: Override for the configured temperature

        Returns:
            Model output text

        Raises:
            GenerationError: If the model call fails
        """
        model_settings = ModelSettings(
            max_tokens=max_tokens or self.max_tokens,
            temperature=self.temperature if temperature is None else temperature,
        )
        try:
            result = await self._agent.run(prompt, model_settings=model_settings)
        except Exception as e:
            logger.error("generation_failed", extra={"error": str(e)}, exc_info=True)
            raise GenerationError(str(e)) from e
        return result.output or fallback

    async def summarize_note(self, note: Note) -> str:
        return await self._generate(
            prompts.summarize_note_prompt(note), fallback="Unable to generate summary"
        )

    async def summarize_notes(self, notes: list[Note], context: str | None = None) -> str:
        return await self._generate(
            prompts.summarize_notes_prompt(notes, context),
            fallback="Unable to generate summary",
            max_tokens=self.max_tokens * 2,
        )

    async def generate_content(self, prompt: str, context: str | None = None) -> str:
        return await self._generate(
            prompts.generate_content_prompt(prompt, context),
            fallback="Unable to generate content",
        )

    async def reformat_note(self, note: Note, instructions: str) -> str:
        return await self._generate(
            prompts.reformat_note_prompt(note, instructions),
            fallback="Unable to reformat content",
        )

    async def extract_tasks(self, notes: list[Note]) -> str:
        return await self._generate(
            prompts.extract_tasks_prompt(notes),
            fallback="Unable to extract tasks",
            temperature=0.3,
        )

    async def weekly_digest(self, notes: list[Note], now: datetime | None = None) -> str:
        """Digest notes modified in the past week (at most 20, newest first)."""
        return await self._generate(
            prompts.weekly_digest_prompt(prompts.recent_notes(notes, now)),
            fallback="Unable to generate weekly digest",
            max_tokens=self.max_tokens * 2,
            temperature=0.5,
        )

    async def answer_question(self, question: str, notes: list[Note]) -> str:
        return await self._generate(
            prompts.answer_question_prompt(question, notes),
            fallback="Unable to answer question",
            temperature=0.3,
        )

    async def generate_tags(self, note: Note) -> list[str]:
        """Suggest 3-5 tags for a note."""
        text = await self._generate(
            prompts.generate_tags_prompt(note),
            fallback="",
            max_tokens=100,
            temperature=0.3,
        )
        return prompts.parse_tags(text)
