"""Configuration settings using pydantic-settings."""
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from academy_bot.models import Subject, Topic


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Telegram Bot
    BOT_TOKEN: str = Field(default="", description="Telegram Bot API token")

    # Generative API (OpenAI-compatible endpoint)
    LLM_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LLM_API_KEY", "API_KEY"),
        description="API key; without it every quiz falls back to the built-in question",
    )
    LLM_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        description="Base URL of the OpenAI-compatible API",
    )
    LLM_MODEL: str = Field(default="gemini-2.5-flash", description="Model name")
    LLM_TIMEOUT: float = Field(default=30.0, description="API request timeout in seconds")
    LLM_MAX_RETRIES: int = Field(
        default=1,
        description="Retries of a failed API request inside the client, on top of the question retry"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )


# Global settings instance
settings = Settings()

QUESTIONS_PER_QUIZ = 5

SUBJECT_ICONS = {
    Subject.MATH: "📐",
    Subject.SCIENCE: "🧬",
    Subject.ENGLISH: "📚",
}

SUBJECT_TOPICS: dict[Subject, list[Topic]] = {
    Subject.MATH: [
        Topic("addition", "Fun Addition", "➕", "Add numbers together!"),
        Topic("subtraction", "Super Subtraction", "➖", "Take away numbers!"),
        Topic("multiplication", "Magic Multiplication", "✖️", "Multiply and grow!"),
        Topic("geometry", "Shapes & Geometry", "🔺", "Learn about shapes!"),
        Topic("money", "Money Math", "💰", "Count coins and bills!"),
        Topic("logic", "Logic Puzzles", "🧩", "Train your brain!"),
    ],
    Subject.SCIENCE: [
        Topic("animals", "Amazing Animals", "🦁", "Learn about wildlife!"),
        Topic("space", "Space Explorers", "🚀", "Explore the stars!"),
        Topic("plants", "Plant Power", "🌱", "How do plants grow?"),
        Topic("human_body", "Human Body", "🦴", "How your body works!"),
        Topic("weather", "Wild Weather", "🌪️", "Rain, sun, and snow!"),
        Topic("experiments", "Fun Experiments", "🧪", "Science in action!"),
    ],
    Subject.ENGLISH: [
        Topic("vocabulary", "Word Wizard", "📖", "Learn new words!"),
        Topic("grammar", "Grammar Guru", "✍️", "Fix the sentences!"),
        Topic("spelling", "Spelling Bee", "🐝", "Spell it right!"),
        Topic("reading", "Reading Time", "📚", "Story adventures!"),
        Topic("rhymes", "Rhyme Time", "🎵", "Match the sounds!"),
        Topic("storytelling", "Storytelling", "🐉", "Create your own tale!"),
    ],
}


def find_topic(subject: Subject, topic_id: str) -> Optional[Topic]:
    """Look up a topic of the subject by its id."""
    for topic in SUBJECT_TOPICS.get(subject, []):
        if topic.id == topic_id:
            return topic
    return None
