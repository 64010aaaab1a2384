"""
Assistant Package - AI project planning

This package contains:
- exceptions.py: AssistantError (400) and GenerationError (502)
- prompts.py: Prompt templates per strategy
- client.py: Gemini text generator
- processors.py: Clean -> parse -> normalize -> persist chain
- strategies.py: create / predict / optimize strategies and their factory
"""

from flowpilot.assistant.exceptions import AssistantError, GenerationError
from flowpilot.assistant.client import GeminiTextGenerator, get_text_generator
from flowpilot.assistant.strategies import StrategyFactory

__all__ = [
    "AssistantError",
    "GenerationError",
    "GeminiTextGenerator",
    "get_text_generator",
    "StrategyFactory",
]
