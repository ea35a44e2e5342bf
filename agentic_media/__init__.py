"""Turn ideas into improved prompts, then into images or video clips."""

__version__ = "0.1.0"
