"""promptlint — static checks for code that builds LLM prompts."""

__version__ = "0.1.0"
