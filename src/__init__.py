"""Notion Feature Docs.

An LLM-powered tool that bundles a codebase's features, asks the
Anthropic Claude API to document them, and publishes the results as
formatted pages in a Notion database.
"""

__version__ = "0.1.0"
