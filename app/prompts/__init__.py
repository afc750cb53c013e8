"""
Prompt templates, versioned by filename and editable without code changes.
"""

from app.prompts.loader import load_prompt, render_prompt

__all__ = ["load_prompt", "render_prompt"]
