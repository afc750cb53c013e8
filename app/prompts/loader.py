"""
Prompt template loader.

Loads .md prompt templates from app/prompts/ and renders them by substituting
{{VARIABLE_NAME}} placeholders. Only upper-case placeholders match, so JSON braces in
templates stay intact.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).parent

_PLACEHOLDER_RE = re.compile(r"\{\{([A-Z_][A-Z0-9_]*)\}\}")


@lru_cache(maxsize=64)
def load_prompt(template_name: str) -> str:
    """Load a prompt template by name (file name without the .md extension).

    Raises:
        FileNotFoundError: If the template file does not exist.
    """
    path = _PROMPTS_DIR / f"{template_name}.md"
    if not path.is_file():
        available = sorted(p.stem for p in _PROMPTS_DIR.glob("*.md"))
        raise FileNotFoundError(
            f"Prompt template '{template_name}' not found at {path}. "
            f"Available templates: {available}"
        )
    return path.read_text(encoding="utf-8").strip()


def render_prompt(template_name: str, **variables: str) -> str:
    """Load a template and fill in its {{VARIABLE}} placeholders.

    Example: ``render_prompt("classify_signal_v1", TITLE="...", CONTENT="...")``

    Raises:
        FileNotFoundError: If the template file does not exist.
        ValueError: If placeholders remain unfilled after rendering.
    """
    template = load_prompt(template_name)
    placeholders = set(_PLACEHOLDER_RE.findall(template))
    for var_name in variables:
        if var_name not in placeholders:
            logger.warning(
                "Variable '%s' provided but not found in template '%s'",
                var_name,
                template_name,
            )

    missing = placeholders - set(variables)
    if missing:
        raise ValueError(
            f"Unfilled placeholders in template '{template_name}': "
            f"{sorted(missing)}. Provide these as keyword arguments."
        )

    # Placeholder-shaped text inside a substituted value is left alone
    return _PLACEHOLDER_RE.sub(lambda m: str(variables[m.group(1)]), template)
