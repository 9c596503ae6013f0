"""
Prompt loader for the insights model.

Loads system prompts and user templates from YAML configuration.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS_PATH = Path(__file__).parent / "prompts.yaml"


class PromptLoader:
    """Load and render prompts kept in a YAML file."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self.config_path = Path(config_path or DEFAULT_PROMPTS_PATH)
        self.prompts = self._load_prompts()

    def _load_prompts(self) -> dict[str, Any]:
        with open(self.config_path, "r", encoding="utf-8") as f:
            prompts = yaml.safe_load(f) or {}
        logger.info("Loaded %d prompts from %s", len(prompts), self.config_path)
        return prompts

    def get_system_prompt(self, name: str) -> str:
        return self.prompts.get(name, {}).get("system", "")

    def render_user_prompt(self, name: str, variables: dict[str, str]) -> str:
        """Fill the user template of prompt ``name``.

        Raises:
            KeyError: If the prompt is unknown or a template variable is missing.
        """
        template = self.prompts.get(name, {}).get("user_template")
        if not template:
            raise KeyError(f"Unknown prompt: {name}")
        return template.format(**variables)


_prompt_loader: Optional[PromptLoader] = None


def get_prompt_loader() -> PromptLoader:
    """Return the process-wide prompt loader."""
    global _prompt_loader
    if _prompt_loader is None:
        _prompt_loader = PromptLoader()
    return _prompt_loader
