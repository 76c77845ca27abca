import logging
import re
from importlib import resources
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

PLAN_PROMPT = "plan-prompt.txt"
SUMMARY_PROMPT = "summary-prompt.txt"

_PLACEHOLDER = re.compile(r"\{\{ \$(\w+) \}\}|\{\{\$(\w+)\}\}")

_LOAD_ERRORS = {
    PLAN_PROMPT: "Unable to load prompt template",
    SUMMARY_PROMPT: "Unable to load summary prompt template",
}


class PromptTemplateError(RuntimeError):
    pass


class PromptLoader:
    """Reads prompt templates from ``prompt_dir`` or from this package."""

    def __init__(self, prompt_dir: Optional[str] = None) -> None:
        self.prompt_dir = prompt_dir

    def load(self, name: str) -> str:
        try:
            if self.prompt_dir:
                return Path(self.prompt_dir, name).read_text(encoding="utf-8")
            return resources.files(__name__).joinpath(name).read_text(encoding="utf-8")
        except OSError as exc:
            message = _LOAD_ERRORS.get(name, "Unable to load prompt template")
            logger.error("%s: %s", message, name)
            raise PromptTemplateError(message) from exc


def render(template: str, variables: Mapping[str, str]) -> str:
    """Replace ``{{ $name }}`` and ``{{$name}}`` for each given name.

    Substitution is a single pass, so placeholders inside substituted values
    stay as written.
    """

    def substitute(match: "re.Match[str]") -> str:
        name = match.group(1) or match.group(2)
        return variables[name] if name in variables else match.group(0)

    return _PLACEHOLDER.sub(substitute, template)
