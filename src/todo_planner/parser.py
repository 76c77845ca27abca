import json
import logging
from typing import List

from markdown_it import MarkdownIt

from .utils.schemas import Plan, PlanStep

logger = logging.getLogger(__name__)

# JSONDecodeError and pydantic ValidationError are both ValueErrors; deeply
# nested input overflows the decoder with RecursionError.
_STEP_ERRORS = (ValueError, RecursionError)


class PlanParseError(RuntimeError):
    pass


class PlanParser:
    """Extracts plan steps from a model response.

    A response that starts with ``{`` is read as a single JSON step and must be
    well formed. Anything else is read as Markdown: every top-level fenced code
    block is expected to hold one JSON step, and blocks that do not parse are
    skipped.
    """

    def __init__(self) -> None:
        self._markdown = MarkdownIt("commonmark")
        self._decoder = json.JSONDecoder()

    def parse(self, response: str) -> Plan:
        logger.info("Parsing model response to extract execution plan")
        text = (response or "").strip()
        if text.startswith("{"):
            return self._parse_direct_json(text)
        return self._parse_markdown(text)

    def extract_code_blocks(self, text: str) -> List[str]:
        tokens = self._markdown.parse(text)
        return [token.content for token in tokens if token.type == "fence" and token.level == 0]

    def _parse_direct_json(self, text: str) -> Plan:
        try:
            step = self._decode_step(text)
        except _STEP_ERRORS as exc:
            logger.error("JSON parsing failed: %s", text)
            raise PlanParseError("Unable to parse AI's JSON response") from exc
        logger.info("Successfully parsed JSON format execution plan")
        return Plan(steps=[step])

    def _parse_markdown(self, text: str) -> Plan:
        logger.info("Parsing execution plan from Markdown code blocks")
        blocks = self.extract_code_blocks(text)
        steps: List[PlanStep] = []
        for block in blocks:
            try:
                step = self._decode_step(block)
            except _STEP_ERRORS:
                logger.warning("Failed to parse code block, skipping: %s", block, exc_info=True)
                continue
            logger.debug("Successfully parsed code block: %s", step.function_name)
            steps.append(step)
        logger.info("Parsed %d execution steps from %d code blocks", len(steps), len(blocks))
        return Plan(steps=steps)

    def _decode_step(self, text: str) -> PlanStep:
        # Text after the first JSON value is ignored.
        text = text.strip()
        payload, end = self._decoder.raw_decode(text)
        trailing = text[end:].strip()
        if trailing:
            logger.debug("Ignoring trailing text after JSON step: %s", trailing)
        return PlanStep.model_validate(payload)
