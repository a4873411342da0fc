"""Short reply suggestions for an incoming message."""

from chat_companion.core.config import PipelineConfig
from chat_companion.core.logging import get_logger
from chat_companion.domain.formatting import clip, parse_suggested_replies
from chat_companion.domain.models.oracle import OracleSuccess
from chat_companion.services import TextOracle
from chat_companion.services.prompts import build_suggestion_prompt

logger = get_logger(__name__)


class SuggestedReplyGenerator:
    def __init__(self, oracle: TextOracle, config: PipelineConfig):
        self.oracle = oracle
        self.config = config

    async def generate(self, text: str) -> list[str]:
        """Up to ``suggestion_count`` replies, each within the length bound. Empty on failure."""
        prompt = build_suggestion_prompt(
            text, self.config.max_suggestion_length, self.config.suggestion_count
        )
        result = await self.oracle.generate(prompt)
        if not isinstance(result, OracleSuccess):
            return []

        replies = [clip(r, self.config.max_suggestion_length) for r in parse_suggested_replies(result.text)]
        if len(replies) > self.config.suggestion_count:
            logger.debug("Dropping extra suggestions", extra={"received": len(replies)})
        return replies[: self.config.suggestion_count]
