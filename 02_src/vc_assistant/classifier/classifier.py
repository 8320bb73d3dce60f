"""Function router: maps free-form text to one operation."""

import json
import re
from typing import Protocol

from ..errors import ClassifierError
from ..llm import ILLMProvider
from ..logging_config import get_logger
from ..models import (
    ClassifierResult,
    OperationKind,
    RoutedOperation,
    UnrecognizedOperation,
)
from .prompts import ROUTER_SYSTEM_PROMPT

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class IClassifier(Protocol):
    """Text to (operation, parameters) mapping."""

    async def classify(self, text: str) -> ClassifierResult:
        """Classify text. Raises ClassifierError when the backend fails."""
        ...


def decode_router_output(output: str, raw_text: str) -> ClassifierResult:
    """Decode the router's ``[function_number, parameters]`` answer.

    Anything that is not a JSON array whose first item is a number from 1 to 9
    becomes an ``UnrecognizedOperation`` carrying the user's original text.
    """
    cleaned = output.strip()
    fenced = _FENCE_RE.match(cleaned)
    if fenced:
        cleaned = fenced.group(1)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        return UnrecognizedOperation(raw_text=raw_text, reason="output is not JSON")

    if not isinstance(payload, list) or not 1 <= len(payload) <= 2:
        return UnrecognizedOperation(
            raw_text=raw_text, reason="expected [function_number, parameters]"
        )

    number = payload[0]
    if isinstance(number, str) and number.strip().isdigit():
        number = int(number.strip())
    elif isinstance(number, float) and number.is_integer():
        number = int(number)

    # bool is an int subclass; true/false is never a function number
    if isinstance(number, bool) or not isinstance(number, int):
        return UnrecognizedOperation(
            raw_text=raw_text, reason=f"function number {number!r} is not an integer"
        )

    try:
        kind = OperationKind(number)
    except ValueError:
        return UnrecognizedOperation(
            raw_text=raw_text, reason=f"function number {number} out of range"
        )

    parameters = payload[1] if len(payload) == 2 else None
    return RoutedOperation(kind=kind, parameters=parameters)


class FunctionRouterClassifier:
    """Classifier backed by an LLM prompted as a function router."""

    def __init__(self, llm_provider: ILLMProvider, max_tokens: int = 300):
        self._llm = llm_provider
        self._max_tokens = max_tokens

    async def classify(self, text: str) -> ClassifierResult:
        """Classify text. Raises ClassifierError when the backend fails."""
        try:
            output = await self._llm.complete(
                messages=[{"role": "user", "content": text}],
                system=ROUTER_SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
                temperature=0.1,
            )
        except Exception as e:
            logger.error("Function router call failed: %s", e, exc_info=True)
            raise ClassifierError(str(e)) from e

        logger.info("Function router output: %s", output)
        result = decode_router_output(output, text)
        if isinstance(result, UnrecognizedOperation):
            logger.warning(
                "Router output not understood (%s), falling back to search",
                result.reason,
            )
        return result
