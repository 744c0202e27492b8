import logging
from typing import Optional

from ...exceptions import ErrorCode, ParseStrategyError
from .classes import Script
from .heuristic import HeuristicParser
from .options import ParserOptions
from .strict import parse_strict

logger = logging.getLogger(__name__)


def _parse_precise(text: str, options: ParserOptions) -> Script:
    """The precise-parser slot. While the strict grammar is switched off it always fails."""
    if not options.strict_grammar:
        raise ParseStrategyError(ErrorCode.STRICT_GRAMMAR_DISABLED)
    return parse_strict(text)


def parse_posix(text: str, options: Optional[ParserOptions] = None) -> Script:
    """
    Parses POSIX shell text into a Script.

    The precise tier is tried first; any ParseStrategyError it raises is
    swallowed and the heuristic parser, which accepts every input, takes over.
    """
    options = options or ParserOptions()
    try:
        return _parse_precise(text, options)
    except ParseStrategyError as e:
        logger.debug("Precise parse unavailable, using heuristic parser: %s", e)
    return HeuristicParser(options).parse(text)
