from pydantic import BaseModel, ConfigDict

from ...config.config import PARSER_CONFIG


class ParserOptions(BaseModel):
    """Per-call parser switches; defaults come from `PARSER_CONFIG`."""

    model_config = ConfigDict(frozen=True)

    strict_grammar: bool = PARSER_CONFIG["strict_grammar"]
    detect_negation: bool = PARSER_CONFIG["detect_negation"]
    join_compound_lines: bool = PARSER_CONFIG["join_compound_lines"]
    extract_redirections: bool = PARSER_CONFIG["extract_redirections"]
