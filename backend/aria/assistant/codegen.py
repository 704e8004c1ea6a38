"""Code generation with structured file output."""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import ParseError, UnsupportedProvider
from ..llm import ProviderRouter, extract_json_object
from ..logging import get_logger
from ..models.schemas import CodeFile, CodeOutput, CodeRequest, CodeResponse
from .prompts import CODE_SYSTEM_PROMPT

logger = get_logger(__name__)

CODE_MODELS = ("anthropic", "openai", "google")


def parse_code_output(text: str) -> CodeOutput:
    """Parse ``{files, commands, tests}``; anything else becomes ``generated.txt``."""
    try:
        output = CodeOutput.model_validate(extract_json_object(text))
    except (ParseError, PydanticValidationError) as e:
        logger.debug(f"Code response was not structured JSON: {e}")
        output = None
    if output and output.files:
        return output
    return CodeOutput(files=[CodeFile(path="generated.txt", content=text)])


def generate_code(request: CodeRequest, router: Optional[ProviderRouter] = None) -> CodeResponse:
    """
    Raises:
        UnsupportedProvider: Model is not anthropic, openai or google.
    """
    if request.model not in CODE_MODELS:
        raise UnsupportedProvider(request.model)

    router = router or ProviderRouter()
    system = CODE_SYSTEM_PROMPT.format(
        language=f" ({request.language})" if request.language else "",
        constraints=f"Additional constraints: {request.constraints}" if request.constraints else "",
    )
    completion = router.complete(request.model, request.instruction, system=system, max_tokens=4000)
    return CodeResponse(
        content=completion.text,
        code_output=parse_code_output(completion.text),
        model=completion.model,
    )
