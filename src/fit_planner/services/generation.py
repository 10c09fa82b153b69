"""Generation client port and the service that calls it safely."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from fit_planner.errors import GenerationFailedError, GenerationTimeoutError
from fit_planner.services.prompts import GenerationPrompt

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GenerationClient(Protocol):
    """Interface for structured-output generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return the provider's structured answer."""


@dataclass(frozen=True)
class SchemaError:
    """Provider output that does not match the expected schema."""

    schema_name: str
    messages: list[str]


@dataclass
class GenerationService:
    """Calls the provider with a deadline and parses its answer."""

    client: GenerationClient
    model: str
    reasoning_effort: str | None
    store: bool
    timeout_seconds: float = 60.0

    async def generate(
        self, prompt: GenerationPrompt, output_type: type[ModelT]
    ) -> ModelT | SchemaError:
        """Generate and parse a structured answer.

        Timeouts and provider errors raise; a malformed answer is returned as a
        ``SchemaError`` value so the pipeline can report it like any other
        validation failure.
        """
        started = time.perf_counter()
        try:
            raw = await asyncio.wait_for(
                self.client.generate(
                    model=self.model,
                    reasoning_effort=self.reasoning_effort,
                    store=self.store,
                    prompt=prompt.text,
                    schema_name=prompt.schema_name,
                    schema=prompt.schema,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            _logger.warning(
                "Generation timed out: kind=%s timeout=%ss",
                prompt.kind,
                self.timeout_seconds,
            )
            raise GenerationTimeoutError(
                f"Generation did not finish within {self.timeout_seconds} seconds",
                {"kind": prompt.kind, "timeout_seconds": self.timeout_seconds},
            ) from exc
        except Exception as exc:
            _logger.warning("Generation failed: kind=%s error=%s", prompt.kind, exc)
            raise GenerationFailedError(
                "Generation provider call failed",
                {"kind": prompt.kind, "error": str(exc)},
            ) from exc
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        _logger.info("Generation complete: kind=%s elapsed_ms=%s", prompt.kind, elapsed_ms)
        return parse_output(raw, output_type, prompt.schema_name)


def parse_output(
    raw: object, output_type: type[ModelT], schema_name: str
) -> ModelT | SchemaError:
    """Validate raw provider output against a model."""
    try:
        return output_type.model_validate(raw)
    except ValidationError as exc:
        messages = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in exc.errors()
        ]
        _logger.warning(
            "Generation output failed schema: schema=%s errors=%s",
            schema_name,
            len(messages),
        )
        return SchemaError(schema_name=schema_name, messages=messages)
