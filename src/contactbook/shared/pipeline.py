"""
Request dispatch with cross-cutting pipeline behaviors.

Commands and queries are plain objects. The mediator looks up the handler
registered for the request's type and passes the request through every
behavior first; ``ValidationBehavior`` runs the registered validators and
stops the request before the handler is ever built.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from contactbook.shared.exceptions import ValidationError
from contactbook.shared.logging import get_logger
from contactbook.shared.validation import ValidationResult, Validator

logger = get_logger(__name__)

NextStep = Callable[[], Awaitable[Any]]


class RequestHandler(Protocol):
    """Protocol for command/query handlers."""

    async def handle(self, request: Any) -> Any: ...


class PipelineBehavior(Protocol):
    """Protocol for a stage wrapped around handler execution."""

    async def __call__(self, request: Any, next_step: NextStep) -> Any: ...


class ValidationBehavior:
    """Runs every validator registered for the request type."""

    def __init__(self, validators: dict[type, list[Validator[Any]]]) -> None:
        self._validators = validators

    async def __call__(self, request: Any, next_step: NextStep) -> Any:
        validators = self._validators.get(type(request), [])
        if validators:
            result = ValidationResult()
            for validator in validators:
                result.merge(validator.validate(request))

            if not result.is_valid:
                errors = result.by_field()
                logger.warning(
                    "Request validation failed",
                    extra={
                        "request_type": type(request).__name__,
                        "fields": sorted(errors),
                    },
                )
                raise ValidationError(errors=errors)

        return await next_step()


class Mediator:
    """Dispatches requests to their handlers through pipeline behaviors."""

    def __init__(self) -> None:
        self._handlers: dict[type, Callable[[], RequestHandler]] = {}
        self._validators: dict[type, list[Validator[Any]]] = {}
        self._behaviors: list[PipelineBehavior] = [ValidationBehavior(self._validators)]

    def register(
        self,
        request_type: type,
        handler_factory: Callable[[], RequestHandler],
        validators: Sequence[Validator[Any]] = (),
    ) -> None:
        """Register the handler and validators for a request type.

        Args:
            request_type: Command or query class.
            handler_factory: Zero-argument callable building the handler.
            validators: Validators run before the handler.
        """
        self._handlers[request_type] = handler_factory
        self._validators[request_type] = list(validators)

    def add_behavior(self, behavior: PipelineBehavior) -> None:
        """Append a behavior; it runs after the ones already registered."""
        self._behaviors.append(behavior)

    async def send(self, request: Any) -> Any:
        """Dispatch a request.

        Raises:
            LookupError: If no handler is registered for the request type.
            ValidationError: If any registered validator rejects the request.
        """
        request_type = type(request)
        factory = self._handlers.get(request_type)
        if factory is None:
            raise LookupError(f"No handler registered for {request_type.__name__}")

        async def invoke_handler() -> Any:
            return await factory().handle(request)

        step: NextStep = invoke_handler
        for behavior in reversed(self._behaviors):
            step = _bind(behavior, request, step)

        return await step()


def _bind(behavior: PipelineBehavior, request: Any, next_step: NextStep) -> NextStep:
    async def run() -> Any:
        return await behavior(request, next_step)

    return run
