"""Create-flow orchestration: validate, submit with fallbacks, verify, reconcile."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

import structlog

from collab_client.client import Session
from collab_client.errors import CollabError, ReconciliationWarning, TransportError, ValidationError
from collab_client.fetcher import EntityFetcher
from collab_client.models import Complete, Entity, LocalMutation, Partial, SubmissionResult, classify
from collab_client.strategies import GROUP_STRATEGIES, PROJECT_STRATEGIES, TASK_STRATEGIES, SubmissionStrategy
from collab_client.sync import ListController

logger = structlog.get_logger()

MAX_FALLBACKS = 3


class FlowState(str, Enum):
    """States of a create flow."""

    IDLE = "idle"
    VALIDATING = "validating"
    VALIDATION_FAILED = "validation_failed"
    SUBMITTING = "submitting"
    SUBMIT_FAILED = "submit_failed"
    FALLBACK_1 = "fallback_1"
    FALLBACK_2 = "fallback_2"
    FALLBACK_3 = "fallback_3"
    ALL_FAILED = "all_failed"
    VERIFYING = "verifying"
    RECONCILING = "reconciling"
    DONE = "done"

    @classmethod
    def fallback(cls, attempt: int) -> "FlowState":
        return cls(f"fallback_{attempt}")


class CreateForm(Protocol):
    def validate(self, session: Session) -> None: ...

    def mutation(self) -> LocalMutation: ...


@dataclass
class CreateOutcome:
    """Result of one submit."""

    state: FlowState
    entity: Entity | None = None
    error: CollabError | None = None
    message: str | None = None
    warnings: list[ReconciliationWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is FlowState.DONE

    @property
    def field_errors(self) -> dict[str, str]:
        if isinstance(self.error, ValidationError):
            return self.error.errors
        return {}


class CreateFlow:
    """Drives a create operation for one entity type.

    Strategies run strictly in order, the next one only after the previous
    failure is observed, so the server never sees two concurrent creates.
    """

    def __init__(
        self,
        fetcher: EntityFetcher,
        controller: ListController,
        strategies: list[SubmissionStrategy],
        verified_fields: tuple[str, ...] = (),
    ) -> None:
        """Initialize the flow.

        Args:
            fetcher: Fetcher used for submits and the verification round trip
            controller: Controller that owns the collection to reconcile into
            strategies: Primary request shape first, then up to three fallbacks
            verified_fields: Optional model fields the backend is known to drop
        """
        if not strategies:
            raise ValueError("At least one submission strategy required")
        if len(strategies) > MAX_FALLBACKS + 1:
            raise ValueError(f"At most {MAX_FALLBACKS} fallback strategies are supported")
        self.fetcher = fetcher
        self.controller = controller
        self.strategies = list(strategies)
        self.verified_fields = verified_fields
        self.state = FlowState.IDLE
        self.history: list[FlowState] = [FlowState.IDLE]

    def _enter(self, state: FlowState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug("Create flow state", entity=self.fetcher.entity_name, state=state.value)

    def _finish(self, state: FlowState, **kwargs: Any) -> CreateOutcome:
        self._enter(state)
        return CreateOutcome(state=state, **kwargs)

    def submit(self, form: CreateForm, session: Session) -> CreateOutcome:
        """Run the flow for one form submission.

        The form is never modified, so on failure the caller keeps the entered values.
        """
        self.state = FlowState.IDLE
        self.history = [FlowState.IDLE]
        entity_name = self.fetcher.entity_name

        self._enter(FlowState.VALIDATING)
        try:
            form.validate(session)
        except ValidationError as e:
            logger.info("Create form rejected", entity=entity_name, fields=list(e.errors))
            return self._finish(FlowState.VALIDATION_FAILED, error=e, message=str(e))

        mutation = form.mutation()
        created = self._submit_with_fallbacks(form, session)
        if isinstance(created, TransportError):
            message = created.user_message(f"Failed to create {entity_name}")
            logger.error("All create attempts failed", entity=entity_name, status=created.status, error=message)
            return self._finish(FlowState.ALL_FAILED, error=created, message=message)

        result = classify(created, mutation.expected)
        if isinstance(result, Partial):
            result = self._verify(result, mutation, session)

        self._enter(FlowState.RECONCILING)
        warnings_before = len(self.controller.warnings)
        self.controller.load(session)
        entity = self.controller.reconcile(mutation, result)
        warnings = self.controller.warnings[warnings_before:]
        logger.info("Create flow completed", entity=entity_name, entity_id=entity.id, warnings=len(warnings))
        return self._finish(FlowState.DONE, entity=entity, warnings=list(warnings))

    def _submit_with_fallbacks(self, form: CreateForm, session: Session) -> Entity | TransportError:
        """Try each strategy in order; return the first entity or the first error."""
        first_error: TransportError | None = None
        for attempt, strategy in enumerate(self.strategies):
            if attempt == 0:
                self._enter(FlowState.SUBMITTING)
            else:
                self._enter(FlowState.fallback(attempt))
            request = strategy.build(form, session)
            try:
                return self.fetcher.create(request, session)
            except TransportError as e:
                logger.warning(
                    "Create attempt failed",
                    entity=self.fetcher.entity_name,
                    strategy=strategy.name,
                    status=e.status,
                    error=str(e),
                )
                if first_error is None:
                    first_error = e
                    self._enter(FlowState.SUBMIT_FAILED)
        return first_error

    def _verify(self, result: Partial, mutation: LocalMutation, session: Session) -> SubmissionResult:
        """Issue one corrective update for dropped verified fields, then re-fetch to confirm."""
        entity = result.entity
        corrections = {name: value for name, value in result.missing_fields.items() if name in self.verified_fields}
        if not corrections or entity.id is None:
            return result

        self._enter(FlowState.VERIFYING)
        logger.info("Correcting dropped fields", entity=self.fetcher.entity_name, entity_id=entity.id, fields=list(corrections))
        try:
            self.fetcher.update(entity.id, corrections, session)
            confirmed = self.fetcher.get_by_id(entity.id, session)
        except TransportError as e:
            logger.warning(
                "Could not confirm corrected fields",
                entity=self.fetcher.entity_name,
                entity_id=entity.id,
                status=e.status,
            )
            return result

        verified = classify(confirmed, mutation.expected)
        if isinstance(verified, Complete):
            logger.info("Corrected fields confirmed", entity=self.fetcher.entity_name, entity_id=entity.id)
        return verified


def group_flow(controller: ListController) -> CreateFlow:
    """Create flow for groups; the backend is known to drop the creation date."""
    return CreateFlow(controller.fetcher, controller, GROUP_STRATEGIES, verified_fields=("created_at",))


def project_flow(controller: ListController) -> CreateFlow:
    return CreateFlow(controller.fetcher, controller, PROJECT_STRATEGIES, verified_fields=("deadline",))


def task_flow(controller: ListController) -> CreateFlow:
    return CreateFlow(controller.fetcher, controller, TASK_STRATEGIES, verified_fields=("deadline",))
