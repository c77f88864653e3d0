"""Step navigation for the credit application wizard.

This module provides the StepRegistry (the ordered, immutable list of
wizard steps) and the WizardNavigator, which tracks the active step and
notifies the host UI whenever it changes.
"""
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from creditdesk.data_structures import Step, WizardState
from creditdesk.exceptions import EmptyStepRegistryError, DuplicateStepError
from creditdesk.logger import get_logger
from creditdesk.money import round_half_up

logger = get_logger(__name__)

STATUS_DONE = "done"
STATUS_CURRENT = "current"
STATUS_PENDING = "pending"


class StepRegistry:
    """Ordered, immutable sequence of wizard steps.

    Raises:
        EmptyStepRegistryError: If no step is supplied.
        DuplicateStepError: If two steps share an id.
    """

    def __init__(self, steps: Iterable[Step]):
        self._steps: Tuple[Step, ...] = tuple(steps)
        if not self._steps:
            raise EmptyStepRegistryError()

        self._positions = {}
        for index, step in enumerate(self._steps):
            if step.id in self._positions:
                raise DuplicateStepError(step.id)
            self._positions[step.id] = index

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __getitem__(self, index: int) -> Step:
        return self._steps[index]

    def __contains__(self, step_id) -> bool:
        return step_id in self._positions

    @property
    def ids(self) -> List[str]:
        return [step.id for step in self._steps]

    def index_of(self, step_id: Optional[str]) -> int:
        """Position of step_id, or -1 if it is not registered."""
        return self._positions.get(step_id, -1)


class WizardNavigator:
    """Finite-state controller over a StepRegistry.

    The active index is always a valid position. Out-of-range requests are
    ignored without raising, so keyboard and button handlers can call the
    navigation methods unconditionally.

    Attributes:
        registry: The StepRegistry being navigated.
        on_step_changed: Optional callback invoked with the new step id after
            every transition.
    """

    def __init__(self, steps, initial_step_id: Optional[str] = None,
                 on_step_changed: Callable[[str], None] = None):
        """Initialize WizardNavigator.

        Args:
            steps: A StepRegistry, or an iterable of Step to build one from.
            initial_step_id: Step to start on. Unknown ids fall back to the
                first step.
            on_step_changed: Optional change-notification sink.
        """
        self.registry = steps if isinstance(steps, StepRegistry) else StepRegistry(steps)
        self.on_step_changed = on_step_changed

        self._index = max(0, self.registry.index_of(initial_step_id))
        self._notifying = False
        self._pending: List[int] = []

    # ----- derived state -----

    @property
    def active_index(self) -> int:
        return self._index

    @property
    def active_id(self) -> str:
        return self.registry[self._index].id

    @property
    def active_step(self) -> Step:
        return self.registry[self._index]

    @property
    def state(self) -> WizardState:
        return WizardState(active_id=self.active_id, active_index=self._index)

    @property
    def step_count(self) -> int:
        return len(self.registry)

    @property
    def is_first(self) -> bool:
        return self._index <= 0

    @property
    def is_last(self) -> bool:
        return self._index >= len(self.registry) - 1

    @property
    def progress_percent(self) -> int:
        """Completion of the wizard in percent, 0 for a single-step wizard."""
        count = len(self.registry)
        if count <= 1:
            return 0
        return round_half_up(self._index / (count - 1) * 100)

    @property
    def position_label(self) -> str:
        return f"Paso {self._index + 1} de {len(self.registry)}"

    def step_status(self, index: int) -> str:
        """Timeline status of the step at index: done, current or pending."""
        if index < self._index:
            return STATUS_DONE
        if index == self._index:
            return STATUS_CURRENT
        return STATUS_PENDING

    # ----- transitions -----

    def go_to(self, index: int) -> None:
        """Activate the step at index. Out-of-range indexes are ignored.

        A call made from inside on_step_changed is queued and applied once
        the running transition, callback included, has finished.
        """
        if self._notifying:
            self._pending.append(index)
            return

        try:
            self._apply(index)
            while self._pending:
                self._apply(self._pending.pop(0))
        finally:
            self._pending.clear()

    def next(self) -> None:
        self.go_to(self._index + 1)

    def previous(self) -> None:
        self.go_to(self._index - 1)

    def first(self) -> None:
        self.go_to(0)

    def last(self) -> None:
        self.go_to(len(self.registry) - 1)

    def go_to_id(self, step_id: str) -> None:
        """Activate the step with the given id; unknown ids are ignored."""
        index = self.registry.index_of(step_id)
        if index >= 0:
            self.go_to(index)

    def _apply(self, index: int) -> None:
        if index < 0 or index >= len(self.registry):
            logger.debug(f"Ignoring navigation to out-of-range step {index}")
            return

        self._index = index
        logger.debug(f"Wizard step -> {self.active_id} ({self.position_label})")

        if self.on_step_changed:
            self._notifying = True
            try:
                self.on_step_changed(self.active_id)
            finally:
                self._notifying = False


def default_credit_steps(icons: dict = None, contents: dict = None) -> StepRegistry:
    """Registry of the five-step credit application.

    Args:
        icons: Optional mapping of step id to icon.
        contents: Optional mapping of step id to content factory.
    """
    icons = icons or {}
    contents = contents or {}
    definitions = [
        ("info", "Información personal"),
        ("codeu", "Codeudores"),
        ("prod", "Información del producto"),
        ("firm", "Solicitud y firmas"),
        ("supp", "Soportes"),
    ]
    return StepRegistry(
        Step(id=step_id, title=title, icon=icons.get(step_id), content=contents.get(step_id))
        for step_id, title in definitions
    )
