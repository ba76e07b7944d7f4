"""Background execution of projections with a caller-owned result slot."""

import sys
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from mortgage_monte.errors import InvalidInputError
from mortgage_monte.monte_carlo import ProjectionResult, project
from mortgage_monte.params import DEFAULT_CONSTANTS, Constants, InputParameters
from mortgage_monte.validation import validate_inputs

FAILURE_MESSAGE = "Failed to run simulation. Please check your inputs and try again."


class ProjectionRunner:
    """Runs ``project`` on a worker thread and tracks the displayed result.

    Overlapping runs are not cancelled. Whichever completes, only a run newer
    than the last applied one replaces ``result``. A failed run sets ``error``
    and leaves ``result`` untouched.
    """

    def __init__(
        self,
        constants: Constants = DEFAULT_CONSTANTS,
        trial_count: int | None = None,
        seed: int | None = None,
        executor: ThreadPoolExecutor | None = None,
        project_fn: Callable[..., ProjectionResult] = project,
    ):
        self.constants = constants
        self.trial_count = trial_count
        self.seed = seed
        self._executor = executor or ThreadPoolExecutor(max_workers=1)
        self._owns_executor = executor is None
        self._project = project_fn
        self._lock = threading.Lock()
        self._next_request = 0
        self._applied_request = 0
        self._pending = 0

        self.result: ProjectionResult | None = None
        self.error: str | None = None
        self.validation_errors: list[str] = []

    @property
    def is_calculating(self) -> bool:
        with self._lock:
            return self._pending > 0

    def submit(self, inputs: InputParameters) -> Future:
        """Validate and dispatch a run. Per-field errors raise before dispatch."""
        errors = validate_inputs(inputs)
        with self._lock:
            self.validation_errors = errors
            if errors:
                raise InvalidInputError("; ".join(errors), errors=errors)
            self.error = None
            self._next_request += 1
            request_id = self._next_request
            self._pending += 1
        try:
            return self._executor.submit(self._run, request_id, inputs)
        except Exception:
            with self._lock:
                self._pending -= 1
            raise

    def _run(self, request_id: int, inputs: InputParameters) -> ProjectionResult:
        try:
            result = self._project(
                inputs, self.constants,
                trial_count=self.trial_count, seed=self.seed, quiet=True,
            )
        except Exception as e:
            print(f"Error running Monte Carlo simulation: {e}", file=sys.stderr)
            with self._lock:
                self.error = FAILURE_MESSAGE
                self._pending -= 1
            raise
        with self._lock:
            if request_id > self._applied_request:
                self._applied_request = request_id
                self.result = result
            self._pending -= 1
        return result

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ProjectionRunner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
