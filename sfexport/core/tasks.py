""" Tasks are the basic unit of execution in sfexport.

Subclass BaseTask or a descendant to define custom task logic
"""
import logging
from typing import Any, Optional

from sfexport.core.exceptions import TaskOptionsError


class BaseTask:
    """BaseTask provides the core execution logic for a Task

    Subclass BaseTask and provide a `_run_task()` method with your
    code.
    """

    task_docs: str = ""
    task_options: dict = {}
    result: Any
    return_values: dict
    logger: logging.Logger
    options: dict

    def __init__(
        self,
        options: Optional[dict] = None,
        logger: Optional[logging.Logger] = None,
        **kwargs,
    ):
        # dict of return_values that can be used by task callers
        self.return_values = {}
        # simple result object for introspection
        self.result = None

        if logger:
            self.logger = logger
        else:
            self._init_logger()

        self._init_options(options, kwargs)
        self._validate_options()

    def _init_logger(self):
        """Initializes self.logger"""
        self.logger = logging.getLogger(self.__class__.__module__)

    def _init_options(self, options, kwargs):
        """Initializes self.options"""
        self.options = dict(options or {})
        if kwargs:
            self.options.update(kwargs)
        # Treat None like a missing option so defaults apply
        self.options = {k: v for k, v in self.options.items() if v is not None}

    def _validate_options(self):
        missing_required = []
        for name, config in list(self.task_options.items()):
            if config.get("required") is True and not self.options.get(name):
                missing_required.append(name)

        if missing_required:
            required_opts = ",".join(missing_required)
            raise TaskOptionsError(
                f"{self.__class__.__name__} requires the options ({required_opts}) and no values were provided"
            )

    def _init_task(self):
        """Override to implement dynamic logic for initializing the task."""
        pass

    def __call__(self) -> dict:
        self._init_task()
        self._log_begin()
        self.result = self._run_task()
        return self.return_values

    def _run_task(self) -> Any:
        """Subclasses should override to provide their implementation"""
        raise NotImplementedError("Subclasses should provide their own implementation")

    def _log_begin(self):
        """Log the beginning of the task execution"""
        self.logger.info(f"Beginning task: {self.__class__.__name__}")
        self.logger.info("")
