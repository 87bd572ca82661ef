import logging

from perfeval.repositories.base import EvaluationRepository


class BaseService:
    """Common plumbing for services that work against the evaluation repository."""

    def __init__(self, repo: EvaluationRepository):
        self.repo = repo
        self._logger = logging.getLogger(self.__class__.__module__)

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)

    def log_error(self, message: str, **extra):
        self._logger.error(message, extra=extra or None)
