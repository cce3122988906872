import logging
from sqlalchemy.orm import Session


class BaseService:
    """
    Common plumbing for services: the request's Session and a per-class logger.
    Services never open their own sessions; the caller owns the session lifecycle.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)
