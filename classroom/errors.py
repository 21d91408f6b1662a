"""Error taxonomy shared by services, repositories and the API layer."""
import logging
from contextlib import contextmanager

from botocore.exceptions import BotoCoreError, ClientError
from pymongo.errors import DuplicateKeyError, PyMongoError

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """A caller-side precondition failed (duplicate enrollment, missing field...)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ValidationError):
    """The referenced class, user or assignment does not exist."""


class RemoteOperationError(Exception):
    """A store, storage or identity call failed. Never retried."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IdentityError(RemoteOperationError):
    """Identity failure carrying a machine-readable code.

    Codes: ``email-already-exists``, ``invalid-password``,
    ``invalid-credentials``, ``invalid-token``.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


@contextmanager
def remote_call(operation: str):
    """Translate driver failures raised inside the block into RemoteOperationError."""
    try:
        yield
    except DuplicateKeyError as e:
        logger.error(f"{operation} violated a unique index: {e}")
        raise ValidationError(f"{operation}: duplicate key") from e
    except PyMongoError as e:
        logger.error(f"{operation} failed: {e}")
        raise RemoteOperationError(f"{operation} failed") from e
    except (BotoCoreError, ClientError) as e:
        logger.error(f"{operation} failed: {e}")
        raise RemoteOperationError(f"{operation} failed") from e
