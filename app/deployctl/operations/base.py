"""Reversible operations and their journal form.

An OperationPerformer carries out one filesystem or OS mutation and knows
how to undo it. An Operation couples a performer with the journal record
it was rebuilt from (if any) and owns the execute/revert protocol:

- execute: performer.execute, performer.finalize, then append the record
  to the package history (or the global history). Nothing is saved.
- revert: performer.revert, performer.finalize, then remove the
  originating record from its history.

Performers are looked up by OperationKind in a closed registry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, TypeVar

from pydantic import BaseModel, ValidationError

from deployctl.core.errors import DeployError, OperationRecordError
from deployctl.core.i18n import translate
from deployctl.models.summary import OperationKind, OperationRecord

if TYPE_CHECKING:
    from deployctl.core.app import DeployApp
    from deployctl.models.package import Package

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

PERFORMERS: dict[OperationKind, type[OperationPerformer]] = {}

T = TypeVar("T", bound="OperationPerformer")


def register(cls: type[T]) -> type[T]:
    """Class decorator adding a performer to the registry under its kind."""
    if cls.KIND in PERFORMERS:
        msg = f"Performer for {cls.KIND.value} already registered"
        raise ValueError(msg)
    PERFORMERS[cls.KIND] = cls
    return cls


def parse_payload(record: OperationRecord, model: type[PayloadT]) -> PayloadT:
    """Deserialize a record payload into the performer's payload model.

    Raises:
        OperationRecordError: If the payload does not match the model.
    """
    try:
        return model.model_validate_json(record.data)
    except ValidationError as e:
        msg = f"Corrupt {record.kind.value} record: {e}"
        raise OperationRecordError(msg) from e


class OperationPerformer(ABC):
    """Abstract base class for reversible operations.

    Subclasses declare their KIND and serialize their own payload; the
    description is the translated ``operation.<kind>`` message. Revert must
    tolerate missing targets: nothing to undo is logged, not raised.
    """

    KIND: ClassVar[OperationKind]

    def description(self) -> str:
        """Stable human-readable label, independent of the payload."""
        return translate(f"operation.{self.KIND.value}")

    @abstractmethod
    def execute(self, app: DeployApp) -> None:
        """Perform the forward action."""

    @abstractmethod
    def revert(self, app: DeployApp) -> None:
        """Undo the forward action, best effort."""

    def finalize(self, app: DeployApp) -> None:
        """Bookkeeping run after execute and after revert."""
        return None

    @abstractmethod
    def payload(self) -> BaseModel:
        """Payload stored in the journal."""

    def as_record(self) -> OperationRecord:
        """Serialize the performer into its journal record."""
        return OperationRecord(kind=self.KIND, data=self.payload().model_dump_json())

    @classmethod
    @abstractmethod
    def from_record(
        cls, record: OperationRecord, package: Package | None = None
    ) -> OperationPerformer:
        """Rebuild a performer from its journal record.

        Raises:
            OperationRecordError: If the record cannot be turned into this performer.
        """


class Operation:
    """A performer plus the journal record it was rebuilt from, if any."""

    def __init__(self, performer: OperationPerformer, record: OperationRecord | None = None):
        self.performer = performer
        self.record = record

    @classmethod
    def from_record(cls, record: OperationRecord, package: Package | None = None) -> Operation:
        """Rebuild an operation from the journal.

        Raises:
            OperationRecordError: If no performer handles the kind or the
                payload does not match it.
        """
        performer_cls = PERFORMERS.get(record.kind)
        if performer_cls is None:
            msg = f"No performer registered for {record.kind.value}"
            raise OperationRecordError(msg)
        return cls(performer_cls.from_record(record, package), record)

    @property
    def kind(self) -> OperationKind:
        return self.performer.KIND

    def description(self) -> str:
        return self.performer.description()

    def execute(self, app: DeployApp, package: str | None = None) -> OperationRecord:
        """Execute the operation and journal it in memory.

        Args:
            app: Running application.
            package: Name of the owning package; None for global operations.

        Returns:
            The record appended to the history.
        """
        logger.debug("Executing: %s", self.description())
        try:
            self.performer.execute(app)
        except BaseException:
            self._finalize_after_failure(app)
            raise
        self.performer.finalize(app)

        record = self.performer.as_record()
        app.history_for(package).add(record)
        return record

    def revert(self, app: DeployApp, package: str | None = None) -> None:
        """Revert the operation and drop its originating record.

        Args:
            app: Running application.
            package: Name of the owning package; None for global operations.
        """
        logger.debug("Reverting: %s", self.description())
        try:
            self.performer.revert(app)
        except BaseException:
            self._finalize_after_failure(app)
            raise
        self.performer.finalize(app)

        if self.record is not None:
            app.history_for(package).remove(self.record)

    def _finalize_after_failure(self, app: DeployApp) -> None:
        try:
            self.performer.finalize(app)
        except (DeployError, OSError) as e:
            logger.warning("Finalize of '%s' failed: %s", self.description(), e)
