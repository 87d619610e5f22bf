"""Reminder eligibility engine.

For a given day, every pending installment is classified into at most one
escalation level by comparing its distance to the due date with the
configured offsets. Each ``(installment, level, day)`` triple is issued at most once:
runs for the same day are serialized and consult the reminder journal
before issuing.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable

from fee_reminder.composer import MessageComposer
from fee_reminder.config import ReminderRules
from fee_reminder.delivery.base import Sender, SimulatedSender
from fee_reminder.exceptions import ConflictError, InternalError
from fee_reminder.journal import ReminderJournal
from fee_reminder.locks import KeyedLock
from fee_reminder.models import (
    ChannelAttempt,
    FeePlan,
    Household,
    Installment,
    ReminderLevel,
    ReminderRecord,
    Student,
)
from fee_reminder.store.school import SchoolDataStore

logger = logging.getLogger(__name__)


def days_until_due(due_date: date, today: date) -> int:
    """Signed whole days from ``today`` to ``due_date`` (future is positive)."""
    return (due_date - today).days


def classify(delta: int, rules: ReminderRules) -> ReminderLevel | None:
    """Escalation level for a ``due_date - today`` delta.

    A level matches when the delta is the negation of its offset, so a
    ``-10`` preventive offset fires ten days before the due date.

    Levels are tried in the order preventive, due day, overdue level 1,
    overdue level 2, and the first match wins.
    """
    for level, offset in rules.offsets():
        if delta == -offset:
            return level
    return None


@dataclass
class ProcessReport:
    """Outcome of one reminder run."""

    today: date
    issued: list[ReminderRecord] = field(default_factory=list)
    examined: int = 0
    skipped_duplicates: int = 0
    skipped_missing: int = 0

    @property
    def processed(self) -> int:
        return len(self.issued)

    @property
    def skipped(self) -> int:
        return self.skipped_duplicates + self.skipped_missing

    def counts_by_level(self) -> dict[str, int]:
        counts = {level.value: 0 for level in ReminderLevel}
        for record in self.issued:
            counts[record.level.value] += 1
        return counts


@dataclass(frozen=True)
class _Candidate:
    fee_plan: FeePlan
    installment: Installment
    level: ReminderLevel


class ReminderEngine:
    """Decide and issue the reminders due on a given day.

    Installment and payment state is only read, never written.
    """

    def __init__(
        self,
        store: SchoolDataStore,
        journal: ReminderJournal | None = None,
        composer: MessageComposer | None = None,
        sender: Sender | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.store = store
        self.journal = journal or ReminderJournal(store)
        self.composer = composer or MessageComposer()
        self.sender = sender or SimulatedSender()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._day_locks = KeyedLock()

    def process_reminders(self, today: date, rules: ReminderRules) -> ProcessReport:
        """Issue every reminder due on ``today``.

        Parameters
        ----------
        today : date
            Calendar day being processed.
        rules : ReminderRules
            Escalation offsets. Validated before anything is read or written.

        Returns
        -------
        ProcessReport
            ``issued`` holds exactly the records appended by this call.

        Raises
        ------
        ConfigurationError
            If the rules are malformed. No reminder is journaled in that case.
        InternalError
            If the journal cannot be written. Reminders issued before the
            failure stay journaled and are logged.
        """
        rules.validate()

        # Exclusive from the journal refresh to the last append
        with self._day_locks.hold(today), self.store.exclusive():
            report = ProcessReport(today=today)
            self.journal.refresh()
            logger.info("Processing reminders for %s", today.isoformat())

            for candidate in self._candidates(today, rules, report):
                try:
                    record = self._issue(candidate, today, report)
                except ConflictError as e:
                    report.skipped_duplicates += 1
                    logger.warning("Skipping installment %s: %s", candidate.installment.installment_id, e)
                    continue
                except InternalError:
                    logger.error(
                        "Reminder run for %s aborted by a storage failure after issuing %d reminders: %s",
                        today.isoformat(),
                        report.processed,
                        ", ".join(r.reminder_id for r in report.issued) or "none",
                    )
                    raise
                if record is not None:
                    report.issued.append(record)

        logger.info(
            "Reminder run for %s: examined=%d issued=%d duplicates=%d missing=%d",
            today.isoformat(),
            report.examined,
            report.processed,
            report.skipped_duplicates,
            report.skipped_missing,
            extra={
                "run_date": today.isoformat(),
                "issued": report.processed,
                "skipped": report.skipped,
            },
        )
        return report

    def _candidates(
        self, today: date, rules: ReminderRules, report: ProcessReport
    ) -> list[_Candidate]:
        candidates = []
        for fee_plan in self.store.list_fee_plans():
            for installment in fee_plan.pending_installments():
                report.examined += 1
                level = classify(days_until_due(installment.due_date, today), rules)
                if level is None:
                    continue
                if self.journal.has_issued(installment.installment_id, level, today):
                    report.skipped_duplicates += 1
                    logger.debug(
                        "Skipping %s for installment %s: already issued on %s",
                        level.value,
                        installment.installment_id,
                        today.isoformat(),
                    )
                    continue
                candidates.append(_Candidate(fee_plan, installment, level))
        return candidates

    def _resolve(self, fee_plan: FeePlan) -> tuple[Student, Household] | None:
        student = self.store.get_student(fee_plan.student_id)
        if student is None:
            logger.warning(
                "Skipping fee plan %s: student %s not found", fee_plan.fee_plan_id, fee_plan.student_id
            )
            return None
        household = self.store.get_household(student.household_id)
        if household is None:
            logger.warning(
                "Skipping fee plan %s: household %s not found",
                fee_plan.fee_plan_id,
                student.household_id,
            )
            return None
        return student, household

    def _issue(
        self, candidate: _Candidate, today: date, report: ProcessReport
    ) -> ReminderRecord | None:
        resolved = self._resolve(candidate.fee_plan)
        if resolved is None:
            report.skipped_missing += 1
            return None
        student, household = resolved

        drafts = self.composer.drafts(candidate.level, candidate.installment, household, student)
        if not drafts:
            logger.warning(
                "Household %s has no email or phone; journaling %s reminder without messages",
                household.household_id,
                candidate.level.value,
            )

        attempts = tuple(
            ChannelAttempt(
                channel=draft.channel,
                recipient=draft.recipient,
                body=draft.body,
                subject=draft.subject,
                status=self.sender.deliver(draft),
            )
            for draft in drafts
        )

        record = ReminderRecord(
            reminder_id=self.id_factory(),
            fee_plan_id=candidate.fee_plan.fee_plan_id,
            installment_id=candidate.installment.installment_id,
            student_id=student.student_id,
            household_id=household.household_id,
            level=candidate.level,
            issued_on=today,
            issued_at=self.clock(),
            attempts=attempts,
        )
        self.journal.append(record)
        return record
