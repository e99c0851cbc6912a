import calendar
import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional

from veriton_backend.interface.attendance import (
    AttendanceEntry,
    AttendanceInterface,
    AttendanceRecord,
    AttendanceStatus,
    StudentAttendanceLine,
    TeacherMonthlyReport,
)
from veriton_backend.model.attendance import Attendance
from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.core import require_role, scoped_query
from veriton_backend.permissions.principal import Principal, Role
from veriton_backend.repositories.base import RepositoryError, ValidationFailedError
from veriton_backend.services.base import EntityService, http_errors, parse_payload

logger = logging.getLogger(__name__)


class AttendanceService(EntityService):
    interface = AttendanceInterface

    def teacher_monthly_report(self, principal: Principal, month: int, year: int,
                               teacher_id: Optional[str] = None) -> TeacherMonthlyReport:
        """Attendance summary of one teacher for a calendar month.

        ``teacher_id`` defaults to the calling teacher.
        """
        require_role(principal, Role.teacher)

        with http_errors():
            teacher_id = teacher_id or principal.teacher_id
            if teacher_id is None:
                raise ValidationFailedError.for_field("teacher_id", "Teacher is required")
            if not 1 <= month <= 12:
                raise ValidationFailedError.for_field("month", "Month must be between 1 and 12")

            first_day = datetime.date(year, month, 1)
            last_day = datetime.date(year, month, calendar.monthrange(year, month)[1])

            records = scoped_query(principal, EntityKind.attendance, self.db).filter(
                Attendance.teacher_id == teacher_id,
                Attendance.date >= first_day,
                Attendance.date <= last_day,
            ).order_by(Attendance.date, Attendance.id).all()

        report = TeacherMonthlyReport(teacher_id=teacher_id, month=month, year=year)
        for record in records:
            status = AttendanceStatus(record.status)
            setattr(report, status.name, getattr(report, status.name) + 1)
        report.records = [AttendanceRecord.model_validate(record) for record in records]
        return report

    def student_attendance(self, principal: Principal, grade_id: str, on_date: datetime.date) -> List[StudentAttendanceLine]:
        """One line per active student of the grade; students without a record are Absent"""
        require_role(principal, Role.teacher)

        with http_errors():
            grade = self.store.get_by_id(EntityKind.grade, principal, grade_id)
            students = self.store.list(EntityKind.student, principal,
                                       extra_filter={"grade_id": grade.id, "is_active": True},
                                       order_by=["roll_no", "first_name"])
            student_ids = [student.id for student in students]

            existing: Dict[str, Any] = {}
            if student_ids:
                rows = scoped_query(principal, EntityKind.attendance, self.db).filter(
                    Attendance.date == on_date,
                    Attendance.student_id.in_(student_ids),
                ).all()
                existing = {row.student_id: row for row in rows}

        lines = []
        for student in students:
            record = existing.get(student.id)
            lines.append(StudentAttendanceLine(
                attendance_id=record.id if record else None,
                student_id=student.id,
                student_name=f"{student.first_name} {student.last_name}",
                roll_no=student.roll_no,
                status=record.status if record else AttendanceStatus.absent,
                remarks=record.remarks if record else None,
            ))
        return lines

    def save_attendance(self, principal: Principal, entries: Iterable[Any]) -> List[str]:
        """Create entries without an id, update the status of those with one.

        Every entry is checked before anything is written and the batch is
        committed once, so a rejected entry leaves no rows behind.
        """
        require_role(principal, Role.teacher)

        with http_errors():
            parsed = [parse_payload(AttendanceEntry, entry) for entry in entries]

            staged = []
            for entry in parsed:
                if entry.id is None:
                    staged.append((None, self.prepare_create(principal, entry.model_dump(exclude={"id"}))))
                else:
                    record = self.store.get_by_id(self.kind, principal, entry.id)
                    values = self.prepare_update(principal, record, {"status": entry.status, "remarks": entry.remarks})
                    staged.append((record.id, values))

            saved = []
            try:
                for record_id, values in staged:
                    if record_id is None:
                        saved.append(self.store.create(self.kind, principal, values, commit=False))
                    else:
                        self.store.update(self.kind, principal, record_id, values, commit=False)
                        saved.append(record_id)
            except RepositoryError:
                self.db.rollback()
                raise
            self.store.commit(self.kind, action="save")

        logger.info("saved %d attendance entries", len(saved))
        return saved
