from sqlalchemy import CheckConstraint, Column, Date, DateTime, Enum, ForeignKey, String, Text

from .base import Base, new_id, utcnow


ATTENDANCE_STATUSES = ('Present', 'Absent', 'Late', 'Excused')


class Attendance(Base):
    __tablename__ = 'attendance'
    __table_args__ = (
        CheckConstraint(
            "(teacher_id IS NULL) <> (student_id IS NULL)",
            name='ck_attendance_teacher_xor_student'
        ),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(Enum(*ATTENDANCE_STATUSES, name='attendance_status', native_enum=False), nullable=False)
    remarks = Column(Text)
    teacher_id = Column(ForeignKey('teacher.id', ondelete='RESTRICT'), index=True)
    student_id = Column(ForeignKey('student.id', ondelete='RESTRICT'), index=True)
