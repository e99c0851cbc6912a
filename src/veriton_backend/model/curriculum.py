from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class Module(Base):
    __tablename__ = 'module'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    grade_id = Column(ForeignKey('grade.id', ondelete='RESTRICT'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(4096))
    credits = Column(Integer, nullable=False, default=0)
    created_by_teacher_id = Column(ForeignKey('teacher.id', ondelete='SET NULL'))
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    grade = relationship('Grade', foreign_keys=[grade_id])
    lessons = relationship('Lesson', back_populates='module', uselist=True, lazy='select')


class Lesson(Base):
    __tablename__ = 'lesson'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    module_id = Column(ForeignKey('module.id', ondelete='RESTRICT'), nullable=False, index=True)
    sub_topic = Column(String(255), nullable=False)
    activity = Column(Text)
    video_url = Column(String(2048))
    diagram_url = Column(String(2048))
    code = Column(Text)
    procedure = Column(Text)
    required_material = Column(Text)
    what_you_get = Column(Text)
    # Staff can create lessons without a teacher
    created_by_teacher_id = Column(ForeignKey('teacher.id', ondelete='SET NULL'))
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    module = relationship('Module', back_populates='lessons')


class Scheduler(Base):
    """A scheduled class session for a grade, module and optional lesson."""
    __tablename__ = 'scheduler'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    grade_id = Column(ForeignKey('grade.id', ondelete='RESTRICT'), nullable=False, index=True)
    module_id = Column(ForeignKey('module.id', ondelete='RESTRICT'), nullable=False)
    lesson_id = Column(ForeignKey('lesson.id', ondelete='SET NULL'))
    teacher_id = Column(ForeignKey('teacher.id', ondelete='RESTRICT'), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class LessonCompletion(Base):
    __tablename__ = 'lesson_completion'
    __table_args__ = (
        Index('lesson_completion_student_lesson_key', 'student_id', 'lesson_id', unique=True),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    student_id = Column(ForeignKey('student.id', ondelete='RESTRICT'), nullable=False)
    lesson_id = Column(ForeignKey('lesson.id', ondelete='RESTRICT'), nullable=False)
    completion_date = Column(DateTime(True), nullable=False, default=utcnow)
