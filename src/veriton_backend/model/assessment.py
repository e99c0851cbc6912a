from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class Exam(Base):
    __tablename__ = 'exam'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    grade_id = Column(ForeignKey('grade.id', ondelete='RESTRICT'), nullable=False, index=True)
    module_id = Column(ForeignKey('module.id', ondelete='RESTRICT'), nullable=False)
    date = Column(Date, nullable=False)
    created_by_teacher_id = Column(ForeignKey('teacher.id', ondelete='RESTRICT'), nullable=False, index=True)
    title = Column(String(255))
    total_marks = Column(Integer)
    duration_minutes = Column(Integer)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    questions = relationship('Question', back_populates='exam', uselist=True, lazy='select')


class Question(Base):
    """A multiple-choice question of an exam."""
    __tablename__ = 'question'
    __table_args__ = (
        CheckConstraint("correct_answer IN ('A', 'B', 'C', 'D')", name='ck_question_correct_answer'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    exam_id = Column(ForeignKey('exam.id', ondelete='RESTRICT'), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    option_a = Column(String(1024), nullable=False)
    option_b = Column(String(1024), nullable=False)
    option_c = Column(String(1024), nullable=False)
    option_d = Column(String(1024), nullable=False)
    correct_answer = Column(String(1), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    exam = relationship('Exam', back_populates='questions')


class Result(Base):
    __tablename__ = 'result'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    student_id = Column(ForeignKey('student.id', ondelete='RESTRICT'), nullable=False, index=True)
    exam_id = Column(ForeignKey('exam.id', ondelete='RESTRICT'), nullable=False, index=True)
    obtained_marks = Column(Numeric(8, 2), nullable=False)
    grade = Column(String(8))
    remarks = Column(Text)
    is_published = Column(Boolean, nullable=False, default=False)
