from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class School(Base):
    __tablename__ = 'school'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_code = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    logo_url = Column(String(2048))
    address = Column(String(1024))
    city = Column(String(255))
    state = Column(String(255))
    postal_code = Column(String(64))
    country = Column(String(255))
    contact_email = Column(String(320))
    contact_phone = Column(String(64))
    principal_name = Column(String(255))
    established_date = Column(Date)
    website = Column(String(2048))
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    grades = relationship('Grade', back_populates='school', uselist=True, lazy='select')


class Grade(Base):
    __tablename__ = 'grade'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    grade_level = Column(String(32), nullable=False)
    section = Column(String(32), nullable=False)
    grade_name = Column(String(255), nullable=False)
    capacity = Column(Integer, nullable=False, default=0)
    class_teacher_id = Column(ForeignKey('teacher.id', ondelete='SET NULL'))
    class_room = Column(String(255))
    academic_year = Column(String(32))
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    school = relationship('School', back_populates='grades')
    class_teacher = relationship('Teacher', foreign_keys=[class_teacher_id])


class Teacher(Base):
    __tablename__ = 'teacher'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    user_id = Column(ForeignKey('user.id', ondelete='RESTRICT'), nullable=False, unique=True)
    employee_id = Column(String(64), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(64))
    address = Column(String(1024))
    date_of_birth = Column(Date)
    gender = Column(String(32))
    joining_date = Column(Date)
    qualification = Column(String(255))
    specialization = Column(String(255))
    salary = Column(Numeric(12, 2))
    profile_picture_url = Column(String(2048))
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    user = relationship('User', foreign_keys=[user_id])


class Student(Base):
    __tablename__ = 'student'
    __table_args__ = (
        Index('student_school_email_key', 'school_id', 'email', unique=True),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    school_id = Column(ForeignKey('school.id', ondelete='RESTRICT'), nullable=False, index=True)
    grade_id = Column(ForeignKey('grade.id', ondelete='RESTRICT'), nullable=False, index=True)
    user_id = Column(ForeignKey('user.id', ondelete='SET NULL'), unique=True)
    student_number = Column(String(64), nullable=False)
    roll_no = Column(String(64))
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(64))
    date_of_birth = Column(Date)
    gender = Column(String(32))
    blood_group = Column(String(8))
    address = Column(String(1024))
    admission_date = Column(Date)
    parent_guardian_name = Column(String(255))
    parent_guardian_phone = Column(String(64))
    parent_guardian_email = Column(String(320))
    emergency_contact = Column(String(255))
    profile_picture_url = Column(String(2048))
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    grade = relationship('Grade', foreign_keys=[grade_id])
    user = relationship('User', foreign_keys=[user_id])
