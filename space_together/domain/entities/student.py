from typing import List, Optional

from pydantic import EmailStr

from space_together.domain.base import EntityPatch, TaggedEntity

from .enums import Gender, StudentStatus


class Student(TaggedEntity):
    """Student of a school - lives in the school's database"""

    user_id: Optional[str] = None
    school_id: Optional[str] = None
    class_id: Optional[str] = None
    creator_id: Optional[str] = None
    name: str
    email: EmailStr
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    date_of_birth: Optional[str] = None
    registration_number: Optional[str] = None
    admission_year: Optional[int] = None
    status: StudentStatus = StudentStatus.Active


class StudentPatch(EntityPatch):
    class_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    date_of_birth: Optional[str] = None
    registration_number: Optional[str] = None
    admission_year: Optional[int] = None
    status: Optional[StudentStatus] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
