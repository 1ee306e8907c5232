"""
Space Together Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Platform-wide role carried in the user token"""

    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"
    SCHOOLSTAFF = "SCHOOLSTAFF"


class JoinRole(str, Enum):
    """Role the invitee takes in the school"""

    Teacher = "Teacher"
    Student = "Student"
    Staff = "Staff"


class JoinStatus(str, Enum):
    """Join school request status"""

    Pending = "Pending"
    Accepted = "Accepted"
    Rejected = "Rejected"
    Expired = "Expired"
    Cancelled = "Cancelled"


RESPONSE_STATUSES = (JoinStatus.Accepted, JoinStatus.Rejected, JoinStatus.Cancelled)


class SchoolType(str, Enum):
    Public = "Public"
    Private = "Private"
    Charter = "Charter"
    International = "International"


class AffiliationType(str, Enum):
    Government = "Government"
    Religious = "Religious"
    NGO = "NGO"
    Independent = "Independent"


class ClassType(str, Enum):
    Private = "Private"
    School = "School"
    Public = "Public"


class SubjectCategory(str, Enum):
    Science = "Science"
    Technology = "Technology"
    Engineering = "Engineering"
    Mathematics = "Mathematics"
    Language = "Language"
    SocialScience = "SocialScience"
    Arts = "Arts"
    TVET = "TVET"
    Other = "Other"


class SubjectTypeFor(str, Enum):
    """Whether a scheme or outcome belongs to a main subject or a class subject"""

    MainSubject = "MainSubject"
    ClassSubject = "ClassSubject"


class SubjectGradingType(str, Enum):
    LetterGrade = "LetterGrade"
    Percentage = "Percentage"
    Points = "Points"
    PassFail = "PassFail"


class SubjectMaterialType(str, Enum):
    Book = "Book"
    Article = "Article"
    Video = "Video"
    Note = "Note"
    ExternalLink = "ExternalLink"
    Document = "Document"


class TeacherType(str, Enum):
    Regular = "Regular"
    HeadTeacher = "HeadTeacher"
    SubjectTeacher = "SubjectTeacher"
    Deputy = "Deputy"


class StudentStatus(str, Enum):
    Active = "Active"
    Suspended = "Suspended"
    Graduated = "Graduated"
    Left = "Left"


class SchoolStaffType(str, Enum):
    Director = "Director"
    HeadOfStudies = "HeadOfStudies"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
