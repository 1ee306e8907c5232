"""
Space Together Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AffiliationType,
    ClassType,
    Gender,
    JoinRole,
    JoinStatus,
    RESPONSE_STATUSES,
    SchoolStaffType,
    SchoolType,
    StudentStatus,
    SubjectCategory,
    SubjectGradingType,
    SubjectMaterialType,
    SubjectTypeFor,
    TeacherType,
    UserRole,
)

# Export all entities
from .change_event import GLOBAL_TOPIC, ChangeEvent, ChangeVerb
from .credentials import STAFF_ROLES, AuthUser, TenantCredential
from .join_school_request import JoinSchoolRequest, JoinSchoolRequestWithRelations
from .learning_outcome import CompetencyBlock, LearningOutcome, LearningOutcomePatch
from .main_class import MainClass, MainClassPatch
from .main_subject import MainSubject, MainSubjectPatch, SubjectContributor
from .school import School, SchoolPatch, school_db_name_from_id
from .school_class import SchoolClass, SchoolClassPatch
from .school_staff import SchoolStaff, SchoolStaffPatch, parse_staff_type
from .sector import Sector, SectorPatch
from .student import Student, StudentPatch
from .subject import Subject, SubjectPatch
from .subject_grading_scheme import SubjectGradingScheme, SubjectGradingSchemePatch
from .subject_learning_material import SubjectLearningMaterial, SubjectLearningMaterialPatch
from .subject_progress_config import (
    ProgressThresholds,
    SubjectProgressConfig,
    SubjectProgressConfigPatch,
)
from .subject_topic import SubjectTopic, SubjectTopicPatch
from .teacher import Teacher, TeacherPatch, parse_teacher_type
from .trade import Trade, TradePatch
from .user import User, UserPatch

__all__ = [
    # Enums
    "AffiliationType",
    "ClassType",
    "Gender",
    "JoinRole",
    "JoinStatus",
    "RESPONSE_STATUSES",
    "SchoolStaffType",
    "SchoolType",
    "StudentStatus",
    "SubjectCategory",
    "SubjectGradingType",
    "SubjectMaterialType",
    "SubjectTypeFor",
    "TeacherType",
    "UserRole",
    # Events and credentials
    "GLOBAL_TOPIC",
    "ChangeEvent",
    "ChangeVerb",
    "STAFF_ROLES",
    "AuthUser",
    "TenantCredential",
    # Entities
    "JoinSchoolRequest",
    "JoinSchoolRequestWithRelations",
    "CompetencyBlock",
    "LearningOutcome",
    "LearningOutcomePatch",
    "MainClass",
    "MainClassPatch",
    "MainSubject",
    "MainSubjectPatch",
    "SubjectContributor",
    "School",
    "SchoolPatch",
    "school_db_name_from_id",
    "SchoolClass",
    "SchoolClassPatch",
    "SchoolStaff",
    "SchoolStaffPatch",
    "parse_staff_type",
    "Sector",
    "SectorPatch",
    "Student",
    "StudentPatch",
    "Subject",
    "SubjectPatch",
    "SubjectGradingScheme",
    "SubjectGradingSchemePatch",
    "SubjectLearningMaterial",
    "SubjectLearningMaterialPatch",
    "ProgressThresholds",
    "SubjectProgressConfig",
    "SubjectProgressConfigPatch",
    "SubjectTopic",
    "SubjectTopicPatch",
    "Teacher",
    "TeacherPatch",
    "parse_teacher_type",
    "Trade",
    "TradePatch",
    "User",
    "UserPatch",
]
