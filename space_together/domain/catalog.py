"""
Descriptor catalogue for every collection the service serves.
"""

from typing import Tuple

from .descriptors import EntityDescriptor, IndexSpec, Relation, Scope, index
from .entities import (
    JoinSchoolRequest,
    LearningOutcome,
    LearningOutcomePatch,
    MainClass,
    MainClassPatch,
    MainSubject,
    MainSubjectPatch,
    School,
    SchoolClass,
    SchoolClassPatch,
    SchoolPatch,
    SchoolStaff,
    SchoolStaffPatch,
    Sector,
    SectorPatch,
    Student,
    StudentPatch,
    Subject,
    SubjectGradingScheme,
    SubjectGradingSchemePatch,
    SubjectLearningMaterial,
    SubjectLearningMaterialPatch,
    SubjectPatch,
    SubjectProgressConfig,
    SubjectProgressConfigPatch,
    SubjectTopic,
    SubjectTopicPatch,
    Teacher,
    TeacherPatch,
    Trade,
    TradePatch,
    User,
    UserPatch,
)

PENDING_JOIN_REQUEST_INDEX = "unique_pending_email_school"
DIRECTOR_INDEX = "unique_director_per_school"


def _username_and_code() -> Tuple[IndexSpec, ...]:
    return (
        index("username", unique=True, name="unique_username"),
        index("code", unique=True, sparse=True, name="unique_code"),
    )


def join_request_indexes(ttl_index: bool = False) -> Tuple[IndexSpec, ...]:
    specs = [
        index("email"),
        index("school_id"),
        index("invited_user_id"),
        index("class_id"),
        index("status"),
        index("role"),
        index("sent_by"),
        index(("created_at", -1)),
        index("school_id", "status"),
        index("email", "status"),
        index("invited_user_id", "school_id"),
        index("school_id", "class_id"),
        index(
            "email",
            "school_id",
            unique=True,
            name=PENDING_JOIN_REQUEST_INDEX,
            partial_filter={"status": "Pending"},
        ),
    ]
    if ttl_index:
        specs.append(index("expires_at", ttl_seconds=0, name="expires_at_ttl"))
    return tuple(specs)


# ----------------------------------------------------------------------------
# Global database
# ----------------------------------------------------------------------------

USERS = EntityDescriptor(
    kind="user",
    collection="users",
    path="users",
    scope=Scope.GLOBAL,
    model=User,
    patch_model=UserPatch,
    search_fields=("name", "email", "username", "phone"),
    unique_keys=(("email",), ("username",)),
    lookup_keys=("email", "username"),
    object_id_fields=("schools", "current_school_id"),
    indexes=(
        index("email", unique=True, name="unique_email"),
        index("username", unique=True, sparse=True, name="unique_username"),
        index("schools"),
    ),
    relations=(Relation("current_school", "schools", "current_school_id"),),
    tag="Users",
)

SCHOOLS = EntityDescriptor(
    kind="school",
    collection="schools",
    path="schools",
    scope=Scope.GLOBAL,
    model=School,
    patch_model=SchoolPatch,
    search_fields=("name", "username", "code", "description"),
    unique_keys=(("username",), ("code",)),
    lookup_keys=("username", "code"),
    object_id_fields=("creator_id", "curriculum"),
    indexes=_username_and_code(),
    relations=(
        Relation("creator", "users", "creator_id"),
        Relation("sectors", "sectors", "curriculum", many=True),
    ),
    tag="Schools",
)

SECTORS = EntityDescriptor(
    kind="sector",
    collection="sectors",
    path="sectors",
    scope=Scope.GLOBAL,
    model=Sector,
    patch_model=SectorPatch,
    search_fields=("name", "username", "country", "description"),
    unique_keys=(("username",),),
    lookup_keys=("username",),
    indexes=(index("username", unique=True, name="unique_username"),),
    tag="Sectors",
)

TRADES = EntityDescriptor(
    kind="trade",
    collection="trades",
    path="trades",
    scope=Scope.GLOBAL,
    model=Trade,
    patch_model=TradePatch,
    search_fields=("name", "username", "description"),
    unique_keys=(("username",),),
    lookup_keys=("username",),
    object_id_fields=("sector_id", "trade_id"),
    indexes=(
        index("username", unique=True, name="unique_username"),
        index("sector_id"),
    ),
    relations=(
        Relation("sector", "sectors", "sector_id"),
        Relation("parent_trade", "trades", "trade_id"),
    ),
    tag="Trades",
)

MAIN_CLASSES = EntityDescriptor(
    kind="main_class",
    collection="main_classes",
    path="main-classes",
    scope=Scope.GLOBAL,
    model=MainClass,
    patch_model=MainClassPatch,
    search_fields=("name", "username", "description"),
    unique_keys=(("username",), ("trade_id", "level")),
    lookup_keys=("username",),
    object_id_fields=("trade_id",),
    indexes=(
        index("username", unique=True, name="unique_username"),
        index("trade_id", "level", unique=True, name="unique_trade_level"),
    ),
    relations=(Relation("trade", "trades", "trade_id"),),
    tag="Main Classes",
)

# Subject curriculum: main subjects and what hangs off them by subject_id

MAIN_SUBJECTS = EntityDescriptor(
    kind="main_subject",
    collection="main_subjects",
    path="main-subjects",
    scope=Scope.GLOBAL,
    model=MainSubject,
    patch_model=MainSubjectPatch,
    search_fields=("name", "code", "description", "level"),
    unique_keys=(("code",),),
    lookup_keys=("code",),
    object_id_fields=("main_class_ids", "prerequisites", "creator_id"),
    indexes=(
        index("code", unique=True, name="unique_code"),
        index("main_class_ids"),
    ),
    relations=(
        Relation("main_classes", "main_classes", "main_class_ids", many=True),
        Relation(
            "learning_outcomes", "learning_outcomes", "_id", foreign_field="subject_id", many=True
        ),
        Relation("grading_scheme", "subject_grading_schemes", "_id", foreign_field="subject_id"),
        Relation("progress_config", "subject_progress_configs", "_id", foreign_field="subject_id"),
    ),
    tag="Main Subjects",
)

LEARNING_OUTCOMES = EntityDescriptor(
    kind="learning_outcome",
    collection="learning_outcomes",
    path="learning-outcomes",
    scope=Scope.GLOBAL,
    model=LearningOutcome,
    patch_model=LearningOutcomePatch,
    search_fields=("title", "description"),
    object_id_fields=("subject_id", "prerequisites", "creator_id"),
    indexes=(index("subject_id", "order"),),
    relations=(
        Relation("subject", "main_subjects", "subject_id"),
        Relation("topics", "topics", "_id", foreign_field="learning_outcome_id", many=True),
    ),
    tag="Learning Outcomes",
)

TOPICS = EntityDescriptor(
    kind="topic",
    collection="topics",
    path="topics",
    scope=Scope.GLOBAL,
    model=SubjectTopic,
    patch_model=SubjectTopicPatch,
    search_fields=("title", "description"),
    object_id_fields=("subject_id", "learning_outcome_id", "parent_topic_id", "creator_id"),
    indexes=(index("subject_id"), index("learning_outcome_id", "order"), index("parent_topic_id")),
    relations=(
        Relation("subject", "main_subjects", "subject_id"),
        Relation("learning_outcome", "learning_outcomes", "learning_outcome_id"),
        Relation("parent_topic", "topics", "parent_topic_id"),
        Relation(
            "learning_materials",
            "subject_learning_materials",
            "_id",
            foreign_field="topic_id",
            many=True,
        ),
    ),
    tag="Topics",
)

SUBJECT_GRADING_SCHEMES = EntityDescriptor(
    kind="subject_grading_scheme",
    collection="subject_grading_schemes",
    path="subject-grading-schemes",
    scope=Scope.GLOBAL,
    model=SubjectGradingScheme,
    patch_model=SubjectGradingSchemePatch,
    search_fields=("minimum_passing_grade",),
    unique_keys=(("subject_id",),),
    lookup_keys=("subject_id",),
    object_id_fields=("subject_id", "creator_id"),
    indexes=(index("subject_id", unique=True, sparse=True, name="unique_subject_id"),),
    relations=(Relation("subject", "main_subjects", "subject_id"),),
    tag="Subject Grading Schemes",
)

SUBJECT_PROGRESS_CONFIGS = EntityDescriptor(
    kind="subject_progress_config",
    collection="subject_progress_configs",
    path="subject-progress-configs",
    scope=Scope.GLOBAL,
    model=SubjectProgressConfig,
    patch_model=SubjectProgressConfigPatch,
    unique_keys=(("subject_id",),),
    lookup_keys=("subject_id",),
    object_id_fields=("subject_id", "creator_id"),
    indexes=(index("subject_id", unique=True, sparse=True, name="unique_subject_id"),),
    relations=(Relation("subject", "main_subjects", "subject_id"),),
    tag="Subject Progress Configs",
)

SUBJECT_LEARNING_MATERIALS = EntityDescriptor(
    kind="subject_learning_material",
    collection="subject_learning_materials",
    path="subject-learning-materials",
    scope=Scope.GLOBAL,
    model=SubjectLearningMaterial,
    patch_model=SubjectLearningMaterialPatch,
    search_fields=("title", "description", "link"),
    object_id_fields=("subject_id", "topic_id", "creator_id"),
    indexes=(index("subject_id"), index("topic_id")),
    relations=(
        Relation("subject", "main_subjects", "subject_id"),
        Relation("topic", "topics", "topic_id"),
    ),
    tag="Subject Learning Materials",
)

JOIN_SCHOOL_REQUESTS = EntityDescriptor(
    kind="join_school_request",
    collection="join_school_requests",
    path="join-school-requests",
    scope=Scope.GLOBAL,
    model=JoinSchoolRequest,
    patch_model=JoinSchoolRequest,
    search_fields=("email", "message", "type"),
    lookup_keys=("email",),
    object_id_fields=("school_id", "invited_user_id", "class_id", "sent_by", "responded_by"),
    indexes=join_request_indexes(),
    relations=(
        Relation("school", "schools", "school_id"),
        Relation("invited_user", "users", "invited_user_id"),
        Relation("sender", "users", "sent_by"),
    ),
    tag="Join School Requests",
)

# ----------------------------------------------------------------------------
# Per-school databases
# ----------------------------------------------------------------------------

CLASSES = EntityDescriptor(
    kind="class",
    collection="classes",
    path="classes",
    scope=Scope.TENANT,
    model=SchoolClass,
    patch_model=SchoolClassPatch,
    search_fields=("name", "username", "code", "description", "grade_level"),
    unique_keys=(("username",), ("code",)),
    lookup_keys=("username", "code"),
    object_id_fields=(
        "school_id",
        "creator_id",
        "class_teacher_id",
        "main_class_id",
        "trade_id",
        "student_ids",
    ),
    indexes=_username_and_code() + (index("class_teacher_id"),),
    relations=(
        Relation("class_teacher", "teachers", "class_teacher_id"),
        Relation("students", "students", "student_ids", many=True),
        Relation("subjects", "subjects", "_id", foreign_field="class_id", many=True),
    ),
    tag="School Classes",
)

SUBJECTS = EntityDescriptor(
    kind="subject",
    collection="subjects",
    path="subjects",
    scope=Scope.TENANT,
    model=Subject,
    patch_model=SubjectPatch,
    search_fields=("name", "username", "code", "description"),
    unique_keys=(("username",), ("code",)),
    lookup_keys=("username", "code"),
    object_id_fields=("class_id", "creator_id", "class_teacher_id", "main_subject_id"),
    indexes=_username_and_code() + (index("class_id"), index("class_teacher_id")),
    relations=(
        Relation("class", "classes", "class_id"),
        Relation("class_teacher", "teachers", "class_teacher_id"),
    ),
    tag="School Subjects",
)

TEACHERS = EntityDescriptor(
    kind="teacher",
    collection="teachers",
    path="teachers",
    scope=Scope.TENANT,
    model=Teacher,
    patch_model=TeacherPatch,
    search_fields=("name", "email", "phone"),
    unique_keys=(("email",),),
    lookup_keys=("email", "user_id"),
    object_id_fields=("user_id", "school_id", "creator_id", "class_ids", "subject_ids"),
    indexes=(index("email"), index("user_id"), index("school_id")),
    relations=(
        Relation("classes", "classes", "class_ids", many=True),
        Relation("subjects", "subjects", "subject_ids", many=True),
    ),
    tag="School Teachers",
)

STUDENTS = EntityDescriptor(
    kind="student",
    collection="students",
    path="students",
    scope=Scope.TENANT,
    model=Student,
    patch_model=StudentPatch,
    search_fields=("name", "email", "phone", "registration_number"),
    unique_keys=(("email",), ("registration_number",)),
    lookup_keys=("email", "user_id", "registration_number"),
    object_id_fields=("user_id", "school_id", "class_id", "creator_id"),
    indexes=(
        index("email"),
        index("user_id"),
        index("school_id"),
        index("class_id"),
        index("registration_number", unique=True, sparse=True, name="unique_registration_number"),
    ),
    relations=(Relation("class", "classes", "class_id"),),
    tag="School Students",
)

SCHOOL_STAFF = EntityDescriptor(
    kind="school_staff",
    collection="school_staff",
    path="school-staff",
    scope=Scope.TENANT,
    model=SchoolStaff,
    patch_model=SchoolStaffPatch,
    search_fields=("name", "email"),
    unique_keys=(("email",),),
    lookup_keys=("email", "user_id"),
    object_id_fields=("user_id", "school_id", "creator_id"),
    indexes=(
        index("email"),
        index("user_id"),
        index("school_id"),
        index(
            "school_id",
            unique=True,
            name=DIRECTOR_INDEX,
            partial_filter={"type": "Director"},
        ),
    ),
    tag="School Staff",
)

ENTITY_DESCRIPTORS = (
    USERS,
    SCHOOLS,
    SECTORS,
    TRADES,
    MAIN_CLASSES,
    MAIN_SUBJECTS,
    LEARNING_OUTCOMES,
    TOPICS,
    SUBJECT_GRADING_SCHEMES,
    SUBJECT_PROGRESS_CONFIGS,
    SUBJECT_LEARNING_MATERIALS,
    CLASSES,
    SUBJECTS,
    TEACHERS,
    STUDENTS,
    SCHOOL_STAFF,
)
