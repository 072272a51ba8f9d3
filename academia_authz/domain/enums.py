"""Domain enumerations for academic role authorization."""

from enum import Enum


class RoleType(str, Enum):
    """Closed category tag for academic roles"""

    STUDENT = "student"
    PROFESSOR = "professor"
    TEACHING_PROFESSOR = "teaching_professor"
    CHAIR = "chair"
    ADMINISTRATOR = "administrator"
    SYSTEM_ADMIN = "system_admin"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [role_type.value for role_type in cls]

    @property
    def display_name(self) -> str:
        return _ROLE_TYPE_DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _ROLE_TYPE_DESCRIPTIONS[self]

    @property
    def default_priority(self) -> int:
        """Priority on the 1 (lowest) to 10 (highest authority) scale"""
        return _ROLE_TYPE_PRIORITIES[self]


_ROLE_TYPE_DISPLAY_NAMES = {
    RoleType.STUDENT: "Student",
    RoleType.PROFESSOR: "Professor",
    RoleType.TEACHING_PROFESSOR: "Teaching Professor",
    RoleType.CHAIR: "Department Chair",
    RoleType.ADMINISTRATOR: "Administrator",
    RoleType.SYSTEM_ADMIN: "System Administrator",
}

_ROLE_TYPE_DESCRIPTIONS = {
    RoleType.STUDENT: "Access to enrolled courses, assignments, and grades",
    RoleType.PROFESSOR: "Teaching, research, and course management capabilities",
    RoleType.TEACHING_PROFESSOR: "Primary focus on teaching and course delivery",
    RoleType.CHAIR: "Department leadership and administrative oversight",
    RoleType.ADMINISTRATOR: "Academic records and student services management",
    RoleType.SYSTEM_ADMIN: "Full system access and technical administration",
}

_ROLE_TYPE_PRIORITIES = {
    RoleType.STUDENT: 1,
    RoleType.TEACHING_PROFESSOR: 4,
    RoleType.PROFESSOR: 5,
    RoleType.ADMINISTRATOR: 6,
    RoleType.CHAIR: 7,
    RoleType.SYSTEM_ADMIN: 10,
}


class AssignmentState(str, Enum):
    """
    Lifecycle state of a role assignment at a given instant.

    PENDING -> EFFECTIVE -> EXPIRED are driven by time; EFFECTIVE -> REVOKED
    by an explicit revoke. EXPIRED and REVOKED never grant authority.
    """

    PENDING = "pending"
    EFFECTIVE = "effective"
    EXPIRED = "expired"
    REVOKED = "revoked"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [state.value for state in cls]


class PermissionTag(str, Enum):
    """Known vocabulary for a role's additional permissions"""

    # User management
    VIEW_USERS = "view_users"
    CREATE_USERS = "create_users"
    EDIT_USERS = "edit_users"
    DELETE_USERS = "delete_users"
    ASSIGN_ROLES = "assign_roles"
    RESET_PASSWORDS = "reset_passwords"
    MANAGE_USER_LOCKOUTS = "manage_user_lockouts"

    # Academic records
    VIEW_ACADEMIC_RECORDS = "view_academic_records"
    EDIT_ACADEMIC_RECORDS = "edit_academic_records"
    CREATE_ACADEMIC_RECORDS = "create_academic_records"
    DELETE_ACADEMIC_RECORDS = "delete_academic_records"
    VIEW_GRADES = "view_grades"
    ASSIGN_GRADES = "assign_grades"
    EDIT_GRADES = "edit_grades"

    # Courses
    VIEW_COURSES = "view_courses"
    CREATE_COURSES = "create_courses"
    EDIT_COURSES = "edit_courses"
    DELETE_COURSES = "delete_courses"
    ASSIGN_INSTRUCTORS = "assign_instructors"
    MANAGE_ENROLLMENT = "manage_enrollment"
    VIEW_SCHEDULES = "view_schedules"
    EDIT_SCHEDULES = "edit_schedules"

    # Departments
    VIEW_DEPARTMENTS = "view_departments"
    EDIT_DEPARTMENTS = "edit_departments"
    CREATE_DEPARTMENTS = "create_departments"
    DELETE_DEPARTMENTS = "delete_departments"
    MANAGE_DEPARTMENT_FACULTY = "manage_department_faculty"
    MANAGE_DEPARTMENT_BUDGET = "manage_department_budget"

    # Research
    VIEW_RESEARCH = "view_research"
    CREATE_RESEARCH = "create_research"
    EDIT_RESEARCH = "edit_research"
    DELETE_RESEARCH = "delete_research"
    MANAGE_RESEARCH_FUNDING = "manage_research_funding"

    # Committees
    VIEW_COMMITTEES = "view_committees"
    CREATE_COMMITTEES = "create_committees"
    EDIT_COMMITTEES = "edit_committees"
    DELETE_COMMITTEES = "delete_committees"
    MANAGE_COMMITTEE_MEMBERS = "manage_committee_members"

    # Infrastructure and reporting
    MANAGE_INFRASTRUCTURE = "manage_infrastructure"
    MANAGE_ACCESS_LEVELS = "manage_access_levels"
    VIEW_REPORTS = "view_reports"
    GENERATE_REPORTS = "generate_reports"

    # System administration
    SYSTEM_CONFIGURATION = "system_configuration"
    VIEW_SYSTEM_LOGS = "view_system_logs"
    MANAGE_BACKUP = "manage_backup"
    SYSTEM_MAINTENANCE = "system_maintenance"
    FULL_SYSTEM_ADMIN = "full_system_admin"

    # Personal data
    VIEW_OWN_PROFILE = "view_own_profile"
    EDIT_OWN_PROFILE = "edit_own_profile"
    VIEW_OWN_GRADES = "view_own_grades"
    VIEW_OWN_COURSES = "view_own_courses"

    # Special
    IMPERSONATE_USERS = "impersonate_users"
    OVERRIDE_RESTRICTIONS = "override_restrictions"
    VIEW_AUDIT_TRAILS = "view_audit_trails"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [tag.value for tag in cls]
