"""Default permission bundles for each academic role type."""

from academia_authz.domain.enums import PermissionTag as P
from academia_authz.domain.enums import RoleType

ALL_USER_MANAGEMENT = frozenset({
    P.VIEW_USERS, P.CREATE_USERS, P.EDIT_USERS, P.DELETE_USERS,
    P.ASSIGN_ROLES, P.RESET_PASSWORDS, P.MANAGE_USER_LOCKOUTS,
})
ALL_ACADEMIC_RECORDS = frozenset({
    P.VIEW_ACADEMIC_RECORDS, P.EDIT_ACADEMIC_RECORDS, P.CREATE_ACADEMIC_RECORDS,
    P.DELETE_ACADEMIC_RECORDS, P.VIEW_GRADES, P.ASSIGN_GRADES, P.EDIT_GRADES,
})
ALL_COURSE_MANAGEMENT = frozenset({
    P.VIEW_COURSES, P.CREATE_COURSES, P.EDIT_COURSES, P.DELETE_COURSES,
    P.ASSIGN_INSTRUCTORS, P.MANAGE_ENROLLMENT, P.VIEW_SCHEDULES, P.EDIT_SCHEDULES,
})
ALL_DEPARTMENT_MANAGEMENT = frozenset({
    P.VIEW_DEPARTMENTS, P.EDIT_DEPARTMENTS, P.CREATE_DEPARTMENTS, P.DELETE_DEPARTMENTS,
    P.MANAGE_DEPARTMENT_FACULTY, P.MANAGE_DEPARTMENT_BUDGET,
})
ALL_RESEARCH_MANAGEMENT = frozenset({
    P.VIEW_RESEARCH, P.CREATE_RESEARCH, P.EDIT_RESEARCH, P.DELETE_RESEARCH,
    P.MANAGE_RESEARCH_FUNDING,
})
ALL_COMMITTEE_MANAGEMENT = frozenset({
    P.VIEW_COMMITTEES, P.CREATE_COMMITTEES, P.EDIT_COMMITTEES, P.DELETE_COMMITTEES,
    P.MANAGE_COMMITTEE_MEMBERS,
})
ALL_INFRASTRUCTURE = frozenset({
    P.MANAGE_INFRASTRUCTURE, P.MANAGE_ACCESS_LEVELS, P.VIEW_REPORTS, P.GENERATE_REPORTS,
})
ALL_SYSTEM_ADMIN = frozenset({
    P.SYSTEM_CONFIGURATION, P.VIEW_SYSTEM_LOGS, P.MANAGE_BACKUP,
    P.SYSTEM_MAINTENANCE, P.FULL_SYSTEM_ADMIN,
})
ALL_PERSONAL = frozenset({
    P.VIEW_OWN_PROFILE, P.EDIT_OWN_PROFILE, P.VIEW_OWN_GRADES, P.VIEW_OWN_COURSES,
})

STUDENT_PERMISSIONS = ALL_PERSONAL | {P.VIEW_COURSES, P.VIEW_SCHEDULES}
PROFESSOR_PERMISSIONS = STUDENT_PERMISSIONS | ALL_COURSE_MANAGEMENT | {
    P.VIEW_ACADEMIC_RECORDS, P.ASSIGN_GRADES, P.EDIT_GRADES,
    P.VIEW_RESEARCH, P.CREATE_RESEARCH, P.EDIT_RESEARCH,
}
TEACHING_PROFESSOR_PERMISSIONS = STUDENT_PERMISSIONS | {
    P.EDIT_COURSES, P.ASSIGN_GRADES, P.EDIT_GRADES, P.EDIT_SCHEDULES, P.MANAGE_ENROLLMENT,
}
CHAIR_PERMISSIONS = (
    PROFESSOR_PERMISSIONS
    | ALL_DEPARTMENT_MANAGEMENT
    | ALL_COMMITTEE_MANAGEMENT
    | {P.VIEW_USERS, P.EDIT_USERS, P.ASSIGN_ROLES}
)
ADMINISTRATOR_PERMISSIONS = (
    ALL_ACADEMIC_RECORDS
    | ALL_COURSE_MANAGEMENT
    | ALL_INFRASTRUCTURE
    | {P.VIEW_USERS, P.EDIT_USERS, P.VIEW_DEPARTMENTS, P.MANAGE_ENROLLMENT}
)
SYSTEM_ADMIN_PERMISSIONS = (
    ALL_USER_MANAGEMENT
    | ALL_ACADEMIC_RECORDS
    | ALL_COURSE_MANAGEMENT
    | ALL_DEPARTMENT_MANAGEMENT
    | ALL_RESEARCH_MANAGEMENT
    | ALL_COMMITTEE_MANAGEMENT
    | ALL_INFRASTRUCTURE
    | ALL_SYSTEM_ADMIN
    | {P.IMPERSONATE_USERS, P.OVERRIDE_RESTRICTIONS, P.VIEW_AUDIT_TRAILS}
)

DEFAULT_PERMISSIONS: dict[RoleType, frozenset[P]] = {
    RoleType.STUDENT: STUDENT_PERMISSIONS,
    RoleType.PROFESSOR: PROFESSOR_PERMISSIONS,
    RoleType.TEACHING_PROFESSOR: TEACHING_PROFESSOR_PERMISSIONS,
    RoleType.CHAIR: CHAIR_PERMISSIONS,
    RoleType.ADMINISTRATOR: ADMINISTRATOR_PERMISSIONS,
    RoleType.SYSTEM_ADMIN: SYSTEM_ADMIN_PERMISSIONS,
}


def default_permissions(role_type: RoleType) -> frozenset[P]:
    """Permission bundle a freshly seeded role of this type starts with."""
    return DEFAULT_PERMISSIONS.get(role_type, frozenset())
