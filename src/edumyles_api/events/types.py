"""Event type catalogue for the EduMyles API.

Event types follow the ``<domain>.<entity>.<verb>`` convention. Payloads are
free-form; the keys listed per event are what the publishing controllers send.
"""

# Authentication: userId, email, role, ipAddress
USER_LOGIN = "user.login"
USER_LOGOUT = "user.logout"
USER_REGISTER = "user.register"

# Academic structure: <entity>Id, name, createdBy
ACADEMIC_YEAR_CREATED = "academic.year.created"
ACADEMIC_SEMESTER_CREATED = "academic.semester.created"
ACADEMIC_GRADE_CREATED = "academic.grade.created"
ACADEMIC_SUBJECT_CREATED = "academic.subject.created"
ACADEMIC_CLASS_CREATED = "academic.class.created"

# Student records: studentId, admissionNumber, changedBy
STUDENT_PROFILE_CREATED = "student.profile.created"
STUDENT_PROFILE_UPDATED = "student.profile.updated"
STUDENT_PROFILE_DELETED = "student.profile.deleted"

AUTH_EVENTS = (USER_LOGIN, USER_LOGOUT, USER_REGISTER)
ACADEMIC_EVENTS = (
    ACADEMIC_YEAR_CREATED,
    ACADEMIC_SEMESTER_CREATED,
    ACADEMIC_GRADE_CREATED,
    ACADEMIC_SUBJECT_CREATED,
    ACADEMIC_CLASS_CREATED,
)
STUDENT_EVENTS = (STUDENT_PROFILE_CREATED, STUDENT_PROFILE_UPDATED, STUDENT_PROFILE_DELETED)

ALL_EVENT_TYPES = AUTH_EVENTS + ACADEMIC_EVENTS + STUDENT_EVENTS
