from enum import StrEnum


class UserRole(StrEnum):
    ATTENDEE = 'attendee'
    HOST = 'host'
    STAFF = 'staff'
    ADMIN = 'admin'
