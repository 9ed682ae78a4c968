from enum import Enum


class RoleEnum(str, Enum):
    SUPER_ADMIN = "super_admin"
    ZONE_MANAGER = "zone_manager"
    INSTITUTE_ADMIN = "institute_admin"
    PARENT = "parent"
    STUDENT = "student"

class StatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

class DifficultyEnum(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class GenderEnum(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

class Resource(str, Enum):
    """Cache namespaces and scope-rule tables are keyed by resource."""
    USERS = "users"
    INSTITUTES = "institutes"
    VIDEOS = "videos"
    ZONES = "zones"
    ANALYTICS = "analytics"


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_SEARCH_LENGTH = 100
