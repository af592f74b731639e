from enum import Enum


class AdminRole(str, Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class GalleryCategory(str, Enum):
    EVENTS = "events"
    CAMPUS = "campus"
    SPORTS = "sports"
    CULTURAL = "cultural"
    ACADEMIC = "academic"
    ACHIEVEMENTS = "achievements"
    OTHER = "other"


class StorageProvider(str, Enum):
    LOCAL = "local"
    CLOUDINARY = "cloudinary"
