from .content import AppConfigBody, CollectionUpdate, ContentBundleResponse, NotificationCreate
from .user import UserRecordBody, UserRecordResponse

__all__ = [
    "AppConfigBody",
    "CollectionUpdate",
    "ContentBundleResponse",
    "NotificationCreate",
    "UserRecordBody",
    "UserRecordResponse",
]
