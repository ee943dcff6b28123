# Base.metadata 에 모든 테이블을 등록하기 위한 import 모음
from app.models.user import User, Role, ApprovalStatus  # noqa: F401
from app.models.otp import OtpVerification  # noqa: F401
from app.models.group import (  # noqa: F401
    Group, GroupType, user_groups, post_groups, event_groups, album_groups,
)
from app.models.post import Post, PostMedia, MediaType  # noqa: F401
from app.models.event import Event, Album, AlbumMedia  # noqa: F401
from app.models.interaction import Like, Comment, TargetType  # noqa: F401
from app.models.notification import Notification, NotificationType, ReferenceType  # noqa: F401
from app.models.site_setting import SiteSetting  # noqa: F401
from app.models.admin_log import AdminActionLog, AdminAction  # noqa: F401
