from sqlalchemy import func

from app.core.constants import Resource, StatusEnum
from app.core.decorators import cached_read
from app.core.scope import apply_scope
from app.models.institute import Institute
from app.models.user import User
from app.models.video import Video
from app.schemas.analytics import DashboardStats
from app.schemas.scope import ScopeContext
from app.services.base import ScopedService


class AnalyticsService(ScopedService):
    """Dashboard aggregates, each built from its own resource's scope rule."""
    resource = Resource.ANALYTICS

    def _scoped(self, model, resource: Resource, context: ScopeContext):
        return apply_scope(self.db.query(model), model, resource, context)

    @cached_read("stats", Resource.ANALYTICS, "dashboard")
    def get_dashboard(self, context: ScopeContext) -> DashboardStats:
        users = self._scoped(User, Resource.USERS, context)
        videos = self._scoped(Video, Resource.VIDEOS, context)
        users_by_role = {
            role: count
            for role, count in users.with_entities(User.role, func.count(User.id)).group_by(User.role).all()
        }
        return DashboardStats(
            total_users=users.count(),
            active_users=users.filter(User.status == StatusEnum.ACTIVE.value).count(),
            users_by_role=users_by_role,
            total_institutes=self._scoped(Institute, Resource.INSTITUTES, context).count(),
            total_videos=videos.count(),
            active_videos=videos.filter(Video.status == StatusEnum.ACTIVE.value).count(),
        )
