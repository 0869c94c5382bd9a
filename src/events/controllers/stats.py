from ninja_extra import api_controller, route

from accounts.permissions import IsOrganizer
from common.authentication import CookieJWTAuth
from common.controllers import UserAwareController
from events import schema
from events.service import stats_service


@api_controller("/stats", auth=CookieJWTAuth(), permissions=[IsOrganizer], tags=["Statistics"])
class StatsController(UserAwareController):
    @route.get("/organizer", response=schema.OrganizerStatsSchema, url_name="organizer_stats")
    def organizer(self) -> schema.OrganizerStatsSchema:
        """Dashboard figures for the current organizer's events."""
        return stats_service.organizer_stats(self.user())
