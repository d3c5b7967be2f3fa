from typing import List

from practice_tracker.clients.base import PlatformClient
from practice_tracker.configs import settings


class GfgClient(PlatformClient):
    platform_label = "GeeksforGeeks"

    @classmethod
    def endpoints_from_settings(cls) -> List[str]:
        return settings.gfg_endpoints
