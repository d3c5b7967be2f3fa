from typing import List

from practice_tracker.clients.base import PlatformClient
from practice_tracker.configs import settings


class LeetCodeClient(PlatformClient):
    platform_label = "LeetCode"

    @classmethod
    def endpoints_from_settings(cls) -> List[str]:
        return settings.leetcode_endpoints
