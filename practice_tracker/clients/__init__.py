from .base import FetchError, FetchResult, PlatformClient, with_retries
from .gfg_client import GfgClient
from .leetcode_client import LeetCodeClient

__all__ = ['FetchError', 'FetchResult', 'PlatformClient', 'with_retries', 'GfgClient', 'LeetCodeClient']
