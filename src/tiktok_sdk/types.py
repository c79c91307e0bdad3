"""
Request types for the API endpoints

Endpoint methods accept either one of these dataclasses or a plain mapping of
parameter names to values.
"""

from dataclasses import dataclass, fields, is_dataclass
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Union


class FeedType(IntEnum):
    """Feed selector for ``aweme/v1/feed/``"""
    FOR_YOU = 0
    FOLLOWING = 1


class PullType(IntEnum):
    """How the feed is being pulled"""
    DEFAULT = 0
    REFRESH = 1
    LOAD_MORE = 2


class TagType(IntEnum):
    """Kind of entity tagged in a comment"""
    USER = 0
    HASHTAG = 1


@dataclass
class Tag:
    """User or hashtag mention inside comment text"""
    start: int
    end: int
    type: TagType = TagType.USER
    user_id: Optional[str] = None
    hashtag_name: Optional[str] = None


@dataclass
class LoginRequest:
    """Parameters for ``passport/user/login/``; credentials are XOR-obfuscated"""
    email: str = ''
    password: str = ''
    username: str = ''
    mobile: str = ''
    account: str = ''
    captcha: str = ''
    mix_mode: int = 1
    app_type: str = 'normal'


@dataclass
class UserSearchRequest:
    """Parameters for user and hashtag searches"""
    keyword: str
    count: int = 10
    cursor: int = 0


@dataclass
class ListPostsRequest:
    """Parameters for listing a user's posts"""
    user_id: str
    count: int = 20
    max_cursor: int = 0


@dataclass
class ListFollowsRequest:
    """Parameters for follower and following lists"""
    user_id: str
    count: int = 20
    max_time: Optional[int] = None


@dataclass
class ListReceivedFollowRequestsRequest:
    """Parameters for listing pending follow requests"""
    count: int = 20
    max_time: Optional[int] = None
    min_time: Optional[int] = None


@dataclass
class ListCommentsRequest:
    """Parameters for listing comments on a post"""
    aweme_id: str
    count: int = 20
    cursor: int = 0


@dataclass
class ListCategoriesRequest:
    """Parameters for listing popular categories"""
    count: int = 10
    cursor: int = 0


@dataclass
class ListPostsInHashtagRequest:
    """Parameters for listing posts under a hashtag"""
    ch_id: str
    count: int = 20
    cursor: int = 0


@dataclass
class ListFeedRequest:
    """Parameters for the For You and Following feeds"""
    count: int = 6
    max_cursor: int = 0
    min_cursor: Optional[int] = None
    is_cold_start: int = 1
    pull_type: PullType = PullType.LOAD_MORE


RequestParams = Union[Mapping[str, Any], Any]


def to_params(request: Optional[RequestParams]) -> Dict[str, Any]:
    """
    Convert a request object or mapping into a parameter dict

    Dataclass fields keep their declaration order and ``None`` fields are
    dropped. Enum members are kept; the serializer renders their values.
    """
    if request is None:
        return {}
    if is_dataclass(request) and not isinstance(request, type):
        return {
            f.name: _to_value(getattr(request, f.name))
            for f in fields(request)
            if getattr(request, f.name) is not None
        }
    if isinstance(request, Mapping):
        return dict(request)
    raise TypeError(f"Unsupported request parameters type: {type(request).__name__}")


def _to_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [to_params(item) if is_dataclass(item) else item for item in value]
    return value
