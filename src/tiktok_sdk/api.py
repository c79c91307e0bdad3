"""
TikTok mobile API endpoints

Each endpoint is a thin composition of a path and a parameter shape on top of
``TikTokHttpClient``; signing, cookies and decoding happen in the client.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import requests

from .config import ClientConfig
from .crypto import encrypt_with_xor
from .exceptions import ValidationError
from .http_client import TikTokHttpClient
from .session import SessionStore
from .signing import with_default_list_params
from .types import (
    FeedType,
    ListCategoriesRequest,
    LoginRequest,
    PullType,
    RequestParams,
    Tag,
    to_params,
)

logger = logging.getLogger(__name__)


def _require(value: Any, name: str) -> None:
    if value is None or value == '':
        raise ValidationError(f"{name} cannot be empty")


class TikTokAPI:
    """
    Client for the TikTok (musical.ly) mobile API

    All endpoint methods are coroutines returning the decoded response body.
    """

    def __init__(
        self,
        request_params: Mapping[str, Any],
        config: ClientConfig,
        session: Optional[requests.Session] = None
    ):
        """
        Creates a new API instance.

        Args:
            request_params: Static device parameters (see ``get_request_params``)
            config: Client configuration; must include ``sign_url``
            session: Optional requests session used as the transport
        """
        self.request = TikTokHttpClient(request_params, config, session=session)
        self.config = config

    @property
    def session_store(self) -> SessionStore:
        """Cookie session shared by every request of this instance"""
        return self.request.session_store

    # Authentication
    async def login_with_email(self, email: str, password: str) -> Dict[str, Any]:
        """Log in with an email address and password."""
        _require(email, "email")
        _require(password, "password")
        return await self.login(LoginRequest(
            email=encrypt_with_xor(email),
            password=encrypt_with_xor(password),
        ))

    async def login(self, params: RequestParams) -> Dict[str, Any]:
        """Log in with prepared login parameters."""
        logger.info("Logging in")
        return await self.request.post('passport/user/login/', params=to_params(params))

    # Users
    async def get_user(self, user_id: str) -> Dict[str, Any]:
        """Get a user's profile."""
        _require(user_id, "user_id")
        return await self.request.get('aweme/v1/user/', params={'user_id': user_id})

    async def search_users(self, params: RequestParams) -> Dict[str, Any]:
        """Search for users."""
        return await self.request.get(
            'aweme/v1/discover/search/',
            params=with_default_list_params(to_params(params))
        )

    async def list_posts(self, params: RequestParams) -> Dict[str, Any]:
        """List a user's posts."""
        return await self.request.get('aweme/v1/aweme/post/', params=with_default_list_params(to_params(params)))

    async def list_followers(self, params: RequestParams) -> Dict[str, Any]:
        """List a user's followers."""
        return await self.request.get(
            'aweme/v1/user/follower/list/',
            params=with_default_list_params(to_params(params))
        )

    async def list_following(self, params: RequestParams) -> Dict[str, Any]:
        """List the users a user is following."""
        return await self.request.get(
            'aweme/v1/user/following/list/',
            params=with_default_list_params(to_params(params))
        )

    async def follow(self, user_id: str) -> Dict[str, Any]:
        """Follow a user."""
        _require(user_id, "user_id")
        return await self.request.get('aweme/v1/commit/follow/user/', params={'user_id': user_id, 'type': 1})

    async def unfollow(self, user_id: str) -> Dict[str, Any]:
        """Unfollow a user."""
        _require(user_id, "user_id")
        return await self.request.get('aweme/v1/commit/follow/user/', params={'user_id': user_id, 'type': 0})

    async def list_received_follow_requests(self, params: Optional[RequestParams] = None) -> Dict[str, Any]:
        """List the users who have requested to follow the logged in user."""
        return await self.request.get(
            'aweme/v1/user/following/request/list/',
            params=with_default_list_params(to_params(params))
        )

    async def approve_follow_request(self, user_id: str) -> Dict[str, Any]:
        """Approve a request from a user to follow you."""
        _require(user_id, "user_id")
        return await self.request.get(
            'aweme/v1/commit/follow/request/approve/',
            params={'from_user_id': user_id}
        )

    async def reject_follow_request(self, user_id: str) -> Dict[str, Any]:
        """Reject a request from a user to follow you."""
        _require(user_id, "user_id")
        return await self.request.get(
            'aweme/v1/commit/follow/request/reject/',
            params={'from_user_id': user_id}
        )

    # Posts
    async def like_post(self, post_id: str) -> Dict[str, Any]:
        """Like a post."""
        _require(post_id, "post_id")
        return await self.request.get('aweme/v1/commit/item/digg/', params={'aweme_id': post_id, 'type': 1})

    async def unlike_post(self, post_id: str) -> Dict[str, Any]:
        """Unlike a post."""
        _require(post_id, "post_id")
        return await self.request.get('aweme/v1/commit/item/digg/', params={'aweme_id': post_id, 'type': 0})

    async def list_comments(self, params: RequestParams) -> Dict[str, Any]:
        """List comments for a post."""
        return await self.request.get(
            'aweme/v1/comment/list/',
            params=with_default_list_params({
                'comment_style': 2,
                'digged_cid': '',
                'insert_cids': '',
                **to_params(params),
            })
        )

    async def post_comment(
        self,
        post_id: str,
        text: str,
        tags: Optional[Sequence[Union[Tag, Mapping[str, Any]]]] = None
    ) -> Dict[str, Any]:
        """
        Post a comment on a post.

        Args:
            post_id: Post to comment on
            text: Comment text
            tags: User or hashtag mentions inside ``text``
        """
        _require(post_id, "post_id")
        _require(text, "text")
        text_extra: List[Dict[str, Any]] = [to_params(tag) for tag in (tags or [])]
        return await self.request.post(
            'aweme/v1/comment/publish/',
            data={
                'text': text,
                'aweme_id': post_id,
                'text_extra': text_extra,
                'is_self_see': 0,
            }
        )

    # Discovery
    async def list_categories(self, params: Optional[RequestParams] = None) -> Dict[str, Any]:
        """List popular categories/hashtags."""
        request_params = to_params(params if params is not None else ListCategoriesRequest())
        return await self.request.get('aweme/v1/category/list/', params=with_default_list_params(request_params))

    async def search_hashtags(self, params: RequestParams) -> Dict[str, Any]:
        """Search for hashtags."""
        return await self.request.get(
            'aweme/v1/challenge/search/',
            params=with_default_list_params(to_params(params))
        )

    async def list_posts_in_hashtag(self, params: RequestParams) -> Dict[str, Any]:
        """List posts tagged with a hashtag."""
        return await self.request.get(
            'aweme/v1/challenge/aweme/',
            params=with_default_list_params({'query_type': 0, 'type': 5, **to_params(params)})
        )

    # Feeds; max_cursor should always be 0
    async def list_for_you_feed(self, params: Optional[RequestParams] = None) -> Dict[str, Any]:
        """List posts in the For You feed."""
        return await self._list_feed(FeedType.FOR_YOU, params)

    async def list_following_feed(self, params: Optional[RequestParams] = None) -> Dict[str, Any]:
        """List posts in the Following feed."""
        return await self._list_feed(FeedType.FOLLOWING, params)

    async def _list_feed(self, feed_type: FeedType, params: Optional[RequestParams]) -> Dict[str, Any]:
        return await self.request.get('aweme/v1/feed/', params=with_default_list_params({
            'count': 6,
            'is_cold_start': 1,
            'max_cursor': 0,
            'pull_type': PullType.LOAD_MORE,
            'type': feed_type,
            **to_params(params),
        }))

    # Live streams
    async def join_live_stream(self, room_id: str) -> Dict[str, Any]:
        """Join a live stream."""
        _require(room_id, "room_id")
        return await self.request.get('aweme/v1/room/enter/', params={'room_id': room_id})

    async def leave_live_stream(self, room_id: str) -> Dict[str, Any]:
        """Leave a live stream."""
        _require(room_id, "room_id")
        return await self.request.get('aweme/v1/room/leave/', params={'room_id': room_id})

    def close(self) -> None:
        """Close the underlying HTTP session"""
        self.request.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
