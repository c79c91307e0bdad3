"""
Deterministic parameter ordering and serialization

The backend checks request signatures against the exact layout of the query
string, so parameters are always emitted in the order given by PARAMS_ORDER.
Keys that are not listed follow the known ones in the order they were added.
"""

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

# Bump PARAMS_ORDER_VERSION whenever PARAMS_ORDER changes: signers validated
# against one layout reject URLs built with another.
PARAMS_ORDER_VERSION = 1

PARAMS_ORDER: Tuple[str, ...] = (
    # Endpoint parameters
    'mix_mode',
    'username',
    'email',
    'mobile',
    'account',
    'password',
    'captcha',
    'app_type',
    'aweme_id',
    'comment_style',
    'digged_cid',
    'insert_cids',
    'text',
    'text_extra',
    'is_self_see',
    'from_user_id',
    'room_id',
    'keyword',
    'user_id',
    'ch_id',
    'query_type',
    'type',
    'is_cold_start',
    'pull_type',
    'max_cursor',
    'min_cursor',
    'cursor',
    'count',
    'retry_type',
    'hotsoon_filtered_count',
    'hotsoon_has_more',
    'follow_request_count',
    # Device and app parameters
    'iid',
    'device_id',
    'ac',
    'channel',
    'aid',
    'app_name',
    'version_code',
    'version_name',
    'device_platform',
    'ssmix',
    'device_type',
    'device_brand',
    'language',
    'os_api',
    'os_version',
    'openudid',
    'manifest_version_code',
    'resolution',
    'dpi',
    'update_version_code',
    'app_language',
    'is_my_cn',
    'fp',
    'timezone_name',
    'timezone_offset',
    'build_number',
    'region',
    'sys_region',
    'carrier_region',
    'mcc_mnc',
    # Freshness parameters
    '_rticket',
    'ts',
)

ParamsSerializer = Callable[[Mapping[str, Any]], str]


def order_params(
    params: Mapping[str, Any],
    order: Sequence[str] = PARAMS_ORDER
) -> List[Tuple[str, Any]]:
    """
    Order parameters by a fixed key list.

    Args:
        params: Parameter mapping in any insertion order
        order: Canonical key order

    Returns:
        List of (key, value) pairs: known keys first in canonical order,
        then unknown keys in the order they appear in ``params``
    """
    rank = {key: index for index, key in enumerate(order)}
    known = sorted((key for key in params if key in rank), key=rank.__getitem__)
    unknown = [key for key in params if key not in rank]
    return [(key, params[key]) for key in known + unknown]


def _format_scalar(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _flatten(key: str, value: Any) -> Iterable[Tuple[str, str]]:
    if value is None:
        return
    if isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            yield from _flatten(f"{key}[{sub_key}]", sub_value)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            yield from _flatten(f"{key}[{index}]", item)
    else:
        yield key, _format_scalar(value)


def encode_component(text: str) -> str:
    """Percent-encode everything outside the RFC 3986 unreserved set."""
    return quote(text, safe='')


def serialize_params(pairs: Iterable[Tuple[str, Any]]) -> str:
    """
    Serialize ordered (key, value) pairs into a query string.

    ``None`` values are skipped; nested lists and mappings use bracketed
    index keys (``text_extra[0][start]=0``). The same rules are used for
    query strings and form bodies.
    """
    parts = []
    for key, value in pairs:
        for flat_key, flat_value in _flatten(key, value):
            parts.append(f"{encode_component(flat_key)}={encode_component(flat_value)}")
    return '&'.join(parts)


def create_params_serializer(order: Optional[Sequence[str]] = None) -> ParamsSerializer:
    """
    Create a serializer bound to a canonical key order.

    Args:
        order: Canonical key order (defaults to PARAMS_ORDER)

    Returns:
        Callable turning a parameter mapping into a query string
    """
    key_order = tuple(order) if order is not None else PARAMS_ORDER

    def params_serializer(params: Mapping[str, Any]) -> str:
        return serialize_params(order_params(params, key_order))

    return params_serializer


def with_default_list_params(params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Merge caller parameters over the defaults shared by paginated endpoints."""
    merged: Dict[str, Any] = {'count': 20, 'retry_type': 'no_retry'}
    if params:
        merged.update(params)
    return merged
