"""
Example usage of the TikTok API client with an external URL signer

This example shows how to plug in a signer, add logging interceptors and read
signing metrics. The signer below only echoes the URL, so real requests will
be rejected by the backend; replace it with a call to your signing service.
"""

import asyncio
import logging

from tiktok_sdk import (
    ClientConfig,
    TikTokAPI,
    TikTokSDKError,
    TransportConfig,
    create_logging_interceptor,
    get_request_params,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


async def sign_url(url: str, ts: int, device_id: str) -> str:
    """Stand-in signer; a real one returns the URL with signature parameters appended"""
    logger.info(f"Signing request for device {device_id} at ts={ts}")
    return url


def build_api() -> TikTokAPI:
    request_params = get_request_params({
        'device_id': '6594726280552547846',
        'iid': '6594726280552547847',
        'openudid': 'b307b864b574e818',
    })
    config = ClientConfig(
        sign_url=sign_url,
        transport=TransportConfig(timeout=10.0)
    )
    return TikTokAPI(request_params, config)


async def main():
    with build_api() as api:
        request_interceptor, response_interceptor = create_logging_interceptor(log_level='info')
        api.request.add_request_interceptor(request_interceptor)
        api.request.add_response_interceptor(response_interceptor)

        try:
            user = await api.get_user('6554462345363161094')
            print(f"User: {user.get('user', {}).get('nickname')}")
        except TikTokSDKError as e:
            print(f"Request failed (expected for demo): {e} [{e.error_code}]")

        metrics = api.request.get_signing_metrics()
        print(f"Signing metrics: {metrics.total_requests} requests, "
              f"{metrics.signed_requests} signed, "
              f"{metrics.average_signing_time_ms:.2f}ms average")


if __name__ == '__main__':
    asyncio.run(main())
