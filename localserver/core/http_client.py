"""Short-lived HTTP probes used by the health-check loop.

Each probe opens its own ``httpx.AsyncClient`` and asks the server to close
the connection, so no pooled socket outlives the probe or keeps a listener
busy during force-close.
"""

import logging

import httpx

logger = logging.getLogger(__name__)

PROBE_HEADERS: dict[str, str] = {
    "Connection": "close",
    "Accept": "application/json",
    "User-Agent": "localserver-health-probe/1.0",
}


async def probe_status(url: str, timeout: float) -> bool:
    """GET ``url`` and report whether it answered HTTP 200.

    Transport errors and timeouts are logged and reported as unhealthy; no
    exception escapes this function.

    Args:
        url: Absolute URL to probe
        timeout: Overall timeout in seconds

    Returns:
        True iff the response status is 200
    """
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_connections=1, max_keepalive_connections=0),
            trust_env=False,
        ) as client:
            response = await client.get(url, headers=PROBE_HEADERS)
    except httpx.TimeoutException as e:
        logger.warning("Health probe to %s timed out: %s", url, e)
        return False
    except httpx.HTTPError as e:
        logger.warning("Health probe to %s failed: %s", url, e)
        return False
    except Exception:
        logger.exception("Unexpected error probing %s", url)
        return False

    logger.debug("Health probe to %s returned HTTP %d", url, response.status_code)
    return response.status_code == 200
