from fastapi.requests import Request

from analytics.keys import UNKNOWN_ADDRESS


def get_client_ip(request: Request) -> str:
    """
    Extract the client's real IP address from the proxy headers or fallback to the client host.
    """
    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        # The first entry is the original client, the rest are proxies
        first = x_forwarded_for.split(",")[0].strip()
        if first:
            return first
    for header in ("X-Real-IP", "CF-Connecting-IP"):
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_ADDRESS
