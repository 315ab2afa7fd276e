"""
Utility functions for core_backend.
"""


def get_client_ip(group, request):
    """
    Extract the client IP from the request.

    Signature matches django-ratelimit's callable key (group, request), so this
    function can be passed as ``key=`` directly.

    Priority order:
    1. CF-Connecting-IP (behind a Cloudflare proxy)
    2. X-Forwarded-For LAST IP (behind a load balancer that appends the client)
    3. REMOTE_ADDR
    """
    cf_connecting_ip = request.META.get('HTTP_CF_CONNECTING_IP')
    if cf_connecting_ip:
        return cf_connecting_ip

    # The last entry is the one our own load balancer appended; earlier
    # entries are client-controlled.
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[-1].strip()

    return request.META.get('REMOTE_ADDR')
