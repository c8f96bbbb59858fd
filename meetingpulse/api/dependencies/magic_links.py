# meetingpulse/api/dependencies/magic_links.py
from fastapi import Request

from meetingpulse.services.magic_link import MagicLinkService


def get_magic_link_service(request: Request) -> MagicLinkService:
    """
    The MagicLinkService built by the application factory.

    Routes depend on this instead of reading app.state directly.
    """
    return request.app.state.magic_links
