from directory_app.config import settings


def normalize_link(link: str, scheme: str = None) -> str:
    """
    Turn a stored link into an absolute URL for rendering.

    Links already starting with the scheme (``https://`` by default) are
    returned unchanged; anything else, including other schemes, gets the
    prefix once.
    """
    scheme = scheme or settings.link_scheme
    if link.startswith(scheme):
        return link
    return scheme + link
