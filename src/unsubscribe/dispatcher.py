"""
HTTP GET Unsubscribe Dispatcher

Follows an extracted unsubscribe link with a single GET request:
- bounded timeout, no retries, no backoff
- any response (whatever its status code) counts as followed; its body
  is never downloaded
- transport failures are converted to LinkFailed, never raised
"""

from typing import Optional

import requests

from .constants import DEFAULT_DISPATCH_TIMEOUT, DEFAULT_USER_AGENT
from .logging import UnsubscribeLogger
from .types import (
    DispatchOutcome, LinkFailed, LinkFollowed, NoLinkFound, UnsubscribeLink
)


class UnsubscribeDispatcher:
    """Issue the unsubscribe request for an extracted link."""

    def __init__(
        self,
        timeout: float = DEFAULT_DISPATCH_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        http_session: Optional[requests.Session] = None
    ):
        """
        Initialize dispatcher.

        Args:
            timeout: Request timeout in seconds; the call is abandoned after it
            user_agent: User-Agent header for requests
            http_session: Session used for requests (a new one if omitted)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.http_session = http_session or requests.Session()
        self.logger = UnsubscribeLogger("dispatcher")

    def dispatch(self, link: Optional[UnsubscribeLink]) -> DispatchOutcome:
        """
        Follow the link, if any.

        Args:
            link: Extracted unsubscribe link, or None

        Returns:
            NoLinkFound when link is None (no network activity),
            LinkFollowed when the endpoint answered,
            LinkFailed when no response was obtained
        """
        if not link:
            self.logger.info("No unsubscribe link found in the email")
            return NoLinkFound()

        self.logger.info("Unsubscribe link found", {"url": link})

        try:
            response = self.http_session.get(
                link,
                headers={'User-Agent': self.user_agent},
                timeout=self.timeout,
                allow_redirects=True,
                stream=True
            )

        except requests.exceptions.Timeout:
            return self._failed(link, f'Request timed out after {self.timeout} seconds')

        except requests.exceptions.ConnectionError as e:
            return self._failed(link, f'Connection error: {str(e)}')

        except requests.exceptions.RequestException as e:
            return self._failed(link, f'Request failed: {str(e)}')

        except Exception as e:
            return self._failed(link, f'Unexpected error: {str(e)}')

        # Only the status line matters; the body is never read
        status_code = response.status_code
        try:
            response.close()
        except Exception as e:
            self.logger.debug("Error closing response", {"url": link, "error": str(e)})

        self.logger.info("Request sent", {"url": link, "status_code": status_code})
        self.logger.log_operation_count('dispatch', True)
        return LinkFollowed(url=link, status_code=status_code)

    def _failed(self, link: str, reason: str) -> LinkFailed:
        self.logger.warning("Error following unsubscribe link", {"url": link, "error": reason})
        self.logger.log_operation_count('dispatch', False)
        return LinkFailed(url=link, reason=reason)

    def close(self):
        """Release pooled connections held by the HTTP session."""
        self.http_session.close()
