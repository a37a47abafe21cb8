from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from submissions.models import Channel


class BaseChannelSender(ABC):
    """
    Capability to deliver one rendered message through one channel.

    Implementations never raise for transport problems; they report them in the
    returned dict instead:

        {'success': True, 'response': {...provider data...}}
        {'success': False, 'error': '...', 'response': None}
    """
    channel: Channel = None
    provider: str = 'base'

    def __init__(self, credentials: Optional[Dict[str, Any]] = None):
        self.credentials = credentials or {}

    @abstractmethod
    async def send(self, recipient: str, content: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
        """Send already-rendered ``content`` to ``recipient``."""

    def message_id(self, result: Dict[str, Any]) -> Optional[str]:
        """Provider message id from a successful result, if the provider returns one."""
        response = result.get('response')
        if isinstance(response, dict):
            return response.get('sid') or response.get('message_id')
        return None

    def __repr__(self):
        return f"<{self.__class__.__name__} provider={self.provider}>"
