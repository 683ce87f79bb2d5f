"""Dispatcher - single best-effort hand-off of a summary to the mail transport."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from .exceptions import DispatchError, DispatchTimeoutError
from .models import DeliveryResult, MessageBody
from .transports import MailTransport, transport_from_env

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT = 30.0


class Dispatcher:
    """Sends a rendered summary exactly once, without retries.

    The transport call runs on a worker thread so a hung transport cannot
    block the caller past ``timeout``.
    """

    def __init__(
        self,
        transport: Optional[MailTransport] = None,
        timeout: float = DEFAULT_SEND_TIMEOUT,
    ):
        """Initialize the Dispatcher.

        Args:
            transport: Mail transport. Chosen from MAIL_TRANSPORT if not provided.
            timeout: Seconds to wait for the transport.
        """
        self._transport = transport
        self._timeout = timeout

    def _get_transport(self) -> MailTransport:
        if self._transport is None:
            self._transport = transport_from_env()
        return self._transport

    def send(self, recipient: str, body: MessageBody) -> DeliveryResult:
        """Send ``body`` to ``recipient``.

        Args:
            recipient: Destination email address.
            body: Rendered subject, HTML and text.

        Returns:
            DeliveryResult for the accepted message.

        Raises:
            DispatchError: If the transport fails or cannot be created.
            DispatchTimeoutError: If the transport does not answer in time.
        """
        result = DeliveryResult(recipient=recipient, subject=body.subject)
        started = time.monotonic()

        try:
            transport = self._get_transport()
        except Exception as e:
            raise DispatchError(f"cannot create mail transport: {e}") from e

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mail-dispatch")
        try:
            future = executor.submit(
                transport.send, recipient, body.subject, body.html, body.text
            )
            result.message_id = future.result(timeout=self._timeout)
        except FutureTimeoutError as e:
            raise DispatchTimeoutError(self._timeout) from e
        except DispatchError:
            raise
        except Exception as e:
            raise DispatchError(str(e)) from e
        finally:
            executor.shutdown(wait=False)

        result.sent = True
        result.duration_seconds = round(time.monotonic() - started, 2)
        logger.info("Summary sent to %s (%s)", recipient, body.subject)
        return result
