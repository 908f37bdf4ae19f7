from abc import ABC, abstractmethod


class AbstractNotifier(ABC):
	"""Interface for senders of the waitlist welcome message."""

	@abstractmethod
	def send(self, email: str, position: int) -> None:
		"""Send the welcome message for a new waitlist entrant.

		Args:
			email: Recipient address.
			position: The entrant's waitlist position; selects the message variant.

		Raises:
			NotificationAppError: If the provider rejects or fails the send.
		"""
		...
