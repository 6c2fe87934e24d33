from abc import ABC, abstractmethod


class AbstractSigner(ABC):
	"""Interface for signing the challenge issued by the registry."""

	@abstractmethod
	def sign(self, challenge: str | None) -> str:
		"""Sign the challenge returned by the key request.

		Args:
			challenge: Challenge payload issued by the registry.

		Returns:
			str: Signed challenge ready to send back.

		Raises:
			InvalidInputError: If the challenge is empty or missing.
		"""
		...
