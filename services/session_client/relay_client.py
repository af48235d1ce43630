"""HTTP access to the relay and to the realtime SDP endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class RelayError(RuntimeError):
	"""Raised when a relay call returns a non-2xx status."""


class SignalingError(RuntimeError):
	"""Raised when the realtime service rejects or garbles the SDP exchange."""


class RelayClient:
	"""Call the relay's token, chat, translate and explanation routes."""

	def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None) -> None:
		self.client = client or httpx.AsyncClient(base_url=base_url)

	async def _post_content(self, path: str, body: Dict[str, Any], failure: str) -> str:
		response = await self.client.post(path, json=body)
		if response.is_error:
			raise RelayError(failure)
		return response.json()["content"]

	async def fetch_token(self) -> Dict[str, Any]:
		"""Return the realtime session descriptor issued by the relay."""
		response = await self.client.get("/api/token")
		if response.is_error:
			raise RelayError(f"Token request failed with HTTP {response.status_code}")
		return response.json()

	async def chat(self, user_message: str) -> str:
		return await self._post_content("/api/chat", {"userMessage": user_message}, "Chat API call failed")

	async def translate(self, text: str) -> str:
		return await self._post_content("/api/translate", {"text": text}, "Translation API call failed")

	async def explain(self, user_text: str, ai_text: str) -> str:
		"""Return the explanation as a JSON-encoded string."""
		return await self._post_content(
			"/api/explanation",
			{"userText": user_text, "aiText": ai_text},
			"Explanation API call failed",
		)

	async def aclose(self) -> None:
		await self.client.aclose()


def ephemeral_key(session: Dict[str, Any]) -> str:
	"""Return ``client_secret.value`` from a session descriptor."""
	secret = session.get("client_secret") if isinstance(session, dict) else None
	value = secret.get("value") if isinstance(secret, dict) else None
	if not value:
		raise SignalingError("Session descriptor did not include an ephemeral client secret.")
	return value


class RealtimeSignaling:
	"""Exchange a local SDP offer for the realtime service's answer."""

	def __init__(self, base_url: str, model: str, client: Optional[httpx.AsyncClient] = None) -> None:
		self.base_url = base_url
		self.model = model
		self.client = client or httpx.AsyncClient()

	async def exchange(self, offer_sdp: str, key: str) -> str:
		"""POST the offer authenticated by the ephemeral ``key`` and return the answer SDP."""
		if not self.base_url:
			raise SignalingError("Realtime base URL is not configured.")
		response = await self.client.post(
			self.base_url,
			params={"model": self.model},
			content=offer_sdp,
			headers={
				"Authorization": f"Bearer {key}",
				"Content-Type": "application/sdp",
			},
		)
		if response.is_error:
			logger.error("SDP exchange failed (%s): %s", response.status_code, response.text)
			raise SignalingError(f"SDP exchange failed with HTTP {response.status_code}")
		answer = response.text
		if not answer.strip():
			raise SignalingError("Realtime service returned an empty SDP answer.")
		return answer

	async def aclose(self) -> None:
		await self.client.aclose()
