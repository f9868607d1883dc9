from __future__ import annotations
import logging
import httpx
from fastapi import HTTPException
from typing import Any, Dict, Optional
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class GeminiError(RuntimeError):
	pass


class GeminiClient:
	def __init__(
		self,
		config: Optional[Settings] = None,
		*,
		api_key: Optional[str] = None,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		config = config or default_settings
		self.api_key = api_key or config.gemini_api_key
		if not self.api_key:
			raise ValueError("GEMINI_API_KEY is not configured")
		self.model = model or config.gemini_model
		self.provider = config.gemini_provider
		if self.provider == "vertex":
			region = config.vertex_region
			project = config.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(timeout=config.gemini_timeout_seconds, transport=transport)

	async def generate(self, prompt: str, *, temperature: Optional[float] = None) -> str:
		payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
		if temperature is not None:
			payload["generationConfig"] = {"temperature": temperature}
		return await self._post_payload(payload)

	async def generate_json(
		self,
		prompt: str,
		schema: Dict[str, Any],
		*,
		temperature: Optional[float] = None,
	) -> str:
		"""Request a response constrained to ``schema``; returns the raw model text."""
		generation_config: Dict[str, Any] = {
			"responseMimeType": "application/json",
			"responseSchema": schema,
		}
		if temperature is not None:
			generation_config["temperature"] = temperature
		payload: Dict[str, Any] = {
			"contents": [{"role": "user", "parts": [{"text": prompt}]}],
			"generationConfig": generation_config,
		}
		return await self._post_payload(payload)

	async def _post_payload(self, payload: Dict[str, Any]) -> str:
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			raise GeminiError(f"Gemini returned HTTP {http_err.response.status_code}") from http_err
		except httpx.RequestError as net_err:
			raise GeminiError(f"Gemini request failed: {net_err}") from net_err
		try:
			data = r.json()
			parts = data["candidates"][0]["content"]["parts"]
		except (ValueError, KeyError, IndexError, TypeError) as err:
			raise GeminiError(f"Unexpected Gemini response: {r.text[:500]}") from err
		text = "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))
		logger.debug("Gemini %s returned %d chars", self.model, len(text))
		return text

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_gemini_client():
	"""FastAPI dependency yielding a client per request; overridden in tests."""
	try:
		client = GeminiClient()
	except ValueError as err:
		raise HTTPException(status_code=503, detail=str(err)) from err
	try:
		yield client
	finally:
		await client.aclose()
