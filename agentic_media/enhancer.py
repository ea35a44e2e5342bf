"""
Prompt improvement with Gemini.

Behavior:
- With an API key: asks Gemini (google.generativeai) to rewrite the idea into a
  single production-ready image/video prompt.
- Without a key, or when Gemini answers with nothing: a local heuristic adds a
  style clause and fixed quality cues.
- Optionally appends one JSON record per attempt to a log file.
"""
import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, Optional

import google.generativeai as genai

from .errors import ProviderError

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """You are an expert creative prompt engineer for image and video generation.
Rewrite the user's idea into a single, concise, production-ready prompt that maximizes visual specificity: subjects, style, composition, camera, lighting, mood, colors, resolution, aspect ratio, and temporal motion cues (if video).
Avoid verbosity, no preambles, just the improved prompt."""

HEURISTIC_EXTRAS = (
    "ultra-detailed, high dynamic range, 4k",
    "cinematic lighting, volumetric light",
    "rule of thirds composition, shallow depth of field",
    "physically-based rendering, photorealistic textures",
)
STYLIZED_RE = re.compile(r"cartoon|anime|illustration|pixel|low poly", re.IGNORECASE)


def heuristic_improve(prompt: str) -> str:
    base = prompt.strip()
    if not base:
        return ""
    if STYLIZED_RE.search(base):
        style = "stylized, bold shapes, clean lines"
    else:
        style = "photorealistic, filmic, natural skin tones"
    return f"{base}, {style}, {', '.join(HEURISTIC_EXTRAS)}"


def _extract_text_from_response(resp: Any) -> str:
    """
    Pull the generated text out of a generate_content response.

    resp.text raises ValueError when the candidate has no text parts (e.g. it
    was blocked), so fall back to walking candidates -> content -> parts.
    """
    if resp is None:
        return ""
    try:
        text = resp.text
        if isinstance(text, str):
            return text.strip()
    except (ValueError, AttributeError):
        pass

    for cand in getattr(resp, "candidates", None) or []:
        content = getattr(cand, "content", None)
        parts = getattr(content, "parts", None) or []
        texts = [getattr(p, "text", "") for p in parts]
        joined = "".join(t for t in texts if isinstance(t, str)).strip()
        if joined:
            return joined
    return ""


class PromptEnhancer:
    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.0-flash",
                 temperature: float = 0.7, log_path: Optional[str] = None):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.log_path = Path(log_path) if log_path else None
        if api_key:
            genai.configure(api_key=api_key)

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _save_record(self, prompt: str, record: Dict[str, Any]) -> None:
        if not self.log_path:
            return
        rec = {"timestamp": int(time.time()), "prompt": prompt, "record": record}
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with self.log_path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")
        except OSError as e:
            logger.warning("Could not write enhancement log %s: %s", self.log_path, e)

    def improve(self, prompt: str) -> str:
        if not self.available:
            improved = heuristic_improve(prompt)
            self._save_record(prompt, {"method": "heuristic", "sample": improved[:200]})
            return improved

        record: Dict[str, Any] = {"model": self.model, "temperature": self.temperature}
        try:
            gm = genai.GenerativeModel(self.model, system_instruction=SYSTEM_INSTRUCTION)
            resp = gm.generate_content(prompt, generation_config={"temperature": float(self.temperature)})
        except Exception as e:
            record["error"] = str(e)
            self._save_record(prompt, record)
            logger.error("Gemini prompt improvement failed: %s", e)
            raise ProviderError(str(e) or "Improve failed", provider="gemini") from e

        text = _extract_text_from_response(resp)
        record.update({"method": "GenerativeModel.generate_content", "success": bool(text), "sample": text[:200]})
        self._save_record(prompt, record)
        if not text:
            logger.warning("Gemini returned no text, using heuristic improvement")
            return heuristic_improve(prompt)
        return text
