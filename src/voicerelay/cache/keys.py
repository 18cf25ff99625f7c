"""Canonical cache keys for synthesis requests."""

import hashlib
import json

from ..tts.models import SynthesisRequest


def cache_key(request: SynthesisRequest) -> str:
    """Generate a deterministic cache key for a synthesis request.

    Serializes a fixed, ordered field list rather than any mapping, so the
    key does not depend on how the caller ordered its query string or JSON
    body. Numeric settings are coerced to float and the speaker boost flag
    to bool, making ``"0.4"`` and ``0.4`` equivalent.

    Args:
        request: Resolved synthesis request

    Returns:
        64-character SHA-256 hex digest
    """
    settings = request.settings
    fields = [
        request.text,
        request.voice_id,
        request.model_id,
        # + 0.0 folds -0.0 into 0.0
        float(settings.stability) + 0.0,
        float(settings.similarity_boost) + 0.0,
        float(settings.style) + 0.0,
        bool(settings.use_speaker_boost),
    ]
    canonical = json.dumps(fields, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
