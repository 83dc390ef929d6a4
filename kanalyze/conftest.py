import copy
import io
import json
from types import SimpleNamespace

import pytest
from PIL import Image

from kanalyze.models import AnalysisResponse

SAMPLE_ANALYSIS = {
    "analysis_id": "an-001",
    "timestamp": "2025-06-01T12:00:00Z",
    "file_info": {
        "name": "latte.png",
        "size_mb": 1.2,
        "dimensions": "1024x1024",
        "format": "PNG",
        "color_space": "sRGB"
    },
    "detection": {
        "verdict": "AI-Generated",
        "ai_probability": 97.0,
        "human_probability": 3.0,
        "confidence_score": 95.0,
        "certainty_level": "Very High",
        "risk_level": "CONFIRMED_AI",
        "summary": "Watermark in the lower right corner and misspelled menu text.",
        "model_suspected": "DALL-E 3",
        "generation_technique": "Diffusion"
    },
    "signals": [
        {
            "indicator": "Watermark",
            "severity": "high",
            "location": "bottom-right corner",
            "evidence": "Colored block pattern typical of DALL-E",
            "confidence": 99
        },
        {
            "indicator": "Text anomaly",
            "severity": "medium",
            "location": "menu board",
            "evidence": "'COFEE' instead of 'COFFEE'",
            "confidence": 88
        }
    ],
    "metadata_analysis": {
        "exif_present": False,
        "camera_model": None,
        "software_detected": None,
        "creation_date": None,
        "gps_data": False,
        "suspicious_flags": ["No EXIF data"]
    },
    "prompt_reconstruction": {
        "available": True,
        "confidence": "medium",
        "estimated_prompt": "cozy cafe interior, latte art, warm lighting, photorealistic",
        "breakdown": {
            "subject": "latte on a wooden table",
            "visual_details": ["steam", "latte art"],
            "style_keywords": ["photorealistic", "warm"],
            "technical_params": ["--ar 1:1"]
        },
        "similar_prompts": [],
        "notes": ""
    },
    "visual_breakdown": {
        "composition_score": 9,
        "color_harmony": 0.8,
        "lighting_realism": 85,
        "texture_consistency": "90",
        "anatomical_accuracy": 5,
        "perspective_correctness": 7,
        "notes": "Too clean"
    },
    "recommendations": ["Check the source of the image"],
    "ui_hints": {
        "primary_color": "#ef4444",
        "confidence_bar_color": "#ef4444",
        "alert_level": "danger",
        "show_heatmap": True,
        "animate_verdict": True
    },
    "processing_metadata": {
        "analysis_time_ms": 2100,
        "apis_used": ["gemini"],
        "version": "1.0"
    },
    "heatmap_data": {
        "enabled": True,
        "regions": [
            {"x": 500, "y": 500, "width": 100, "height": 100, "intensity": 0.9, "label": "Watermark"}
        ]
    }
}


@pytest.fixture
def analysis_payload():
    """A fresh, mutable copy of a well-formed Gemini reply."""
    return copy.deepcopy(SAMPLE_ANALYSIS)


@pytest.fixture
def make_result():
    def _make(analysis_id="an-001", **detection):
        data = copy.deepcopy(SAMPLE_ANALYSIS)
        data["analysis_id"] = analysis_id
        data["detection"].update(detection)
        return AnalysisResponse.model_validate(data)
    return _make


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeAnalyzer:
    """
    Stands in for GeminiAnalyzer. Each call consumes the next outcome
    (an AnalysisResponse or an exception to raise); a call can be held
    back by putting an asyncio.Event in gates under its index.
    """

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.calls = []
        self.gates = {}

    async def analyze(self, upload):
        index = len(self.calls)
        self.calls.append(upload)
        gate = self.gates.get(index)
        if gate is not None:
            await gate.wait()
        outcome = self.outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_analyzer():
    return FakeAnalyzer


class FakeModels:
    """Mimics client.aio.models of google-genai."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.requests = []

    async def generate_content(self, model, contents, config):
        self.requests.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


@pytest.fixture
def fake_genai():
    """Build a fake genai client answering with the given text or error."""
    def _make(text=None, error=None, payload=None):
        if payload is not None:
            text = json.dumps(payload)
        models = FakeModels(text=text, error=error)
        return SimpleNamespace(aio=SimpleNamespace(models=models)), models
    return _make
