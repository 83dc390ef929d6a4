"""
Presentation View Models

Turns a ViewState into the JSON document the page renders. Only data
wiring lives here - layout and styling belong to static/index.html.
"""

from typing import Any, Dict, List, Optional

from . import config
from .history import HistoryItem
from .models import (
    AnalysisResponse, HeatmapRegion, MetadataAnalysis, PromptReconstruction,
    Signal, VisualBreakdown
)
from .score_normalizer import normalize_score, to_fixed
from .state import AppState, ViewState

SEVERITY_COLORS = {
    "high": "#ef4444",
    "medium": "#eab308",
    "low": "#3BA3F8",
}

# Color of the human slice of the gauge (matches the card background)
GAUGE_TRACK_COLOR = "#1E2A4A"

BREAKDOWN_BARS = [
    ("Lighting Realism", "lighting_realism"),
    ("Anatomical Accuracy", "anatomical_accuracy"),
    ("Texture Consistency", "texture_consistency"),
]


def heatmap_box(region: HeatmapRegion) -> Dict[str, Any]:
    """
    Map a grid region onto percentages of the displayed image box.

    The grid is always HEATMAP_GRID wide and tall, whatever the real
    resolution of the image.
    """
    scale = 100 / config.HEATMAP_GRID
    return {
        "left": region.x * scale,
        "top": region.y * scale,
        "width": region.width * scale,
        "height": region.height * scale,
        "intensity": region.intensity,
        "label": region.label,
    }


def risk_label(risk_level: str) -> str:
    return risk_level.replace("_", " ", 1)


def signal_bar(signal: Signal) -> Dict[str, Any]:
    # Capped from above only; the model's confidence is otherwise shown as-is
    return {
        "indicator": signal.indicator,
        "severity": signal.severity.upper(),
        "location": signal.location,
        "evidence": signal.evidence,
        "confidence": signal.confidence,
        "width": min(signal.confidence, 100),
        "color": SEVERITY_COLORS.get(signal.severity, SEVERITY_COLORS["low"]),
    }


def metadata_rows(metadata: MetadataAnalysis) -> List[Dict[str, Any]]:
    return [
        {"label": "EXIF Present", "value": "Yes" if metadata.exif_present else "No",
         "ok": metadata.exif_present},
        {"label": "Camera Model", "value": metadata.camera_model or "N/A"},
        {"label": "Software", "value": metadata.software_detected or "N/A"},
    ]


def prompt_panel(reconstruction: Optional[PromptReconstruction]) -> Optional[Dict[str, Any]]:
    if reconstruction is None or not reconstruction.available:
        return None
    return {
        "estimated_prompt": reconstruction.estimated_prompt,
        "style_keywords": list(reconstruction.breakdown.style_keywords),
        "confidence": reconstruction.confidence,
    }


def breakdown_bars(breakdown: VisualBreakdown) -> List[Dict[str, Any]]:
    bars = []
    for label, field_name in BREAKDOWN_BARS:
        score = normalize_score(getattr(breakdown, field_name))
        bars.append({"label": label, "display": score.display, "fill": score.fill})
    return bars


def result_view(result: AnalysisResponse, image_src: str) -> Dict[str, Any]:
    """Everything the report screen shows for one analysis."""
    detection = result.detection
    heatmap = result.heatmap_data
    boxes = [heatmap_box(r) for r in heatmap.regions] if heatmap and heatmap.enabled else []

    return {
        "analysis_id": result.analysis_id,
        "header": {
            "risk_label": risk_label(detection.risk_level),
            "verdict": detection.verdict,
            "summary": detection.summary,
            "is_ai": detection.verdict == "AI-Generated",
        },
        "image": {
            "src": image_src,
            "caption": f"{result.file_info.name} • {result.file_info.dimensions}",
            "heatmap": boxes,
        },
        "gauge": {
            "ai_probability": detection.ai_probability,
            "human_probability": detection.human_probability,
            "label": f"{to_fixed(detection.ai_probability, 1)}%",
            "color": result.ui_hints.confidence_bar_color,
            "track_color": GAUGE_TRACK_COLOR,
            "certainty": detection.certainty_level,
        },
        "signals": [signal_bar(s) for s in result.signals],
        "metadata": metadata_rows(result.metadata_analysis),
        "prompt": prompt_panel(result.prompt_reconstruction),
        "breakdown": breakdown_bars(result.visual_breakdown),
        "recommendations": list(result.recommendations),
    }


def headline_percent(result: AnalysisResponse) -> str:
    """Probability shown on a history card: the side the verdict picked."""
    detection = result.detection
    if detection.verdict == "AI-Generated":
        return f"{to_fixed(detection.ai_probability, 0)}%"
    return f"{to_fixed(detection.human_probability, 0)}%"


def history_card(item: HistoryItem) -> Dict[str, Any]:
    return {
        "key": item.key,
        "thumbnail": item.image_src,
        "name": item.analysis.file_info.name,
        "timestamp": item.timestamp,
        "verdict": item.analysis.detection.verdict,
        "percent": headline_percent(item.analysis),
        "summary": item.analysis.detection.summary,
    }


def build_view(state: ViewState) -> Dict[str, Any]:
    """
    Build the view model for whichever screen the state selects.

    Returns:
        {"state": str, "nav": {...}, "screen": {...}}
    """
    app_state = state.app_state

    if app_state == AppState.IDLE:
        screen = {
            "upload": {
                "accept": config.ACCEPT_FILTER,
                "formats": config.UPLOAD_FORMAT_LABELS,
                "size_hint": config.UPLOAD_SIZE_HINT,
            },
            "feature_tags": config.FEATURE_TAGS,
            "faq": config.FAQ_ENTRIES,
            "anchor": state.anchor,
        }
    elif app_state == AppState.ANALYZING:
        screen = {"text": config.LOADER_TEXT}
    elif app_state == AppState.ERROR:
        screen = {"message": state.error_message, "retry_label": "Try Again"}
    elif app_state == AppState.RESULT:
        screen = result_view(state.result, state.image_src)
    else:
        screen = {
            "count": len(state.history),
            "items": [history_card(item) for item in state.history],
        }

    return {
        "state": app_state.value,
        "nav": {
            "detect_active": app_state == AppState.IDLE,
            "history_active": app_state == AppState.HISTORY,
        },
        "screen": screen,
    }
