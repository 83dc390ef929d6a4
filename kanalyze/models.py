"""
Data Models for Analysis Results

Pydantic schema for the JSON document the Gemini forensic prompt asks for.
Every response is validated against it before it reaches the view layer.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

Verdict = Literal["AI-Generated", "Human-Made", "Uncertain"]
CertaintyLevel = Literal["Very High", "High", "Medium", "Low"]
RiskLevel = Literal["CONFIRMED_AI", "LIKELY_AI", "UNCERTAIN", "LIKELY_HUMAN", "CONFIRMED_HUMAN"]
Severity = Literal["high", "medium", "low"]

# Breakdown scores come back on 0-1, 0-10 or 0-100 scales, sometimes as text
Score = Union[float, str]


class Schema(BaseModel):
    # Rejects inf and nan (json.loads reads 1e999 as inf)
    model_config = {"allow_inf_nan": False}


class FileInfo(Schema):
    name: str
    size_mb: float
    dimensions: str
    format: str
    color_space: str


class Detection(Schema):
    model_config = {"protected_namespaces": ()}

    verdict: Verdict
    ai_probability: float
    human_probability: float
    confidence_score: float
    certainty_level: CertaintyLevel
    risk_level: RiskLevel
    summary: str
    model_suspected: Optional[str] = None
    generation_technique: Optional[str] = None


class Signal(Schema):
    """One forensic indicator. Confidence is expected on 0-100 but never clamped."""
    indicator: str
    severity: Severity
    location: str
    evidence: str
    confidence: float


class MetadataAnalysis(Schema):
    exif_present: bool
    camera_model: Optional[str] = None
    software_detected: Optional[str] = None
    creation_date: Optional[str] = None
    gps_data: bool = False
    suspicious_flags: List[str] = Field(default_factory=list)


class PromptBreakdown(Schema):
    subject: str = ""
    visual_details: List[str] = Field(default_factory=list)
    style_keywords: List[str] = Field(default_factory=list)
    technical_params: List[str] = Field(default_factory=list)


class PromptReconstruction(Schema):
    available: bool
    confidence: Severity = "low"
    estimated_prompt: str = ""
    breakdown: PromptBreakdown = Field(default_factory=PromptBreakdown)
    similar_prompts: List[str] = Field(default_factory=list)
    notes: str = ""


class VisualBreakdown(Schema):
    composition_score: Score
    color_harmony: Score
    lighting_realism: Score
    texture_consistency: Score
    anatomical_accuracy: Score
    perspective_correctness: Score
    notes: Optional[Union[str, float]] = None


class UIHints(Schema):
    primary_color: str
    confidence_bar_color: str
    alert_level: str
    show_heatmap: bool
    animate_verdict: bool


class ProcessingMetadata(Schema):
    analysis_time_ms: float
    apis_used: List[str] = Field(default_factory=list)
    version: str


class HeatmapRegion(Schema):
    """Rectangle on the virtual 1000x1000 grid, independent of real resolution."""
    x: float
    y: float
    width: float
    height: float
    intensity: float
    label: str


class HeatmapData(Schema):
    enabled: bool
    regions: List[HeatmapRegion] = Field(default_factory=list)


class AnalysisResponse(Schema):
    """
    Complete forensic report for one image.

    The verdict is chosen by the remote model; ai_probability and
    human_probability are not guaranteed to sum to 100.
    """
    model_config = {"frozen": True}

    analysis_id: Optional[str] = None
    timestamp: Optional[str] = None
    file_info: FileInfo
    detection: Detection
    signals: List[Signal]
    metadata_analysis: MetadataAnalysis
    prompt_reconstruction: Optional[PromptReconstruction] = None
    visual_breakdown: VisualBreakdown
    recommendations: List[str]
    ui_hints: UIHints
    processing_metadata: ProcessingMetadata
    heatmap_data: Optional[HeatmapData] = None
    error: Optional[bool] = None
    message: Optional[str] = None
