"""EmergencyClassifier — All default threshold values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via ClassifierConfig at runtime.
Matcher keyword tables and their per-group weights are data, not thresholds,
and live in emergencyclassifier/analysis/rule_tables.py.
"""

# ── Score aggregation ──────────────────────────────────────────────────────────
# Any emergency category above this score counts as an emergency indicator
OTHER_SUPPRESSION_THRESHOLD: float = 0.1

# Penalty subtracted from the "other" score when emergency indicators exist
OTHER_SUPPRESSION_PENALTY: float = 0.5

# Minimum emergency score required to escape an "other" winner
OTHER_ESCAPE_THRESHOLD: float = 0.15

# Matcher score at or above which a "<Category> evidence strong" entry is recorded
STRONG_EVIDENCE_THRESHOLD: float = 0.6

# Uncertainty score at or above which an "Uncertain classification" entry is recorded
UNCERTAIN_REASONING_THRESHOLD: float = 0.5

# Minimum per-category delta for adaptive rules to count as having changed the scores
ADAPTIVE_CHANGE_EPSILON: float = 0.01

# Boost applied by adaptive rules that specify no boost of their own
ADAPTIVE_DEFAULT_BOOST: float = 0.2

# Fraction of a keyword_boost rule's boost taken from the originally predicted category
ADAPTIVE_ORIGINAL_TYPE_PENALTY_RATIO: float = 0.5

# ── Contextual overrides ───────────────────────────────────────────────────────
# Sports injury: medical must reach this score before it is lifted over accident
SPORTS_MEDICAL_MIN_SCORE: float = 0.4
SPORTS_MEDICAL_BOOST: float = 0.2
SPORTS_MEDICAL_MARGIN: float = 0.1

# Structural damage: earthquake must reach this score before it is lifted over non_emergency
STRUCTURAL_EARTHQUAKE_MIN_SCORE: float = 0.3
STRUCTURAL_EARTHQUAKE_BOOST: float = 0.3
STRUCTURAL_EARTHQUAKE_MARGIN: float = 0.2
STRUCTURAL_NON_EMERGENCY_PENALTY: float = 0.3

# Fallen tree: storm below the trigger is raised to the floor before boosting
FALLEN_TREE_STORM_TRIGGER: float = 0.3
FALLEN_TREE_STORM_FLOOR: float = 0.5
FALLEN_TREE_STORM_BOOST: float = 0.4
FALLEN_TREE_STORM_MARGIN: float = 0.3
FALLEN_TREE_ACCIDENT_PENALTY: float = 0.4
FALLEN_TREE_BLOCKED_PATHWAY_BOOST: float = 0.2

# ── Suppression overrides ──────────────────────────────────────────────────────
# School context only suppresses when no emergency category reaches this score
SCHOOL_MAX_EMERGENCY_SCORE: float = 0.4
SCHOOL_NON_EMERGENCY_SCORE: float = 0.9

# Non-emergency score assigned when a training or drill scenario is recognised
TRAINING_NON_EMERGENCY_SCORE: float = 0.95

# Crowd scenes with a selection max below this are treated as non-emergencies
WEAK_EVIDENCE_THRESHOLD: float = 0.35

# Any emergency category above this score blocks the crowd-scene suppression
CROWD_EMERGENCY_THRESHOLD: float = 0.3

# Penalty for a medical winner whose matcher found no direct injury indicators
MEDICAL_NO_INDICATOR_PENALTY: float = 0.3

# Accident and flood keyword fallbacks require at least this score
FALLBACK_MIN_SCORE: float = 0.1

# Deterministic priority for categories still tied after all overrides
TIE_BREAK_PRIORITY: tuple = (
    "accident",
    "fire",
    "medical",
    "flood",
    "earthquake",
    "storm",
    "other",
)

# ── Confidence calibration ─────────────────────────────────────────────────────
CONFIDENCE_FLOOR: float = 0.6
CONFIDENCE_CEILING: float = 1.0

# non_emergency confidence is confined to this band
NON_EMERGENCY_CONFIDENCE_FLOOR: float = 0.55
NON_EMERGENCY_CONFIDENCE_CEILING: float = 0.7

# Evidence-richness boosts
CAPTION_CONFIDENCE_BOOST_THRESHOLD: float = 0.8
CAPTION_CONFIDENCE_BOOST: float = 0.1
OBJECT_RICHNESS_MIN_OBJECTS: int = 3          # strictly more than this many objects
OBJECT_RICHNESS_BOOST: float = 0.05
PEOPLE_PRESENT_BOOST: float = 0.05
HIGH_CONFIDENCE_TAG_THRESHOLD: float = 0.8
HIGH_CONFIDENCE_TAG_MIN_COUNT: int = 5        # strictly more than this many tags
HIGH_CONFIDENCE_TAG_BOOST: float = 0.1

# Category feature floors
STORM_STRONG_FEATURE_FLOOR: float = 0.85     # fallen tree + blocked pathway
STORM_FEATURE_FLOOR: float = 0.80            # either one
FIRE_STRONG_FEATURE_FLOOR: float = 0.85      # electrical + clear fire indicator
FIRE_FEATURE_FLOOR: float = 0.80             # clear indicator with two or more features
EARTHQUAKE_FEATURE_FLOOR: float = 0.85       # two or more strong structural features
EARTHQUAKE_EXTRA_FEATURE_BOOST: float = 0.1  # three or more features
EARTHQUAKE_FULL_PATTERN_BOOST: float = 0.15
EARTHQUAKE_FULL_PATTERN_CAP: float = 0.98
EARTHQUAKE_PARTIAL_PATTERN_BOOST: float = 0.1
EARTHQUAKE_PARTIAL_PATTERN_CAP: float = 0.92

# Image-quality penalty applied when max(caption confidence, mean tag confidence) is low
IMAGE_QUALITY_THRESHOLD: float = 0.45
IMAGE_QUALITY_PENALTY_FACTOR: float = 0.7

# Earthquake winners with at least this many damage features skip the quality penalty
EARTHQUAKE_QUALITY_EXEMPT_FEATURES: int = 2

# Reported confidence floor for any winner other than "other"
MIN_REPORTED_CONFIDENCE: float = 0.5

# ── Uncertainty analysis ───────────────────────────────────────────────────────
UNCERTAIN_LOW_QUALITY_THRESHOLD: float = 0.4

# ── Manual review ──────────────────────────────────────────────────────────────
REVIEW_MAX_SCORE_THRESHOLD: float = 0.4
REVIEW_UNCERTAIN_WINNER_THRESHOLD: float = 0.5
REVIEW_WEAK_MAX_SCORE: float = 0.6
REVIEW_WEAK_UNCERTAIN_SCORE: float = 0.3

# ── Azure AI Vision (Image Analysis 4.0) ───────────────────────────────────────
AZURE_VISION_API_VERSION: str = "2023-10-01"

# Visual features requested per analysis call
AZURE_VISION_FEATURES: tuple = ("Caption", "Tags", "Objects", "People", "Read", "DenseCaptions")

AZURE_VISION_LANGUAGE: str = "en"

# HTTP timeout for a single analysis request (seconds)
VISION_REQUEST_TIMEOUT: int = 30

# Maximum retry attempts on 429 / 5xx / transport errors
VISION_MAX_RETRIES: int = 3

# Base seconds for exponential backoff between retries
VISION_BACKOFF_BASE: float = 2.0

# ── Adaptive rule store ────────────────────────────────────────────────────────
# PostgREST table holding correction-derived rules
ADAPTIVE_RULES_TABLE: str = "adaptive_classifier_config"

# HTTP timeout for the rule fetch (seconds); the fetch is never retried
RULE_STORE_REQUEST_TIMEOUT: int = 10

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"
