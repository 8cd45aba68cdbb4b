"""Matcher rule tables for EmergencyClassifier.

Each category matcher in analysis.matchers is driven by the vocabularies,
Signal weights, Penalty entries and FeatureRule entries defined here. Edit
these tables to tune scoring; the control flow in matchers.py stays fixed.
"""

from __future__ import annotations

from emergencyclassifier.analysis.signals import (
    SOURCE_CAPTION,
    SOURCE_DESCRIPTION,
    SOURCE_NARRATIVE,
    SOURCE_OBJECTS,
    FeatureRule,
    Penalty,
    Signal,
)


# ── Flood ─────────────────────────────────────────────────────────────────────

FLOOD_KEYWORDS = (
    "flood", "flooding", "flooded", "inundation", "overflow", "waterlogged", "floodwaters",
    "rescue", "evacuation", "flood damage", "flood emergency", "water emergency",
    "flooding emergency", "flash flood", "river overflow", "dam breach", "levee failure",
    "storm surge", "high water", "flood warning", "flood rescue", "water rescue",
    "flooded street", "flooded road", "flooded building", "flooded house", "flooded vehicle",
    "flooded area", "boat", "life vest", "life jacket", "rescue boat", "evacuation boat",
    "floating", "wading", "knee-deep", "waist-deep", "chest-deep", "submerged", "emergency boat",
)

FLOOD_OBJECT_TERMS = (
    "debris", "damage", "destruction", "wreckage", "flooded", "submerged", "boat", "life vest",
    "life jacket", "rescue", "floating", "lifeboat", "raft", "paddle", "oar",
)

FLOOD_WORD_PATTERN = r"(flood|flooding|flooded|inundation|overflow|submerged|waterlogged)"

FLOOD_OBJECTS = Signal(weight=0.25, terms=FLOOD_OBJECT_TERMS, source=SOURCE_OBJECTS, per_match=True)
FLOOD_WORD = Signal(weight=0.15, patterns=(FLOOD_WORD_PATTERN,), source=SOURCE_NARRATIVE)

FLOOD_SIGNALS = (
    Signal(weight=0.4, terms=FLOOD_KEYWORDS, per_match=True),
    FLOOD_OBJECTS,
    Signal(weight=0.2, terms=("boat",), source=SOURCE_OBJECTS),
    Signal(weight=0.15, terms=("vest", "jacket"), source=SOURCE_OBJECTS),
    Signal(weight=0.15, patterns=(r"(emergency|rescue|evacuation|damage|destruction|disaster)",)),
    FLOOD_WORD,
    Signal(
        weight=0.2,
        patterns=(
            r"(boat|life vest|life jacket|rescue|evacuation|emergency|floating|wading"
            r"|knee-deep|waist-deep)",
        ),
    ),
    Signal(weight=0.15, patterns=(r"(knee-deep|waist-deep|chest-deep|ankle-deep|submerged|floating|wading)",)),
    Signal(weight=0.1, patterns=(r"(submerged|waterlogged|flooded|damaged.*water|water.*damage)",)),
)

FLOOD_PENALTIES = (
    Penalty(0.4, r"(swimming|pool|recreational|fun|enjoying|playing|splashing|diving|swim|swimmer)"),
    Penalty(0.3, r"(clear|clean|blue|bright|pool|swimming)"),
    Penalty(0.3, r"(happy|smiling|laughing|enjoying|relaxed|calm|joyful)"),
    Penalty(0.2, r"(student|school|campus|classroom|crowd|assembly|group|gathering)"),
)

# Without a flood word or flood object the score cannot exceed this.
FLOOD_NO_EVIDENCE_CAP = 0.1

FLOOD_FEATURES = (
    FeatureRule("Submerged Area", r"(submerged|underwater|waterlogged)"),
    FeatureRule("Rescue Operations", r"(rescue|evacuation|boat)"),
    FeatureRule("Flooded Road", r"(street|road)", also=r"water|flood"),
)


# ── Accident ──────────────────────────────────────────────────────────────────

ACCIDENT_KEYWORDS = (
    "car", "vehicle", "automobile", "truck", "motorcycle", "motorbike", "scooter", "bike", "bus",
    "traffic", "road", "street", "accident", "collision", "crash", "damage", "wreck", "broken",
    "intersection", "emergency", "police", "ambulance", "firefighter", "impact", "overturned",
    "crashed", "smashed", "hit", "traffic accident", "road accident", "vehicle collision",
    "car crash", "motor vehicle accident", "motorcycle accident", "bike accident",
    "traffic collision", "road collision",
)

ACCIDENT_STRONG_INDICATORS = ("crashed", "collision", "overturned", "accident", "wreck", "damaged")

VEHICLE_OBJECT_TERMS = (
    "car", "vehicle", "truck", "motorcycle", "motorbike", "bike", "bus", "automobile", "wheel", "tire",
)

EMERGENCY_RESPONDER_TERMS = ("police", "ambulance", "emergency", "firefighter", "rescue", "responder")

_TRAFFIC_SUBJECTS = ("road", "vehicle", "traffic")
_TRAFFIC_EVENTS = (
    "accident", "incident", "collision", "crash", "damage", "emergency", "disaster", "chaos",
    "panic", "distress", "alarm", "siren", "warning", "danger", "hazard",
)
TRAFFIC_ACCIDENT_PHRASES = (
    ("traffic cone", "motorcycle accident", "car crash")
    + tuple(f"{subject} {event}" for event in _TRAFFIC_EVENTS for subject in _TRAFFIC_SUBJECTS)
)

_TWO_WHEELERS = r"(motorcycle|motorbike|bike|scooter)"
_ACCIDENT_EVENTS = r"(accident|crash|collision|overturned)"

VEHICLE_OBJECTS = Signal(
    weight=0.2, terms=VEHICLE_OBJECT_TERMS, source=SOURCE_OBJECTS, per_match=True, cap=0.4
)

ACCIDENT_SIGNALS = (
    Signal(weight=0.15, terms=ACCIDENT_KEYWORDS, per_match=True, cap=0.6),
    Signal(weight=0.25, terms=ACCIDENT_STRONG_INDICATORS, per_match=True),
    VEHICLE_OBJECTS,
    Signal(weight=0.15, min_people=1),
    Signal(weight=0.1, min_people=3),
    Signal(weight=0.2, terms=EMERGENCY_RESPONDER_TERMS),
    Signal(weight=0.15, terms=TRAFFIC_ACCIDENT_PHRASES),
    Signal(weight=0.1, patterns=(r"(road|street|highway|intersection|traffic)",)),
    Signal(
        weight=0.3,
        patterns=(rf"{_TWO_WHEELERS}.*{_ACCIDENT_EVENTS}|{_ACCIDENT_EVENTS}.*{_TWO_WHEELERS}",),
    ),
    Signal(weight=0.15, patterns=(r"accident|collision|crash|overturned",), source=SOURCE_CAPTION),
)

TREE_DAMAGE_PATTERN = r"(tree|branch|trunk|fallen|broken|downed|snapped|uprooted)"
TREE_VEHICLE_PATTERN = r"(car|vehicle|truck|motorcycle|motorbike|bus)"
TREE_OBJECT_TERMS = ("tree", "branch", "trunk", "fallen", "broken", "downed")
# Tree evidence without vehicle objects belongs to storm.
ACCIDENT_TREE_PENALTY = 0.7

INJURY_EVIDENCE_PATTERN = (
    r"(injury|injured|bruise|bruised|swollen|wound|cut|laceration|hurt|pain|crutch|bandage|cast|brace)"
)
SCHOOL_CONTEXT_PATTERN = (
    r"(student|school|campus|university|college|classroom|lecture|workshop|seminar|conference"
    r"|event|assembly|project|supreme.*student.*council|drug.*free.*workplace|teacher|instructor"
    r"|professor|lecturer|presentation|training|class|lesson|course|education|academic)"
)
EMERGENCY_VOCABULARY_PATTERN = (
    r"(crashed|collision|overturned|damaged|injured|emergency|ambulance|police|fire|smoke|flood"
    r"|water|accident|disaster|destruction|chaos|panic|distress|alarm|siren|warning|danger|hazard)"
)

ACCIDENT_PENALTIES = (
    Penalty(0.3, SCHOOL_CONTEXT_PATTERN, unless=INJURY_EVIDENCE_PATTERN),
    Penalty(
        0.5,
        r"(sports|sport|athletic|field|stadium|gym|playing|game|match|practice|exercise)",
        when=INJURY_EVIDENCE_PATTERN,
    ),
    Penalty(
        0.4,
        r"(smiling|calm|organized|peaceful|relaxed|happy|enjoying|conversation|discussion|meeting"
        r"|group.*photo|team|teamwork|collaboration)",
        unless=EMERGENCY_VOCABULARY_PATTERN,
    ),
)

ACCIDENT_FEATURES = (
    FeatureRule("Vehicle Accident", r"(car|vehicle|automobile)"),
    FeatureRule("Motorcycle Accident", r"(motorcycle|motorbike)"),
    FeatureRule("Vehicle Collision", r"(collision|crash|impact)"),
)


# ── Fire ──────────────────────────────────────────────────────────────────────

FIRE_KEYWORDS = (
    "fire", "smoke", "flame", "burn", "burning", "hot", "blaze", "combustion", "ash",
    "emergency", "rescue", "firefighter", "fire truck", "alarm", "inferno", "conflagration",
    "fire emergency", "fire hazard", "smoke damage", "fire department", "fire suppression",
    "electrical fire", "electrical", "outlet", "plug", "cord", "wire", "socket",
    "electrical outlet", "power outlet", "wall outlet", "electrical hazard", "short circuit",
    "electrical malfunction", "spark", "sparking", "sparks", "electrical spark", "power cord",
    "cable", "electrical cord", "building fire", "building on fire", "structure fire",
    "building ablaze", "roof fire", "multi-story fire", "two-story fire", "upper floor fire",
    "rooftop fire", "smoke rising",
)

FIRE_OBJECT_TERMS = (
    "fire", "smoke", "flame", "fire truck", "fire engine", "burning", "blaze",
    "outlet", "plug", "electrical", "wire", "cord", "socket",
    "building", "structure", "roof", "wall",
)

FLAMES_PATTERN = r"(fire|flame|burning|ablaze)"

FIRE_SIGNALS = (
    Signal(weight=0.4, terms=FIRE_KEYWORDS, per_match=True),
    Signal(
        weight=0.4,
        patterns=(r"(outlet|plug|cord|wire|socket|electrical|power)",),
        requires=(FLAMES_PATTERN,),
    ),
    Signal(
        weight=0.35,
        patterns=(r"(building|structure|multi-story|two-story|roof|rooftop|upper floor)",),
        requires=(r"(fire|flame|burning|ablaze|smoke|smoking|smoky)",),
    ),
    Signal(
        weight=0.15, terms=FIRE_OBJECT_TERMS, source=SOURCE_OBJECTS,
        per_match=True, cap=0.3, base=0.35,
    ),
    Signal(weight=0.1, patterns=(r"fire|smoke",), source=SOURCE_CAPTION),
)

_FIRE_TRAINING = r"training|drill|exercise|practice|demonstration|workshop|seminar|class|lesson|instructor|student|participant"
_FIRE_CONTROLLED = r"barrel|container|controlled|contained|training|drill|exercise"
_FIRE_ATTIRE = r"suit|business|formal|office|professional|heels|dress|shirt|tie"
_FIRE_CALM = r"calm|observing|watching|standing|relaxed|peaceful|quiet"
_FIRE_EXTINGUISHERS = r"fire extinguisher|extinguisher|multiple|lined up|arranged|neatly"

FIRE_PENALTIES = (
    Penalty(0.8, rf"({_FIRE_TRAINING})"),
    Penalty(0.7, rf"({_FIRE_CONTROLLED})"),
    Penalty(0.6, rf"({_FIRE_ATTIRE})"),
    Penalty(0.5, rf"({_FIRE_CALM})"),
    Penalty(0.5, rf"({_FIRE_EXTINGUISHERS})"),
    Penalty(
        0.6,
        r"(fire truck|fire engine|fire department).*(training|drill|exercise|practice|demonstration)",
    ),
)

# Any training/controlled/calm vocabulary caps the fire score.
FIRE_TRAINING_SCENARIO_PATTERN = (
    rf"({_FIRE_TRAINING}|{_FIRE_CONTROLLED}|{_FIRE_ATTIRE}|{_FIRE_CALM}|{_FIRE_EXTINGUISHERS})"
)
FIRE_TRAINING_CAP = 0.2

FIRE_FEATURES = (
    FeatureRule(
        "Electrical Fire",
        r"(electrical fire|electrical|outlet|plug|cord|wire|socket|electrical outlet|power outlet"
        r"|wall outlet|electrical hazard|short circuit|electrical malfunction)",
    ),
    FeatureRule("Building Fire", r"(building fire|building on fire|structure fire|house fire)"),
    FeatureRule("Vehicle Fire", r"(vehicle fire|car fire|truck fire|automobile fire)"),
    FeatureRule("Wildfire", r"(forest fire|wildfire|brush fire)"),
    FeatureRule("Active Flames", r"(flame|flames|burning|burn)"),
    FeatureRule("Smoke Present", r"(smoke|smoking|smoky|smoke rising|smoke visible)"),
    FeatureRule("Electrical Sparks", r"(spark|sparking|sparks|electrical spark)"),
    FeatureRule("Electrical Outlet", r"(outlet|wall outlet|electrical outlet|plug|socket)"),
)
FIRE_WALL_FEATURE = FeatureRule("Wall Fire", r"(wall|on wall|wall mounted)", also=r"(fire|flame|burning)")
FIRE_TRAILING_FEATURES = (
    FeatureRule(
        "Intense Fire",
        r"(intense|large|spreading|engulfed|engulfing|significant|major)",
        also=r"(fire|flame)",
    ),
    FeatureRule(
        "Fire Department Present",
        r"(fire department|firefighter|fire truck|fire engine|emergency response|fire suppression)",
    ),
)


# ── Medical ───────────────────────────────────────────────────────────────────

MEDICAL_KEYWORDS = (
    "injury", "ambulance", "medical", "hospital", "emergency", "rescue", "paramedic", "stretcher",
    "blood", "wound", "patient", "doctor", "nurse", "health", "hurt", "pain", "injured",
    "medical emergency", "health emergency", "medical response", "first aid", "emergency medical",
    "medical assistance", "healthcare", "medical care", "bruise", "bruised", "swollen", "swelling",
    "cut", "laceration", "fracture", "broken", "knee injury", "ankle injury", "wrist injury",
    "arm injury", "leg injury", "shoulder injury", "limping", "unable to walk", "supporting leg",
    "favoring", "holding", "clutching", "crutch", "crutches", "bandage", "bandaged", "brace",
    "cast", "splint", "sling", "lying down", "on ground", "down on", "prostrate", "reclining",
)

MEDICAL_OBJECT_TERMS = (
    "ambulance", "stretcher", "first aid", "bandage", "wheelchair", "hospital", "doctor", "nurse",
    "medicine", "crutch", "crutches", "brace", "cast", "splint", "sling", "bandaged", "bandaging",
)

VISUAL_INJURY_TERMS = (
    "bruise", "bruised", "swollen", "swelling", "bandage", "bandaged", "crutch", "crutches",
    "brace", "cast", "splint", "sling", "injury", "injured", "wound", "hurt", "pain",
)

PAIN_TERMS = (
    "grimacing", "grimace", "pain", "hurt", "suffering", "distress", "uncomfortable",
    "lying down", "on the ground", "sitting down", "holding", "clutching", "supporting",
    "favoring", "limping", "unable to", "can't walk", "can not walk",
)

MEDICAL_KEYWORD_SIGNAL = Signal(weight=0.2, terms=MEDICAL_KEYWORDS, per_match=True, cap=0.7)
MEDICAL_OBJECT_SIGNAL = Signal(
    weight=0.25, terms=MEDICAL_OBJECT_TERMS, source=SOURCE_OBJECTS, per_match=True, cap=0.5
)
VISUAL_INJURY_SIGNAL = Signal(weight=0.15, terms=VISUAL_INJURY_TERMS, per_match=True, cap=0.4)
PAIN_SIGNAL = Signal(
    weight=0.08, terms=PAIN_TERMS, source=SOURCE_DESCRIPTION, per_match=True, cap=0.25
)

SCORING_BODY_PARTS = ("knee", "ankle", "wrist", "arm", "leg", "shoulder", "elbow", "hand", "foot")
FEATURE_BODY_PARTS = SCORING_BODY_PARTS + ("head", "back", "chest", "face", "forehead", "temple")

MEDICAL_BODY_PART_BOOST = 0.15
MEDICAL_PEOPLE_WEIGHT = 0.15
MEDICAL_PEOPLE_CAP = 0.4

MEDICAL_SPORTS_PATTERN = (
    r"(sports|sport|athletic|field|stadium|gym|playing|game|match|practice|training|exercise"
    r"|turf|artificial.*turf)"
)
MEDICAL_SPORTS_BOOST = 0.35

MEDICAL_FIRST_AID_PATTERN = (
    r"(first aid|administering|attending|treating|medical assistance|helping|person.*helping"
    r"|assisting|medical personnel|first responder|gloves|medical gloves|first aid kit|bandage|gauze)"
)
MEDICAL_FIRST_AID_MIN_PEOPLE = 2
MEDICAL_FIRST_AID_BOOST = 0.3

MEDICAL_LYING_PATTERN = r"(lying|lying down|on the ground|on.*turf|seated on|sitting on)"
MEDICAL_LYING_BOOST = 0.25

MEDICAL_CROWD_TERMS = ("student", "school", "classroom", "campus", "group photo", "crowd")
MEDICAL_CROWD_PENALTY = 0.2

MEDICAL_CAPTION_INDICATOR_PATTERN = r"medical|injury|patient|hurt|pain"

MEDICAL_FEATURES = (
    FeatureRule("Visible Bruise", r"(bruise|bruised)"),
    FeatureRule("Swelling", r"(swollen|swelling)"),
    FeatureRule("Visible Wound", r"(cut|laceration|wound)"),
    FeatureRule(
        "Visible Blood",
        r"(blood|bleeding|bleed|bloody|blood stream|blood on|blood visible|bloodstain)",
    ),
)
MEDICAL_HEAD_INJURY_PATTERN = (
    r"(head injury|head wound|head bleeding|forehead|temple|face injury|facial injury)"
)
MEDICAL_POSTURE_FEATURES = (
    FeatureRule("Lying Down", r"(lying down|on ground|down on|prostrate|reclining)"),
)
MEDICAL_CLUTCHING_PATTERN = r"(clutching|holding|grasping)"
MEDICAL_AID_FEATURES = (
    FeatureRule("Mobility Impaired", r"(limping|unable to walk|can't walk|can not walk)"),
    FeatureRule("Using Crutches", r"(crutch|crutches)"),
    FeatureRule("Bandaged", r"(bandage|bandaged|gauze|pad)"),
    FeatureRule("Injury Support Device", r"(cast|brace|splint|sling)"),
    FeatureRule(
        "First Aid Being Administered",
        r"(first aid|administering|attending|treating|medical assistance|emergency response"
        r"|paramedic|medical personnel|first responder|gloves|medical gloves|first aid kit"
        r"|medical supplies)",
    ),
    FeatureRule(
        "Medical Personnel Present",
        r"(person helping|someone helping|assisting|medical staff|healthcare worker|nurse|doctor"
        r"|paramedic|emergency responder)",
    ),
)
MEDICAL_SPORTS_FIELD_PATTERN = (
    r"(sports|sport|athletic|field|stadium|gym|playing|game|match|practice|training|exercise"
    r"|soccer|football|basketball|turf)"
)
MEDICAL_SPORTS_ATTIRE_PATTERN = r"(uniform|jersey|sports wear|athletic|player|team)"


# ── Earthquake ────────────────────────────────────────────────────────────────

EARTHQUAKE_KEYWORDS = (
    "earthquake", "seismic", "tremor", "ground", "crack", "building", "collapse", "damaged",
    "cracked", "destruction", "debris", "emergency", "structural", "seismic activity",
    "ground shaking", "building damage", "structural damage", "earthquake damage", "seismic event",
    "structural failure", "building collapse", "wall crack", "foundation crack",
    "structural collapse", "damaged structure", "collapsed", "destroyed", "ruined", "damage",
    "ceiling collapse", "collapsed ceiling", "hanging ceiling", "damaged ceiling", "fallen ceiling",
    "ceiling tile", "dropped ceiling", "suspended ceiling", "ceiling grid", "broken ceiling",
    "rubble", "wreckage", "scattered", "broken", "shattered", "fallen", "hanging", "exposed",
    "damaged infrastructure", "twisted", "bent", "exposed wires", "exposed pipes", "broken lights",
    "damaged furniture", "covered in debris", "debris covered", "column", "pillar", "support",
    "concrete", "rebar", "reinforcement", "steel bar", "exposed rebar", "damaged column",
    "broken column", "cracked column", "concrete spall", "concrete spalling", "spalled",
    "rebar exposed", "exposed reinforcement", "structural column", "damaged pillar",
    "broken pillar", "concrete debris", "building debris",
)

EARTHQUAKE_KEYWORD_SIGNAL = Signal(weight=0.15, terms=EARTHQUAKE_KEYWORDS, per_match=True, cap=0.5)

COLUMN_CONTEXT_PATTERN = (
    r"(column|pillar|support|concrete.*damage|building.*damage|structural.*damage)"
)
COLUMN_DAMAGE_PATTERN = r"(damaged|broken|cracked|collapsed|exposed|spall)"
REBAR_PATTERN = r"(rebar|reinforcement|steel.*bar|exposed.*rebar|rebar.*exposed)"
COLUMN_DAMAGE_BOOST = 0.4

STRUCTURAL_OBJECT_SIGNAL = Signal(
    weight=0.15,
    terms=(
        "building", "structure", "wall", "crack", "debris", "rubble", "ceiling", "roof",
        "damaged", "broken", "collapsed", "hanging", "twisted", "bent", "exposed",
        "infrastructure", "grid", "tile", "fixture", "pipe", "wire", "beam", "frame",
        "column", "pillar", "support", "concrete", "rebar", "reinforcement", "steel",
    ),
    source=SOURCE_OBJECTS,
    per_match=True,
    cap=0.3,
    base=0.3,
)

CEILING_KEYWORD_SIGNAL = Signal(
    weight=0.35,
    terms=(
        "ceiling", "ceiling tile", "suspended ceiling", "dropped ceiling", "ceiling grid",
        "hanging ceiling", "fallen ceiling", "collapsed ceiling", "damaged ceiling",
        "ceiling collapse", "broken ceiling", "debris on", "tiles fallen", "fallen tiles",
    ),
)
CEILING_OBJECT_SIGNAL = Signal(
    weight=0.35,
    terms=("ceiling", "tile", "grid", "suspended", "hanging", "fallen"),
    source=SOURCE_OBJECTS,
)
CEILING_DEBRIS_PATTERN = r"(debris|scattered|fallen|broken|covered)"
CEILING_DEBRIS_BOOST = 0.15

DEBRIS_KEYWORD_SIGNAL = Signal(
    weight=0.2,
    terms=(
        "debris", "rubble", "wreckage", "scattered", "broken pieces", "fallen materials",
        "covered in", "debris covered", "debris on", "scattered debris",
    ),
)
DEBRIS_OBJECT_SIGNAL = Signal(
    weight=0.2,
    terms=("debris", "rubble", "wreckage", "scattered", "broken"),
    source=SOURCE_OBJECTS,
)

HANGING_SIGNAL = Signal(
    weight=0.08,
    terms=(
        "hanging", "hanging down", "exposed", "detached", "broken off", "twisted", "bent",
        "exposed wires", "exposed pipes", "hanging wires", "hanging pipes", "hanging lights",
        "broken lights", "detached fixtures",
    ),
    per_match=True,
    cap=0.15,
)

EARTHQUAKE_SIGNALS = (
    Signal(
        weight=0.2,
        patterns=(r"(laptop|computer|desktop|monitor)",),
        requires=(r"(debris|covered|scattered|fallen)",),
    ),
    HANGING_SIGNAL,
    Signal(
        weight=0.05,
        patterns=(
            r"ceiling.*collapse|collapse.*ceiling",
            r"structural.*damage|damage.*structural",
            r"building.*damage|damage.*building",
            r"hanging.*ceiling|ceiling.*hanging",
            r"debris.*scattered|scattered.*debris",
            r"exposed.*(wire|pipe|infrastructure)",
            r"damaged.*(room|interior|space)",
            r"broken.*(ceiling|wall|structure)",
        ),
        source=SOURCE_DESCRIPTION,
        per_match=True,
        cap=0.15,
    ),
)

INTERIOR_PATTERN = r"(room|interior|indoor|inside|classroom|office|building|hall)"
INTERIOR_DAMAGE_BOOST = 0.15
NORMAL_SCENE_PATTERN = r"(clean|organized|normal|undamaged|intact|perfect condition)"
NORMAL_SCENE_MAX_SCORE = 0.4
NORMAL_SCENE_PENALTY = 0.2

CLASSROOM_PATTERN = r"(classroom|school|university|college|lecture|hall)"

EARTHQUAKE_CONTEXT_FEATURES = ("Classroom", "Interior Space")

EARTHQUAKE_FEATURE_PATTERNS = {
    "Collapsed Ceiling": r"(ceiling.*collapse|collapsed.*ceiling)",
    "Scattered Debris": r"debris|rubble|scattered",
    "Hanging Fixtures": r"(hanging.*(light|fixture|pipe|wire)|exposed.*(wire|pipe))",
    "Exposed Infrastructure": r"(exposed.*(wire|pipe|infrastructure)|hanging.*(wire|pipe))",
    "Damaged Furniture": r"(broken.*furniture|damaged.*furniture|furniture.*covered|debris.*covered)",
    "Wall Damage": r"(wall.*crack|damaged.*wall|broken.*wall|cracked.*wall)",
    "Damaged Columns": r"(damaged.*column|broken.*column|cracked.*column|collapsed.*column)",
    "Concrete Spalling": r"(concrete.*spall|spalled|spalling|concrete.*debris)",
}


# ── Storm ─────────────────────────────────────────────────────────────────────

STORM_KEYWORDS = (
    "storm", "hurricane", "typhoon", "wind", "tornado", "cyclone", "thunder", "rain", "windy",
    "severe weather", "weather emergency", "weather", "storm damage", "wind damage",
    "weather warning", "severe weather warning", "storm warning", "weather alert",
    "fallen tree", "fallen branch", "downed tree", "broken tree", "tree down", "tree fallen",
    "tree damage", "branch down", "tree blocking", "blocked path", "blocked road",
    "blocked sidewalk", "obstruction", "tree debris", "branch debris", "debris on",
    "scattered branches", "broken branches", "snapped tree", "tree snapped", "broken trunk",
    "fallen trunk", "uprooted", "uprooted tree", "tree obstruction", "pathway blocked",
    "sidewalk blocked", "road blocked",
)

STORM_OBJECT_TERMS = (
    "tree", "branch", "branches", "trunk", "debris", "fallen", "broken", "downed", "obstruction",
    "blocked", "damage", "wind", "storm", "leaves", "limbs", "wood", "log", "timber", "sidewalk",
    "path", "pathway", "road", "pavement", "curb", "snapped", "uprooted", "splintered", "fractured",
)
STORM_TREE_OBJECT_TERMS = ("tree", "branch", "trunk", "fallen", "broken", "downed", "snapped")
STORM_BLOCKING_PATTERN = r"(blocked|obstruction|pathway|sidewalk|road|path)"

STORM_SIGNALS = (
    Signal(weight=0.2, terms=STORM_KEYWORDS, per_match=True, cap=0.6),
    Signal(weight=0.5, terms=STORM_TREE_OBJECT_TERMS, source=SOURCE_OBJECTS),
    Signal(
        weight=0.2, terms=STORM_TREE_OBJECT_TERMS, source=SOURCE_OBJECTS,
        requires=(STORM_BLOCKING_PATTERN,),
    ),
    Signal(weight=0.15, terms=STORM_OBJECT_TERMS, source=SOURCE_OBJECTS, per_match=True, cap=0.3),
    Signal(weight=0.15, patterns=(r"storm|weather",), source=SOURCE_CAPTION),
)

FALLEN_TREE_PATTERNS = (
    r"(fallen tree|downed tree|tree down|tree fallen|broken tree|snapped tree|uprooted tree)",
    r"(tree.*fallen|tree.*down|tree.*broken|tree.*snapped)",
    r"(trunk.*broken|trunk.*snapped|trunk.*fallen|broken.*trunk|fallen.*trunk)",
)
FALLEN_BRANCH_PATTERNS = (
    r"(fallen branch|downed branch|broken branch|branch down)",
    r"(branch.*fallen|branch.*down|branch.*broken|broken.*branch|fallen.*branch)",
)
PATHWAY_PATTERN = r"(path|sidewalk|road|pathway|street|walkway|pavement)"
BLOCKED_PATTERN = r"(blocked|obstruction|blocking)"
PATHWAY_OBJECT_TERMS = ("sidewalk", "path", "road", "pavement")

STORM_TYPE_FEATURES = (
    FeatureRule("Hurricane", r"hurricane"),
    FeatureRule("Tornado", r"tornado"),
    FeatureRule("Typhoon", r"typhoon"),
    FeatureRule("Thunderstorm", r"thunderstorm|thunder"),
)
WIND_DAMAGE_FEATURE = FeatureRule("Wind Damage", r"(wind damage|strong wind|high wind)")
TREE_DEBRIS_PATTERN = r"(debris|scattered|broken|fallen|damage)"
TREE_WORD_PATTERN = r"(tree|branch|limb)"
RECENT_DAMAGE_FEATURE = FeatureRule(
    "Recent Damage", r"(green|green leaves|still green|alive|recent)", also=r"(tree|branch|fallen)"
)


# ── Uncertainty ───────────────────────────────────────────────────────────────

CONFLICT_FAMILIES = (
    ("fire", "smoke", "flame", "burn"),
    ("water", "flood", "rain", "wet"),
    ("medical", "hospital", "ambulance", "injury"),
    ("car", "vehicle", "crash", "accident"),
)
AMBIGUOUS_TERMS = ("people", "person", "group", "crowd", "gathering", "scene", "situation")
RECREATIONAL_TERMS = (
    "swimming", "pool", "recreational", "fun", "enjoying", "playing", "splashing", "diving",
    "swim", "swimmer", "swimming pool", "swimming cap", "swimming suit",
)
TRAINING_TERMS = (
    "training", "drill", "exercise", "practice", "demonstration", "workshop", "seminar", "class",
    "lesson", "instructor", "student", "participant", "barrel", "container", "controlled",
    "contained",
)
UNCLEAR_TERMS = ("unclear", "blurry", "dark", "foggy", "unidentified", "unknown", "ambiguous")

UNCERTAIN_LOW_QUALITY_BOOST = 0.3
UNCERTAIN_CONFLICT_MIN = 2
UNCERTAIN_CONFLICT_BOOST = 0.25
UNCERTAIN_AMBIGUOUS_MIN = 3
UNCERTAIN_AMBIGUOUS_BOOST = 0.2
UNCERTAIN_RECREATIONAL_MIN = 2
UNCERTAIN_RECREATIONAL_BOOST = 0.15
UNCERTAIN_TRAINING_MIN = 2
UNCERTAIN_TRAINING_BOOST = 0.15
UNCERTAIN_MIN_OBJECTS = 2
UNCERTAIN_MIN_TAGS = 3
UNCERTAIN_POOR_DETECTION_BOOST = 0.15
UNCERTAIN_UNCLEAR_BOOST = 0.1
