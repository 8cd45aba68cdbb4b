"""EmergencyClassifier I/O package.

File read/write operations only — no business logic in this layer.
"""

from emergencyclassifier.io.persistence import load_json, save_json, to_json

__all__ = [
    "save_json",
    "load_json",
    "to_json",
]
